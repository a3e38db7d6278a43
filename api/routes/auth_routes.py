from typing import Dict, Optional
from fastapi import APIRouter, Depends, HTTPException, Security, status

from errors import InvalidCredentialsError, NotAuthenticatedError
from models.requests import LoginRequest
from services.admin_session import SessionManager, get_session_manager, session_token_header


router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/login", response_model=Dict)
async def login(credentials: LoginRequest, sessions: SessionManager = Depends(get_session_manager)):
    """Log in as administrator and receive a session token"""
    try:
        session = sessions.login(credentials.username, credentials.password)
    except InvalidCredentialsError as e:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(e))
    return {"token": session.token, "user": session.to_user()}


@router.post("/logout", response_model=Dict)
async def logout(
    token: Optional[str] = Security(session_token_header),
    sessions: SessionManager = Depends(get_session_manager)
):
    """End the current admin session"""
    return {"success": sessions.logout(token)}


@router.get("/me", response_model=Dict)
async def me(
    token: Optional[str] = Security(session_token_header),
    sessions: SessionManager = Depends(get_session_manager)
):
    """Get the administrator of the current session"""
    try:
        return sessions.me(token).to_user()
    except NotAuthenticatedError as e:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=str(e))
