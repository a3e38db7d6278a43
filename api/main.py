import logging
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from config import settings
from database import BaseRepository
from errors import (
    InvalidFormatError,
    RequestFailedError,
    StoreUnavailableError,
    TruckNotFoundError,
    TruckStoreError,
)
from repositories.factory import get_truck_repository
from routes.admin_routes import router as admin_router
from routes.auth_routes import router as auth_router
from routes.image_routes import router as image_router
from routes.truck_routes import router as truck_router
from services.admin_session import SessionManager
from utils.record_codec import utc_now_iso

# Configure logging based on settings
Path(settings.log_file).parent.mkdir(parents=True, exist_ok=True)
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper()),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.FileHandler(settings.log_file),
        logging.StreamHandler()
    ]
)
logger = logging.getLogger(__name__)

# HTTP status returned for each storage error
ERROR_STATUS_CODES = {
    TruckNotFoundError: 404,
    InvalidFormatError: 400,
    StoreUnavailableError: 503,
    RequestFailedError: 502,
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifecycle - startup and shutdown events."""
    # Startup
    logger.info("Starting Truck Marketplace API...")
    logger.info(f"Storage backend: {settings.storage_backend}")
    logger.info(f"Trucks directory: {settings.trucks_dir}")
    logger.info(f"Images directory: {settings.images_dir}")
    settings.images_dir.mkdir(parents=True, exist_ok=True)

    stats = get_truck_repository().get_stats()
    if stats["status"] != "healthy":
        logger.warning(f"Truck storage is not healthy: {stats.get('error', stats['status'])}")
    else:
        logger.info(f"Truck storage ready with {stats['truckCount']} trucks")

    yield

    # Shutdown
    logger.info("Shutting down Truck Marketplace API...")


# OpenAPI tags for better documentation organization
tags_metadata = [
    {
        "name": "health",
        "description": "Health check endpoints for monitoring API status",
    },
    {
        "name": "trucks",
        "description": "Truck listings - list, filter, read, create, update and delete",
    },
    {
        "name": "images",
        "description": "Associate uploaded images with the truck they belong to",
    },
    {
        "name": "admin",
        "description": "Backup export and restore, storage statistics and maintenance checks",
    },
    {
        "name": "auth",
        "description": "Administrator login and logout",
    },
]

# Create FastAPI app
app = FastAPI(
    title=settings.app_name,
    description="""
    ## Overview
    Storage and query API for a truck marketplace. Truck listings are kept in a
    JSON document on disk and served to the gallery, detail and admin pages.

    ## Features
    - **Listings**: Create, read, update and delete truck listings
    - **Queries**: Sort by any field and filter by exact attribute values
    - **Images**: Bind uploaded images to the listing they belong to
    - **Backups**: Export and restore the whole collection

    ## Authentication
    Write operations need an administrator: send the `X-API-Key` header or the
    `X-Session-Token` returned by `/api/auth/login`.
    """,
    version=settings.app_version,
    lifespan=lifespan,
    openapi_tags=tags_metadata,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    debug=settings.debug
)
app.state.session_manager = SessionManager(settings.admin_username, settings.admin_password)

# Configure CORS for the browser frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # In production, restrict to the frontend domain
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Uploaded and associated truck images
app.mount(
    settings.upload_url_prefix,
    StaticFiles(directory=settings.images_dir, check_dir=False),
    name="images"
)


# Health check endpoint (no auth required)
@app.get("/health",
         tags=["health"],
         summary="Health Check",
         description="Check the health status of the API and truck storage",
         response_description="Health status information")
async def health_check(repo: BaseRepository = Depends(get_truck_repository)):
    """Check API and storage health status.

    Returns:
        dict: Health status with API status, storage status, and version
    """
    return {
        "status": "healthy",
        "storage": repo.get_stats()["status"],
        "version": settings.app_version
    }


# Root endpoint
@app.get("/",
         summary="API Information",
         description="Get basic information about the Truck Marketplace API",
         response_description="API metadata")
async def root():
    """Get basic API information.

    Returns:
        dict: API name, version, and documentation URL
    """
    return {
        "name": settings.app_name,
        "version": settings.app_version,
        "documentation": "/docs"
    }


@app.get("/api/status",
         tags=["health"],
         summary="Storage Status",
         description="Truck count and storage locations")
async def storage_status(repo: BaseRepository = Depends(get_truck_repository)):
    """Get storage status.

    Returns:
        dict: Status, truck count, data and image directories
    """
    stats = repo.get_stats()
    result = {
        "status": stats["status"],
        "truckCount": stats["truckCount"],
        "dataDir": str(settings.data_dir),
        "imagesDir": str(settings.images_dir),
        "storageType": stats["storageType"],
        "lastChecked": utc_now_iso()
    }
    if "error" in stats:
        result["error"] = stats["error"]
    return result


# Include routers under the /api prefix
app.include_router(truck_router, prefix="/api")
app.include_router(image_router, prefix="/api")
app.include_router(admin_router, prefix="/api")
app.include_router(auth_router, prefix="/api")


# Error handlers
@app.exception_handler(TruckStoreError)
async def truck_store_error_handler(request: Request, exc: TruckStoreError):
    """Return storage errors as {"error": message}.

    Args:
        request: The incoming request
        exc: The storage error that was raised
    """
    status_code = next(
        (code for error_type, code in ERROR_STATUS_CODES.items() if isinstance(exc, error_type)),
        500
    )
    if status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")
    return JSONResponse(status_code=status_code, content={"error": exc.message})


@app.exception_handler(404)
async def not_found_handler(request, exc):
    """Handle 404 Not Found errors.

    Args:
        request: The incoming request
        exc: The exception that was raised
    """
    # If it's an HTTPException with a detail, preserve it
    if hasattr(exc, 'detail'):
        return JSONResponse(
            status_code=404,
            content={"error": exc.detail}
        )
    return JSONResponse(
        status_code=404,
        content={"error": "Resource not found", "path": str(request.url)}
    )


@app.exception_handler(500)
async def internal_error_handler(request, exc):
    """Handle 500 Internal Server errors.

    Args:
        request: The incoming request
        exc: The exception that was raised
    """
    logger.error(f"Internal server error: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"error": "Internal server error"}
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host="0.0.0.0", port=settings.port, reload=settings.debug)
