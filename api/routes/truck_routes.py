from typing import Dict, List, Optional
from fastapi import APIRouter, Depends, Query, status

from database import BaseRepository
from models.truck import TruckPayload
from repositories.factory import get_truck_repository
from services.admin_session import require_admin
from utils.query import DEFAULT_SORT


router = APIRouter(
    prefix="/trucks",
    tags=["trucks"],
    responses={404: {"description": "Truck not found"}}
)


@router.get("", response_model=List[Dict])
async def list_trucks(
    sortBy: str = Query(DEFAULT_SORT, description="Field to sort by, prefixed with '-' for descending order"),
    status_filter: Optional[str] = Query(None, alias="status", description="Filter by status ('all' for any)"),
    make: Optional[str] = Query(None, description="Filter by make ('all' for any)"),
    condition: Optional[str] = Query(None, description="Filter by condition ('all' for any)"),
    fuel_type: Optional[str] = Query(None, description="Filter by fuel type ('all' for any)"),
    repo: BaseRepository = Depends(get_truck_repository)
):
    """List trucks, sorted and optionally filtered by exact attribute values"""
    criteria = {
        "status": status_filter,
        "make": make,
        "condition": condition,
        "fuel_type": fuel_type
    }
    return repo.filter(criteria, sort_by=sortBy)


@router.get("/{truck_id}", response_model=Dict)
async def get_truck(truck_id: str, repo: BaseRepository = Depends(get_truck_repository)):
    """Get a truck by id"""
    return repo.get_by_id(truck_id)


@router.post(
    "",
    response_model=Dict,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)]
)
async def create_truck(truck: TruckPayload, repo: BaseRepository = Depends(get_truck_repository)):
    """Create a truck. The id, created_date and defaults are assigned by the store."""
    return repo.create(truck.model_dump(exclude_unset=True))


@router.put("/{truck_id}", response_model=Dict, dependencies=[Depends(require_admin)])
async def update_truck(truck_id: str, updates: TruckPayload,
                       repo: BaseRepository = Depends(get_truck_repository)):
    """Update a truck. Supplied fields overwrite, all others are kept."""
    return repo.update(truck_id, updates.model_dump(exclude_unset=True))


@router.delete("/{truck_id}", response_model=Dict, dependencies=[Depends(require_admin)])
async def delete_truck(truck_id: str, repo: BaseRepository = Depends(get_truck_repository)):
    """Delete a truck and the image files it owns"""
    return repo.delete(truck_id)
