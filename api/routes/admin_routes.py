"""
Admin Routes for the Truck API.

Backup export and restore of the whole store, storage statistics and
maintenance checks. Every endpoint requires an administrator.
"""

import logging
from typing import Any, Dict
from fastapi import APIRouter, Body, Depends, Query

from config import settings
from database import BaseRepository
from repositories.factory import get_truck_repository
from services.admin_session import require_admin
from services.maintenance_service import cleanup_orphaned_images, validate_data_integrity

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/admin",
    tags=["admin"],
    dependencies=[Depends(require_admin)],
    responses={
        400: {"description": "Bad request - invalid import document"},
        401: {"description": "Admin access required"},
        503: {"description": "Storage unavailable"}
    }
)


@router.get("/export", response_model=Dict)
async def export_trucks(repo: BaseRepository = Depends(get_truck_repository)):
    """Export every truck as a backup document accepted by the import endpoint"""
    data = repo.export_data()
    logger.info(f"Exported {data['truckCount']} trucks")
    return data


@router.post("/import", response_model=Dict)
async def import_trucks(
    document: Any = Body(..., description="Export document with a 'trucks' list"),
    repo: BaseRepository = Depends(get_truck_repository)
):
    """Replace the whole truck collection with the trucks of an export document"""
    return repo.import_data(document)


@router.get("/stats", response_model=Dict)
async def storage_stats(repo: BaseRepository = Depends(get_truck_repository)):
    """Storage statistics"""
    return repo.get_stats()


@router.get("/integrity", response_model=Dict)
async def check_integrity(repo: BaseRepository = Depends(get_truck_repository)):
    """Validate required fields and value ranges of every stored truck"""
    return validate_data_integrity(repo.get_all())


@router.post("/cleanup", response_model=Dict)
async def cleanup_images(
    dry_run: bool = Query(True, description="Only report orphaned images without deleting them"),
    repo: BaseRepository = Depends(get_truck_repository)
):
    """Find, and unless dry_run is set remove, image files no truck references"""
    return cleanup_orphaned_images(
        settings.images_dir,
        repo.get_all(),
        settings.upload_url_prefix,
        dry_run=dry_run
    )
