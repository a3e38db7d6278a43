from typing import Dict
from fastapi import APIRouter, Depends

from config import settings
from database import BaseRepository
from models.requests import ImageAssociationRequest
from repositories.factory import get_truck_repository
from services.admin_session import require_admin
from services.image_association_service import ImageAssociationService

router = APIRouter(
    prefix="/images",
    tags=["images"],
    responses={404: {"description": "Truck not found"}}
)


def get_image_service(repo: BaseRepository = Depends(get_truck_repository)) -> ImageAssociationService:
    """Image association service bound to the application repository."""
    return ImageAssociationService(
        repo,
        images_dir=settings.images_dir,
        upload_url_prefix=settings.upload_url_prefix,
        file_prefix=settings.record_file_prefix
    )


@router.put("/update-truck-id", response_model=Dict, dependencies=[Depends(require_admin)])
async def associate_images(request: ImageAssociationRequest,
                           service: ImageAssociationService = Depends(get_image_service)):
    """Rename temporary uploads after the truck they belong to and store the resulting image list"""
    return service.associate_images(request.truckId, request.imageUrls)
