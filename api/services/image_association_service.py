"""
Image association for truck listings.

Images are uploaded before the owning truck has an id and are stored as
``upload_<suffix>`` files. Once the truck exists they are renamed to
``<prefix>_<id>_<suffix>`` and the truck's image list is rewritten, so that
deleting the truck also removes its images.
"""

import logging
from pathlib import Path
from typing import Dict, List, Optional

from database import BaseRepository

logger = logging.getLogger(__name__)

TEMPORARY_PREFIX = "upload_"


class ImageAssociationService:
    """Re-homes temporary uploads onto a truck id."""

    def __init__(self, repository: BaseRepository, images_dir: Path,
                 upload_url_prefix: str = "/data/trucks/images", file_prefix: str = "truck"):
        """Initialize the service.

        Args:
            repository: Repository holding the trucks
            images_dir: Directory the image files live in
            upload_url_prefix: Public URL prefix of files in images_dir
            file_prefix: Prefix of truck-owned image file names
        """
        self.repository = repository
        self.images_dir = Path(images_dir)
        self.upload_url_prefix = upload_url_prefix.rstrip("/") + "/"
        self.file_prefix = file_prefix

    def _file_name(self, image_ref: str) -> Optional[str]:
        """File name of a reference served from the upload prefix, or None."""
        if not isinstance(image_ref, str) or not image_ref.startswith(self.upload_url_prefix):
            return None
        name = image_ref[len(self.upload_url_prefix):]
        if not name or "/" in name or "\\" in name or name in (".", ".."):
            return None
        return name

    def is_temporary_upload(self, image_ref: str) -> bool:
        """True if the reference points at a not yet associated upload."""
        name = self._file_name(image_ref)
        return name is not None and name.startswith(TEMPORARY_PREFIX)

    def associated_name(self, truck_id: str, temporary_name: str) -> str:
        """File name an upload gets once it belongs to a truck."""
        suffix = temporary_name[len(TEMPORARY_PREFIX):]
        return f"{self.file_prefix}_{truck_id}_{suffix}"

    def _rename(self, truck_id: str, image_ref: str) -> Optional[str]:
        name = self._file_name(image_ref)
        new_name = self.associated_name(truck_id, name)
        try:
            (self.images_dir / name).rename(self.images_dir / new_name)
        except OSError as e:
            logger.warning(f"Could not associate image {name} with truck {truck_id}: {e}")
            return None
        logger.info(f"Renamed image {name} -> {new_name}")
        return f"{self.upload_url_prefix}{new_name}"

    def associate_images(self, truck_id: str, image_refs: List[str]) -> Dict:
        """
        Associate uploaded images with a truck.

        Temporary uploads are renamed to the truck's naming scheme; other
        references pass through unchanged, as does any upload whose rename
        fails. The truck's images field is then overwritten with the result.
        A repository whose images live on the API server hands the whole
        association to that server.

        Args:
            truck_id: Id of the owning truck
            image_refs: Image URLs in display order

        Returns:
            dict: Success flag, truck id, resulting image list and rename count

        Raises:
            TruckNotFoundError: If the truck does not exist
        """
        if self.repository.stores_images_remotely:
            return self.repository.associate_images(truck_id, image_refs)

        self.repository.get_by_id(truck_id)

        images = []
        renamed = 0
        for image_ref in image_refs:
            new_ref = self._rename(truck_id, image_ref) if self.is_temporary_upload(image_ref) else None
            if new_ref is None:
                images.append(image_ref)
            else:
                images.append(new_ref)
                renamed += 1

        self.repository.update(truck_id, {"images": images})
        logger.info(f"Associated {renamed} of {len(image_refs)} images with truck {truck_id}")
        return {
            "success": True,
            "truckId": truck_id,
            "images": images,
            "renamedCount": renamed
        }
