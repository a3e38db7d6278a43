"""
Maintenance checks over the truck store.

Integrity validation of stored listings and detection/cleanup of image files
that no listing references.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Dict, Iterable, List

from models.truck import FuelType, TruckCondition, TruckStatus

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ["id", "make", "model", "year", "price"]
MIN_YEAR = 1980


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def validate_truck(truck: Dict) -> List[str]:
    """
    Check one stored truck.

    Args:
        truck: Stored truck record

    Returns:
        List of human-readable issues, empty when the truck is valid
    """
    truck_id = truck.get("id", "unknown")
    issues = []

    for field in REQUIRED_FIELDS:
        if truck.get(field) in (None, ""):
            issues.append(f"Truck {truck_id}: Missing required field '{field}'")

    year = truck.get("year")
    max_year = datetime.now().year + 1
    if not _is_number(year) or year < MIN_YEAR or year > max_year:
        issues.append(f"Truck {truck_id}: Invalid year '{year}'")

    price = truck.get("price")
    if not _is_number(price) or price <= 0:
        issues.append(f"Truck {truck_id}: Invalid price '{price}'")

    if not isinstance(truck.get("images"), list):
        issues.append(f"Truck {truck_id}: Images field must be an array")

    enum_fields = [("condition", TruckCondition), ("fuel_type", FuelType), ("status", TruckStatus)]
    for field, enum in enum_fields:
        value = truck.get(field)
        if value is not None and value not in {member.value for member in enum}:
            issues.append(f"Truck {truck_id}: Invalid {field} '{value}'")

    return issues


def validate_data_integrity(trucks: List[Dict]) -> Dict:
    """Validate every truck and summarize the issues found."""
    issues = []
    for truck in trucks:
        issues.extend(validate_truck(truck))

    if issues:
        logger.warning(f"Integrity check found {len(issues)} issues in {len(trucks)} trucks")
    return {
        "success": True,
        "truckCount": len(trucks),
        "issuesCount": len(issues),
        "issues": issues,
        "isHealthy": not issues
    }


def referenced_image_names(trucks: Iterable[Dict], upload_url_prefix: str) -> set:
    """File names of every image referenced from the upload prefix."""
    prefix = upload_url_prefix.rstrip("/") + "/"
    names = set()
    for truck in trucks:
        for image in truck.get("images") or []:
            if isinstance(image, str) and image.startswith(prefix):
                names.add(image[len(prefix):])
    return names


def find_orphaned_images(images_dir: Path, trucks: List[Dict], upload_url_prefix: str) -> List[str]:
    """Image files in images_dir not referenced by any truck, sorted by name."""
    images_dir = Path(images_dir)
    if not images_dir.is_dir():
        return []
    referenced = referenced_image_names(trucks, upload_url_prefix)
    return sorted(
        path.name for path in images_dir.iterdir()
        if path.is_file() and path.name not in referenced
    )


def cleanup_orphaned_images(images_dir: Path, trucks: List[Dict], upload_url_prefix: str,
                            dry_run: bool = True) -> Dict:
    """
    Remove image files no truck references.

    Args:
        images_dir: Directory holding the images
        trucks: Every stored truck
        upload_url_prefix: URL prefix the images are referenced by
        dry_run: Only report what would be removed

    Returns:
        dict: Orphaned file names and how many were removed
    """
    orphaned = find_orphaned_images(images_dir, trucks, upload_url_prefix)
    removed = 0
    if not dry_run:
        for name in orphaned:
            try:
                (Path(images_dir) / name).unlink()
                removed += 1
            except OSError as e:
                logger.warning(f"Could not delete orphaned image {name}: {e}")
        logger.info(f"Removed {removed} orphaned images from {images_dir}")

    return {
        "success": True,
        "trucksCount": len(trucks),
        "orphanedImages": orphaned,
        "removedCount": removed,
        "dryRun": dry_run
    }
