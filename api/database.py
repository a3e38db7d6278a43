import logging
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List, Optional

from errors import InvalidFormatError, StoreUnavailableError, TruckStoreError
from utils.jsonio import read_json, write_json
from utils.query import DEFAULT_SORT, filter_trucks, sort_trucks
from utils.record_codec import normalize_imported, utc_now_iso

logger = logging.getLogger(__name__)

STORAGE_VERSION = "1.0"


def is_safe_truck_id(truck_id: Any) -> bool:
    """True if the id is a non-empty string usable as part of a file name."""
    return (
        isinstance(truck_id, str)
        and truck_id not in ("", ".", "..")
        and "/" not in truck_id
        and "\\" not in truck_id
        and "\x00" not in truck_id
    )


class KeyValueStorage(ABC):
    """String key-value storage with the browser localStorage interface."""

    @abstractmethod
    def get_item(self, key: str) -> Optional[str]:
        """Return the stored string for key, or None."""

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        """Store value under key."""

    @abstractmethod
    def remove_item(self, key: str) -> None:
        """Remove key if present."""


class MemoryKeyValueStorage(KeyValueStorage):
    """Process-local storage, lost when the process exits."""

    def __init__(self):
        self._items: Dict[str, str] = {}

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)


class FileKeyValueStorage(KeyValueStorage):
    """Storage persisted as a single JSON object on disk.

    Every call reads the file; every write replaces it atomically.
    """

    def __init__(self, path: Path):
        self.path = Path(path)

    def _load(self) -> Dict[str, str]:
        items = read_json(self.path)
        if items is None:
            return {}
        if not isinstance(items, dict):
            raise StoreUnavailableError(f"Key-value storage {self.path} is not a JSON object")
        return items

    def get_item(self, key: str) -> Optional[str]:
        return self._load().get(key)

    def set_item(self, key: str, value: str) -> None:
        items = self._load()
        items[key] = value
        write_json(self.path, items)

    def remove_item(self, key: str) -> None:
        items = self._load()
        if key in items:
            del items[key]
            write_json(self.path, items)


class BaseRepository(ABC):
    """Base truck repository.

    Defines the storage contract every backend satisfies and implements the
    shared query, export, import and statistics operations on top of it.
    Reads degrade to an empty result when the medium is unavailable; every
    other operation raises.

    Mutating operations of the file-backed backends run under ``write_lock``,
    which serializes them within one process only. Two processes writing the
    same document can still lose each other's updates.
    """

    storage_type = "abstract"
    # Image files live with another process, which also renames them
    stores_images_remotely = False

    def __init__(self, images_dir: Optional[Path] = None, file_prefix: str = "truck"):
        self.images_dir = Path(images_dir) if images_dir is not None else None
        self.file_prefix = file_prefix
        self.write_lock = threading.RLock()

    # Storage contract

    @abstractmethod
    def list_ids(self) -> List[str]:
        """Return every truck id in storage order."""

    @abstractmethod
    def get_by_id(self, truck_id: str) -> Dict:
        """Return the stored truck, raising TruckNotFoundError if absent."""

    @abstractmethod
    def create(self, data: Dict) -> Dict:
        """Create a truck from a partial record and return it."""

    @abstractmethod
    def update(self, truck_id: str, data: Dict) -> Dict:
        """Shallow-merge data over the stored truck and return the result."""

    @abstractmethod
    def delete(self, truck_id: str) -> Dict:
        """Delete a truck and its image files."""

    @abstractmethod
    def get_all(self) -> List[Dict]:
        """Return every truck in storage order."""

    @abstractmethod
    def replace_all(self, trucks: List[Dict]) -> None:
        """Replace the whole collection with the given trucks."""

    @abstractmethod
    def storage_size(self) -> int:
        """Size in bytes of the persisted document(s)."""

    # Query layer

    def list(self, sort_by: str = DEFAULT_SORT) -> List[Dict]:
        """List all trucks sorted by the sort spec; empty if the store is unavailable."""
        try:
            trucks = self.get_all()
        except TruckStoreError as e:
            logger.error(f"Error loading trucks from {self.storage_type} storage: {e.message}")
            return []
        return sort_trucks(trucks, sort_by)

    def filter(self, criteria: Optional[Dict[str, Any]] = None, sort_by: str = DEFAULT_SORT) -> List[Dict]:
        """List trucks matching every criterion ("all" or None means unconstrained)."""
        return filter_trucks(self.list(sort_by), criteria)

    # Export / import

    def export_data(self) -> Dict:
        """Snapshot of the whole collection, usable as import input."""
        trucks = self.get_all()
        return {
            "version": STORAGE_VERSION,
            "exportDate": utc_now_iso(),
            "truckCount": len(trucks),
            "trucks": trucks
        }

    def import_data(self, document: Any) -> Dict:
        """
        Replace the whole collection with the trucks of an export document.

        Args:
            document: Mapping with a "trucks" list

        Returns:
            dict: Success flag and number of imported trucks

        Raises:
            InvalidFormatError: If the trucks list is missing or not a list
        """
        trucks = document.get("trucks") if isinstance(document, dict) else None
        if not isinstance(trucks, list):
            raise InvalidFormatError("Invalid data format")

        by_id: Dict[str, Dict] = {}
        for truck in trucks:
            if not isinstance(truck, dict) or not truck.get("id"):
                logger.warning("Skipping imported truck without an id")
                continue
            if not is_safe_truck_id(truck["id"]):
                logger.warning(f"Skipping imported truck with unsafe id {truck['id']!r}")
                continue
            if truck["id"] in by_id:
                logger.warning(f"Duplicate truck id {truck['id']} in import, keeping the last record")
            by_id[truck["id"]] = normalize_imported(truck)
        imported = list(by_id.values())

        with self.write_lock:
            self.replace_all(imported)
        logger.info(f"Imported {len(imported)} trucks into {self.storage_type} storage")
        return {"success": True, "importedCount": len(imported)}

    def get_stats(self) -> Dict:
        """Storage statistics."""
        try:
            return {
                "version": STORAGE_VERSION,
                "truckCount": len(self.list_ids()),
                "lastUpdated": utc_now_iso(),
                "storageSize": self.storage_size(),
                "storageType": self.storage_type,
                "status": "healthy"
            }
        except TruckStoreError as e:
            logger.error(f"Error reading {self.storage_type} storage statistics: {e.message}")
            return {
                "version": STORAGE_VERSION,
                "truckCount": 0,
                "lastUpdated": utc_now_iso(),
                "storageSize": 0,
                "storageType": self.storage_type,
                "status": "error",
                "error": e.message
            }

    # Images

    def image_prefix(self, truck_id: str) -> str:
        """File name prefix of images owned by a truck."""
        return f"{self.file_prefix}_{truck_id}_"

    def remove_truck_images(self, truck_id: str) -> int:
        """Best-effort removal of a truck's image files. Returns the number removed."""
        if self.images_dir is None or not self.images_dir.is_dir():
            return 0

        prefix = self.image_prefix(truck_id)
        removed = 0
        try:
            candidates = [path for path in self.images_dir.iterdir() if path.name.startswith(prefix)]
        except OSError as e:
            logger.warning(f"Could not list images for truck {truck_id}: {e}")
            return 0

        for path in candidates:
            try:
                path.unlink()
                removed += 1
                logger.info(f"Deleted image {path.name}")
            except OSError as e:
                logger.warning(f"Could not delete image {path.name}: {e}")
        return removed

    @staticmethod
    def delete_result(truck_id: str) -> Dict:
        return {"success": True, "message": f"Truck {truck_id} deleted"}
