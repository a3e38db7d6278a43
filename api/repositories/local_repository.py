import json
import logging
from typing import Dict, List, Optional

from database import STORAGE_VERSION, BaseRepository, KeyValueStorage, MemoryKeyValueStorage
from errors import StoreUnavailableError, TruckNotFoundError
from utils.record_codec import denormalize_for_caller, normalize_for_store

logger = logging.getLogger(__name__)

DEFAULT_STORAGE_KEY = "truck_sales_data"


class LocalTruckRepository(BaseRepository):
    """Repository keeping all trucks in one entry of a key-value storage.

    The entry holds {"version": "1.0", "trucks": {id: record}, "sequence": n}
    where sequence counts every create. Each operation deserializes the entry,
    mutates it and serializes it back in a single call.
    """

    storage_type = "local"

    def __init__(self, storage: Optional[KeyValueStorage] = None, storage_key: str = DEFAULT_STORAGE_KEY, **kwargs):
        super().__init__(**kwargs)
        self.storage = storage if storage is not None else MemoryKeyValueStorage()
        self.storage_key = storage_key

    @staticmethod
    def _empty_document() -> Dict:
        return {"version": STORAGE_VERSION, "trucks": {}, "sequence": 0}

    def _load(self) -> Dict:
        raw = self.storage.get_item(self.storage_key)
        if raw is None:
            return self._empty_document()
        try:
            document = json.loads(raw)
        except (TypeError, json.JSONDecodeError) as e:
            raise StoreUnavailableError(f"Error reading from local storage: {e}") from e
        if not isinstance(document, dict) or not isinstance(document.get("trucks"), dict):
            raise StoreUnavailableError("Error reading from local storage: malformed document")
        document.setdefault("sequence", len(document["trucks"]))
        return document

    def _save(self, document: Dict) -> None:
        document["version"] = STORAGE_VERSION
        try:
            self.storage.set_item(self.storage_key, json.dumps(document))
        except (OSError, StoreUnavailableError) as e:
            logger.error(f"Error writing to local storage: {e}")
            raise StoreUnavailableError("Failed to save data") from e

    def list_ids(self) -> List[str]:
        return list(self._load()["trucks"].keys())

    def get_all(self) -> List[Dict]:
        return [denormalize_for_caller(truck) for truck in self._load()["trucks"].values()]

    def get_by_id(self, truck_id: str) -> Dict:
        truck = self._load()["trucks"].get(truck_id)
        if truck is None:
            raise TruckNotFoundError(truck_id)
        return denormalize_for_caller(truck)

    def create(self, data: Dict) -> Dict:
        with self.write_lock:
            document = self._load()
            document["sequence"] += 1
            truck = normalize_for_store(data)
            document["trucks"][truck["id"]] = truck
            self._save(document)
        logger.info(f"Created truck {truck['id']} in local storage")
        return denormalize_for_caller(truck)

    def update(self, truck_id: str, data: Dict) -> Dict:
        with self.write_lock:
            document = self._load()
            existing = document["trucks"].get(truck_id)
            if existing is None:
                raise TruckNotFoundError(truck_id)
            truck = normalize_for_store(data, existing=existing)
            document["trucks"][truck_id] = truck
            self._save(document)
        logger.info(f"Updated truck {truck_id} in local storage")
        return denormalize_for_caller(truck)

    def delete(self, truck_id: str) -> Dict:
        with self.write_lock:
            document = self._load()
            if truck_id not in document["trucks"]:
                raise TruckNotFoundError(truck_id)
            del document["trucks"][truck_id]
            self._save(document)
        logger.info(f"Deleted truck {truck_id} from local storage")
        self.remove_truck_images(truck_id)
        return self.delete_result(truck_id)

    def replace_all(self, trucks: List[Dict]) -> None:
        self._save({
            "version": STORAGE_VERSION,
            "trucks": {truck["id"]: truck for truck in trucks},
            "sequence": len(trucks)
        })

    def storage_size(self) -> int:
        return len(self.storage.get_item(self.storage_key) or "")

    @property
    def sequence(self) -> int:
        return self._load()["sequence"]
