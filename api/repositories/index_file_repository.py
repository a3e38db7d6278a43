import logging
from pathlib import Path
from typing import Dict, List, Optional

from database import BaseRepository
from errors import StoreUnavailableError, TruckNotFoundError
from utils.jsonio import dump_json, read_json, write_json
from utils.record_codec import denormalize_for_caller, normalize_for_store, utc_now_iso

logger = logging.getLogger(__name__)


class IndexFileTruckRepository(BaseRepository):
    """Repository storing every truck in one JSON index document.

    Layout: {"trucks": [record, ...], "lastUpdated": iso-timestamp}. Each
    mutation reads the whole document, changes it and writes it back whole.
    """

    storage_type = "index_file"

    def __init__(self, index_file: Path, images_dir: Optional[Path] = None, file_prefix: str = "truck"):
        super().__init__(images_dir=images_dir, file_prefix=file_prefix)
        self.index_file = Path(index_file)

    def _load(self) -> Dict:
        document = read_json(self.index_file)
        if document is None:
            return {"trucks": [], "lastUpdated": None}
        if not isinstance(document, dict) or not isinstance(document.get("trucks"), list):
            raise StoreUnavailableError(f"Index document {self.index_file} is malformed")
        return document

    def _save(self, trucks: List[Dict]) -> None:
        write_json(self.index_file, {"trucks": trucks, "lastUpdated": utc_now_iso()})

    @staticmethod
    def _position(trucks: List[Dict], truck_id: str) -> int:
        for index, truck in enumerate(trucks):
            if truck.get("id") == truck_id:
                return index
        raise TruckNotFoundError(truck_id)

    def list_ids(self) -> List[str]:
        return [truck.get("id") for truck in self._load()["trucks"]]

    def get_all(self) -> List[Dict]:
        return [denormalize_for_caller(truck) for truck in self._load()["trucks"]]

    def get_by_id(self, truck_id: str) -> Dict:
        trucks = self._load()["trucks"]
        return denormalize_for_caller(trucks[self._position(trucks, truck_id)])

    def create(self, data: Dict) -> Dict:
        with self.write_lock:
            trucks = self._load()["trucks"]
            truck = normalize_for_store(data)
            trucks.append(truck)
            self._save(trucks)
        logger.info(f"Created truck {truck['id']} in {self.index_file}")
        return denormalize_for_caller(truck)

    def update(self, truck_id: str, data: Dict) -> Dict:
        with self.write_lock:
            trucks = self._load()["trucks"]
            position = self._position(trucks, truck_id)
            truck = normalize_for_store(data, existing=trucks[position])
            trucks[position] = truck
            self._save(trucks)
        logger.info(f"Updated truck {truck_id} in {self.index_file}")
        return denormalize_for_caller(truck)

    def delete(self, truck_id: str) -> Dict:
        with self.write_lock:
            trucks = self._load()["trucks"]
            del trucks[self._position(trucks, truck_id)]
            self._save(trucks)
        logger.info(f"Deleted truck {truck_id} from {self.index_file}")
        self.remove_truck_images(truck_id)
        return self.delete_result(truck_id)

    def replace_all(self, trucks: List[Dict]) -> None:
        self._save(list(trucks))

    def storage_size(self) -> int:
        return len(dump_json(self._load()))
