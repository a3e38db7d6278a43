import logging
from pathlib import Path
from typing import Dict, List, Optional

from database import BaseRepository, is_safe_truck_id
from errors import StoreUnavailableError, TruckNotFoundError
from utils.jsonio import read_json, write_json
from utils.record_codec import denormalize_for_caller, normalize_for_store

logger = logging.getLogger(__name__)


class PerRecordTruckRepository(BaseRepository):
    """Repository storing each truck in its own <prefix>_<id>.json file.

    The set of trucks is whatever the directory listing holds; ids come back
    in file name order.
    """

    storage_type = "per_record"

    def __init__(self, trucks_dir: Path, images_dir: Optional[Path] = None, file_prefix: str = "truck"):
        super().__init__(images_dir=images_dir, file_prefix=file_prefix)
        self.trucks_dir = Path(trucks_dir)

    def _record_path(self, truck_id: str) -> Path:
        if not is_safe_truck_id(truck_id):
            raise TruckNotFoundError(truck_id)
        return self.trucks_dir / f"{self.file_prefix}_{truck_id}.json"

    def _record_files(self) -> List[Path]:
        if not self.trucks_dir.exists():
            return []
        prefix = f"{self.file_prefix}_"
        try:
            return sorted(
                path for path in self.trucks_dir.iterdir()
                if path.is_file() and path.name.startswith(prefix) and path.suffix == ".json"
            )
        except OSError as e:
            raise StoreUnavailableError(f"Cannot read trucks directory {self.trucks_dir}: {e}") from e

    def _read_record(self, truck_id: str) -> Dict:
        truck = read_json(self._record_path(truck_id))
        if truck is None:
            raise TruckNotFoundError(truck_id)
        if not isinstance(truck, dict):
            raise StoreUnavailableError(f"Truck file for {truck_id} is malformed")
        return truck

    def list_ids(self) -> List[str]:
        prefix_length = len(self.file_prefix) + 1
        return [path.stem[prefix_length:] for path in self._record_files()]

    def get_all(self) -> List[Dict]:
        return [denormalize_for_caller(self._read_record(truck_id)) for truck_id in self.list_ids()]

    def get_by_id(self, truck_id: str) -> Dict:
        return denormalize_for_caller(self._read_record(truck_id))

    def create(self, data: Dict) -> Dict:
        with self.write_lock:
            truck = normalize_for_store(data)
            write_json(self._record_path(truck["id"]), truck)
        logger.info(f"Created {self._record_path(truck['id'])}")
        return denormalize_for_caller(truck)

    def update(self, truck_id: str, data: Dict) -> Dict:
        with self.write_lock:
            truck = normalize_for_store(data, existing=self._read_record(truck_id))
            write_json(self._record_path(truck_id), truck)
        logger.info(f"Updated {self._record_path(truck_id)}")
        return denormalize_for_caller(truck)

    def delete(self, truck_id: str) -> Dict:
        with self.write_lock:
            path = self._record_path(truck_id)
            if not path.exists():
                raise TruckNotFoundError(truck_id)
            try:
                path.unlink()
            except OSError as e:
                raise StoreUnavailableError(f"Error deleting truck file {path.name}: {e}") from e
        logger.info(f"Deleted {path}")
        self.remove_truck_images(truck_id)
        return self.delete_result(truck_id)

    def replace_all(self, trucks: List[Dict]) -> None:
        keep = set()
        for truck in trucks:
            path = self._record_path(truck["id"])
            write_json(path, truck)
            keep.add(path)
        for path in self._record_files():
            if path not in keep:
                path.unlink(missing_ok=True)

    def storage_size(self) -> int:
        return sum(path.stat().st_size for path in self._record_files())
