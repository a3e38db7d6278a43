import json
import logging
from typing import Any, Dict, List

from database import STORAGE_VERSION, BaseRepository
from errors import InvalidFormatError, TruckStoreError
from services.truck_api_client import TruckApiClient
from utils.query import DEFAULT_SORT
from utils.record_codec import denormalize_for_caller, utc_now_iso

logger = logging.getLogger(__name__)


class RemoteTruckRepository(BaseRepository):
    """Repository delegating every operation to the truck API server.

    The server runs one of the file-backed repositories; this class only
    translates calls into HTTP requests. Listing degrades to an empty result
    when the server is unreachable or fails.
    """

    storage_type = "remote"
    stores_images_remotely = True

    def __init__(self, client: TruckApiClient, **kwargs):
        super().__init__(**kwargs)
        self.client = client

    def list(self, sort_by: str = DEFAULT_SORT) -> List[Dict]:
        """List trucks sorted by the server; empty if the server is unavailable."""
        try:
            trucks = self.client.list_trucks(sort_by)
        except TruckStoreError as e:
            logger.error(f"Error loading trucks from {self.client.base_url}: {e.message}")
            return []
        logger.info(f"Loaded {len(trucks)} trucks from {self.client.base_url}")
        return [denormalize_for_caller(truck) for truck in trucks]

    def list_ids(self) -> List[str]:
        return [truck.get("id") for truck in self.get_all()]

    def get_all(self) -> List[Dict]:
        return [denormalize_for_caller(truck) for truck in self.client.list_trucks(DEFAULT_SORT)]

    def get_by_id(self, truck_id: str) -> Dict:
        return denormalize_for_caller(self.client.get_truck(truck_id))

    def create(self, data: Dict) -> Dict:
        payload = {key: value for key, value in data.items() if key != "id"}
        truck = self.client.create_truck(payload)
        logger.info(f"Created truck {truck.get('id')} on {self.client.base_url}")
        return denormalize_for_caller(truck)

    def update(self, truck_id: str, data: Dict) -> Dict:
        truck = self.client.update_truck(truck_id, data)
        logger.info(f"Updated truck {truck_id} on {self.client.base_url}")
        return denormalize_for_caller(truck)

    def delete(self, truck_id: str) -> Dict:
        result = self.client.delete_truck(truck_id)
        logger.info(f"Deleted truck {truck_id} on {self.client.base_url}")
        return result

    def associate_images(self, truck_id: str, image_refs: List[str]) -> Dict:
        """Let the server rename its uploads and rewrite the truck's image list."""
        result = self.client.associate_images(truck_id, image_refs)
        logger.info(f"Associated images with truck {truck_id} on {self.client.base_url}")
        return result

    def export_data(self) -> Dict:
        return self.client.export_trucks()

    def import_data(self, document: Any) -> Dict:
        trucks = document.get("trucks") if isinstance(document, dict) else None
        if not isinstance(trucks, list):
            raise InvalidFormatError("Invalid data format")
        return self.client.import_trucks({"trucks": trucks})

    def replace_all(self, trucks: List[Dict]) -> None:
        self.client.import_trucks({"trucks": trucks})

    def storage_size(self) -> int:
        return len(json.dumps(self.get_all()))

    def get_stats(self) -> Dict:
        try:
            status = self.client.get_status()
        except TruckStoreError as e:
            logger.warning(f"Truck API offline: {e.message}")
            return {
                "version": STORAGE_VERSION,
                "truckCount": 0,
                "lastUpdated": utc_now_iso(),
                "storageType": self.storage_type,
                "apiEndpoint": self.client.base_url,
                "status": "offline"
            }
        return {
            **status,
            "version": STORAGE_VERSION,
            "lastUpdated": utc_now_iso(),
            "storageType": self.storage_type,
            "apiEndpoint": self.client.base_url
        }
