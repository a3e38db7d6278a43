"""
HTTP client for the truck API.

Used by the remote storage backend to run the store operations on the API
server. Translates HTTP failures into the storage error taxonomy.
"""

import logging
from typing import Any, Dict, Optional
from urllib.parse import quote

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from errors import RequestFailedError, StoreUnavailableError, TruckNotFoundError

logger = logging.getLogger(__name__)


class TruckApiClient:
    """Client for the truck API server.

    Handles authentication headers, retries of idempotent requests, timeouts
    and error translation.
    """

    def __init__(self, base_url: str, api_key: Optional[str] = None,
                 session_token: Optional[str] = None, timeout: float = 10.0):
        """Initialize the truck API client.

        Args:
            base_url: API base URL, e.g. http://localhost:3001/api
            api_key: Optional API key sent as X-API-Key for admin operations
            session_token: Optional admin session token sent as X-Session-Token
            timeout: Request timeout in seconds
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.headers = {"Content-Type": "application/json"}
        if api_key:
            self.headers["X-API-Key"] = api_key
        if session_token:
            self.headers["X-Session-Token"] = session_token

        # Writes are never retried: a retried POST could create the truck twice
        self.session = requests.Session()
        retry_strategy = Retry(
            total=3,
            backoff_factor=0.5,
            status_forcelist=[502, 503, 504],
            allowed_methods=["GET"]
        )
        adapter = HTTPAdapter(max_retries=retry_strategy)
        self.session.mount("http://", adapter)
        self.session.mount("https://", adapter)

    @staticmethod
    def _error_message(response: requests.Response) -> str:
        """Server supplied error message, or one derived from the status code."""
        try:
            body = response.json()
        except ValueError:
            body = None
        if isinstance(body, dict):
            message = body.get("error") or body.get("detail")
            if isinstance(message, str) and message:
                return message
        return f"HTTP {response.status_code}: {response.reason}"

    def request(self, method: str, endpoint: str, truck_id: Optional[str] = None,
                params: Optional[Dict] = None, json: Optional[Any] = None) -> Any:
        """Make a request to the API and return the decoded JSON body.

        Args:
            method: HTTP method
            endpoint: Path relative to the base URL
            truck_id: Truck id the request targets; a 404 then means the truck is missing
            params: Query parameters
            json: JSON body

        Returns:
            Decoded JSON response

        Raises:
            TruckNotFoundError: On 404 for a truck request
            RequestFailedError: On any other non-2xx response
            StoreUnavailableError: If the server cannot be reached
        """
        url = f"{self.base_url}{endpoint}"
        logger.debug(f"{method} {url}")

        try:
            response = self.session.request(
                method,
                url,
                headers=self.headers,
                params=params,
                json=json,
                timeout=self.timeout
            )
        except requests.exceptions.RequestException as e:
            logger.error(f"Truck API unreachable at {self.base_url}: {e}")
            raise StoreUnavailableError(f"Truck API unreachable: {e}") from e

        if not response.ok:
            if response.status_code == 404 and truck_id is not None:
                raise TruckNotFoundError(truck_id)
            message = self._error_message(response)
            logger.warning(f"{method} {endpoint} failed: {message}")
            raise RequestFailedError(message, status_code=response.status_code)

        try:
            return response.json()
        except ValueError as e:
            raise RequestFailedError(f"Invalid JSON response from {endpoint}", status_code=response.status_code) from e

    def list_trucks(self, sort_by: str) -> list:
        return self.request("GET", "/trucks", params={"sortBy": sort_by})

    def get_truck(self, truck_id: str) -> Dict:
        return self.request("GET", f"/trucks/{quote(truck_id, safe='')}", truck_id=truck_id)

    def create_truck(self, data: Dict) -> Dict:
        return self.request("POST", "/trucks", json=data)

    def update_truck(self, truck_id: str, data: Dict) -> Dict:
        return self.request("PUT", f"/trucks/{quote(truck_id, safe='')}", truck_id=truck_id, json=data)

    def delete_truck(self, truck_id: str) -> Dict:
        return self.request("DELETE", f"/trucks/{quote(truck_id, safe='')}", truck_id=truck_id)

    def export_trucks(self) -> Dict:
        return self.request("GET", "/admin/export")

    def import_trucks(self, document: Dict) -> Dict:
        return self.request("POST", "/admin/import", json=document)

    def get_status(self) -> Dict:
        return self.request("GET", "/status")

    def associate_images(self, truck_id: str, image_urls: list) -> Dict:
        return self.request(
            "PUT",
            "/images/update-truck-id",
            truck_id=truck_id,
            json={"truckId": truck_id, "imageUrls": image_urls}
        )
