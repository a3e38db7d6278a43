"""
Tests for the remote repository and the truck API client.
The HTTP session is mocked; no server is contacted.
"""

from unittest.mock import Mock, patch

import pytest
import requests

from errors import InvalidFormatError, RequestFailedError, StoreUnavailableError, TruckNotFoundError
from repositories.remote_repository import RemoteTruckRepository
from services.image_association_service import ImageAssociationService
from services.truck_api_client import TruckApiClient


def make_response(status_code=200, body=None, reason="OK"):
    response = Mock()
    response.status_code = status_code
    response.ok = 200 <= status_code < 300
    response.reason = reason
    if isinstance(body, Exception):
        response.json.side_effect = body
    else:
        response.json.return_value = body
    return response


@pytest.fixture
def client():
    return TruckApiClient("http://trucks.test/api/", api_key="secret", timeout=5)


@pytest.fixture
def mock_request(client):
    with patch.object(client.session, "request") as mock:
        yield mock


@pytest.fixture
def remote(client):
    return RemoteTruckRepository(client)


class TestTruckApiClient:
    """Request building and error translation."""

    def test_headers_and_url(self, client, mock_request):
        mock_request.return_value = make_response(body=[])

        client.list_trucks("-price")

        args, kwargs = mock_request.call_args
        assert args == ("GET", "http://trucks.test/api/trucks")
        assert kwargs["params"] == {"sortBy": "-price"}
        assert kwargs["headers"]["X-API-Key"] == "secret"
        assert kwargs["timeout"] == 5

    def test_session_token_header(self):
        client = TruckApiClient("http://trucks.test/api", session_token="token-1")
        assert client.headers["X-Session-Token"] == "token-1"
        assert "X-API-Key" not in client.headers

    def test_truck_404_becomes_not_found(self, client, mock_request):
        mock_request.return_value = make_response(404, {"error": "Truck not found: abc"}, "Not Found")

        with pytest.raises(TruckNotFoundError) as exc_info:
            client.get_truck("abc")
        assert exc_info.value.message == "Truck not found: abc"

    def test_server_error_message_is_kept(self, client, mock_request):
        mock_request.return_value = make_response(400, {"error": "Invalid data format"}, "Bad Request")

        with pytest.raises(RequestFailedError) as exc_info:
            client.import_trucks({"trucks": []})
        assert exc_info.value.message == "Invalid data format"
        assert exc_info.value.status_code == 400

    def test_error_without_body_uses_status(self, client, mock_request):
        mock_request.return_value = make_response(500, ValueError("no json"), "Internal Server Error")

        with pytest.raises(RequestFailedError) as exc_info:
            client.get_status()
        assert exc_info.value.message == "HTTP 500: Internal Server Error"

    def test_connection_error_becomes_unavailable(self, client, mock_request):
        mock_request.side_effect = requests.exceptions.ConnectionError("refused")

        with pytest.raises(StoreUnavailableError):
            client.get_status()

    def test_timeout_becomes_unavailable(self, client, mock_request):
        mock_request.side_effect = requests.exceptions.Timeout("slow")

        with pytest.raises(StoreUnavailableError):
            client.get_truck("abc")

    def test_truck_id_is_url_encoded(self, client, mock_request):
        mock_request.return_value = make_response(body={"success": True})

        client.delete_truck("a/b")

        assert mock_request.call_args[0] == ("DELETE", "http://trucks.test/api/trucks/a%2Fb")


class TestRemoteTruckRepository:
    """Store operations mapped onto the HTTP API."""

    def test_list_uses_server_order(self, remote, mock_request):
        mock_request.return_value = make_response(body=[
            {"id": "b", "price": 95000},
            {"id": "a", "price": 85000, "features": None},
        ])

        trucks = remote.list("-price")

        assert [truck["id"] for truck in trucks] == ["b", "a"]
        assert trucks[1]["features"] == []
        assert mock_request.call_args.kwargs["params"] == {"sortBy": "-price"}

    def test_list_degrades_when_offline(self, remote, mock_request):
        mock_request.side_effect = requests.exceptions.ConnectionError("refused")
        assert remote.list() == []

    def test_list_degrades_on_server_error(self, remote, mock_request):
        mock_request.return_value = make_response(500, {"error": "boom"}, "Internal Server Error")
        assert remote.list() == []

    def test_filter_applies_locally(self, remote, mock_request):
        mock_request.return_value = make_response(body=[
            {"id": "a", "make": "Mack"},
            {"id": "b", "make": "Volvo"},
        ])
        assert [truck["id"] for truck in remote.filter({"make": "Volvo"})] == ["b"]

    def test_get_missing_raises(self, remote, mock_request):
        mock_request.return_value = make_response(404, {"error": "Truck not found: zz"}, "Not Found")

        with pytest.raises(TruckNotFoundError):
            remote.get_by_id("zz")

    def test_get_offline_raises(self, remote, mock_request):
        mock_request.side_effect = requests.exceptions.ConnectionError("refused")

        with pytest.raises(StoreUnavailableError):
            remote.get_by_id("zz")

    def test_create_strips_id(self, remote, mock_request):
        mock_request.return_value = make_response(201, {"id": "new", "make": "Mack"})

        truck = remote.create({"id": "mine", "make": "Mack"})

        assert truck["id"] == "new"
        assert mock_request.call_args.kwargs["json"] == {"make": "Mack"}

    def test_update_and_delete(self, remote, mock_request):
        mock_request.return_value = make_response(body={"id": "a", "price": 1})
        assert remote.update("a", {"price": 1})["price"] == 1
        assert mock_request.call_args[0][0] == "PUT"

        mock_request.return_value = make_response(body={"success": True, "message": "Truck a deleted"})
        assert remote.delete("a")["success"] is True
        assert mock_request.call_args[0][0] == "DELETE"

    def test_import_validates_before_sending(self, remote, mock_request):
        with pytest.raises(InvalidFormatError):
            remote.import_data({"trucks": "nope"})
        mock_request.assert_not_called()

    def test_import_and_export(self, remote, mock_request):
        mock_request.return_value = make_response(body={"success": True, "importedCount": 1})
        assert remote.import_data({"trucks": [{"id": "a"}]})["importedCount"] == 1
        assert mock_request.call_args[0] == ("POST", "http://trucks.test/api/admin/import")

        mock_request.return_value = make_response(body={"version": "1.0", "truckCount": 0, "trucks": []})
        assert remote.export_data()["truckCount"] == 0

    def test_export_offline_raises(self, remote, mock_request):
        mock_request.side_effect = requests.exceptions.ConnectionError("refused")

        with pytest.raises(StoreUnavailableError):
            remote.export_data()

    def test_image_association_runs_on_server(self, remote, mock_request, tmp_path):
        upload = tmp_path / "upload_1.jpg"
        upload.write_bytes(b"jpeg")
        server_result = {
            "success": True,
            "truckId": "t1",
            "images": ["/data/trucks/images/truck_t1_1.jpg"],
            "renamedCount": 1
        }
        mock_request.return_value = make_response(body=server_result)
        service = ImageAssociationService(remote, tmp_path)

        result = service.associate_images("t1", ["/data/trucks/images/upload_1.jpg"])

        assert result == server_result
        args, kwargs = mock_request.call_args
        assert args == ("PUT", "http://trucks.test/api/images/update-truck-id")
        assert kwargs["json"] == {"truckId": "t1", "imageUrls": ["/data/trucks/images/upload_1.jpg"]}
        assert mock_request.call_count == 1
        assert upload.exists()

    def test_image_association_unknown_truck(self, remote, mock_request, tmp_path):
        mock_request.return_value = make_response(404, {"error": "Truck not found: t9"}, "Not Found")

        with pytest.raises(TruckNotFoundError):
            ImageAssociationService(remote, tmp_path).associate_images("t9", [])

    def test_stats_online(self, remote, mock_request):
        mock_request.return_value = make_response(body={"status": "healthy", "truckCount": 4})
        stats = remote.get_stats()

        assert stats["status"] == "healthy"
        assert stats["truckCount"] == 4
        assert stats["storageType"] == "remote"
        assert stats["apiEndpoint"] == "http://trucks.test/api"

    def test_stats_offline(self, remote, mock_request):
        mock_request.side_effect = requests.exceptions.ConnectionError("refused")
        stats = remote.get_stats()

        assert stats["status"] == "offline"
        assert stats["truckCount"] == 0
