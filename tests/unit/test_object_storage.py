import pytest

from stackclient.exceptions import (
    ContainerNotEmptyError,
    ForbiddenException,
    ResourceNotFoundException,
)
from stackclient.object_store import Container, ObjectStorage
from stackclient.transport import MockClient

ACCOUNT_URL = "https://swift.example.com/v1/AUTH_123"


@pytest.fixture()
def storage(mock_client):
    return ObjectStorage("tok", ACCOUNT_URL, mock_client)


class TestFactories:
    def test_from_identity(self, authenticated, mock_client):
        storage = ObjectStorage.from_identity(authenticated, "region-b", mock_client)
        assert storage.url == "https://swift-b.example.com/v1/AUTH_123"
        assert storage.token == authenticated.token

    def test_unknown_region(self, catalog):
        assert ObjectStorage.from_service_catalog(catalog, "tok", "region-z", MockClient()) is None


class TestAccount:
    def test_account_info(self, storage, mock_client):
        mock_client.queue_response(204, headers={
            "X-Account-Bytes-Used": "2048",
            "X-Account-Container-Count": "3",
            "X-Account-Object-Count": "12",
        })
        assert storage.account_info() == {"bytes": 2048, "containers": 3, "objects": 12}
        assert mock_client.last_request.method == "HEAD"
        assert mock_client.last_request.get_header("X-Auth-Token") == "tok"

    def test_containers(self, storage, mock_client):
        mock_client.queue_response(200, [
            {"name": "photos", "count": 2, "bytes": 100},
            {"name": "empty", "count": 0, "bytes": 0},
        ])
        containers = storage.containers(limit=10, marker="a b")

        assert list(containers) == ["photos", "empty"]
        assert containers["photos"] == Container("photos", 2, 100)
        assert str(mock_client.last_request.url) == f"{ACCOUNT_URL}?format=json&limit=10&marker=a%20b"

    def test_no_containers(self, storage, mock_client):
        mock_client.queue_response(204)
        assert storage.containers() == {}

    def test_errors_propagate(self, storage, mock_client):
        mock_client.queue_response(403)
        with pytest.raises(ForbiddenException):
            storage.containers()


class TestContainers:
    def test_container_details(self, storage, mock_client):
        mock_client.queue_response(204, headers={
            "X-Container-Object-Count": "4",
            "X-Container-Bytes-Used": "512",
            "X-Container-Meta-Owner": "alice",
        })
        container = storage.container("my photos")

        assert container == Container("my photos", 4, 512, {"Owner": "alice"})
        assert str(mock_client.last_request.url) == f"{ACCOUNT_URL}/my%20photos"

    def test_missing_container_raises(self, storage, mock_client):
        mock_client.queue_response(404)
        with pytest.raises(ResourceNotFoundException):
            storage.container("nope")

    def test_has_container(self, storage, mock_client):
        mock_client.queue_response(204)
        mock_client.queue_response(404)
        assert storage.has_container("yes") is True
        assert storage.has_container("no") is False

    def test_create_container(self, storage, mock_client):
        mock_client.queue_response(201)
        mock_client.queue_response(202)

        assert storage.create_container("photos", {"Owner": "alice"}) is True
        request = mock_client.last_request
        assert request.method == "PUT"
        assert request.get_header("X-Container-Meta-Owner") == "alice"
        assert storage.update_container("photos") is False

    def test_delete_container(self, storage, mock_client):
        mock_client.queue_response(204)
        mock_client.queue_response(404)
        assert storage.delete_container("photos") is True
        assert storage.delete_container("photos") is False

    def test_delete_non_empty_container(self, storage, mock_client):
        mock_client.queue_response(409, b"There was a conflict")
        with pytest.raises(ContainerNotEmptyError) as exc_info:
            storage.delete_container("photos")
        assert exc_info.value.status_code == 409
