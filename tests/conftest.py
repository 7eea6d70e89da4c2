"""Pytest shared fixtures."""
import pathlib
import sys
from typing import Optional

# Add project root to Python path
ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import pytest
import requests

from stackclient.identity import IdentityService
from stackclient.transport import MockClient

ENDPOINT = "https://identity.example.com:5000/v2.0"
FUTURE = "2099-01-01T00:00:00Z"

CATALOG = [
    {
        "name": "Identity",
        "type": "identity",
        "endpoints": [{"region": "region-a", "publicURL": "https://identity.example.com:5000/v2.0"}],
    },
    {
        "name": "Object Storage",
        "type": "object-store",
        "endpoints": [
            {"region": "region-a", "publicURL": "https://swift.example.com/v1/AUTH_123"},
            {"region": "region-b", "publicURL": "https://swift-b.example.com/v1/AUTH_123"},
        ],
    },
    {
        "name": "CDN",
        "type": "hpext:cdn",
        "endpoints": [{"region": "region-a", "publicURL": "https://cdn.example.com/v1.0/123"}],
    },
]


def make_access(
    token: str = "token-1",
    expires: Optional[str] = FUTURE,
    tenant_id: Optional[str] = None,
    tenant_name: Optional[str] = None,
    catalog: Optional[list] = None,
) -> dict:
    """Body of a successful POST /tokens."""
    details = {"id": token}
    if expires is not None:
        details["expires"] = expires
    if tenant_id or tenant_name:
        details["tenant"] = {"id": tenant_id, "name": tenant_name}
    return {
        "access": {
            "token": details,
            "serviceCatalog": CATALOG if catalog is None else catalog,
            "user": {"id": "u-1", "name": "alice", "roles": [{"name": "member"}]},
        }
    }


# ─────────────────────────────────────────────────────────────────────────────
# Network Guard Rails
# ─────────────────────────────────────────────────────────────────────────────
@pytest.fixture(autouse=True)
def _block_network(monkeypatch, request):
    """
    Prevent unit tests from reaching the network.

    Integration tests are explicitly marked with @pytest.mark.integration and
    are allowed to perform real HTTP calls by skipping this fixture.
    """
    if request.node.get_closest_marker("integration"):
        return

    def _refuse(self, method, url, *args, **kwargs):
        raise RuntimeError(f"Unexpected HTTP {method} in unit test: {url}")

    monkeypatch.setattr(requests.Session, "request", _refuse)


# ─────────────────────────────────────────────────────────────────────────────
# Transport / Identity
# ─────────────────────────────────────────────────────────────────────────────
@pytest.fixture()
def mock_client():
    return MockClient()


@pytest.fixture()
def identity(mock_client):
    """Unauthenticated identity service on the mock transport."""
    return IdentityService(ENDPOINT, mock_client)


@pytest.fixture()
def authenticated(identity, mock_client):
    """Identity service holding an unscoped, valid token."""
    mock_client.queue_response(200, make_access())
    identity.authenticate_as_user("alice", "secret")
    return identity


@pytest.fixture()
def access_payload():
    """Factory for POST /tokens bodies (see ``make_access``)."""
    return make_access


@pytest.fixture()
def catalog():
    return CATALOG
