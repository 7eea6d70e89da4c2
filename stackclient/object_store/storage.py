"""Object storage (v1) account and container operations.

Consumer of the transport and identity layers; every call is one blocking
request authorized with ``X-Auth-Token``.
"""
from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional
from urllib.parse import quote

from ..exceptions import (
    ConflictException,
    ContainerNotEmptyError,
    ResourceNotFoundException,
    StackError,
)
from ..identity import IdentityService
from ..transport import TransportClient, Url, create_transport, raise_for_status
from ..transport.message import Response

logger = logging.getLogger(__name__)

SERVICE_TYPE = "object-store"
CONTAINER_METADATA_PREFIX = "X-Container-Meta-"


@dataclass
class Container:
    """Container summary as returned by listings or HEAD."""
    name: str
    count: int = 0
    bytes: int = 0
    metadata: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_json(cls, data: Mapping[str, Any]) -> "Container":
        return cls(
            name=data["name"],
            count=int(data.get("count") or 0),
            bytes=int(data.get("bytes") or 0),
        )

    @classmethod
    def from_response(cls, name: str, response: Response) -> "Container":
        metadata = {}
        offset = len(CONTAINER_METADATA_PREFIX)
        for header, value in response.headers.items():
            if header.lower().startswith(CONTAINER_METADATA_PREFIX.lower()):
                metadata[header[offset:]] = value
        return cls(
            name=name,
            count=int(response.get_header("X-Container-Object-Count", default=0)),
            bytes=int(response.get_header("X-Container-Bytes-Used", default=0)),
            metadata=metadata,
        )


def metadata_headers(metadata: Mapping[str, Any], prefix: str = CONTAINER_METADATA_PREFIX) -> Dict[str, str]:
    return {f"{prefix}{key}": str(value) for key, value in metadata.items()}


class ObjectStorage:
    """Client for one object storage account.

    Usage:
        storage = ObjectStorage.from_identity(identity, "region-a")
        if not storage.has_container("backups"):
            storage.create_container("backups")
    """

    def __init__(self, token: str, url: str, client: Optional[TransportClient] = None):
        """Initialize the client.

        Args:
            token: Auth token
            url: Account endpoint (publicURL from the catalog)
            client: Transport to use (defaults to the requests backend)
        """
        self._token = token
        self._url = url.rstrip("/")
        self.client = client if client is not None else create_transport()

    @classmethod
    def from_identity(
        cls,
        identity: IdentityService,
        region: str,
        client: Optional[TransportClient] = None,
    ) -> Optional["ObjectStorage"]:
        """Build a client from an authenticated identity service.

        Returns:
            ObjectStorage or None when the catalog has no endpoint for the region
        """
        return cls.from_service_catalog(identity.service_catalog(), identity.token, region, client)

    @classmethod
    def from_service_catalog(
        cls,
        catalog: List[Dict[str, Any]],
        token: str,
        region: str,
        client: Optional[TransportClient] = None,
    ) -> Optional["ObjectStorage"]:
        for entry in catalog:
            if entry.get("type") != SERVICE_TYPE:
                continue
            for endpoint in entry.get("endpoints") or []:
                if endpoint.get("publicURL") and endpoint.get("region") == region:
                    return cls(token, endpoint["publicURL"], client)
        logger.warning(f"No {SERVICE_TYPE} endpoint for region '{region}' in service catalog")
        return None

    @property
    def token(self) -> str:
        return self._token

    @property
    def url(self) -> str:
        return self._url

    def _container_url(self, name: str) -> str:
        return f"{self._url}/{quote(name, safe='')}"

    def _request(self, method: str, url: Any, headers: Optional[Dict[str, str]] = None) -> Response:
        all_headers = {"X-Auth-Token": self._token}
        all_headers.update(headers or {})
        request = self.client.create_request(method, url, None, {"headers": all_headers})
        return raise_for_status(request, self.client.send(request))

    # ─────────────────────────────────────────────────────────────────────────
    # Account
    # ─────────────────────────────────────────────────────────────────────────
    def account_info(self) -> Dict[str, int]:
        """Byte, container and object totals of the account."""
        response = self._request("HEAD", self._url)
        return {
            "bytes": int(response.get_header("X-Account-Bytes-Used", default=0)),
            "containers": int(response.get_header("X-Account-Container-Count", default=0)),
            "objects": int(response.get_header("X-Account-Object-Count", default=0)),
        }

    def containers(self, limit: int = 0, marker: Optional[str] = None) -> Dict[str, Container]:
        """List containers of the account.

        Args:
            limit: Maximum number of containers (0 for the server default)
            marker: Only list containers sorting after this name

        Returns:
            Mapping of container name to Container, in server order
        """
        url = Url(self._url)
        url.add_query({"format": "json"})
        if limit > 0:
            url.add_query({"limit": str(int(limit))})
        if marker:
            url.add_query({"marker": quote(marker, safe="")})

        response = self._request("GET", url)
        if response.status_code == 204:
            return {}
        return {item["name"]: Container.from_json(item) for item in response.json()}

    # ─────────────────────────────────────────────────────────────────────────
    # Containers
    # ─────────────────────────────────────────────────────────────────────────
    def container(self, name: str) -> Container:
        """Fetch container details.

        Raises:
            ResourceNotFoundException: If the container does not exist
        """
        response = self._request("HEAD", self._container_url(name))
        if response.status_code not in (200, 204):
            raise StackError(f"Unknown status: {response.status_code}")
        return Container.from_response(name, response)

    def has_container(self, name: str) -> bool:
        """Non-raising twin of ``container``."""
        try:
            self.container(name)
        except ResourceNotFoundException:
            return False
        return True

    def create_container(self, name: str, metadata: Optional[Mapping[str, Any]] = None) -> bool:
        """Create (or update) a container.

        Returns:
            True when created (201), False when it already existed (202)
        """
        response = self._request("PUT", self._container_url(name), metadata_headers(metadata or {}))
        if response.status_code == 201:
            logger.info(f"Created container '{name}'")
            return True
        if response.status_code == 202:
            return False
        raise StackError(f"Server returned unexpected code: {response.status_code}")

    def update_container(self, name: str, metadata: Optional[Mapping[str, Any]] = None) -> bool:
        return self.create_container(name, metadata)

    def delete_container(self, name: str) -> bool:
        """Delete an empty container.

        Returns:
            True when deleted, False when it did not exist

        Raises:
            ContainerNotEmptyError: If the container still holds objects
        """
        try:
            response = self._request("DELETE", self._container_url(name))
        except ResourceNotFoundException:
            return False
        except ConflictException as exc:
            raise ContainerNotEmptyError(
                "Non-empty container cannot be deleted", exc.request, exc.response
            ) from exc

        if response.status_code == 204:
            logger.info(f"Deleted container '{name}'")
            return True
        raise StackError(f"Server returned unexpected code: {response.status_code}")
