"""Identity (v2.0) client: authentication, token lifecycle and rescoping.

Handles token acquisition, expiry checks, the service catalog and
snapshots of the authenticated state.
"""
from __future__ import annotations
import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from ..exceptions import (
    AuthenticationFailure,
    InvalidArgument,
    SerializationError,
    UnauthorizedException,
)
from ..transport import TransportClient, Url, create_transport, raise_for_status
from ..transport.message import Response

logger = logging.getLogger(__name__)

API_VERSION = "2.0"
ACCEPT_TYPE = "application/json"
SNAPSHOT_VERSION = 1


def parse_expires(value: str) -> datetime:
    """Parse an ISO 8601 ``expires`` stamp into an aware UTC datetime.

    Stamps without an offset are taken as UTC.

    Raises:
        ValueError: If the value is not ISO 8601
    """
    text = str(value).strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def _mask(token: Optional[str]) -> str:
    return f"{token[:8]}..." if token else "<none>"


class IdentityService:
    """Client for the identity endpoint.

    State is empty until ``authenticate`` (or ``authenticate_as_user``)
    succeeds; ``rescope_using_tenant_id``/``rescope_using_tenant_name``
    swap the scope of the current token. Instances are not thread-safe.

    Usage:
        identity = IdentityService("https://identity.example.com:5000")
        identity.authenticate_as_user("alice", "secret", tenant_name="demo")
        storage_urls = identity.service_catalog("object-store")
    """

    def __init__(self, url: str, client: Optional[TransportClient] = None):
        """Initialize the service.

        Args:
            url: Identity endpoint. ``/v2.0`` is appended when it has no path
            client: Transport to use (defaults to the requests backend)
        """
        parsed = Url(url)
        if parsed.path:
            self._endpoint = str(url).rstrip("/")
        else:
            self._endpoint = f"{str(url).rstrip('/')}/v{API_VERSION}"

        self.client = client if client is not None else create_transport()
        self._token_details: Dict[str, Any] = {}
        self._catalog: List[Dict[str, Any]] = []
        self._user: Dict[str, Any] = {}
        self._expires_at: Optional[datetime] = None

    @property
    def endpoint(self) -> str:
        return self._endpoint

    def url(self) -> str:
        """Endpoint URL, e.g. ``https://identity.example.com:5000/v2.0``."""
        return self._endpoint

    # ─────────────────────────────────────────────────────────────────────────
    # Authentication
    # ─────────────────────────────────────────────────────────────────────────
    def _post_tokens(self, auth: Dict[str, Any]) -> str:
        body = json.dumps({"auth": auth}).encode("utf-8")
        headers = {
            "Content-Type": "application/json",
            "Accept": ACCEPT_TYPE,
            "Content-Length": str(len(body)),
        }
        request = self.client.create_request("POST", f"{self._endpoint}/tokens", body, {"headers": headers})
        response = raise_for_status(request, self.client.send(request))
        self._handle_response(response)
        return self.token

    def _handle_response(self, response: Response) -> None:
        """Replace token, catalog and user with the ones in ``response``.

        Raises:
            AuthenticationFailure: If the body carries no usable token
        """
        try:
            access = response.json()["access"]
            token = access["token"]
            token_id = token["id"]
        except (KeyError, TypeError, SerializationError) as exc:
            raise AuthenticationFailure(
                f"Identity response carries no token ({exc!r})", response=response
            ) from exc
        if not token_id:
            raise AuthenticationFailure("Identity response carries an empty token id", response=response)

        expires_at = None
        if token.get("expires"):
            try:
                expires_at = parse_expires(token["expires"])
            except ValueError as exc:
                raise AuthenticationFailure(
                    f"Malformed token expiry: {token['expires']!r}", response=response
                ) from exc

        self._token_details = token
        self._expires_at = expires_at
        self._catalog = list(access.get("serviceCatalog") or [])
        self._user = access.get("user") or {}

    def authenticate(self, ops: Dict[str, Any]) -> str:
        """Authenticate with an arbitrary credentials payload.

        The payload is wrapped in ``{"auth": ops}`` and POSTed to
        ``{endpoint}/tokens``, e.g. ``{"passwordCredentials": {...},
        "tenantId": "..."}``.

        Args:
            ops: Credentials (and optional scope) for the ``auth`` envelope

        Returns:
            The new token id

        Raises:
            UnauthorizedException: Credentials rejected (401)
            RequestException: Any other HTTP error
            AuthenticationFailure: 2xx response without a usable token
            TransportError: Network failure
        """
        token = self._post_tokens(dict(ops))
        logger.info(f"Authenticated against {self._endpoint} (token {_mask(token)}, tenant={self.tenant_id})")
        return token

    def authenticate_as_user(
        self,
        username: str,
        password: str,
        tenant_id: Optional[str] = None,
        tenant_name: Optional[str] = None,
    ) -> str:
        """Authenticate with username and password.

        When both tenant_id and tenant_name are given, tenant_id is used
        and tenant_name is ignored.

        Args:
            username: Account name
            password: Account password
            tenant_id: Scope the token to this tenant id
            tenant_name: Scope the token to this tenant name

        Returns:
            The new token id

        Raises:
            AuthenticationFailure: Credentials rejected or unusable response
        """
        ops: Dict[str, Any] = {
            "passwordCredentials": {
                "username": username,
                "password": password,
            }
        }
        if tenant_id:
            if tenant_name:
                logger.warning(f"Both tenant id and tenant name given; using tenant id '{tenant_id}'")
            ops["tenantId"] = tenant_id
        elif tenant_name:
            ops["tenantName"] = tenant_name

        try:
            return self.authenticate(ops)
        except UnauthorizedException as exc:
            raise AuthenticationFailure(
                f"Authentication failed for user '{username}'", exc.request, exc.response
            ) from exc

    def _rescope(self, scope: Dict[str, str]) -> str:
        current = self.token
        if not current:
            raise AuthenticationFailure("Cannot rescope: no token has been obtained yet")

        auth: Dict[str, Any] = {"token": {"id": current}}
        auth.update({key: value for key, value in scope.items() if value})
        token = self._post_tokens(auth)
        logger.info(f"Rescoped token {_mask(current)} -> {_mask(token)} (tenant={self.tenant_id})")
        return token

    def rescope_using_tenant_id(self, tenant_id: str) -> str:
        """Trade the current token for one scoped to ``tenant_id``.

        An empty string requests an unscoped token. Every stored field is
        replaced by the new response.

        Returns:
            The new token id
        """
        return self._rescope({"tenantId": tenant_id})

    def rescope_using_tenant_name(self, tenant_name: str) -> str:
        """Same as ``rescope_using_tenant_id`` but scoped by tenant name."""
        return self._rescope({"tenantName": tenant_name})

    # ─────────────────────────────────────────────────────────────────────────
    # Token state
    # ─────────────────────────────────────────────────────────────────────────
    @property
    def token(self) -> Optional[str]:
        """Current token id; may be stale, check ``is_expired()``."""
        return self._token_details.get("id")

    @property
    def token_details(self) -> Dict[str, Any]:
        return self._token_details

    @property
    def tenant_id(self) -> Optional[str]:
        return (self._token_details.get("tenant") or {}).get("id") or None

    @property
    def tenant_name(self) -> Optional[str]:
        return (self._token_details.get("tenant") or {}).get("name") or None

    @property
    def user(self) -> Dict[str, Any]:
        return self._user

    @property
    def expires_at(self) -> Optional[datetime]:
        return self._expires_at

    def is_expired(self) -> bool:
        """True when no token was obtained or its expiry has passed."""
        if not self.token or self._expires_at is None:
            return True
        return datetime.now(timezone.utc) >= self._expires_at

    def service_catalog(self, type_: Optional[str] = None) -> List[Dict[str, Any]]:
        """Return the catalog, optionally only entries of one service type.

        Args:
            type_: Service type such as ``identity`` or ``object-store``
        """
        if not type_:
            return self._catalog
        return [entry for entry in self._catalog if entry.get("type") == type_]

    def endpoint_for(
        self,
        service_type: str,
        region: Optional[str] = None,
        interface: str = "publicURL",
    ) -> Optional[str]:
        """First catalog URL for a service type (and region, when given)."""
        for entry in self.service_catalog(service_type):
            for endpoint in entry.get("endpoints") or []:
                if region is not None and endpoint.get("region") != region:
                    continue
                if endpoint.get(interface):
                    return endpoint[interface]
        return None

    def tenants(self, token: Optional[str] = None) -> List[Dict[str, Any]]:
        """List the tenants a token has access to. Does not change state.

        Args:
            token: Token to query with (defaults to the current one)

        Raises:
            AuthenticationFailure: No token given and none obtained yet
            RequestException: HTTP error from the identity endpoint
            SerializationError: Body is not a JSON object
        """
        token = token or self.token
        if not token:
            raise AuthenticationFailure("Cannot list tenants: no token available")

        headers = {"X-Auth-Token": token, "Accept": ACCEPT_TYPE}
        request = self.client.create_request("GET", f"{self._endpoint}/tenants", None, {"headers": headers})
        response = raise_for_status(request, self.client.send(request))
        data = response.json()
        if not isinstance(data, dict):
            raise SerializationError(f"Expected a JSON object from {request.url}, got {type(data).__name__}")
        return data.get("tenants", [])

    # ─────────────────────────────────────────────────────────────────────────
    # Snapshots
    # ─────────────────────────────────────────────────────────────────────────
    def to_snapshot(self) -> Dict[str, Any]:
        """Capture the authenticated state as plain, JSON-safe data.

        The transport is not part of the snapshot.
        """
        return {
            "version": SNAPSHOT_VERSION,
            "endpoint": self._endpoint,
            "token": self.token,
            "expires": self._token_details.get("expires"),
            "tenant_id": self.tenant_id,
            "tenant_name": self.tenant_name,
            "token_details": json.loads(json.dumps(self._token_details)),
            "service_catalog": json.loads(json.dumps(self._catalog)),
            "user": json.loads(json.dumps(self._user)),
        }

    @classmethod
    def from_snapshot(
        cls,
        snapshot: Dict[str, Any],
        client: Optional[TransportClient] = None,
    ) -> "IdentityService":
        """Rebuild a service from ``to_snapshot`` output without any network call.

        Args:
            snapshot: Data produced by ``to_snapshot``
            client: Transport to attach (defaults to the requests backend)

        Raises:
            InvalidArgument: If the snapshot has no endpoint or a bad expiry
        """
        endpoint = snapshot.get("endpoint")
        if not endpoint:
            raise InvalidArgument("Snapshot has no endpoint")

        service = cls(endpoint, client)
        details = dict(snapshot.get("token_details") or {})
        if not details and snapshot.get("token"):
            details = {"id": snapshot["token"], "expires": snapshot.get("expires")}
            if snapshot.get("tenant_id") or snapshot.get("tenant_name"):
                details["tenant"] = {"id": snapshot.get("tenant_id"), "name": snapshot.get("tenant_name")}

        service._token_details = details
        service._expires_at = None
        if details.get("expires"):
            try:
                service._expires_at = parse_expires(details["expires"])
            except ValueError as exc:
                raise InvalidArgument(f"Snapshot has a malformed expiry: {details['expires']!r}") from exc
        service._catalog = list(snapshot.get("service_catalog") or [])
        service._user = dict(snapshot.get("user") or {})
        return service
