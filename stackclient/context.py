"""Application-owned context holding one transport and one identity.

Replaces a process-wide registry: the application builds an ``SdkContext``
from an ``SdkConfig`` and passes it (or the objects it hands out) around.
"""
from __future__ import annotations
import logging
from typing import Any, Optional

from .config import SdkConfig
from .exceptions import ConfigurationError
from .identity import IdentityService
from .transport import TransportClient, create_transport

logger = logging.getLogger(__name__)


class SdkContext:
    """Lazily builds and caches the transport and the identity service.

    Usage:
        with SdkContext(load_settings()) as ctx:
            identity = ctx.identity()
            print(identity.tenants())
    """

    def __init__(self, config: SdkConfig):
        self.config = config
        self._transport: Optional[TransportClient] = None
        self._identity: Optional[IdentityService] = None

    def transport(self, reset: bool = False) -> TransportClient:
        """Return the shared transport, building it on first use or on reset."""
        if self._transport is None or reset:
            if self._transport is not None:
                self._transport.close()
            self._transport = create_transport(self.config.transport, self.config.transport_options())
            if self._identity is not None:
                self._identity.client = self._transport
        return self._transport

    def identity(self, force: bool = False) -> IdentityService:
        """Return an authenticated identity service.

        A new token is requested when none exists, when it has expired or
        when ``force`` is set.

        Raises:
            ConfigurationError: No endpoint or no credentials configured
            AuthenticationFailure: Credentials rejected
        """
        if force or self._identity is None or self._identity.is_expired():
            if not self.config.endpoint:
                raise ConfigurationError("Unable to authenticate. No endpoint supplied.")
            if not self.config.has_credentials:
                raise ConfigurationError("Unable to authenticate. No user credentials supplied.")

            reason = "forced" if force else ("expired" if self._identity is not None else "initial")
            logger.info(f"Authenticating '{self.config.username}' against {self.config.endpoint} ({reason})")
            identity = IdentityService(self.config.endpoint, self.transport())
            identity.authenticate_as_user(
                self.config.username,
                self.config.password,
                self.config.tenant_id,
                self.config.tenant_name,
            )
            self._identity = identity
        return self._identity

    def close(self) -> None:
        if self._transport is not None:
            self._transport.close()
        self._transport = None
        self._identity = None

    def __enter__(self) -> "SdkContext":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()
