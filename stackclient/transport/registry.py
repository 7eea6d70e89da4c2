"""Named transport factories.

Configuration selects a backend by name (``"requests"``, ``"mock"``, or
anything registered by the application).
"""
from __future__ import annotations
from typing import Any, Callable, Dict, List, Mapping, Optional

from ..exceptions import ConfigurationError
from .client import TransportClient
from .mock import MockClient
from .requests_client import RequestsClient

TransportFactory = Callable[..., TransportClient]

DEFAULT_TRANSPORT = "requests"

_FACTORIES: Dict[str, TransportFactory] = {
    "requests": RequestsClient.create,
    "mock": MockClient.create,
}


def register_transport(name: str, factory: TransportFactory) -> None:
    """Register (or replace) a factory taking ``(options, **kwargs)``."""
    if not name:
        raise ConfigurationError("Transport name cannot be empty")
    _FACTORIES[name.lower()] = factory


def unregister_transport(name: str) -> None:
    _FACTORIES.pop(name.lower(), None)


def available_transports() -> List[str]:
    return sorted(_FACTORIES)


def create_transport(
    name: Optional[str] = None,
    options: Optional[Mapping[str, Any]] = None,
    **kwargs: Any,
) -> TransportClient:
    """Instantiate the transport registered under ``name``.
    
    Raises:
        ConfigurationError: If no factory is registered under that name
    """
    key = (name or DEFAULT_TRANSPORT).lower()
    factory = _FACTORIES.get(key)
    if factory is None:
        raise ConfigurationError(
            f"Unknown transport '{name}'. Available: {', '.join(available_transports())}"
        )
    return factory(options, **kwargs)
