"""HTTP transport layer: URL model, messages, error mapping and backends."""
from .url import Url
from .message import Message, Request, Response, METHODS
from .errors import STATUS_EXCEPTIONS, classify, raise_for_status
from .client import TransportClient, default_user_agent
from .requests_client import RequestsClient
from .mock import MockClient
from .registry import (
    register_transport,
    unregister_transport,
    available_transports,
    create_transport,
)

__all__ = [
    "Url",
    "Message",
    "Request",
    "Response",
    "METHODS",
    "STATUS_EXCEPTIONS",
    "classify",
    "raise_for_status",
    "TransportClient",
    "default_user_agent",
    "RequestsClient",
    "MockClient",
    "register_transport",
    "unregister_transport",
    "available_transports",
    "create_transport",
]
