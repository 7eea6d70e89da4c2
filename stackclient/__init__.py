"""Client SDK for the identity and object storage services.

This package provides a modular, testable interface to the platform APIs.

Architecture:
- transport/: URL model, HTTP messages, error mapping and pluggable backends
- identity/: Authentication, token lifecycle, rescoping and snapshots
- object_store/: Account and container operations
- config/: Settings from environment variables and /run/secrets
- context.py: Application-owned transport + identity holder
- exceptions.py: Typed exceptions for error handling

Usage:
    from stackclient import IdentityService, ObjectStorage

    identity = IdentityService("https://identity.example.com:5000")
    identity.authenticate_as_user("alice", "secret", tenant_name="demo")

    storage = ObjectStorage.from_identity(identity, "region-a")
    print(storage.containers())
"""
from .version import __version__
from .exceptions import (
    StackError,
    InvalidArgument,
    SerializationError,
    ConfigurationError,
    TransportError,
    RequestException,
    UnauthorizedException,
    ForbiddenException,
    ResourceNotFoundException,
    MethodNotAllowedException,
    ConflictException,
    LengthRequiredException,
    UnprocessableEntityException,
    ServerException,
    AuthenticationFailure,
    ContainerNotEmptyError,
)
from .transport import (
    Url,
    Request,
    Response,
    TransportClient,
    RequestsClient,
    MockClient,
    classify,
    raise_for_status,
    register_transport,
    create_transport,
)
from .identity import IdentityService
from .object_store import ObjectStorage, Container
from .config import SdkConfig, load_settings
from .context import SdkContext

__all__ = [
    "__version__",
    
    # Exceptions
    "StackError",
    "InvalidArgument",
    "SerializationError",
    "ConfigurationError",
    "TransportError",
    "RequestException",
    "UnauthorizedException",
    "ForbiddenException",
    "ResourceNotFoundException",
    "MethodNotAllowedException",
    "ConflictException",
    "LengthRequiredException",
    "UnprocessableEntityException",
    "ServerException",
    "AuthenticationFailure",
    "ContainerNotEmptyError",
    
    # Transport
    "Url",
    "Request",
    "Response",
    "TransportClient",
    "RequestsClient",
    "MockClient",
    "classify",
    "raise_for_status",
    "register_transport",
    "create_transport",
    
    # Services
    "IdentityService",
    "ObjectStorage",
    "Container",
    
    # Configuration
    "SdkConfig",
    "load_settings",
    "SdkContext",
]
