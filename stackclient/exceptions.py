"""Typed exceptions raised by the SDK."""
from __future__ import annotations
from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from .transport.message import Request, Response


class StackError(Exception):
    """Base exception for all SDK operations."""
    pass


class InvalidArgument(StackError, ValueError):
    """Malformed input (URL, query, HTTP method, ...)."""
    pass


class SerializationError(StackError):
    """Response body could not be decoded as JSON."""
    pass


class ConfigurationError(StackError):
    """Settings are missing or name an unknown transport."""
    pass


class TransportError(StackError):
    """Network-level failure below HTTP (DNS, connect, TLS, timeout).
    
    Attributes:
        cause: Underlying exception raised by the HTTP library
    """
    
    def __init__(self, message: str, cause: Optional[BaseException] = None):
        self.cause = cause
        super().__init__(message)


class RequestException(StackError):
    """HTTP error returned by a remote service.
    
    Carries the failed request and the server response so callers can
    inspect headers and body.
    """
    
    def __init__(self, message: str, request: "Request", response: "Response"):
        self._request = request
        self._response = response
        super().__init__(message)
    
    @property
    def request(self) -> "Request":
        return self._request
    
    @property
    def response(self) -> "Response":
        return self._response
    
    @property
    def status_code(self) -> int:
        return self._response.status_code


class UnauthorizedException(RequestException):
    """401: credentials missing, wrong or expired."""
    pass


class ForbiddenException(RequestException):
    """403: authenticated but not allowed."""
    pass


class ResourceNotFoundException(RequestException):
    """404: resource does not exist."""
    pass


class MethodNotAllowedException(RequestException):
    """405: verb not supported on the resource."""
    pass


class ConflictException(RequestException):
    """409: request conflicts with the resource state."""
    pass


class LengthRequiredException(RequestException):
    """411: Content-Length header missing."""
    pass


class UnprocessableEntityException(RequestException):
    """422: payload understood but semantically invalid."""
    pass


class ServerException(RequestException):
    """500: remote service failed."""
    pass


class AuthenticationFailure(StackError):
    """Authentication did not produce a usable token.
    
    Attributes:
        request: Request that failed, when there was one
        response: Server response, when there was one
    """
    
    def __init__(self, message: str, request: Optional["Request"] = None, response: Optional["Response"] = None):
        self.request = request
        self.response = response
        super().__init__(message)


class ContainerNotEmptyError(ConflictException):
    """A container still holding objects cannot be deleted."""
    pass
