"""Transport client contract and the verb helpers shared by every backend.

Backends implement ``_send`` only. ``send`` returns the raw response; the
error mapper runs automatically only when the client is built with
``raise_errors=True``, otherwise callers pass the response through
``raise_for_status`` themselves or branch on the status code.
"""
from __future__ import annotations
import abc
import logging
from typing import Any, Dict, Mapping, Optional, Union

import requests

from ..exceptions import InvalidArgument
from ..version import __version__
from .errors import raise_for_status
from .message import Request, Response
from .url import Url

logger = logging.getLogger(__name__)

DEFAULT_OPTIONS: Dict[str, Any] = {
    "timeout": 0,  # 0 is no timeout
    "ssl_verify": True,
    "debug": False,
    "proxy": False,
    "base_url": None,
    "headers": {},
}


def default_user_agent() -> str:
    """SDK version followed by the requests User-Agent."""
    return f"stackclient/{__version__} {requests.utils.default_user_agent()}"


class TransportClient(abc.ABC):
    """Base class for HTTP transports.
    
    Options:
        timeout: Seconds before giving up (0 disables the timeout)
        ssl_verify: Verify TLS certificates (bool or CA bundle path)
        debug: Log every request/response at INFO instead of DEBUG
        proxy: Proxy URL, or False for a direct connection
        base_url: Prefix for relative request URLs
        headers: Default headers sent with every request
    """
    
    def __init__(self, options: Optional[Mapping[str, Any]] = None, raise_errors: bool = False):
        self._options: Dict[str, Any] = dict(DEFAULT_OPTIONS)
        self._options["headers"] = {}
        for key, value in (options or {}).items():
            self.set_option(key, value)
        self.raise_errors = raise_errors
    
    @classmethod
    def create(cls, options: Optional[Mapping[str, Any]] = None, **kwargs: Any) -> "TransportClient":
        """Factory used by the transport registry."""
        return cls(options, **kwargs)
    
    # ─────────────────────────────────────────────────────────────────────────
    # Options
    # ─────────────────────────────────────────────────────────────────────────
    def set_option(self, key: str, value: Any) -> None:
        """Change one option on the live client."""
        if key == "timeout":
            if value is None:
                value = 0
            if not isinstance(value, (int, float)) or isinstance(value, bool) or value < 0:
                raise InvalidArgument(f"timeout must be a non-negative number, got {value!r}")
        elif key == "headers":
            value = dict(value or {})
        elif key == "base_url" and value is not None:
            value = str(value).rstrip("/")
        self._options[key] = value
    
    def get_option(self, key: str, default: Any = None) -> Any:
        return self._options.get(key, default)
    
    @property
    def options(self) -> Dict[str, Any]:
        return dict(self._options)
    
    # ─────────────────────────────────────────────────────────────────────────
    # Requests
    # ─────────────────────────────────────────────────────────────────────────
    def _resolve_url(self, url: Union[str, Url]) -> Url:
        target = Url(url)
        base_url = self.get_option("base_url")
        if base_url and not target.host:
            resolved = Url(base_url)
            if target.path:
                resolved.add_path(target.path)
            if target.query:
                resolved.add_query(target.query)
            if target.fragment:
                resolved.fragment = target.fragment
            return resolved
        return target
    
    def create_request(
        self,
        method: str,
        url: Union[str, Url],
        body: Any = None,
        options: Optional[Mapping[str, Any]] = None,
    ) -> Request:
        """Build a request with default and per-call headers.
        
        Args:
            method: HTTP verb (any case)
            url: Absolute URL, or a path relative to the ``base_url`` option
            body: Bytes, str or file-like object
            options: Per-request options, currently ``headers``
            
        Returns:
            Request ready for ``send``
        """
        request = Request(method, self._resolve_url(url), body=body)
        request.set_header("User-Agent", default_user_agent())
        for name, value in self.get_option("headers", {}).items():
            request.set_header(name, value)
        for name, value in ((options or {}).get("headers") or {}).items():
            request.set_header(name, value)
        return request
    
    def send(self, request: Request) -> Response:
        """Send a request and return the response.
        
        Raises:
            TransportError: On network failure
            RequestException: On 4xx/5xx, only when ``raise_errors`` is set
        """
        level = logging.INFO if self.get_option("debug") else logging.DEBUG
        logger.log(level, f"{request.method} {request.url}")
        response = self._send(request)
        logger.log(level, f"{request.method} {request.url} -> {response.status_code} {response.reason_phrase}")
        if self.raise_errors:
            raise_for_status(request, response)
        return response
    
    @abc.abstractmethod
    def _send(self, request: Request) -> Response:
        """Hand the request to the underlying HTTP implementation."""
    
    def get(self, url: Union[str, Url], options: Optional[Mapping[str, Any]] = None) -> Response:
        return self.send(self.create_request("GET", url, None, options))
    
    def head(self, url: Union[str, Url], options: Optional[Mapping[str, Any]] = None) -> Response:
        return self.send(self.create_request("HEAD", url, None, options))
    
    def post(self, url: Union[str, Url], body: Any = None, options: Optional[Mapping[str, Any]] = None) -> Response:
        return self.send(self.create_request("POST", url, body, options))
    
    def put(self, url: Union[str, Url], body: Any = None, options: Optional[Mapping[str, Any]] = None) -> Response:
        return self.send(self.create_request("PUT", url, body, options))
    
    def delete(self, url: Union[str, Url], options: Optional[Mapping[str, Any]] = None) -> Response:
        return self.send(self.create_request("DELETE", url, None, options))
    
    def copy(self, url: Union[str, Url], destination: str, options: Optional[Mapping[str, Any]] = None) -> Response:
        """Server-side copy; ``destination`` goes into the Destination header."""
        request = self.create_request("COPY", url, None, options)
        request.set_header("Destination", destination)
        return self.send(request)
    
    def close(self) -> None:
        """Release connections held by the backend."""
    
    def __enter__(self) -> "TransportClient":
        return self
    
    def __exit__(self, *exc_info: Any) -> None:
        self.close()
