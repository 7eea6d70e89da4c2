"""Transport backed by a ``requests.Session``."""
from __future__ import annotations
from typing import Any, Mapping, Optional

import requests

from ..exceptions import TransportError
from .client import TransportClient
from .message import Request, Response


def _protocol_version(resp: requests.Response) -> str:
    version = getattr(getattr(resp, "raw", None), "version", None)
    if isinstance(version, int) and version > 0:
        return f"{version // 10}.{version % 10}"
    return "1.1"


class RequestsClient(TransportClient):
    """Default transport. Connection pooling is left to the session.
    
    Usage:
        client = RequestsClient({"timeout": 10, "ssl_verify": True})
        response = client.get("https://identity.example.com/v2.0/tenants",
                              {"headers": {"X-Auth-Token": token}})
    """
    
    def __init__(
        self,
        options: Optional[Mapping[str, Any]] = None,
        raise_errors: bool = False,
        session: Optional[requests.Session] = None,
    ):
        self.session = session if session is not None else requests.Session()
        super().__init__(options, raise_errors)
    
    def _request_kwargs(self) -> dict:
        proxy = self.get_option("proxy")
        return {
            "timeout": self.get_option("timeout") or None,
            "verify": self.get_option("ssl_verify", True),
            "proxies": {"http": proxy, "https": proxy} if proxy else None,
            "allow_redirects": True,
        }
    
    def _send(self, request: Request) -> Response:
        try:
            resp = self.session.request(
                request.method,
                str(request.url),
                headers=request.headers,
                data=request.body,
                **self._request_kwargs(),
            )
        except requests.exceptions.RequestException as exc:
            raise TransportError(f"{request.method} {request.url} failed: {exc}", cause=exc) from exc
        
        return Response(
            resp.status_code,
            resp.reason or "",
            headers=resp.headers.items(),
            body=resp.content,
            protocol_version=_protocol_version(resp),
        )
    
    def close(self) -> None:
        self.session.close()
