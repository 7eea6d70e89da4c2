"""In-memory transport returning queued responses.

Used by the test-suite and for offline development: every sent request is
recorded, every call pops the next canned response (or failure).
"""
from __future__ import annotations
import json
from collections import deque
from http import HTTPStatus
from typing import Any, Deque, Iterable, List, Mapping, Optional, Union

from ..exceptions import TransportError
from .client import TransportClient
from .message import HeaderSource, Request, Response


def _reason(status_code: int) -> str:
    try:
        return HTTPStatus(status_code).phrase
    except ValueError:
        return ""


class MockClient(TransportClient):
    """Transport that never touches the network."""
    
    def __init__(
        self,
        options: Optional[Mapping[str, Any]] = None,
        raise_errors: bool = False,
        responses: Optional[Iterable[Union[Response, BaseException]]] = None,
    ):
        super().__init__(options, raise_errors)
        self.sent: List[Request] = []
        self._queue: Deque[Union[Response, BaseException]] = deque(responses or [])
    
    def queue_response(
        self,
        status_code: int = 200,
        body: Any = b"",
        headers: Optional[HeaderSource] = None,
        reason_phrase: Optional[str] = None,
    ) -> Response:
        """Queue a response; dict/list bodies are JSON-encoded."""
        response = Response(
            status_code,
            _reason(status_code) if reason_phrase is None else reason_phrase,
            headers=headers,
            body=body,
        )
        if isinstance(body, (dict, list)):
            response.body = json.dumps(body).encode("utf-8")
            if not response.has_header("Content-Type"):
                response.set_header("Content-Type", "application/json")
        self._queue.append(response)
        return response
    
    def queue_failure(self, error: BaseException) -> None:
        """Make the next call fail as if the network was down."""
        self._queue.append(error)
    
    @property
    def pending(self) -> int:
        return len(self._queue)
    
    @property
    def last_request(self) -> Optional[Request]:
        return self.sent[-1] if self.sent else None
    
    def _send(self, request: Request) -> Response:
        self.sent.append(request)
        if not self._queue:
            raise TransportError(f"No response queued for {request.method} {request.url}")
        
        item = self._queue.popleft()
        if isinstance(item, TransportError):
            raise item
        if isinstance(item, BaseException):
            raise TransportError(f"{request.method} {request.url} failed: {item}", cause=item) from item
        return item
