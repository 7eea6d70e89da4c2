"""Protocol-neutral HTTP messages: headers, body, request line, status line."""
from __future__ import annotations
import json
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from requests.structures import CaseInsensitiveDict

from ..exceptions import InvalidArgument, SerializationError
from .url import Url

HeaderValue = Union[str, int, Iterable[str]]
HeaderSource = Union[Mapping[str, HeaderValue], Iterable[Tuple[str, HeaderValue]]]

METHODS = ("GET", "HEAD", "POST", "PUT", "DELETE", "COPY")

_MISSING = object()


def _as_values(value: HeaderValue) -> List[str]:
    if isinstance(value, (str, bytes, int, float)):
        return [value.decode("latin-1") if isinstance(value, bytes) else str(value)]
    return [str(item) for item in value]


def _iter_headers(headers: HeaderSource) -> Iterable[Tuple[str, HeaderValue]]:
    if isinstance(headers, Mapping):
        return headers.items()
    return headers


class Message:
    """Headers, body and protocol version shared by requests and responses.

    Header names are case-insensitive. A header may hold several values;
    ``set_header`` replaces them, ``add_header`` appends.
    """

    def __init__(
        self,
        headers: Optional[HeaderSource] = None,
        body: Any = None,
        protocol_version: str = "1.1",
    ):
        self._headers: CaseInsensitiveDict = CaseInsensitiveDict()
        self._body = body
        self.protocol_version = protocol_version
        if headers:
            self.add_headers(headers)

    @property
    def body(self) -> Any:
        return self._body

    @body.setter
    def body(self, value: Any) -> None:
        self._body = value

    @property
    def headers(self) -> Dict[str, str]:
        """Snapshot of all headers, multiple values joined with ``, ``."""
        return {name: ", ".join(values) for name, values in self._headers.items()}

    def has_header(self, name: str) -> bool:
        return name in self._headers

    def get_header(self, name: str, as_list: bool = False, default: Any = _MISSING) -> Any:
        """Return a header value.

        Args:
            name: Header name (any case)
            as_list: Return every value as a list instead of a joined string
            default: Returned when the header is absent (None or [] otherwise)
        """
        values = self._headers.get(name)
        if values is None:
            if default is not _MISSING:
                return default
            return [] if as_list else None
        return list(values) if as_list else ", ".join(values)

    def set_header(self, name: str, value: HeaderValue) -> None:
        self._headers[name] = _as_values(value)

    def set_headers(self, headers: HeaderSource) -> None:
        """Replace every header with the given ones."""
        self._headers = CaseInsensitiveDict()
        self.add_headers(headers)

    def add_header(self, name: str, value: HeaderValue) -> None:
        existing = self._headers.get(name)
        if existing is None:
            self._headers[name] = _as_values(value)
        else:
            existing.extend(_as_values(value))

    def add_headers(self, headers: HeaderSource) -> None:
        for name, value in _iter_headers(headers):
            self.add_header(name, value)

    def remove_header(self, name: str) -> None:
        self._headers.pop(name, None)


class Request(Message):
    """Outgoing HTTP request: method, target URL, headers and body."""

    def __init__(
        self,
        method: str,
        url: Union[str, Url],
        headers: Optional[HeaderSource] = None,
        body: Any = None,
        protocol_version: str = "1.1",
    ):
        super().__init__(headers=headers, body=body, protocol_version=protocol_version)
        self.method = method
        self.url = url

    @property
    def method(self) -> str:
        return self._method

    @method.setter
    def method(self, value: str) -> None:
        method = str(value).upper()
        if method not in METHODS:
            raise InvalidArgument(f"Unsupported HTTP method: {value}")
        self._method = method

    @property
    def url(self) -> Url:
        return self._url

    @url.setter
    def url(self, value: Union[str, Url]) -> None:
        self._url = value if isinstance(value, Url) else Url(value)

    def __repr__(self) -> str:
        return f"<Request [{self._method} {self._url}]>"


class Response(Message):
    """HTTP response returned by a transport.

    The body is kept as received; ``json()`` decodes it on first use and
    caches the result.
    """

    def __init__(
        self,
        status_code: int,
        reason_phrase: str = "",
        headers: Optional[HeaderSource] = None,
        body: Any = b"",
        protocol_version: str = "1.1",
    ):
        super().__init__(headers=headers, body=body, protocol_version=protocol_version)
        self.status_code = int(status_code)
        self.reason_phrase = reason_phrase or ""
        self._json: Any = _MISSING

    @Message.body.setter
    def body(self, value: Any) -> None:
        self._body = value
        self._json = _MISSING

    @property
    def ok(self) -> bool:
        return self.status_code < 400

    @property
    def text(self) -> str:
        body = self._body
        if body is None:
            return ""
        if isinstance(body, str):
            return body
        if isinstance(body, (bytes, bytearray)):
            return bytes(body).decode("utf-8", errors="replace")
        return str(body)

    def json(self) -> Any:
        """Decode the body as JSON.

        Raises:
            SerializationError: If the body is not valid JSON
        """
        if self._json is _MISSING:
            try:
                self._json = json.loads(self.text)
            except ValueError as exc:
                raise SerializationError(
                    f"Unable to parse response body as JSON ({self.status_code} {self.reason_phrase}): {exc}"
                ) from exc
        return self._json

    def __repr__(self) -> str:
        return f"<Response [{self.status_code} {self.reason_phrase}]>"
