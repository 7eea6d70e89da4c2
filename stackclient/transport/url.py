"""URL model with incremental path and query composition.

The class does not validate against RFC 3986; it is a usable model of a
URL inside the SDK. Query values are kept verbatim (no percent-decoding)
so a parsed URL serializes back to the same string.
"""
from __future__ import annotations
from typing import Any, Dict, List, Mapping, Optional, Union
from urllib.parse import urlsplit

from ..exceptions import InvalidArgument

QueryValue = Union[str, List[str]]

_COMPONENTS = ("scheme", "host", "port", "user", "password", "path", "query", "fragment")


def _split_netloc(netloc: str) -> Dict[str, Any]:
    """Split ``user:password@host:port`` without lowercasing the host."""
    parts: Dict[str, Any] = {}
    userinfo, sep, hostport = netloc.rpartition("@")
    if sep:
        user, has_password, password = userinfo.partition(":")
        parts["user"] = user
        if has_password:
            parts["password"] = password

    if hostport.startswith("["):
        end = hostport.find("]")
        if end == -1:
            raise InvalidArgument(f"Invalid IPv6 host in URL: {netloc!r}")
        parts["host"] = hostport[: end + 1]
        rest = hostport[end + 1:]
        if rest:
            if not rest.startswith(":"):
                raise InvalidArgument(f"Invalid host/port in URL: {netloc!r}")
            parts["port"] = rest[1:]
    else:
        host, has_port, port = hostport.partition(":")
        parts["host"] = host
        if has_port:
            parts["port"] = port
    return parts


def _parse_url_string(value: str) -> Dict[str, Any]:
    if not value.strip():
        raise InvalidArgument("Url cannot be populated with an empty string")
    try:
        split = urlsplit(value)
    except ValueError as exc:
        raise InvalidArgument(f"Malformed URL {value!r}: {exc}") from exc

    parts = _split_netloc(split.netloc) if split.netloc else {}
    if split.scheme:
        parts["scheme"] = split.scheme
    parts["path"] = split.path
    parts["query"] = split.query
    parts["fragment"] = split.fragment
    return parts


def _expand_query_string(value: str) -> Dict[str, QueryValue]:
    """Expand ``foo=1&bar[]=a&bar[]=b`` into ``{"foo": "1", "bar": ["a", "b"]}``.

    A key ending in ``[]`` always yields a list; a repeated plain key is
    promoted to a list on its second occurrence.
    """
    query: Dict[str, QueryValue] = {}
    for pair in value.lstrip("?").split("&"):
        if not pair:
            continue
        raw_key, _, val = pair.partition("=")
        is_array = raw_key.endswith("[]")
        key = raw_key[:-2] if is_array else raw_key

        if key in query:
            existing = query[key]
            if isinstance(existing, list):
                existing.append(val)
            else:
                query[key] = [existing, val]
        else:
            query[key] = [val] if is_array else val
    return query


def _normalize_query(query: Mapping[str, Any]) -> Dict[str, QueryValue]:
    normalized: Dict[str, QueryValue] = {}
    for key, val in query.items():
        if isinstance(val, (list, tuple)):
            normalized[str(key)] = [str(item) for item in val]
        else:
            normalized[str(key)] = str(val)
    return normalized


class Url:
    """Parsed URL: scheme, host, port, user, password, path, query, fragment.

    Usage:
        url = Url("https://identity.example.com:5000/v2.0")
        url.add_path("tokens")
        url.add_query({"limit": "10"})
        str(url)  # https://identity.example.com:5000/v2.0/tokens?limit=10
    """

    def __init__(self, value: Union[str, Mapping[str, Any], "Url"]):
        """Populate the URL from a string or a mapping of components.

        Args:
            value: URL string, mapping (keys as in ``_COMPONENTS``, ``pass``
                accepted for ``password``) or another Url

        Raises:
            InvalidArgument: If the value is of another type or unusable
        """
        self._scheme: Optional[str] = None
        self._host: Optional[str] = None
        self._port: Optional[int] = None
        self._user: Optional[str] = None
        self._password: Optional[str] = None
        self._path: str = ""
        self._query: Dict[str, QueryValue] = {}
        self._fragment: Optional[str] = None

        if isinstance(value, Url):
            parts = value.to_dict()
        elif isinstance(value, str):
            parts = _parse_url_string(value)
        elif isinstance(value, Mapping):
            parts = dict(value)
            if "pass" in parts:
                parts["password"] = parts.pop("pass")
            if not any(parts.get(key) for key in ("scheme", "host", "path")):
                raise InvalidArgument("Url mapping needs at least a scheme, host or path")
        else:
            raise InvalidArgument("Url can only be populated with a string or mapping of values")

        self._populate(parts)

    def _populate(self, parts: Mapping[str, Any]) -> None:
        for key in _COMPONENTS:
            val = parts.get(key)
            if val or (key == "port" and val is not None and val != ""):
                setattr(self, key, val)

    # ─────────────────────────────────────────────────────────────────────
    # Components
    # ─────────────────────────────────────────────────────────────────────
    @property
    def scheme(self) -> Optional[str]:
        return self._scheme

    @scheme.setter
    def scheme(self, value: str) -> None:
        self._scheme = str(value)

    @property
    def host(self) -> Optional[str]:
        return self._host

    @host.setter
    def host(self, value: str) -> None:
        self._host = str(value)

    @property
    def port(self) -> Optional[int]:
        return self._port

    @port.setter
    def port(self, value: Union[int, str]) -> None:
        try:
            port = int(value)
        except (TypeError, ValueError) as exc:
            raise InvalidArgument(f"Invalid port: {value!r}") from exc
        if not 0 <= port <= 65535:
            raise InvalidArgument(f"Port out of range: {port}")
        self._port = port

    @property
    def user(self) -> Optional[str]:
        return self._user

    @user.setter
    def user(self, value: str) -> None:
        self._user = str(value)

    @property
    def password(self) -> Optional[str]:
        return self._password

    @password.setter
    def password(self, value: str) -> None:
        self._password = str(value)

    @property
    def path(self) -> str:
        return self._path

    @path.setter
    def path(self, value: str) -> None:
        self._path = str(value).rstrip("/")

    @property
    def segments(self) -> List[str]:
        """Path split into its non-empty segments."""
        return [segment for segment in self._path.split("/") if segment]

    def add_path(self, segment: str) -> None:
        """Append a segment to the path, inserting one ``/`` separator."""
        self.path = self._path + "/" + str(segment).lstrip("/")

    @property
    def query(self) -> Dict[str, QueryValue]:
        return self._query

    @query.setter
    def query(self, value: Union[str, Mapping[str, Any]]) -> None:
        self.set_query(value)

    def set_query(self, query: Union[str, Mapping[str, Any]]) -> None:
        """Replace the whole query.

        Args:
            query: Query string (``a=1&b[]=2``) or mapping of values

        Raises:
            InvalidArgument: If query is neither a string nor a mapping
        """
        if isinstance(query, str):
            self._query = _expand_query_string(query)
        elif isinstance(query, Mapping):
            self._query = _normalize_query(query)
        else:
            raise InvalidArgument("Query must be a string or a mapping")

    def add_query(self, query: Mapping[str, Any]) -> None:
        """Merge values into the query; existing keys are overwritten."""
        if not isinstance(query, Mapping):
            raise InvalidArgument("Query must be a mapping")
        merged = dict(self._query)
        merged.update(_normalize_query(query))
        self._query = merged

    @property
    def fragment(self) -> Optional[str]:
        return self._fragment

    @fragment.setter
    def fragment(self, value: str) -> None:
        self._fragment = str(value)

    # ─────────────────────────────────────────────────────────────────────
    # Serialization
    # ─────────────────────────────────────────────────────────────────────
    def _shrink_query(self) -> str:
        pairs = []
        for key, val in self._query.items():
            if isinstance(val, list):
                pairs.extend(f"{key}[]={item}" for item in val)
            else:
                pairs.append(f"{key}={val}")
        return "&".join(pairs)

    def to_dict(self) -> Dict[str, Any]:
        """Return the components as a mapping accepted by ``Url()``."""
        return {
            "scheme": self._scheme,
            "host": self._host,
            "port": self._port,
            "user": self._user,
            "password": self._password,
            "path": self._path,
            "query": {key: list(val) if isinstance(val, list) else val for key, val in self._query.items()},
            "fragment": self._fragment,
        }

    def __str__(self) -> str:
        url = f"{self._scheme}://" if self._scheme else "//"

        if self._user:
            url += self._user
            if self._password:
                url += f":{self._password}"
            url += "@"

        url += self._host or ""

        if self._port is not None:
            url += f":{self._port}"

        url += self._path

        if self._query:
            url += "?" + self._shrink_query()

        if self._fragment:
            url += f"#{self._fragment}"

        return url

    def __repr__(self) -> str:
        return f"Url({str(self)!r})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Url):
            return str(self) == str(other)
        if isinstance(other, str):
            return str(self) == other
        return NotImplemented

    def __hash__(self) -> int:
        return hash(str(self))
