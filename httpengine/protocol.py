"""HTTP methods, status codes and a case-insensitive header multimap."""

from __future__ import annotations

import enum
from http import HTTPStatus
from typing import Iterable, Iterator, Mapping, Optional, Tuple, Union

NameLike = Union[str, bytes]
ValueLike = Union[str, bytes, bytearray, memoryview, int]


class Method(enum.IntFlag):
    """HTTP request methods described in RFC 2616."""

    OPTIONS = 1
    GET = 1 << 1
    HEAD = 1 << 2
    POST = 1 << 3
    PUT = 1 << 4
    DELETE = 1 << 5
    TRACE = 1 << 6
    CONNECT = 1 << 7


class Status(enum.IntEnum):
    """Predefined HTTP status codes."""

    OK = 200
    CREATED = 201
    ACCEPTED = 202
    PARTIAL_CONTENT = 206
    MOVED_PERMANENTLY = 301
    FOUND = 302
    BAD_REQUEST = 400
    UNAUTHORIZED = 401
    FORBIDDEN = 403
    NOT_FOUND = 404
    METHOD_NOT_ALLOWED = 405
    CONFLICT = 409
    INTERNAL_SERVER_ERROR = 500
    BAD_GATEWAY = 502
    SERVICE_UNAVAILABLE = 503
    HTTP_VERSION_NOT_SUPPORTED = 505


def status_reason(status_code: int) -> str:
    """Return the standard reason phrase for a status code."""
    try:
        return HTTPStatus(int(status_code)).phrase
    except ValueError:
        return "Unknown Status Code"


def _name(name: NameLike) -> str:
    if isinstance(name, str):
        return name
    if isinstance(name, (bytes, bytearray, memoryview)):
        return bytes(name).decode("latin-1")
    raise TypeError(f"header name must be str or bytes, not {type(name).__name__}")


def _value(value: ValueLike) -> bytes:
    if isinstance(value, bytes):
        return value
    if isinstance(value, (bytearray, memoryview)):
        return bytes(value)
    if isinstance(value, str):
        return value.encode("utf-8")
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value).encode("ascii")
    raise TypeError(f"header value must be str, bytes or int, not {type(value).__name__}")


class HeaderMap:
    """Multimap of HTTP headers whose names compare case-insensitively.

    Names keep the case they were given with. Values are stored as bytes.
    Iteration is ordered by name, ignoring case; for a repeated name the
    most recently added value comes first.
    """

    def __init__(self, items: Optional[Union[Mapping, "HeaderMap", Iterable[Tuple[NameLike, ValueLike]]]] = None):
        self._entries: dict[str, list[tuple[str, bytes]]] = {}
        if items is None:
            return
        if isinstance(items, HeaderMap):
            self._entries = {key: list(values) for key, values in items._entries.items()}
            return
        pairs = items.items() if isinstance(items, Mapping) else items
        for name, value in pairs:
            self.add(name, value)

    @staticmethod
    def _key(name: NameLike) -> str:
        return _name(name).lower()

    def add(self, name: NameLike, value: ValueLike) -> None:
        """Add a value, keeping any existing values for the same name."""
        text = _name(name)
        self._entries.setdefault(text.lower(), []).insert(0, (text, _value(value)))

    def set(self, name: NameLike, value: ValueLike) -> None:
        """Replace every value for the name with a single value."""
        text = _name(name)
        self._entries[text.lower()] = [(text, _value(value))]

    def get(self, name: NameLike, default: Optional[bytes] = None) -> Optional[bytes]:
        """Return the most recently added value for the name."""
        entries = self._entries.get(self._key(name))
        return entries[0][1] if entries else default

    def get_all(self, name: NameLike) -> list[bytes]:
        """Return all values for the name, most recent first."""
        return [value for _, value in self._entries.get(self._key(name), [])]

    def remove(self, name: NameLike) -> int:
        """Remove every value for the name and return how many were removed."""
        return len(self._entries.pop(self._key(name), []))

    def items(self) -> Iterator[tuple[str, bytes]]:
        """Yield (name, value) pairs in map order."""
        for key in sorted(self._entries):
            yield from self._entries[key]

    def __contains__(self, name: object) -> bool:
        if not isinstance(name, (str, bytes, bytearray, memoryview)):
            return False
        return self._key(name) in self._entries

    def __len__(self) -> int:
        return sum(len(values) for values in self._entries.values())

    def __iter__(self) -> Iterator[str]:
        for key in sorted(self._entries):
            yield self._entries[key][0][0]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, HeaderMap):
            return NotImplemented
        return [(n.lower(), v) for n, v in self.items()] == [(n.lower(), v) for n, v in other.items()]

    def __repr__(self) -> str:
        return f"HeaderMap({list(self.items())!r})"