"""Parsing of HTTP request and response heads."""

from __future__ import annotations

import re
from typing import Iterable, Union
from urllib.parse import unquote, urlsplit

from .protocol import HeaderMap, Method

_METHODS = {member.name.encode("ascii"): member for member in Method}
_VERSIONS = (b"HTTP/1.0", b"HTTP/1.1")
_STATUS_CODE = re.compile(rb"[+-]?[0-9]+")


class ParseError(ValueError):
    """Raised when HTTP data cannot be parsed."""


def split(data: bytes, delim: bytes, max_split: int = 0) -> list[bytes]:
    """Split data on delim at most max_split times; 0 means no limit."""
    if not delim:
        raise ValueError("delimiter must not be empty")
    if max_split < 0:
        return [data]
    return data.split(delim, max_split if max_split else -1)


def parse_path(raw_path: Union[bytes, str]) -> tuple[str, dict[str, list[str]]]:
    """Decode a request path and its query string.

    Returns the decoded path and a mapping of each query key to its values
    in order of appearance.
    """
    if isinstance(raw_path, (bytes, bytearray)):
        try:
            text = bytes(raw_path).decode("utf-8")
        except UnicodeDecodeError as exc:
            raise ParseError("path is not valid UTF-8") from exc
    else:
        text = raw_path
    if not text:
        raise ParseError("path is empty")
    try:
        url = urlsplit(text)
    except ValueError as exc:
        raise ParseError(f"invalid path: {text!r}") from exc

    query: dict[str, list[str]] = {}
    for item in url.query.split("&") if url.query else ():
        if not item:
            continue
        key, _, value = item.partition("=")
        query.setdefault(unquote(key), []).append(unquote(value))
    return unquote(url.path), query


def parse_header_list(lines: Iterable[bytes]) -> HeaderMap:
    """Parse "Name: value" lines into a header map."""
    headers = HeaderMap()
    for line in lines:
        parts = split(line, b":", 1)
        if len(parts) != 2:
            raise ParseError(f"malformed header line: {line!r}")
        headers.add(parts[0].strip(), parts[1].strip())
    return headers


def parse_headers(data: bytes) -> tuple[list[bytes], HeaderMap]:
    """Split a head into the three parts of its first line and its headers."""
    first, *lines = split(data, b"\r\n")
    parts = split(first, b" ", 2)
    if len(parts) != 3:
        raise ParseError(f"malformed first line: {first!r}")
    return parts, parse_header_list(lines)


def parse_request_headers(data: bytes) -> tuple[Method, bytes, HeaderMap]:
    """Parse a request head into its method, raw path and headers."""
    (method_name, path, version), headers = parse_headers(data)
    if version not in _VERSIONS:
        raise ParseError(f"unsupported HTTP version: {version!r}")
    try:
        method = _METHODS[method_name]
    except KeyError:
        raise ParseError(f"unsupported method: {method_name!r}") from None
    return method, path, headers


def parse_response_headers(data: bytes) -> tuple[int, bytes, HeaderMap]:
    """Parse a response head into its status code, reason and headers."""
    (_, code, reason), headers = parse_headers(data)
    if not _STATUS_CODE.fullmatch(code):
        raise ParseError(f"invalid status code: {code!r}")
    status_code = int(code)
    if not 100 <= status_code <= 599:
        raise ParseError(f"status code out of range: {status_code}")
    return status_code, reason, headers