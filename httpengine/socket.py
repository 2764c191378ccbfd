"""Server side of an HTTP/1.x connection: request parsing and response writing."""

from __future__ import annotations

import asyncio
import enum
import html
import json
import logging
from typing import Any, Callable, Optional, Union

from .parser import ParseError, parse_path, parse_request_headers
from .protocol import HeaderMap, Method, Status, status_reason

logger = logging.getLogger(__name__)

_ERROR_PAGE = (
    "<!DOCTYPE html>"
    "<html>"
    "<head><meta charset=\"utf-8\"><title>{status}</title></head>"
    "<body><h1>{status}</h1><p>The request could not be completed.</p></body>"
    "</html>"
)


class _ReadState(enum.Enum):
    HEADERS = enum.auto()
    DATA = enum.auto()
    FINISHED = enum.auto()


class _WriteState(enum.Enum):
    NONE = enum.auto()
    DATA = enum.auto()
    FINISHED = enum.auto()


def _to_bytes(value: Union[str, bytes, bytearray, memoryview]) -> bytes:
    if isinstance(value, str):
        return value.encode("utf-8")
    return bytes(value)


class Socket:
    """One HTTP request read from a transport and the response written to it.

    The transport needs ``write(bytes)`` and ``close()``. Incoming bytes are
    handed over with :meth:`feed_data`; once the request head has been parsed
    the headers-parsed callbacks run with the socket as their argument.
    """

    def __init__(self, transport: Any, peer_address: Optional[str] = None):
        self._transport = transport
        if peer_address is None:
            get_extra_info = getattr(transport, "get_extra_info", None)
            peer = get_extra_info("peername") if get_extra_info is not None else None
            peer_address = peer[0] if isinstance(peer, tuple) and peer else peer
        self._peer_address = peer_address

        self._buffer = bytearray()
        self._read_state = _ReadState.HEADERS
        self._method: Optional[Method] = None
        self._raw_path = b""
        self._path = ""
        self._query: dict[str, list[str]] = {}
        self._headers = HeaderMap()
        self._data_read = 0
        self._data_total = -1

        self._write_state = _WriteState.NONE
        self._status_code = int(Status.OK)
        self._status_reason = status_reason(Status.OK).encode("latin-1")
        self._response_headers = HeaderMap()

        self._headers_parsed_callbacks: list[Callable[["Socket"], Any]] = []
        self._disconnect_callbacks: list[Callable[["Socket"], Any]] = []
        self._headers_parsed = False
        self._disconnected = False
        self._closed = False

    # Incoming data

    def feed_data(self, data: bytes) -> None:
        """Hand over bytes received from the client."""
        if self._closed or self._read_state is _ReadState.FINISHED:
            return
        if self._read_state is _ReadState.DATA:
            self._append_body(data)
            return

        self._buffer += data
        index = self._buffer.find(b"\r\n\r\n")
        if index == -1:
            return
        head = bytes(self._buffer[:index])
        rest = bytes(self._buffer[index + 4:])
        self._buffer.clear()

        try:
            method, raw_path, headers = parse_request_headers(head)
            path, query = parse_path(raw_path)
        except ParseError:
            self.write_error(Status.BAD_REQUEST)
            return

        total = -1
        length = headers.get("Content-Length")
        if length is not None:
            try:
                total = int(length)
            except ValueError:
                total = -1
            if total < 0:
                self.write_error(Status.BAD_REQUEST)
                return

        self._method = method
        self._raw_path = raw_path
        self._path = path
        self._query = query
        self._headers = headers
        self._data_total = total
        self._read_state = _ReadState.DATA if total > 0 else _ReadState.FINISHED
        self._headers_parsed = True
        self._append_body(rest)

        for callback in list(self._headers_parsed_callbacks):
            callback(self)

    def _append_body(self, data: bytes) -> None:
        if self._read_state is not _ReadState.DATA or not data:
            return
        chunk = data[: self._data_total - self._data_read]
        self._buffer += chunk
        self._data_read += len(chunk)
        if self._data_read >= self._data_total:
            self._read_state = _ReadState.FINISHED

    def feed_eof(self) -> None:
        """Signal that the client will send nothing more."""
        self._read_state = _ReadState.FINISHED
        if self._disconnected:
            return
        self._disconnected = True
        for callback in list(self._disconnect_callbacks):
            callback(self)

    def _connection_lost(self) -> None:
        self.feed_eof()
        self._closed = True
        self._write_state = _WriteState.FINISHED

    def add_headers_parsed_callback(self, callback: Callable[["Socket"], Any]) -> None:
        """Call ``callback(socket)`` once the request head has been parsed."""
        self._headers_parsed_callbacks.append(callback)

    def add_disconnect_callback(self, callback: Callable[["Socket"], Any]) -> None:
        """Call ``callback(socket)`` when the client disconnects."""
        self._disconnect_callbacks.append(callback)

    # Request

    def bytes_available(self) -> int:
        """Number of body bytes that can be read right now."""
        return len(self._buffer) if self._headers_parsed else 0

    def read(self, size: int = -1) -> bytes:
        """Read up to size bytes of the request body; all of it if size < 0."""
        if not self._headers_parsed:
            return b""
        if size < 0 or size >= len(self._buffer):
            data = bytes(self._buffer)
            self._buffer.clear()
            return data
        data = bytes(self._buffer[:size])
        del self._buffer[:size]
        return data

    def read_all(self) -> bytes:
        """Read every body byte received so far."""
        return self.read(-1)

    def is_headers_parsed(self) -> bool:
        """Whether the request head has been parsed."""
        return self._headers_parsed

    def _require_headers(self) -> None:
        if not self._headers_parsed:
            raise RuntimeError("request headers have not been parsed yet")

    @property
    def peer_address(self) -> Optional[str]:
        """Address of the remote peer, if known."""
        return self._peer_address

    @property
    def method(self) -> Method:
        """The request method."""
        self._require_headers()
        assert self._method is not None
        return self._method

    @property
    def raw_path(self) -> bytes:
        """The request target exactly as sent."""
        self._require_headers()
        return self._raw_path

    @property
    def path(self) -> str:
        """The decoded path without its query string."""
        self._require_headers()
        return self._path

    @property
    def query_string(self) -> dict[str, list[str]]:
        """Query parameters, each key mapped to its values in order."""
        self._require_headers()
        return {key: list(values) for key, values in self._query.items()}

    @property
    def headers(self) -> HeaderMap:
        """The request headers."""
        self._require_headers()
        return self._headers

    @property
    def content_length(self) -> int:
        """Value of the Content-Length header, or -1 if absent."""
        return self._data_total

    def read_json(self) -> Any:
        """Parse the request body as a JSON object or array.

        On invalid JSON a 400 error is written to the client and ValueError
        is raised.
        """
        data = self.read_all()
        try:
            document = json.loads(data)
        except ValueError as exc:
            self.write_error(Status.BAD_REQUEST)
            raise ValueError("request body is not valid JSON") from exc
        if not isinstance(document, (dict, list)):
            self.write_error(Status.BAD_REQUEST)
            raise ValueError("request body is not a JSON object or array")
        return document

    # Response

    def _require_unwritten(self) -> None:
        if self._closed:
            raise RuntimeError("socket is closed")
        if self._write_state is not _WriteState.NONE:
            raise RuntimeError("response headers have already been written")

    def set_status_code(self, status_code: int, reason: Union[str, bytes, None] = None) -> None:
        """Set the response status; the reason defaults to the standard phrase."""
        self._require_unwritten()
        self._status_code = int(status_code)
        if reason is None:
            self._status_reason = status_reason(status_code).encode("latin-1")
        else:
            self._status_reason = _to_bytes(reason)

    def set_header(self, name: Union[str, bytes], value: Any, replace: bool = True) -> None:
        """Set a response header, replacing or adding to existing values."""
        self._require_unwritten()
        if replace:
            self._response_headers.set(name, value)
        else:
            self._response_headers.add(name, value)

    def set_headers(self, headers: Any) -> None:
        """Replace all response headers."""
        self._require_unwritten()
        self._response_headers = HeaderMap(headers)

    def write_headers(self) -> None:
        """Write the status line and response headers."""
        self._require_unwritten()
        lines = [b"HTTP/1.0 %d %s" % (self._status_code, self._status_reason)]
        lines.extend(
            name.encode("latin-1") + b": " + value for name, value in self._response_headers.items()
        )
        self._transport.write(b"\r\n".join(lines) + b"\r\n\r\n")
        self._write_state = _WriteState.DATA

    def write(self, data: Union[bytes, bytearray, memoryview]) -> int:
        """Write body data, writing the headers first if needed."""
        if self._closed:
            raise RuntimeError("socket is closed")
        if self._write_state is _WriteState.NONE:
            self.write_headers()
        payload = bytes(data)
        if payload:
            self._transport.write(payload)
        return len(payload)

    def write_redirect(self, path: Union[str, bytes], permanent: bool = False) -> None:
        """Write a 301 or 302 redirect and close the socket."""
        self.set_status_code(Status.MOVED_PERMANENTLY if permanent else Status.FOUND)
        self.set_header("Location", _to_bytes(path))
        self.write_headers()
        self.close()

    def write_error(self, status_code: int, reason: Union[str, bytes, None] = None) -> None:
        """Write an HTML error page with the given status and close the socket."""
        if self._closed:
            return
        if self._write_state is _WriteState.NONE:
            self.set_status_code(status_code, reason)
            status = f"{self._status_code} {self._status_reason.decode('latin-1')}"
            body = _ERROR_PAGE.format(status=html.escape(status)).encode("utf-8")
            self.set_header("Content-Length", len(body))
            self.set_header("Content-Type", "text/html")
            self.write(body)
        self.close()

    def write_json(self, document: Any, status_code: int = Status.OK) -> None:
        """Write a JSON document as the response and close the socket."""
        body = json.dumps(document).encode("utf-8")
        self.set_status_code(status_code)
        self.set_header("Content-Length", len(body))
        self.set_header("Content-Type", "application/json")
        self.write(body)
        self.close()

    def close(self) -> None:
        """Finish the response and close the underlying transport."""
        if self._closed:
            return
        self._closed = True
        self._read_state = _ReadState.FINISHED
        self._write_state = _WriteState.FINISHED
        self._transport.close()

    def is_closed(self) -> bool:
        """Whether the socket has been closed."""
        return self._closed


class HttpProtocol(asyncio.Protocol):
    """asyncio protocol that routes each request to a handler.

    The handler's ``route(socket, path)`` is called with the path stripped
    of its leading slash. Without a handler every request gets a 404.
    """

    def __init__(self, handler: Any = None):
        self._handler = handler
        self._socket: Optional[Socket] = None

    def connection_made(self, transport: asyncio.BaseTransport) -> None:
        self._socket = Socket(transport)
        self._socket.add_headers_parsed_callback(self._dispatch)

    def _dispatch(self, socket: Socket) -> None:
        if self._handler is None:
            socket.write_error(Status.NOT_FOUND)
            return
        path = socket.path
        if path.startswith("/"):
            path = path[1:]
        try:
            self._handler.route(socket, path)
        except Exception:
            logger.exception("handler failed for %r", path)
            socket.write_error(Status.INTERNAL_SERVER_ERROR)

    def data_received(self, data: bytes) -> None:
        if self._socket is not None:
            self._socket.feed_data(data)

    def eof_received(self) -> bool:
        if self._socket is not None:
            self._socket.feed_eof()
        # Keep the transport open so the response can still be written.
        return True

    def connection_lost(self, exc: Optional[Exception]) -> None:
        if self._socket is not None:
            self._socket._connection_lost()