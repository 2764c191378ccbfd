"""Handler that serves files and directory listings from a document root."""

from __future__ import annotations

import html
import mimetypes
import os
from typing import Any, Optional, Union
from urllib.parse import unquote

from .copier import DeviceCopier
from .handler import Handler
from .protocol import Status
from .range import Range

_LIST_TEMPLATE = (
    "<!DOCTYPE html>"
    "<html>"
    "<head>"
    "<meta charset=\"utf-8\">"
    "<title>{title}</title>"
    "</head>"
    "<body>"
    "<h1>{title}</h1>"
    "<p>Directory listing:</p>"
    "<ul>{listing}</ul>"
    "<hr>"
    "<p><em>httpengine</em></p>"
    "</body>"
    "</html>"
)

_SNIFF_SIZE = 512


def _mime_type(path: str, head: bytes) -> str:
    guessed, _ = mimetypes.guess_type(path)
    if guessed:
        return guessed
    if not head:
        return "application/x-zerosize"
    if b"\x00" not in head:
        try:
            head.decode("utf-8")
        except UnicodeDecodeError as exc:
            # A multi-byte sequence cut off by the sniff window is still text.
            if exc.start < len(head) - 3:
                return "application/octet-stream"
        return "text/plain"
    return "application/octet-stream"


class FilesystemHandler(Handler):
    """Serve the files below a document root.

    Directories are answered with an HTML listing. Files honour a single
    byte range from the Range header.
    """

    def __init__(self, document_root: Union[str, "os.PathLike[str]", None] = None):
        super().__init__()
        self._root: Optional[str] = None
        if document_root is not None:
            self.document_root = document_root

    @property
    def document_root(self) -> Optional[str]:
        """Absolute path of the directory being served."""
        return self._root

    @document_root.setter
    def document_root(self, path: Union[str, "os.PathLike[str]"]) -> None:
        self._root = os.path.abspath(os.fspath(path))

    def _absolute_path(self, path: str) -> Optional[str]:
        assert self._root is not None
        target = os.path.normpath(os.path.join(self._root, path))
        relative = os.path.relpath(target, self._root)
        if relative == os.pardir or relative.startswith(os.pardir + os.sep):
            return None
        if not os.path.exists(target):
            return None
        return target

    def process(self, socket: Any, path: str) -> None:
        """Serve the file or directory named by path."""
        if self._root is None:
            socket.write_error(Status.INTERNAL_SERVER_ERROR)
            return

        decoded = unquote(path)
        absolute = self._absolute_path(decoded)
        if absolute is None:
            socket.write_error(Status.NOT_FOUND)
            return

        if os.path.isdir(absolute):
            self._process_directory(socket, decoded, absolute)
        else:
            self._process_file(socket, absolute)

    def _process_file(self, socket: Any, absolute: str) -> None:
        try:
            file = open(absolute, "rb")
        except OSError:
            socket.write_error(Status.FORBIDDEN)
            return

        try:
            file_size = os.fstat(file.fileno()).st_size
            head = file.read(_SNIFF_SIZE)
            file.seek(0)
        except OSError:
            file.close()
            socket.write_error(Status.FORBIDDEN)
            return

        header = socket.headers.get("Range", b"") if socket.is_headers_parsed() else b""
        byte_range = Range()
        if header and header.startswith(b"bytes="):
            # Only the first range is served; several need a multipart reply.
            first = header[6:].split(b",")[0]
            byte_range = Range.parse(first.decode("latin-1"), file_size)

        if byte_range.is_valid():
            socket.set_status_code(Status.PARTIAL_CONTENT)
            socket.set_header("Content-Length", byte_range.length)
            socket.set_header("Content-Range", "bytes " + byte_range.content_range())
            copier = DeviceCopier(file, socket, start=byte_range.start, end=byte_range.end)
        else:
            socket.set_header("Content-Length", file_size)
            copier = DeviceCopier(file, socket)

        socket.set_header("Content-Type", _mime_type(absolute, head))
        socket.write_headers()

        def on_finished() -> None:
            file.close()
            if not socket.is_closed():
                socket.close()

        copier.add_finished_callback(on_finished)
        socket.add_disconnect_callback(lambda _socket: copier.stop())
        copier.start()

    def _process_directory(self, socket: Any, path: str, absolute: str) -> None:
        entries = [(".", True), ("..", True)]
        with os.scandir(absolute) as scan:
            others = [
                (entry.name, entry.is_dir())
                for entry in scan
                if not entry.name.startswith(".")
            ]
        others.sort(key=lambda item: (not item[1], item[0].lower(), item[0]))
        entries.extend(others)

        listing = "".join(
            '<li><a href="{0}{1}">{0}{1}</a></li>'.format(html.escape(name), "/" if is_dir else "")
            for name, is_dir in entries
        )
        body = _LIST_TEMPLATE.format(
            title="/" + html.escape(path),
            listing=listing,
        ).encode("utf-8")

        socket.set_header("Content-Type", "text/html")
        socket.set_header("Content-Length", len(body))
        socket.write(body)
        socket.close()