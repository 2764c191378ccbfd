"""HTTP basic authentication middleware."""

from __future__ import annotations

import base64
import binascii
from typing import Any, Optional

from .handler import Middleware
from .parser import split
from .protocol import Status


def _decode_base64(data: bytes) -> Optional[bytes]:
    try:
        return base64.b64decode(data, validate=False)
    except (binascii.Error, ValueError):
        return None


class BasicAuthMiddleware(Middleware):
    """Middleware that admits requests carrying known basic credentials.

    Override :meth:`verify` in a subclass to check credentials another way.
    """

    def __init__(self, realm: str):
        self._realm = realm
        self._credentials: dict[str, str] = {}

    @property
    def realm(self) -> str:
        """The realm shown to clients when credentials are requested."""
        return self._realm

    def add(self, username: str, password: str) -> None:
        """Accept a username and password, replacing any earlier password."""
        self._credentials[username] = password

    def verify(self, username: str, password: str) -> bool:
        """Whether the credentials are accepted."""
        return username in self._credentials and self._credentials[username] == password

    def process(self, socket: Any) -> bool:
        """Admit the request or answer it with 401 Unauthorized."""
        header = socket.headers.get("Authorization", b"") if socket.is_headers_parsed() else b""
        parts = header.split(b" ")
        if len(parts) == 2 and parts[0].lower() == b"basic":
            decoded = _decode_base64(parts[1])
            if decoded is not None:
                fields = split(decoded, b":", 1)
                if len(fields) == 2 and self.verify(
                    fields[0].decode("utf-8", errors="replace"),
                    fields[1].decode("utf-8", errors="replace"),
                ):
                    return True

        socket.set_header("WWW-Authenticate", f'Basic realm="{self._realm}"')
        socket.write_error(Status.UNAUTHORIZED)
        return False