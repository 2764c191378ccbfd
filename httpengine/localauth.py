"""Authentication of local applications through a token kept in a private file."""

from __future__ import annotations

import json
import os
import uuid
from typing import Any, Mapping, Optional, Union

from .handler import Middleware
from .localfile import LocalFile
from .protocol import Status

DEFAULT_HEADER_NAME = "X-Auth-Token"


class LocalAuthMiddleware(Middleware):
    """Admit requests that carry the token stored in a file only the user can read.

    The file holds a JSON object. Once :meth:`set_data` has been called it
    contains the given data plus a "token" entry. Clients running under the
    same account read the token and send it in the token header.
    """

    def __init__(
        self,
        application_name: Optional[str] = None,
        directory: Union[str, "os.PathLike[str]", None] = None,
        header_name: Union[str, bytes] = DEFAULT_HEADER_NAME,
    ):
        self._file = LocalFile(application_name, directory)
        self._header_name = header_name
        self._token = "{" + str(uuid.uuid4()) + "}"
        self._data: dict[str, Any] = {}
        self._update_file()

    def _update_file(self) -> None:
        document = json.dumps(self._data, indent=4) + "\n"
        try:
            with self._file:
                self._file.write(document)
        except OSError:
            # Whether the file was written can be checked with exists().
            pass

    @property
    def token(self) -> str:
        """The token clients must present."""
        return self._token

    @property
    def header_name(self) -> Union[str, bytes]:
        """Name of the request header that carries the token."""
        return self._header_name

    @header_name.setter
    def header_name(self, name: Union[str, bytes]) -> None:
        self._header_name = name

    def exists(self) -> bool:
        """Whether the token file exists."""
        return self._file.exists()

    def filename(self) -> str:
        """Path of the file that stores the token."""
        return str(self._file.path)

    def set_data(self, data: Mapping[str, Any]) -> None:
        """Store additional data next to the token and rewrite the file."""
        self._data = dict(data)
        self._data["token"] = self._token
        self._update_file()

    def process(self, socket: Any) -> bool:
        """Admit the request if it carries the token, otherwise answer 403."""
        value = socket.headers.get(self._header_name) if socket.is_headers_parsed() else None
        if value != self._token.encode("utf-8"):
            socket.write_error(Status.FORBIDDEN)
            return False
        return True

    def remove(self) -> None:
        """Delete the token file if it exists."""
        self._file.close()
        if self._file.exists():
            self._file.remove()