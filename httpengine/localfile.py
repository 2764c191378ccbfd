"""A file in the user's home directory readable only by its owner."""

from __future__ import annotations

import os
import stat
import sys
from pathlib import Path
from typing import BinaryIO, Optional, Union


def _default_application_name() -> str:
    if sys.argv and sys.argv[0]:
        return Path(sys.argv[0]).stem or "python"
    return "python"


class LocalFile:
    """A hidden file named ".<application name>" that only the user can read.

    Opening the file truncates it and restricts its permissions to the
    owner. Raises OSError on platforms where this cannot be ensured.
    """

    def __init__(
        self,
        application_name: Optional[str] = None,
        directory: Union[str, "os.PathLike[str]", None] = None,
    ):
        name = application_name or _default_application_name()
        base = Path(directory) if directory is not None else Path.home()
        self._path = (base / f".{name}").absolute()
        self._file: Optional[BinaryIO] = None

    @property
    def path(self) -> Path:
        """Absolute path of the file."""
        return self._path

    def open(self) -> None:
        """Open the file for writing, truncating it and restricting access."""
        if os.name != "posix":
            raise OSError("restricting access to the local file is not supported on this platform")
        self.close()
        fd = os.open(self._path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        try:
            os.chmod(self._path, stat.S_IRUSR | stat.S_IWUSR)
        except OSError:
            os.close(fd)
            raise
        self._file = os.fdopen(fd, "wb")

    def write(self, data: Union[str, bytes, bytearray, memoryview]) -> int:
        """Write data to the open file and return the number of bytes written."""
        if self._file is None:
            raise ValueError("the file is not open")
        payload = data.encode("utf-8") if isinstance(data, str) else bytes(data)
        return self._file.write(payload)

    def close(self) -> None:
        """Close the file if it is open."""
        if self._file is not None:
            self._file.close()
            self._file = None

    def exists(self) -> bool:
        """Whether the file exists on disk."""
        return self._path.exists()

    def remove(self) -> None:
        """Close and delete the file."""
        self.close()
        self._path.unlink()

    def __enter__(self) -> "LocalFile":
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()