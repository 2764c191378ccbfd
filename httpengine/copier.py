"""Copying data from one file-like object to another."""

from __future__ import annotations

from typing import Any, Callable, Optional

DEFAULT_BUFFER_SIZE = 64 * 1024


class CopyError(RuntimeError):
    """Raised when a copier is used in a way it does not allow."""


class DeviceCopier:
    """Copy data from a source to a destination.

    A seekable source is read in blocks of ``buffer_size`` bytes when
    :meth:`start` is called, limited to the bytes from ``start`` to ``end``
    inclusive (``end`` of -1 meaning the end of the source). Any other
    source is sequential: whatever it has to read is copied on start, and
    further data arrives through :meth:`feed` until :meth:`finish`. A
    source of None takes all its data from :meth:`feed`.

    Error callbacks get a message; finished callbacks run once, after the
    copy completes, fails or is stopped.
    """

    def __init__(
        self,
        src: Any,
        dest: Any,
        buffer_size: int = DEFAULT_BUFFER_SIZE,
        start: int = 0,
        end: int = -1,
    ):
        if buffer_size <= 0:
            raise ValueError("buffer size must be positive")
        if start < 0:
            raise ValueError("range start must not be negative")
        if end < -1 or (end >= 0 and end < start):
            raise ValueError("range end must be -1 or not before the start")
        self._src = src
        self._dest = dest
        self._buffer_size = buffer_size
        self._range_start = start
        self._range_end = end
        self._finished_callbacks: list[Callable[[], Any]] = []
        self._error_callbacks: list[Callable[[str], Any]] = []
        self._pending = bytearray()
        self._eof = False
        self._started = False
        self._finished = False

    def add_finished_callback(self, callback: Callable[[], Any]) -> None:
        """Call ``callback()`` when the copy finishes."""
        self._finished_callbacks.append(callback)

    def add_error_callback(self, callback: Callable[[str], Any]) -> None:
        """Call ``callback(message)`` when the copy fails."""
        self._error_callbacks.append(callback)

    def _is_seekable(self) -> bool:
        seekable = getattr(self._src, "seekable", None)
        return self._src is not None and callable(seekable) and bool(seekable())

    def start(self) -> None:
        """Begin copying; may be called only once."""
        if self._started or self._finished:
            raise CopyError("the copy has already been started or stopped")
        self._started = True
        try:
            if self._is_seekable():
                self._copy_blocks()
                return
            if self._pending:
                data = bytes(self._pending)
                self._pending.clear()
                self._dest.write(data)
            if self._src is not None:
                self._drain()
        except (OSError, ValueError) as exc:
            self._fail(str(exc))
            return
        if self._eof:
            self._finish()

    def _copy_blocks(self) -> None:
        self._src.seek(self._range_start)
        remaining: Optional[int] = None
        if self._range_end >= 0:
            remaining = self._range_end - self._range_start + 1
        while remaining is None or remaining > 0:
            size = self._buffer_size if remaining is None else min(self._buffer_size, remaining)
            chunk = self._src.read(size)
            if not chunk:
                break
            self._dest.write(chunk)
            if remaining is not None:
                remaining -= len(chunk)
            if self._finished:
                return
        self._finish()

    def _drain(self) -> None:
        while not self._finished:
            chunk = self._src.read(self._buffer_size)
            if not chunk:
                break
            self._dest.write(chunk)

    def feed(self, data: bytes) -> None:
        """Copy data arriving from a sequential source."""
        if self._finished or not data:
            return
        if not self._started:
            self._pending += data
            return
        try:
            self._dest.write(bytes(data))
        except (OSError, ValueError) as exc:
            self._fail(str(exc))

    def finish(self) -> None:
        """Signal that a sequential source has no more data."""
        if self._finished:
            return
        if not self._started:
            self._eof = True
            return
        self._finish()

    def stop(self) -> None:
        """Stop copying; later data is ignored."""
        if not self._finished:
            self._finish()

    def is_finished(self) -> bool:
        """Whether the copy has finished, failed or been stopped."""
        return self._finished

    def _fail(self, message: str) -> None:
        if self._finished:
            return
        for callback in list(self._error_callbacks):
            callback(message)
        self._finish()

    def _finish(self) -> None:
        self._finished = True
        for callback in list(self._finished_callbacks):
            callback()