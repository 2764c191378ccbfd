"""HTTP byte ranges as used by the Range and Content-Range headers."""

from __future__ import annotations

import re
from typing import Optional

_RANGE = re.compile(r"([0-9]*)-([0-9]*)")


class Range:
    """A byte range, optionally tied to the size of the whole resource.

    A negative start means "the last N bytes"; an end of -1 means "up to the
    end". A data size of -1 means the size of the resource is unknown. A
    range built without a start is empty and never valid.
    """

    __slots__ = ("_start", "_end", "_data_size")

    def __init__(self, start: Optional[int] = None, end: int = -1, data_size: Optional[int] = -1):
        if start is None:
            # Empty range: start beyond end makes it invalid.
            start, end = 1, 0
        self._start = int(start)
        self._end = int(end)
        self._data_size = -1 if data_size is None or data_size < 0 else int(data_size)

    @classmethod
    def parse(cls, text: str, data_size: Optional[int] = -1) -> "Range":
        """Parse a range such as "0-99", "-500" or "100-".

        Text that cannot be parsed gives an invalid range.
        """
        match = _RANGE.fullmatch(text.strip())
        if match is None:
            return cls(data_size=data_size)
        first, last = match.groups()
        if not first and not last:
            return cls(data_size=data_size)
        if not first:
            suffix = int(last)
            if suffix == 0:
                return cls(data_size=data_size)
            return cls(-suffix, -1, data_size)
        if not last:
            return cls(int(first), -1, data_size)
        return cls(int(first), int(last), data_size)

    def with_data_size(self, data_size: Optional[int]) -> "Range":
        """Return a range with the same offsets and a different data size."""
        return Range(self._start, self._end, data_size)

    @property
    def start(self) -> int:
        """First byte of the range, or -N for "last N bytes" of unknown size."""
        if self._start < 0 and self._data_size >= 0:
            return self._data_size + self._start
        return self._start

    @property
    def end(self) -> int:
        """Last byte of the range, or -1 when it depends on an unknown size."""
        if self._data_size >= 0 and (self._start < 0 or self._end == -1):
            return self._data_size - 1
        return self._end

    @property
    def length(self) -> int:
        """Number of bytes in the range, or -1 if unknown or invalid."""
        if not self.is_valid():
            return -1
        if self._start < 0:
            return -self._start
        if self._end == -1:
            return self._data_size - self._start if self._data_size >= 0 else -1
        return self._end - self._start + 1

    @property
    def data_size(self) -> int:
        """Size of the whole resource, or -1 if unknown."""
        return self._data_size

    def is_valid(self) -> bool:
        """Check that the range lies within bounds."""
        start, end, size = self._start, self._end, self._data_size
        if start < 0:
            return end == -1 and (size < 0 or -start <= size)
        if end == -1:
            return size < 0 or start < size
        return start <= end and (size < 0 or end < size)

    def content_range(self) -> str:
        """Return the value for a Content-Range header, without the unit."""
        size = str(self._data_size) if self._data_size >= 0 else "*"
        if not self.is_valid():
            return f"*/{size}" if self._data_size >= 0 else ""
        return f"{self.start}-{self.end}/{size}"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Range):
            return NotImplemented
        return (self._start, self._end, self._data_size) == (other._start, other._end, other._data_size)

    def __hash__(self) -> int:
        return hash((self._start, self._end, self._data_size))

    def __repr__(self) -> str:
        return f"Range({self._start}, {self._end}, {self._data_size})"