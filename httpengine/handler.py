"""Request routing through middleware, redirects and sub-handlers."""

from __future__ import annotations

import abc
import re
from typing import Any, Union

from .protocol import Status

PatternLike = Union[str, "re.Pattern[str]"]

_PLACEHOLDER = re.compile(r"%(\d{1,2})")


def _compile(pattern: PatternLike) -> "re.Pattern[str]":
    if isinstance(pattern, re.Pattern):
        return pattern
    return re.compile(pattern)


def _fill_lowest(template: str, value: str) -> str:
    """Replace every occurrence of the lowest-numbered %N marker with value."""
    numbers = [int(match.group(1)) for match in _PLACEHOLDER.finditer(template)]
    if not numbers:
        return template
    lowest = min(numbers)
    return _PLACEHOLDER.sub(
        lambda match: value if int(match.group(1)) == lowest else match.group(0),
        template,
    )


class Middleware(abc.ABC):
    """Decides, before a handler runs, whether a request may go on."""

    @abc.abstractmethod
    def process(self, socket: Any) -> bool:
        """Return True to continue; otherwise an error has been written."""


class Handler:
    """Base class for HTTP handlers.

    :meth:`route` runs the middleware in order, then the redirects, then the
    sub-handlers, and finally :meth:`process` when nothing matched. Patterns
    are regular expressions searched anywhere in the path.
    """

    def __init__(self) -> None:
        self._middleware: list[Middleware] = []
        self._redirects: list[tuple["re.Pattern[str]", str]] = []
        self._sub_handlers: list[tuple["re.Pattern[str]", Handler]] = []

    def add_middleware(self, middleware: Middleware) -> None:
        """Append middleware to run before every request."""
        self._middleware.append(middleware)

    def add_redirect(self, pattern: PatternLike, path: str) -> None:
        """Redirect matching paths to path; "%1", "%2"... refer to captures."""
        self._redirects.append((_compile(pattern), path))

    def add_sub_handler(self, pattern: PatternLike, handler: "Handler") -> None:
        """Pass matching requests, minus the matched text, to handler."""
        self._sub_handlers.append((_compile(pattern), handler))

    def route(self, socket: Any, path: str) -> None:
        """Route an incoming request."""
        for middleware in self._middleware:
            if not middleware.process(socket):
                return

        for pattern, destination in self._redirects:
            match = pattern.search(path)
            if match is not None:
                new_path = destination
                for capture in match.groups():
                    new_path = _fill_lowest(new_path, capture or "")
                socket.write_redirect(new_path)
                return

        for pattern, handler in self._sub_handlers:
            match = pattern.search(path)
            if match is not None:
                handler.route(socket, path[len(match.group(0)):])
                return

        self.process(socket, path)

    def process(self, socket: Any, path: str) -> None:
        """Handle a request no pattern matched; the default answers 404."""
        socket.write_error(Status.NOT_FOUND)