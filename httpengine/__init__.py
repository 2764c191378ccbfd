"""Embeddable asyncio HTTP/1.x server engine with routing, middleware, range requests and static file serving."""

__version__ = "1.0.0"

__all__ = [
    "authclient",
    "basicauth",
    "copier",
    "filesystem",
    "fileserver",
    "handler",
    "localauth",
    "localfile",
    "parser",
    "protocol",
    "range",
    "socket",
]