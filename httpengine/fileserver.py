"""Command that serves a directory over HTTP."""

from __future__ import annotations

import argparse
import asyncio
import os
import sys
from typing import Any, Optional, Sequence

from .filesystem import FilesystemHandler
from .socket import HttpProtocol

DEFAULT_ADDRESS = "127.0.0.1"
DEFAULT_PORT = 8000


def _port(text: str) -> int:
    try:
        value = int(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid port: {text!r}") from None
    if not 0 <= value <= 65535:
        raise argparse.ArgumentTypeError(f"port out of range: {value}")
    return value


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """Parse the command-line options of the file server."""
    parser = argparse.ArgumentParser(description="Serve the files in a directory over HTTP.")
    parser.add_argument(
        "-a", "--address", default=DEFAULT_ADDRESS, help="address to bind to"
    )
    parser.add_argument(
        "-p", "--port", type=_port, default=DEFAULT_PORT, help="port to listen on"
    )
    parser.add_argument(
        "-d", "--directory", default=os.getcwd(), help="directory to serve"
    )
    return parser.parse_args(argv)


async def serve(handler: Any, address: str = DEFAULT_ADDRESS, port: int = DEFAULT_PORT) -> asyncio.AbstractServer:
    """Start listening on address and port, routing requests to handler.

    Raises OSError if the address cannot be bound.
    """
    loop = asyncio.get_running_loop()
    return await loop.create_server(lambda: HttpProtocol(handler), address, port)


async def _run(handler: Any, address: str, port: int) -> int:
    try:
        server = await serve(handler, address, port)
    except OSError:
        print("Unable to listen on the specified port.", file=sys.stderr)
        return 1
    async with server:
        await server.serve_forever()
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Serve a directory until interrupted; return the exit status."""
    args = parse_args(argv)
    handler = FilesystemHandler(args.directory)
    try:
        return asyncio.run(_run(handler, args.address, args.port))
    except KeyboardInterrupt:
        return 0


if __name__ == "__main__":
    sys.exit(main())