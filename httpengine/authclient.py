"""Client that authenticates to a local server with the token from its file."""

from __future__ import annotations

import argparse
import json
import sys
import urllib.error
import urllib.request
from pathlib import Path
from typing import Optional, Sequence, Union

from .localauth import DEFAULT_HEADER_NAME

DEFAULT_FILENAME = ".authserver"


class AuthClientError(Exception):
    """Raised when the credentials cannot be loaded or are refused."""


def _default_path() -> Path:
    return Path.home() / DEFAULT_FILENAME


def load_credentials(path: Union[str, Path, None] = None) -> tuple[int, str]:
    """Read the port and token from the local file."""
    target = Path(path) if path is not None else _default_path()
    try:
        raw = target.read_bytes()
    except OSError as exc:
        raise AuthClientError("Unable to open local file - is server running?") from exc

    try:
        document = json.loads(raw)
    except ValueError:
        document = {}
    if not isinstance(document, dict) or "port" not in document or "token" not in document:
        raise AuthClientError("Malformed JSON in local file.")

    port, token = document["port"], document["token"]
    if isinstance(port, bool) or not isinstance(port, (int, float)) or int(port) != port:
        raise AuthClientError("Malformed JSON in local file.")
    if not isinstance(token, str):
        raise AuthClientError("Malformed JSON in local file.")
    return int(port), token


def authenticate(path: Union[str, Path, None] = None, timeout: Optional[float] = 30.0) -> int:
    """Send the token to the local server and return the response status."""
    port, token = load_credentials(path)
    request = urllib.request.Request(f"http://127.0.0.1:{port}/")
    request.add_header(DEFAULT_HEADER_NAME, token)
    opener = urllib.request.build_opener(urllib.request.ProxyHandler({}))
    try:
        with opener.open(request, timeout=timeout) as response:
            response.read()
            return response.status
    except urllib.error.HTTPError as exc:
        raise AuthClientError(f"{exc.code} {exc.reason}") from exc
    except (urllib.error.URLError, OSError) as exc:
        raise AuthClientError(str(getattr(exc, "reason", exc))) from exc


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Authenticate to the local server; return the exit status."""
    parser = argparse.ArgumentParser(description="Authenticate to a local server.")
    parser.add_argument(
        "-f", "--file", default=str(_default_path()), help="file holding the port and token"
    )
    args = parser.parse_args(argv)
    try:
        authenticate(args.file)
    except AuthClientError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    print("Successfully authenticated to server.", file=sys.stderr)
    return 0


if __name__ == "__main__":
    sys.exit(main())