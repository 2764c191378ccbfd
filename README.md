# httpengine

A small HTTP/1.x server engine built on `asyncio` and the standard library,
with no third-party dependencies. It provides:

- `httpengine.socket.Socket`, one request read from a transport and the
  response written back to it, and `httpengine.socket.HttpProtocol`, the
  `asyncio.Protocol` that feeds a connection into a `Socket` and hands the
  request to a handler;
- `httpengine.handler.Handler` and `httpengine.handler.Middleware`, a tree of
  handlers with regular-expression redirects, sub-handlers and middleware;
- `httpengine.filesystem.FilesystemHandler`, which serves files and directory
  listings below a document root and honours a single `Range: bytes=...`;
- `httpengine.basicauth.BasicAuthMiddleware`, HTTP Basic authentication;
- `httpengine.localauth.LocalAuthMiddleware`, token authentication for
  programs running as the same user, backed by `httpengine.localfile.LocalFile`;
- `httpengine.range.Range` for byte ranges, `httpengine.parser` for parsing
  request and response heads, `httpengine.protocol` with `Method`, `Status`,
  `status_reason()` and the case-insensitive `HeaderMap`, and
  `httpengine.copier.DeviceCopier` for copying between file-like objects.

## Installation

```
pip install .
```

## Serving a directory

```
httpengine-fileserver --address 127.0.0.1 --port 8000 --directory /srv/www
```

| option              | default           |
|---------------------|-------------------|
| `-a`, `--address`   | `127.0.0.1`       |
| `-p`, `--port`      | `8000`            |
| `-d`, `--directory` | current directory |

The server runs until interrupted. If the address cannot be bound it prints
`Unable to listen on the specified port.` and exits with status 1.

Paths that leave the document root or do not exist get `404 Not Found`; a file
that cannot be opened gets `403 Forbidden`. A directory is answered with an
HTML listing: `.` and `..` first, then the other entries (names starting with
a dot are left out), directories before files, sorted by name without regard
to case. A file is sent with a `Content-Type` guessed from its name (or from
its first bytes), and a valid first range of a `Range: bytes=...` header gives
`206 Partial Content` with `Content-Range`; an invalid range sends the whole
file.

## Writing handlers

A handler receives each request through `route(socket, path)`, where `path` is
the request path without its leading slash. Middleware runs first; if any
middleware's `process(socket)` returns false the request stops there. Then
redirects are tried in the order they were added, then sub-handlers, and
finally the handler's own `process(socket, path)`, which by default answers
`404 Not Found`. Patterns are regular expressions (strings or compiled) and
are searched anywhere in the path.

```python
from httpengine.basicauth import BasicAuthMiddleware
from httpengine.filesystem import FilesystemHandler
from httpengine.handler import Handler
from httpengine.protocol import Status


class Hello(Handler):
    def process(self, socket, path):
        socket.set_status_code(Status.OK)
        socket.set_header("Content-Type", "text/plain")
        socket.write(b"hello, " + path.encode())
        socket.close()


root = FilesystemHandler("/srv/www")
root.add_redirect(r"^$", "/index.html")
root.add_sub_handler(r"^hello/", Hello())

password = "password"
auth = BasicAuthMiddleware("private area")
auth.add("user", password)
root.add_middleware(auth)
```

A redirect's destination may refer to captured groups with `%1`, `%2`, and so
on; the client gets `302 Found`. A sub-handler is given the path with the
matched text removed. `BasicAuthMiddleware` answers unknown credentials with
`401 Unauthorized` and a `WWW-Authenticate` header naming the realm; override
its `verify(username, password)` to check credentials another way.

To run the tree, start a server inside an event loop:

```python
import asyncio

from httpengine.fileserver import serve


async def run():
    server = await serve(root, "127.0.0.1", 8000)
    async with server:
        await server.serve_forever()


asyncio.run(run())
```

`serve()` returns the `asyncio` server and raises `OSError` if the address
cannot be bound. An exception raised by a handler is logged and answered with
`500 Internal Server Error`.

## Requests and responses

On a `Socket`, once `is_headers_parsed()` is true, the request is described by
the properties `method` (a `Method`), `raw_path`, `path`, `query_string` (each
key mapped to a list of its values), `headers` (a `HeaderMap`) and
`content_length` (`-1` when there is no `Content-Length`). The body is read
with `bytes_available()`, `read(size)`, `read_all()` and `read_json()`; the
last writes `400 Bad Request` and raises `ValueError` when the body is not a
JSON object or array.

The response is built with `set_status_code()`, `set_header()`,
`set_headers()`, `write_headers()`, `write()` and `close()`; `write()` sends
the headers first if they have not been sent. The status line is written as
`HTTP/1.0`. The shortcuts `write_redirect(path, permanent=False)`,
`write_error(status_code)` and `write_json(document, status_code)` write a
complete response and close the socket.

## Local token authentication

`LocalAuthMiddleware` creates a random token and writes it, with any data
passed to `set_data()`, as a JSON object to the file `.<application name>` in
the user's home directory (or in `directory`), with permissions restricting it
to its owner. Requests must carry the token in the `X-Auth-Token` header (or
the `header_name` given); others get `403 Forbidden`. `exists()` tells whether
the file was written, `filename()` gives its path and `remove()` deletes it.
Restricting the file's permissions is supported on POSIX systems only; elsewhere
the file is not written.

```python
from httpengine.localauth import LocalAuthMiddleware

middleware = LocalAuthMiddleware("authserver")
middleware.set_data({"port": 8000})
root.add_middleware(middleware)
```

The `httpengine-authclient` command reads the port and token from such a file
(`~/.authserver` unless `-f`/`--file` names another), requests
`http://127.0.0.1:<port>/` with the token, and prints whether the server
accepted it, exiting with status 0 on success and 1 otherwise:

```
httpengine-authclient
```

## Ranges

```python
from httpengine.range import Range

r = Range.parse("-500", 1000)
r.start, r.end, r.length   # (500, 999, 500)
r.content_range()          # "500-999/1000"

Range(100, 10, 1200).content_range()   # "*/1200"
Range.parse("abcdef").is_valid()       # False
```

## What it does not do

Each connection carries a single request: the socket is closed once the
response is written, and there is no keep-alive or chunked transfer encoding.
There is no handler that forwards requests to an upstream server and none that
dispatches paths to registered functions; write a `Handler` subclass for that.
Only one range of a `Range` header is served.

## Running the tests

```
pip install .[test]
pytest
```