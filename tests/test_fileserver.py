import asyncio
import os
import socket

import pytest

from httpengine.fileserver import main, parse_args, serve
from httpengine.filesystem import FilesystemHandler
from httpengine.parser import parse_response_headers

DATA = b"test"


def test_parse_args_defaults():
    args = parse_args([])
    assert args.address == "127.0.0.1"
    assert args.port == 8000
    assert args.directory == os.getcwd()


def test_parse_args_values():
    args = parse_args(["-a", "0.0.0.0", "-p", "9001", "-d", "somewhere"])
    assert (args.address, args.port, args.directory) == ("0.0.0.0", 9001, "somewhere")


def test_parse_args_long_options():
    args = parse_args(["--address", "::1", "--port", "0", "--directory", "dir"])
    assert (args.address, args.port, args.directory) == ("::1", 0, "dir")


@pytest.mark.parametrize("port", ["abc", "70000", "-1"])
def test_parse_args_rejects_bad_port(port):
    with pytest.raises(SystemExit):
        parse_args(["-p", port])


async def _request(port, head):
    reader, writer = await asyncio.open_connection("127.0.0.1", port)
    writer.write(head)
    await writer.drain()
    response = await asyncio.wait_for(reader.read(), timeout=5)
    writer.close()
    index = response.index(b"\r\n\r\n")
    code, _, headers = parse_response_headers(response[:index])
    return code, headers, response[index + 4:]


@pytest.fixture
def root(tmp_path):
    (tmp_path / "inside").write_bytes(DATA)
    return tmp_path


@pytest.mark.asyncio
async def test_serve_file(root):
    server = await serve(FilesystemHandler(root), "127.0.0.1", 0)
    async with server:
        port = server.sockets[0].getsockname()[1]
        code, headers, body = await _request(port, b"GET /inside HTTP/1.0\r\n\r\n")
    assert code == 200
    assert body == DATA
    assert int(headers.get("Content-Length")) == len(DATA)


@pytest.mark.asyncio
async def test_serve_range(root):
    server = await serve(FilesystemHandler(root), "127.0.0.1", 0)
    async with server:
        port = server.sockets[0].getsockname()[1]
        code, headers, body = await _request(
            port, b"GET /inside HTTP/1.1\r\nRange: bytes=1-2\r\n\r\n"
        )
    assert code == 206
    assert body == DATA[1:3]
    assert headers.get("Content-Range") == b"bytes 1-2/4"


@pytest.mark.asyncio
async def test_serve_missing_file(root):
    server = await serve(FilesystemHandler(root), "127.0.0.1", 0)
    async with server:
        port = server.sockets[0].getsockname()[1]
        code, _, _ = await _request(port, b"GET /nonexistent HTTP/1.0\r\n\r\n")
    assert code == 404


def test_main_fails_when_port_in_use(tmp_path):
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as busy:
        busy.bind(("127.0.0.1", 0))
        busy.listen(1)
        port = busy.getsockname()[1]
        status = main(["-a", "127.0.0.1", "-p", str(port), "-d", str(tmp_path)])
    assert status == 1