import pytest

from httpengine.filesystem import FilesystemHandler
from httpengine.parser import parse_response_headers
from httpengine.socket import Socket

DATA = b"test"


class _Transport:
    def __init__(self):
        self.data = bytearray()
        self.closed = False

    def write(self, data):
        self.data += data

    def close(self):
        self.closed = True


class _Response:
    def __init__(self, transport):
        head, _, body = bytes(transport.data).partition(b"\r\n\r\n")
        self.status_code, self.reason, self.headers = parse_response_headers(head)
        self.body = body


@pytest.fixture
def root(tmp_path):
    (tmp_path / "outside").write_bytes(DATA)
    (tmp_path / "root").mkdir()
    (tmp_path / "root" / "inside").write_bytes(DATA)
    return tmp_path / "root"


def _request(handler, path, headers=None):
    transport = _Transport()
    socket = Socket(transport, "127.0.0.1")
    if headers is not None:
        lines = b"".join(k + b": " + v + b"\r\n" for k, v in headers)
        socket.feed_data(b"GET /" + path.encode() + b" HTTP/1.0\r\n" + lines + b"\r\n")
        assert socket.is_headers_parsed()
    handler.route(socket, path)
    assert transport.closed
    return _Response(transport)


@pytest.mark.parametrize(
    "path, status_code, data",
    [
        ("nonexistent", 404, None),
        ("../outside", 404, None),
        ("inside", 200, DATA),
        ("", 200, None),
    ],
)
def test_requests(root, path, status_code, data):
    response = _request(FilesystemHandler(root), path)
    assert response.status_code == status_code
    if data is not None:
        assert response.body == data


@pytest.mark.parametrize(
    "range_value, status_code, content_range, data",
    [
        ("", 200, "", DATA),
        ("0-2", 206, "bytes 0-2/4", DATA[0:3]),
        ("1-2", 206, "bytes 1-2/4", DATA[1:3]),
        ("1-", 206, "bytes 1-3/4", DATA[1:]),
        ("-2", 206, "bytes 2-3/4", DATA[2:]),
        ("abcd", 200, "", DATA),
    ],
)
def test_range_requests(root, range_value, status_code, content_range, data):
    headers = [(b"Range", b"bytes=" + range_value.encode())] if range_value else None
    response = _request(FilesystemHandler(root), "inside", headers)
    assert response.status_code == status_code
    assert response.body == data
    assert int(response.headers.get("Content-Length")) == len(data)
    assert response.headers.get("Content-Range", b"") == content_range.encode("latin-1")


def test_only_first_of_several_ranges_is_served(root):
    response = _request(FilesystemHandler(root), "inside", [(b"Range", b"bytes=0-0,2-3")])
    assert response.status_code == 206
    assert response.body == DATA[:1]
    assert response.headers.get("Content-Range") == b"bytes 0-0/4"


def test_no_document_root_is_server_error():
    response = _request(FilesystemHandler(), "inside")
    assert response.status_code == 500


def test_absolute_path_outside_root_is_not_found(root, tmp_path):
    response = _request(FilesystemHandler(root), str(tmp_path / "outside"))
    assert response.status_code == 404


def test_parent_directory_is_not_found(root):
    response = _request(FilesystemHandler(root), "..")
    assert response.status_code == 404


def test_percent_encoded_path_is_decoded(root):
    (root / "a b").write_bytes(DATA)
    response = _request(FilesystemHandler(root), "a%20b")
    assert response.status_code == 200
    assert response.body == DATA


def test_directory_listing_content(root):
    (root / "sub").mkdir()
    (root / "Beta").write_bytes(DATA)
    (root / ".hidden").write_bytes(DATA)
    response = _request(FilesystemHandler(root), "")
    body = response.body.decode("utf-8")
    assert response.headers.get("Content-Type") == b"text/html"
    assert int(response.headers.get("Content-Length")) == len(response.body)
    assert "<title>/</title>" in body
    assert '<a href="sub/">sub/</a>' in body
    assert '<a href="inside">inside</a>' in body
    assert ".hidden" not in body
    assert body.index("sub/") < body.index("Beta") < body.index("inside")


def test_subdirectory_listing_title_is_escaped(root):
    (root / "<d>").mkdir()
    (root / "<d>" / "f").write_bytes(DATA)
    response = _request(FilesystemHandler(root), "<d>")
    body = response.body.decode("utf-8")
    assert response.status_code == 200
    assert "<title>/&lt;d&gt;</title>" in body
    assert '<a href="f">f</a>' in body


def test_content_type_from_extension(root):
    (root / "page.html").write_bytes(b"<p>x</p>")
    response = _request(FilesystemHandler(root), "page.html")
    assert response.headers.get("Content-Type") == b"text/html"
    assert response.body == b"<p>x</p>"


def test_document_root_can_be_set_later(root):
    handler = FilesystemHandler()
    handler.document_root = root
    response = _request(handler, "inside")
    assert response.status_code == 200
    assert response.body == DATA