import stat

import pytest

from httpengine.localfile import LocalFile

APPLICATION_NAME = "QHttpEngine"


def test_open_and_remove(tmp_path):
    local = LocalFile(APPLICATION_NAME, tmp_path)
    local.open()
    assert local.exists()
    local.remove()
    assert not local.exists()


def test_file_name_is_hidden_application_name(tmp_path):
    local = LocalFile(APPLICATION_NAME, tmp_path)
    assert local.path == tmp_path / ".QHttpEngine"


def test_default_directory_is_home(tmp_path, monkeypatch):
    monkeypatch.setenv("HOME", str(tmp_path))
    local = LocalFile(APPLICATION_NAME)
    assert local.path == tmp_path / ".QHttpEngine"


def test_permissions_are_owner_only(tmp_path):
    local = LocalFile(APPLICATION_NAME, tmp_path)
    local.open()
    local.close()
    mode = stat.S_IMODE(local.path.stat().st_mode)
    assert mode == stat.S_IRUSR | stat.S_IWUSR


def test_existing_permissions_are_restricted(tmp_path):
    target = tmp_path / ".QHttpEngine"
    target.write_bytes(b"old")
    target.chmod(0o644)
    local = LocalFile(APPLICATION_NAME, tmp_path)
    local.open()
    local.close()
    assert stat.S_IMODE(target.stat().st_mode) == 0o600
    assert target.read_bytes() == b""


def test_write_and_read_back(tmp_path):
    local = LocalFile(APPLICATION_NAME, tmp_path)
    local.open()
    assert local.write(b"abc") == 3
    assert local.write("def") == 3
    local.close()
    assert local.path.read_bytes() == b"abcdef"


def test_reopen_truncates(tmp_path):
    local = LocalFile(APPLICATION_NAME, tmp_path)
    local.open()
    local.write(b"first contents")
    local.open()
    local.write(b"two")
    local.close()
    assert local.path.read_bytes() == b"two"


def test_context_manager_closes(tmp_path):
    with LocalFile(APPLICATION_NAME, tmp_path) as local:
        local.write(b"data")
    assert local.path.read_bytes() == b"data"
    with pytest.raises(ValueError):
        local.write(b"more")


def test_write_before_open_raises(tmp_path):
    local = LocalFile(APPLICATION_NAME, tmp_path)
    with pytest.raises(ValueError):
        local.write(b"data")
    assert not local.exists()


def test_remove_missing_raises(tmp_path):
    local = LocalFile(APPLICATION_NAME, tmp_path)
    with pytest.raises(FileNotFoundError):
        local.remove()