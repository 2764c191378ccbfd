import io

import pytest

from httpengine.copier import CopyError, DeviceCopier

SAMPLE_DATA = b"1234567890123456789012345678901234567890"


def make_copier(src, dest, **kwargs):
    copier = DeviceCopier(src, dest, **kwargs)
    errors = []
    finished = []
    copier.add_error_callback(errors.append)
    copier.add_finished_callback(lambda: finished.append(True))
    return copier, errors, finished


class ChunkSource:
    """Sequential source that hands out its chunks one read at a time."""

    def __init__(self, chunks):
        self._chunks = list(chunks)

    def seekable(self):
        return False

    def read(self, size=-1):
        return self._chunks.pop(0) if self._chunks else b""


class BrokenSource:
    def seekable(self):
        return True

    def seek(self, offset):
        return offset

    def read(self, size=-1):
        raise OSError("boom")


def test_buffer():
    dest = io.BytesIO()
    copier, errors, finished = make_copier(io.BytesIO(SAMPLE_DATA), dest, buffer_size=2)
    copier.start()
    assert len(finished) == 1
    assert errors == []
    assert dest.getvalue() == SAMPLE_DATA
    assert copier.is_finished()


def test_fed_stream():
    dest = io.BytesIO()
    copier, errors, finished = make_copier(None, dest, buffer_size=2)
    copier.start()
    copier.feed(SAMPLE_DATA[:10])
    copier.feed(SAMPLE_DATA[10:])
    assert finished == []
    copier.finish()
    assert len(finished) == 1
    assert errors == []
    assert dest.getvalue() == SAMPLE_DATA


def test_stop():
    dest = io.BytesIO()
    copier, errors, finished = make_copier(None, dest)
    copier.start()
    copier.feed(SAMPLE_DATA)
    assert dest.getvalue() == SAMPLE_DATA
    copier.stop()
    copier.feed(SAMPLE_DATA)
    assert dest.getvalue() == SAMPLE_DATA
    assert len(finished) == 1
    assert errors == []


@pytest.mark.parametrize(
    "start, end, buffer_size, expected",
    [
        (1, 21, 8, SAMPLE_DATA[1:22]),
        (0, 21, 7, SAMPLE_DATA[0:22]),
        (10, -1, 5, SAMPLE_DATA[10:]),
    ],
)
def test_range(start, end, buffer_size, expected):
    dest = io.BytesIO()
    copier, errors, finished = make_copier(
        io.BytesIO(SAMPLE_DATA), dest, buffer_size=buffer_size, start=start, end=end
    )
    copier.start()
    assert len(finished) == 1
    assert errors == []
    assert dest.getvalue() == expected


def test_sequential_source_is_drained_on_start():
    dest = io.BytesIO()
    source = ChunkSource([SAMPLE_DATA[:5], SAMPLE_DATA[5:]])
    copier, errors, finished = make_copier(source, dest)
    copier.start()
    assert dest.getvalue() == SAMPLE_DATA
    assert finished == []
    copier.finish()
    assert len(finished) == 1
    assert errors == []


def test_data_fed_before_start_is_kept():
    dest = io.BytesIO()
    copier, errors, finished = make_copier(None, dest)
    copier.feed(SAMPLE_DATA)
    copier.finish()
    assert dest.getvalue() == b""
    copier.start()
    assert dest.getvalue() == SAMPLE_DATA
    assert len(finished) == 1


def test_read_error_reports_and_finishes():
    dest = io.BytesIO()
    copier, errors, finished = make_copier(BrokenSource(), dest)
    copier.start()
    assert errors == ["boom"]
    assert len(finished) == 1
    assert dest.getvalue() == b""


def test_start_twice_raises():
    copier, _, _ = make_copier(io.BytesIO(SAMPLE_DATA), io.BytesIO())
    copier.start()
    with pytest.raises(CopyError):
        copier.start()


def test_start_after_stop_raises():
    copier, _, finished = make_copier(None, io.BytesIO())
    copier.stop()
    assert len(finished) == 1
    with pytest.raises(CopyError):
        copier.start()


@pytest.mark.parametrize(
    "kwargs",
    [{"buffer_size": 0}, {"start": -1}, {"start": 10, "end": 5}, {"end": -2}],
)
def test_invalid_arguments(kwargs):
    with pytest.raises(ValueError):
        DeviceCopier(io.BytesIO(SAMPLE_DATA), io.BytesIO(), **kwargs)