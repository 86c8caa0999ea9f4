import gzip
import io

import pytest

from csvbatch.io.line_source import TextLineSource, open_line_source


def test_read_lines_strips_terminators():
    source = TextLineSource(io.StringIO("a\nb\r\nc\rd"))
    assert source.read_line() == "a"
    assert source.read_line() == "b"
    assert source.read_line() == "c\rd"
    assert source.read_line() is None
    assert source.read_line() is None


def test_bytes_read_counts_encoded_bytes():
    source = TextLineSource(io.StringIO("é\nx\n"))
    source.read_line()
    assert source.bytes_read == 3
    source.read_line()
    assert source.bytes_read == 5


def test_close_is_idempotent():
    stream = io.StringIO("a\n")
    source = TextLineSource(stream)
    source.close()
    source.close()
    assert source.closed
    assert stream.closed
    assert source.read_line() is None


def test_context_manager():
    with TextLineSource(io.StringIO("a\n")) as source:
        assert source.read_line() == "a"
    assert source.closed


def test_open_plain_file(tmp_path):
    f = tmp_path / "data.csv"
    f.write_bytes(b"1,2\r\n3,4\n")

    with open_line_source(f) as source:
        assert source.total_bytes == 9
        assert source.read_line() == "1,2"
        assert source.read_line() == "3,4"
        assert source.read_line() is None
        assert source.bytes_read == 9


def test_open_gzip_file(tmp_path):
    f = tmp_path / "data.csv.gz"
    with gzip.open(f, "wt", encoding="utf-8") as out:
        out.write("1,2\n3,4\n")

    with open_line_source(f) as source:
        assert source.total_bytes is None
        assert source.read_line() == "1,2"
        assert source.read_line() == "3,4"
        assert source.read_line() is None


def test_open_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        open_line_source(tmp_path / "missing.csv")
