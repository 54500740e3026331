import pytest

from cli.ingest_runner import build_source, main, parse_args
from shared.models.document import SourceType


def test_file_and_url_are_mutually_exclusive():
    with pytest.raises(SystemExit):
        parse_args(["--user-id", "u1", "--file", "a.txt", "--url", "https://example.com"])


def test_user_id_is_required():
    with pytest.raises(SystemExit):
        parse_args(["--file", "a.txt"])


def test_url_source():
    source = build_source(parse_args(["--user-id", "u1", "--url", "https://youtu.be/abc"]))
    assert source.source_type == SourceType.URL
    assert source.identifier == "https://youtu.be/abc"
    assert source.content is None


def test_file_source_type_from_extension(tmp_path):
    path = tmp_path / "report.csv"
    path.write_bytes(b"a,b\n1,2\n")
    source = build_source(parse_args(["--user-id", "u1", "--file", str(path)]))
    assert source.source_type == SourceType.CSV
    assert source.identifier == "report.csv"
    assert source.content == b"a,b\n1,2\n"


def test_explicit_type_overrides_extension(tmp_path):
    path = tmp_path / "export.data"
    path.write_bytes(b"plain text")
    source = build_source(parse_args(["--user-id", "u1", "--file", str(path), "--type", "txt"]))
    assert source.source_type == SourceType.TXT


async def test_unreadable_source_exits_with_2(tmp_path):
    assert await main(["--user-id", "u1", "--file", str(tmp_path / "missing.txt")]) == 2


async def test_unknown_extension_exits_with_2(tmp_path):
    path = tmp_path / "slides.pptx"
    path.write_bytes(b"data")
    assert await main(["--user-id", "u1", "--file", str(path)]) == 2
