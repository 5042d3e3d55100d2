import asyncio
from pathlib import Path

import pytest

from devserver.streaming import is_html, iter_file, open_regular_file, stream_file


def _collect(body):
    async def run():
        return [chunk async for chunk in body]

    return asyncio.run(run())


def test_chunks_are_bounded_and_ordered(tmp_path):
    payload = bytes(range(256)) * 40
    target = tmp_path / "blob.bin"
    target.write_bytes(payload)

    handle = target.open("rb")
    chunks = _collect(iter_file(handle, len(payload), b"<tail>", chunk_size=1000))
    assert all(len(chunk) <= 1000 for chunk in chunks[:-1])
    assert chunks[-1] == b"<tail>"
    assert b"".join(chunks[:-1]) == payload
    assert handle.closed


def test_no_trailer_chunk_without_trailer(tmp_path):
    target = tmp_path / "a.txt"
    target.write_bytes(b"abc")
    assert _collect(iter_file(target.open("rb"), 3)) == [b"abc"]


def test_early_close_releases_handle(tmp_path):
    target = tmp_path / "big.bin"
    target.write_bytes(b"x" * 10_000)
    handle = target.open("rb")

    async def run():
        body = iter_file(handle, 10_000, chunk_size=100)
        first = await body.__anext__()
        await body.aclose()
        return first

    assert asyncio.run(run()) == b"x" * 100
    assert handle.closed


def test_directories_are_not_opened(tmp_path):
    with pytest.raises(IsADirectoryError):
        asyncio.run(open_regular_file(tmp_path))


def test_missing_file_raises_oserror(tmp_path):
    with pytest.raises(FileNotFoundError):
        asyncio.run(open_regular_file(tmp_path / "missing"))


def test_html_detection():
    assert is_html(Path("a/index.html"))
    assert is_html(Path("INDEX.HTML"))
    assert not is_html(Path("page.htm"))
    assert not is_html(Path("html"))


def test_stream_file_headers(site, config):
    response = asyncio.run(stream_file(site / "style.css", config))
    assert response.status_code == 200
    assert response.headers["content-type"] == "text/css"
    assert response.headers["content-length"] == str((site / "style.css").stat().st_size)
    assert b"".join(_collect(response.body_iterator)) == (site / "style.css").read_bytes()


def test_body_stops_at_size_taken_when_opened(site, config):
    target = site / "style.css"
    original = target.read_bytes()
    response = asyncio.run(stream_file(target, config))
    with target.open("ab") as handle:
        handle.write(b"/* edited */\n" * 10)

    body = b"".join(_collect(response.body_iterator))
    assert body == original
    assert len(body) == int(response.headers["content-length"])


def test_html_trailer_follows_original_length(site, config):
    target = site / "index.html"
    original = target.read_bytes()
    response = asyncio.run(stream_file(target, config))
    target.write_bytes(original + b"<p>more</p>" * 20)

    body = b"".join(_collect(response.body_iterator))
    assert len(body) == int(response.headers["content-length"])
    assert body.startswith(original)
    assert body.endswith(b"</script>\n")
