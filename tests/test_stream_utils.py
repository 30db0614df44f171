import io
import pytest
import pytest_asyncio

from space_storage.stream_utils import consume_stream, iter_byte_source


async def agen(*parts):
    for part in parts:
        yield part


async def collect(source, **kwargs):
    return [chunk async for chunk in iter_byte_source(source, **kwargs)]


@pytest.mark.asyncio
async def test_consume_stream_joins_chunks():
    assert await consume_stream(agen(b"ab", b"", b"cd")) == b"abcd"


@pytest.mark.asyncio
async def test_consume_stream_empty():
    assert await consume_stream(agen()) == b""


@pytest.mark.asyncio
async def test_iter_bytes_and_str():
    assert await collect(b"raw") == [b"raw"]
    assert await collect(bytearray(b"raw")) == [b"raw"]
    assert await collect("héllo") == ["héllo".encode("utf-8")]


@pytest.mark.asyncio
async def test_iter_file_like_in_chunks():
    chunks = await collect(io.BytesIO(b"0123456789"), chunk_size=4)
    assert chunks == [b"0123", b"4567", b"89"]


@pytest.mark.asyncio
async def test_iter_async_file_like():
    class AsyncReader:
        def __init__(self, data):
            self._buffer = io.BytesIO(data)

        async def read(self, size):
            return self._buffer.read(size)

    assert b"".join(await collect(AsyncReader(b"async data"), chunk_size=3)) == b"async data"


@pytest.mark.asyncio
async def test_iter_iterables():
    assert await collect([b"a", b"b"]) == [b"a", b"b"]
    assert await collect(agen(b"x", b"y")) == [b"x", b"y"]


@pytest.mark.asyncio
async def test_iter_unsupported_type():
    with pytest.raises(TypeError):
        await collect(42)


@pytest.mark.asyncio
async def test_iter_str_chunks_are_utf8_encoded():
    assert await collect(["a", b"b", "é"]) == [b"a", b"b", "é".encode("utf-8")]
    assert await collect(agen("x", b"y")) == [b"x", b"y"]
