# space_storage/stream_utils.py
import asyncio
import inspect
from typing import Any, AsyncIterator

DEFAULT_CHUNK_SIZE = 64 * 1024


def _to_bytes(chunk: Any) -> bytes:
    return chunk.encode("utf-8") if isinstance(chunk, str) else bytes(chunk)


async def consume_stream(stream: AsyncIterator[bytes]) -> bytes:
    """Drains an async byte stream into a single bytes object."""
    buffer = bytearray()
    async for chunk in stream:
        buffer.extend(chunk)
    return bytes(buffer)


async def iter_byte_source(data: Any, chunk_size: int = DEFAULT_CHUNK_SIZE) -> AsyncIterator[bytes]:
    """Yields the content of an upload source as bytes chunks.

    Accepts bytes-like objects, str (utf-8), binary file-like objects
    (sync `read` or async `read`), and sync or async iterables of bytes.
    """
    if isinstance(data, (bytes, bytearray, memoryview)):
        yield bytes(data)
    elif isinstance(data, str):
        yield data.encode("utf-8")
    elif hasattr(data, "read"):
        read_async = inspect.iscoroutinefunction(data.read)
        while True:
            if read_async:
                chunk = await data.read(chunk_size)
            else:
                # Use asyncio.to_thread so blocking file reads do not stall the loop
                chunk = await asyncio.to_thread(data.read, chunk_size)
            if not chunk:
                break
            yield _to_bytes(chunk)
    elif hasattr(data, "__aiter__"):
        async for chunk in data:
            yield _to_bytes(chunk)
    elif hasattr(data, "__iter__"):
        for chunk in data:
            yield _to_bytes(chunk)
    else:
        raise TypeError(f"Unsupported upload data type: {type(data).__name__}")
