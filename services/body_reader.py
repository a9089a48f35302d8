"""
Request body accumulation.

Reads a binary stream chunk by chunk, yielding to the event loop between
chunks, and returns the chunks joined in arrival order.
"""

from typing import AsyncIterable

from core.errors import BodyTooLargeError


async def accumulate_body(chunks: AsyncIterable[bytes], max_size: int = 0) -> bytes:
    """
    Concatenate every chunk of a body stream.

    Args:
        chunks: Async iterable of byte chunks, exhausted at end-of-stream
        max_size: Maximum total size in bytes, 0 for unbounded

    Returns:
        The complete body

    Raises:
        BodyTooLargeError: If max_size is set and the body grows past it
    """
    buffer = bytearray()
    async for chunk in chunks:
        if not chunk:
            continue
        buffer.extend(chunk)
        if max_size and len(buffer) > max_size:
            raise BodyTooLargeError(max_size)
    return bytes(buffer)
