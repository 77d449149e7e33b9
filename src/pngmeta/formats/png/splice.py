"""
Chunk insertion.

New chunks go directly after IHDR, which PNG requires to be the first
chunk. Text metadata placed there precedes IDAT, so readers that stop
scanning at the image data still see it.
"""

import logging

from ...utils.binary import BytesLike
from .chunks import get_ihdr_offsets
from .errors import ChunkOutOfBoundsError

logger = logging.getLogger(__name__)


def insert_bytes(stream: BytesLike, data: BytesLike, offset: int) -> bytes:
    """Return a copy of stream with data inserted at offset."""
    if offset < 0 or offset > len(stream):
        raise ChunkOutOfBoundsError(
            f"Insertion offset {offset} outside stream of {len(stream)} bytes",
            offset, len(stream),
        )
    view = memoryview(stream)
    return b"".join((view[:offset], data, view[offset:]))


def insert_chunk(stream: BytesLike, chunk: BytesLike) -> bytes:
    """
    Insert a complete chunk immediately after IHDR.

    Raises:
        ChunkNotFoundError: The stream has no IHDR chunk
    """
    _, insert_at = get_ihdr_offsets(stream)
    logger.debug(f"Inserting {len(chunk)} byte chunk at offset {insert_at}")
    return insert_bytes(stream, chunk, insert_at)
