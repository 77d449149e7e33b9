"""
PNG chunk stream parser.

Walks the chunk sequence that follows the 8-byte signature without
decoding any pixel data. Declared lengths are trusted; CRCs are only
checked when verify_crc is requested.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Iterator

from ...utils.binary import BufferBoundsError, BytesLike, IoBuffer, read_uint32_at, slice_at
from .base import (
    CHUNK_HEADER_SIZE, CRC_FIELD_SIZE, IHDR, ITXT, LENGTH_FIELD_SIZE,
    SIGNATURE_LENGTH, ChunkDescriptor,
)
from .errors import (
    ChecksumMismatchError, ChunkNotFoundError, ChunkOutOfBoundsError, PngFormatError,
)
from .itxt import decode_itxt_data

logger = logging.getLogger(__name__)


ChunkHandler = Callable[[ChunkDescriptor], object]


def parse_chunk_at(stream: BytesLike, offset: int, verify_crc: bool = False) -> ChunkDescriptor:
    """
    Unpack the chunk whose length field starts at offset.

    Args:
        stream: The complete PNG byte stream
        offset: Byte offset of the chunk's length field
        verify_crc: Recompute the CRC and raise ChecksumMismatchError on mismatch

    Raises:
        ChunkOutOfBoundsError: The header or the declared data + CRC run past the end
    """
    stream_length = len(stream)
    if offset < 0 or offset + CHUNK_HEADER_SIZE > stream_length:
        raise ChunkOutOfBoundsError(
            f"No chunk header at offset {offset} (stream is {stream_length} bytes)",
            offset, stream_length,
        )

    data_length = read_uint32_at(stream, offset)
    type_bytes = bytes(slice_at(stream, offset + LENGTH_FIELD_SIZE, 4))
    chunk_type = type_bytes.decode("latin-1")

    data_start = offset + CHUNK_HEADER_SIZE
    data_end = data_start + data_length
    next_offset = data_end + CRC_FIELD_SIZE
    if next_offset > stream_length:
        raise ChunkOutOfBoundsError(
            f"{chunk_type} chunk at offset {offset} declares {data_length} data bytes, "
            f"which runs past the end of the stream ({stream_length} bytes)",
            offset, stream_length,
        )

    try:
        data = slice_at(stream, data_start, data_length)
        crc = read_uint32_at(stream, data_end)
    except BufferBoundsError as e:
        raise ChunkOutOfBoundsError(str(e), offset, stream_length) from e

    decoded_text = decode_itxt_data(data) if chunk_type == ITXT else None

    chunk = ChunkDescriptor(
        start_offset=offset,
        data_length=data_length,
        chunk_type=chunk_type,
        data_offsets=(data_start, data_end),
        next_offset=next_offset,
        data=data,
        crc=crc,
        decoded_text=decoded_text,
    )

    if verify_crc:
        expected = chunk.computed_crc()
        if expected != crc:
            raise ChecksumMismatchError(chunk_type, offset, expected, crc)

    return chunk


def iter_chunks(stream: BytesLike, start: int = SIGNATURE_LENGTH,
                verify_crc: bool = False) -> Iterator[ChunkDescriptor]:
    """Yield chunks from start until the end of the stream."""
    offset = start
    stream_length = len(stream)
    while offset < stream_length:
        chunk = parse_chunk_at(stream, offset, verify_crc)
        yield chunk
        if chunk.next_offset <= offset:
            # Framing guarantees progress; stop rather than loop forever
            logger.warning(f"Chunk offset did not advance at {offset}, stopping")
            return
        offset = chunk.next_offset


def walk_chunks(stream: BytesLike, handle_chunk: ChunkHandler,
                verify_crc: bool = False) -> dict[int, ChunkDescriptor]:
    """
    Visit chunks in order, starting right after the PNG signature.

    handle_chunk is called with each ChunkDescriptor and must return a
    truthy value to keep going; a falsy return (including None) stops the
    walk after that chunk. The signature itself is not validated here.

    Returns:
        The visited chunks keyed by their start offset
    """
    chunks: dict[int, ChunkDescriptor] = {}
    for chunk in iter_chunks(stream, SIGNATURE_LENGTH, verify_crc):
        chunks[chunk.start_offset] = chunk
        logger.debug(f"walk_chunks: {chunk}")
        if not handle_chunk(chunk):
            break
    return chunks


def find_chunk(stream: BytesLike, chunk_type: str) -> ChunkDescriptor:
    """First chunk of the given type, or ChunkNotFoundError."""
    for chunk in iter_chunks(stream):
        if chunk.chunk_type == chunk_type:
            return chunk
    raise ChunkNotFoundError(chunk_type)


def get_ihdr_offsets(stream: BytesLike) -> tuple[int, int]:
    """(start, next) offsets of the IHDR chunk."""
    ihdr = find_chunk(stream, IHDR)
    return ihdr.start_offset, ihdr.next_offset


@dataclass(frozen=True)
class ImageProperties:
    """Fields of the IHDR chunk."""
    width: int
    height: int
    bit_depth: int
    color_type: int
    compression: int
    filter: int
    interlace: int

    IHDR_LENGTH = 13

    @classmethod
    def from_chunk(cls, chunk: ChunkDescriptor) -> 'ImageProperties':
        if chunk.data_length < cls.IHDR_LENGTH:
            raise PngFormatError(
                f"IHDR data is {chunk.data_length} bytes, expected {cls.IHDR_LENGTH}"
            )
        io = IoBuffer.from_bytes(chunk.data)
        return cls(
            width=io.read_uint32(),
            height=io.read_uint32(),
            bit_depth=io.read_uint8(),
            color_type=io.read_uint8(),
            compression=io.read_uint8(),
            filter=io.read_uint8(),
            interlace=io.read_uint8(),
        )


def get_image_properties(stream: BytesLike) -> ImageProperties:
    """Read width, height and pixel format from the IHDR chunk."""
    return ImageProperties.from_chunk(find_chunk(stream, IHDR))
