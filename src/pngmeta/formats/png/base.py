"""
PNG Chunk Base Types

A PNG file is an 8-byte signature followed by chunks:

    length   4 bytes  big-endian, counts the data field only
    type     4 bytes  ASCII letters, e.g. IHDR, iTXt, IDAT
    data     length bytes
    crc      4 bytes  CRC-32 over type + data
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional

from ...utils.binary import BytesLike, IoBuffer
from .crc import compute_crc
from .errors import ChunkEncodingError

if TYPE_CHECKING:
    from .itxt import ITXtFields


PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"
SIGNATURE_LENGTH = len(PNG_SIGNATURE)

LENGTH_FIELD_SIZE = 4
TYPE_FIELD_SIZE = 4
CRC_FIELD_SIZE = 4
CHUNK_HEADER_SIZE = LENGTH_FIELD_SIZE + TYPE_FIELD_SIZE
CHUNK_OVERHEAD = CHUNK_HEADER_SIZE + CRC_FIELD_SIZE

# PNG limits chunk lengths to 2^31 - 1
MAX_CHUNK_LENGTH = 0x7FFFFFFF

IHDR = "IHDR"
IDAT = "IDAT"
IEND = "IEND"
ITXT = "iTXt"
TEXT = "tEXt"
ZTXT = "zTXt"


def is_critical(chunk_type: str) -> bool:
    """Critical chunks have an uppercase first letter (bit 5 clear)."""
    return bool(chunk_type) and not (ord(chunk_type[0]) & 0x20)


@dataclass(frozen=True)
class ChunkDescriptor:
    """
    Parsed view over one chunk inside a specific byte stream.

    `data` is a memoryview into the caller's stream; copy it with bytes()
    if it needs to outlive the stream.
    """
    start_offset: int
    data_length: int
    chunk_type: str
    data_offsets: tuple[int, int]
    next_offset: int
    data: memoryview
    crc: int
    decoded_text: Optional[str] = None

    @property
    def total_length(self) -> int:
        return self.next_offset - self.start_offset

    @property
    def critical(self) -> bool:
        return is_critical(self.chunk_type)

    def computed_crc(self) -> int:
        return compute_crc(self.chunk_type.encode("latin-1") + bytes(self.data))

    def crc_valid(self) -> bool:
        """Check the declared CRC without raising."""
        return self.computed_crc() == self.crc

    def itxt_fields(self) -> 'ITXtFields':
        """Structured fields of an iTXt chunk."""
        from .itxt import ITXtFields
        if self.chunk_type != ITXT:
            raise TypeError(f"{self.chunk_type} chunk has no iTXt fields")
        return ITXtFields.from_bytes(self.data)

    def __str__(self) -> str:
        return f"{self.chunk_type} @{self.start_offset} ({self.data_length} bytes)"


def make_chunk(chunk_type: str, data: BytesLike) -> bytes:
    """
    Frame data as a complete chunk: length + type + data + crc.

    The length field is not covered by the CRC; the type code is.
    """
    type_bytes = chunk_type.encode("ascii") if chunk_type.isascii() else b""
    if len(type_bytes) != TYPE_FIELD_SIZE or not type_bytes.isalpha():
        raise ChunkEncodingError(f"Invalid chunk type code: {chunk_type!r}")
    if len(data) > MAX_CHUNK_LENGTH:
        raise ChunkEncodingError(f"Chunk data too large: {len(data)} bytes")

    crc_data = type_bytes + bytes(data)
    out = IoBuffer.writer()
    out.write_uint32(len(data))
    out.write_bytes(crc_data)
    out.write_uint32(compute_crc(crc_data))
    return out.getvalue()
