"""PNG format package - chunk stream codec."""
from .crc import compute_crc, update_crc, make_crc_table, CRC_TABLE
from .base import (
    ChunkDescriptor, make_chunk, is_critical,
    PNG_SIGNATURE, IHDR, IDAT, IEND, ITXT,
)
from .errors import (
    PngFormatError, InvalidSignatureError, ChunkOutOfBoundsError,
    ChunkNotFoundError, ChunkEncodingError, MalformedTextError, ChecksumMismatchError,
)
from .itxt import (
    ITXtFields, create_itxt_chunk, decode_itxt_data,
    PREDEFINED_KEYWORDS, XMP_KEYWORD,
)
from .chunks import (
    parse_chunk_at, iter_chunks, walk_chunks, find_chunk, get_ihdr_offsets,
    ImageProperties, get_image_properties,
)
from .splice import insert_bytes, insert_chunk
from .png_file import PngFile

__all__ = [
    'compute_crc', 'update_crc', 'make_crc_table', 'CRC_TABLE',
    'ChunkDescriptor', 'make_chunk', 'is_critical',
    'PNG_SIGNATURE', 'IHDR', 'IDAT', 'IEND', 'ITXT',
    'PngFormatError', 'InvalidSignatureError', 'ChunkOutOfBoundsError',
    'ChunkNotFoundError', 'ChunkEncodingError', 'MalformedTextError', 'ChecksumMismatchError',
    'ITXtFields', 'create_itxt_chunk', 'decode_itxt_data',
    'PREDEFINED_KEYWORDS', 'XMP_KEYWORD',
    'parse_chunk_at', 'iter_chunks', 'walk_chunks', 'find_chunk', 'get_ihdr_offsets',
    'ImageProperties', 'get_image_properties',
    'insert_bytes', 'insert_chunk',
    'PngFile',
]
