"""PNG format exceptions."""

from typing import Optional


class PngFormatError(ValueError):
    """Base class for all PNG structure and encoding failures."""


class InvalidSignatureError(PngFormatError):
    """The 8-byte PNG signature is missing or wrong."""


class ChunkOutOfBoundsError(PngFormatError, IndexError):
    """A chunk read or an insertion offset falls outside the stream."""

    def __init__(self, message: str, offset: Optional[int] = None,
                 stream_length: Optional[int] = None):
        super().__init__(message)
        self.offset = offset
        self.stream_length = stream_length


class ChunkNotFoundError(PngFormatError):
    """A structurally required chunk (IHDR) is absent."""

    def __init__(self, chunk_type: str, message: Optional[str] = None):
        super().__init__(message or f"No {chunk_type} chunk found")
        self.chunk_type = chunk_type


class ChunkEncodingError(PngFormatError):
    """Chunk fields violate the encoding constraints."""


class MalformedTextError(PngFormatError):
    """Chunk text could not be encoded or decoded."""


class ChecksumMismatchError(PngFormatError):
    """The declared CRC of a chunk does not match its contents."""

    def __init__(self, chunk_type: str, offset: int, expected: int, actual: int):
        super().__init__(
            f"CRC mismatch in {chunk_type} chunk at offset {offset}: "
            f"declared {actual:#010x}, computed {expected:#010x}"
        )
        self.chunk_type = chunk_type
        self.offset = offset
        self.expected = expected
        self.actual = actual
