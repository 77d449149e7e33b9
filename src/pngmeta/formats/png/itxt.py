"""
iTXt (International Textual Data) chunk encoding.

iTXt data field layout:
    Keyword:             1-79 bytes (Latin-1)
    Null separator:      1 byte
    Compression flag:    1 byte (0 = uncompressed, 1 = compressed)
    Compression method:  1 byte (0 = zlib deflate, the only defined method)
    Language tag:        0 or more bytes (e.g. "en")
    Null separator:      1 byte
    Translated keyword:  0 or more bytes (UTF-8)
    Null separator:      1 byte
    Text:                0 or more bytes (UTF-8, deflated when flag is 1)

See http://www.libpng.org/pub/png/spec/1.2/PNG-Chunks.html#C.iTXt
"""

import logging
import zlib
from dataclasses import dataclass

from ...utils.binary import BufferBoundsError, BytesLike, IoBuffer
from .base import ITXT, make_chunk
from .errors import ChunkEncodingError, MalformedTextError

logger = logging.getLogger(__name__)


XMP_KEYWORD = "XML:com.adobe.xmp"

PREDEFINED_KEYWORDS = frozenset({
    "Title",            # Short (one line) title or caption for image
    "Author",           # Name of image's creator
    "Description",      # Description of image (possibly long)
    "Copyright",        # Copyright notice
    "Creation Time",    # Time of original image creation
    "Software",         # Software used to create the image
    "Disclaimer",       # Legal disclaimer
    "Warning",          # Warning of nature of content
    "Source",           # Device used to create the image
    "Comment",          # Miscellaneous comment
})

MIN_KEYWORD_LENGTH = 1
MAX_KEYWORD_LENGTH = 79

COMPRESSION_NONE = 0
COMPRESSION_DEFLATE = 1
COMPRESSION_METHOD_ZLIB = 0


@dataclass(frozen=True)
class ITXtFields:
    """The ordered fields of an iTXt data block."""
    keyword: str = XMP_KEYWORD
    compression_flag: int = COMPRESSION_NONE
    compression_method: int = COMPRESSION_METHOD_ZLIB
    language_tag: str = ""
    translated_keyword: str = ""
    text: str = ""

    def __post_init__(self):
        try:
            keyword_bytes = self.keyword.encode("latin-1")
        except UnicodeEncodeError:
            raise ChunkEncodingError(
                f"iTXt keyword must be Latin-1: {self.keyword!r}"
            ) from None
        if not MIN_KEYWORD_LENGTH <= len(keyword_bytes) <= MAX_KEYWORD_LENGTH:
            raise ChunkEncodingError(
                f"iTXt keyword must be {MIN_KEYWORD_LENGTH}-{MAX_KEYWORD_LENGTH} bytes, "
                f"got {len(keyword_bytes)}"
            )
        if b"\0" in keyword_bytes:
            raise ChunkEncodingError("iTXt keyword must not contain a null byte")
        if self.compression_flag not in (COMPRESSION_NONE, COMPRESSION_DEFLATE):
            raise ChunkEncodingError(
                f"Invalid iTXt compression flag: {self.compression_flag}"
            )
        if self.compression_method != COMPRESSION_METHOD_ZLIB:
            raise ChunkEncodingError(
                f"Invalid iTXt compression method: {self.compression_method}"
            )
        for name in ("language_tag", "translated_keyword"):
            if "\0" in getattr(self, name):
                raise ChunkEncodingError(f"iTXt {name} must not contain a null byte")

    @property
    def compressed(self) -> bool:
        return self.compression_flag == COMPRESSION_DEFLATE

    def segments(self) -> tuple[bytes, ...]:
        """The data field as its ordered byte segments."""
        try:
            language_tag = self.language_tag.encode("ascii")
            translated_keyword = self.translated_keyword.encode("utf-8")
            text = self.text.encode("utf-8")
        except UnicodeEncodeError as e:
            raise MalformedTextError(f"Cannot encode iTXt text: {e}") from e

        if self.compressed:
            text = zlib.compress(text)

        return (
            self.keyword.encode("latin-1") + b"\0",
            bytes([self.compression_flag]),
            bytes([self.compression_method]),
            language_tag + b"\0",
            translated_keyword + b"\0",
            text,
        )

    def to_bytes(self) -> bytes:
        return b"".join(self.segments())

    @classmethod
    def from_bytes(cls, data: BytesLike) -> 'ITXtFields':
        """Parse an iTXt data field, inflating the text if compressed."""
        io = IoBuffer.from_bytes(data)
        try:
            keyword = io.read_until_null().decode("latin-1")
            compression_flag = io.read_uint8()
            compression_method = io.read_uint8()
            language_tag = io.read_until_null().decode("ascii")
            translated_keyword = io.read_until_null().decode("utf-8")
            text_bytes = io.read_remaining()
            if compression_flag == COMPRESSION_DEFLATE:
                text_bytes = zlib.decompress(text_bytes)
            text = text_bytes.decode("utf-8")
        except BufferBoundsError as e:
            raise MalformedTextError(f"Truncated iTXt data: {e}") from e
        except zlib.error as e:
            raise MalformedTextError(f"Cannot inflate iTXt text: {e}") from e
        except UnicodeDecodeError as e:
            raise MalformedTextError(f"iTXt field has invalid encoding: {e}") from e

        return cls(
            keyword=keyword,
            compression_flag=compression_flag,
            compression_method=compression_method,
            language_tag=language_tag,
            translated_keyword=translated_keyword,
            text=text,
        )


def _text_offset(raw: bytes, keyword_end: int) -> int:
    """Offset of the text field given the keyword terminator position."""
    # skip keyword null, compression flag and method
    language_end = raw.find(b"\0", keyword_end + 3)
    translated_end = raw.find(b"\0", language_end + 1) if language_end >= 0 else -1
    if translated_end < 0:
        raise MalformedTextError("Truncated iTXt header")
    return translated_end + 1


def decode_itxt_data(data: BytesLike) -> str:
    """
    Decode a whole iTXt data field as text.

    The keyword is Latin-1 and everything after its terminator is UTF-8.
    Compressed text is inflated first so the result is always readable.
    """
    raw = bytes(data)
    keyword_end = raw.find(b"\0")
    if keyword_end < 0:
        keyword_end = len(raw)
    elif len(raw) > keyword_end + 1 and raw[keyword_end + 1] == COMPRESSION_DEFLATE:
        start = _text_offset(raw, keyword_end)
        try:
            raw = raw[:start] + zlib.decompress(raw[start:])
        except zlib.error as e:
            raise MalformedTextError(f"Cannot inflate iTXt text: {e}") from e
    try:
        rest = raw[keyword_end:].decode("utf-8")
    except UnicodeDecodeError as e:
        raise MalformedTextError(f"iTXt data is not valid UTF-8: {e}") from e
    return raw[:keyword_end].decode("latin-1") + rest


def create_itxt_chunk(text: str, keyword: str = XMP_KEYWORD,
                      language_tag: str = "", translated_keyword: str = "",
                      compressed: bool = False) -> bytes:
    """
    Assemble a complete iTXt chunk.

    Args:
        text: Chunk text, e.g. an XMP packet
        keyword: One of PREDEFINED_KEYWORDS or one known to the target software
        language_tag: Optional RFC 3066 language tag, e.g. "en"
        translated_keyword: Optional keyword translated into language_tag
        compressed: Deflate the text with zlib

    Returns:
        length + "iTXt" + data + crc, ready to splice into a PNG stream
    """
    if keyword not in PREDEFINED_KEYWORDS:
        logger.debug(f"iTXt keyword {keyword!r} is not a predefined keyword")

    fields = ITXtFields(
        keyword=keyword,
        compression_flag=COMPRESSION_DEFLATE if compressed else COMPRESSION_NONE,
        language_tag=language_tag,
        translated_keyword=translated_keyword,
        text=text,
    )
    data = fields.to_bytes()
    logger.debug(f"Built iTXt chunk: keyword={keyword!r}, data_length={len(data)}")
    return make_chunk(ITXT, data)
