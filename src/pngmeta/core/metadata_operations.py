"""
Metadata Operations - PNG XMP read/write layer

Byte-level helpers raise PngFormatError / XMPError to the caller. The
file-level functions (read_metadata, write_metadata, write_text,
verify_png) report through MetadataOpResult instead.

Actions Implemented:
- get_image_metadata / read_metadata (READ)
- insert_xmp_metadata / write_metadata (WRITE)
- add_text_chunk / write_text (WRITE)
- verify_png (READ)
"""

import io
import logging
import os
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional, Union

from PIL import Image, UnidentifiedImageError

from ..formats.png import (
    IDAT, ITXT, ChunkDescriptor, PngFormatError,
    create_itxt_chunk, insert_chunk, walk_chunks,
)
from ..formats.xmp import XMP_KEYWORD, XMPError, XMPMetadata, build_xmp_packet, read_xmp_text
from .config import MetadataConfig

logger = logging.getLogger(__name__)


# ═══════════════════════════════════════════════════════════════════════════════
# RESULT TYPES
# ═══════════════════════════════════════════════════════════════════════════════

@dataclass
class MetadataOpResult:
    """Result of a metadata operation."""
    success: bool
    message: str
    path: Optional[str] = None
    data: Optional[Any] = None
    backup_path: Optional[str] = None


# ═══════════════════════════════════════════════════════════════════════════════
# BYTE-LEVEL OPERATIONS
# ═══════════════════════════════════════════════════════════════════════════════

def get_image_metadata(stream: bytes, stop_at_idat: bool = True,
                       verify_crc: bool = False) -> XMPMetadata:
    """
    Extract XMP metadata from every XMP iTXt chunk before the image data.

    Text chunks conventionally precede IDAT, so the walk stops there
    unless stop_at_idat is False.
    """
    metadata = XMPMetadata()

    def handle_chunk(chunk: ChunkDescriptor) -> bool:
        if chunk.chunk_type == ITXT:
            # The keyword is the first null-terminated field
            keyword = chunk.decoded_text.split("\0")[0]
            logger.debug(f"get_image_metadata: iTXt keyword={keyword!r}")
            if keyword == XMP_KEYWORD:
                found = read_xmp_text(chunk.decoded_text)
                if found is not None:
                    metadata.merge(found)
        elif chunk.chunk_type == IDAT and stop_at_idat:
            return False
        return True

    walk_chunks(stream, handle_chunk, verify_crc)
    return metadata


def insert_xmp_metadata(stream: bytes, metadata: XMPMetadata,
                        keyword: str = XMP_KEYWORD) -> bytes:
    """Build an XMP packet, wrap it in an iTXt chunk and splice it after IHDR."""
    xmp_data = build_xmp_packet(metadata)
    logger.debug(f"Built XMP packet ({len(xmp_data)} chars)")
    return insert_chunk(stream, create_itxt_chunk(xmp_data, keyword))


def add_text_chunk(stream: bytes, text: str, keyword: str,
                   language_tag: str = "", translated_keyword: str = "",
                   compressed: bool = False) -> bytes:
    """Splice an arbitrary iTXt chunk after IHDR."""
    chunk = create_itxt_chunk(text, keyword, language_tag, translated_keyword, compressed)
    return insert_chunk(stream, chunk)


def verify_png(data: bytes) -> MetadataOpResult:
    """
    Check that Pillow can still decode the image.

    Pillow's verify() checks chunk CRCs; load() decodes the pixels. The
    result data lists size, mode and the text chunks Pillow sees.
    """
    try:
        with Image.open(io.BytesIO(data)) as img:
            img.verify()
        with Image.open(io.BytesIO(data)) as img:
            img.load()
            info = {
                "size": img.size,
                "mode": img.mode,
                "format": img.format,
                "text": dict(getattr(img, "text", {})),
            }
    except (UnidentifiedImageError, OSError, SyntaxError, ValueError) as e:
        logger.warning(f"Pillow rejected image: {e}")
        return MetadataOpResult(False, f"Image failed verification: {e}")

    return MetadataOpResult(True, "Image verified", data=info)


# ═══════════════════════════════════════════════════════════════════════════════
# FILE OPERATIONS
# ═══════════════════════════════════════════════════════════════════════════════

def read_metadata(path: Union[str, Path],
                  config: Optional[MetadataConfig] = None) -> MetadataOpResult:
    """Read XMP metadata from a PNG file."""
    config = config or MetadataConfig()

    if not os.path.exists(path):
        return MetadataOpResult(False, f"PNG not found: {path}")

    try:
        data = Path(path).read_bytes()
        metadata = get_image_metadata(data, config.stop_at_idat, config.verify_crc)
    except (PngFormatError, XMPError) as e:
        return MetadataOpResult(False, f"Failed to read metadata: {e}", path=str(path))

    return MetadataOpResult(True, "Metadata read", path=str(path), data=metadata)


def _write_png(source: Union[str, Path], new_data: bytes,
               output: Optional[Union[str, Path]],
               config: MetadataConfig) -> MetadataOpResult:
    """Verify, back up and write new PNG bytes."""
    target = Path(output) if output else Path(source)

    if config.verify_with_pillow:
        check = verify_png(new_data)
        if not check.success:
            return MetadataOpResult(False, f"Refusing to write: {check.message}", path=str(target))

    backup_path = None
    if config.create_backup and target.exists():
        backup_path = f"{target}.bak"
        shutil.copy2(target, backup_path)
        logger.info(f"Backed up {target} to {backup_path}")

    target.parent.mkdir(parents=True, exist_ok=True)
    with open(target, 'wb') as f:
        f.write(new_data)
    logger.info(f"Wrote {len(new_data)} bytes to {target}")

    return MetadataOpResult(True, f"Wrote {target}", path=str(target),
                            data=new_data, backup_path=backup_path)


def write_metadata(path: Union[str, Path], metadata: XMPMetadata,
                   output: Optional[Union[str, Path]] = None,
                   config: Optional[MetadataConfig] = None) -> MetadataOpResult:
    """
    Insert an XMP iTXt chunk into a PNG file.

    Args:
        path: Source PNG
        metadata: Fields to write
        output: Destination (default: overwrite path)
        config: Keyword, backup and verification options

    Returns:
        MetadataOpResult with status
    """
    config = config or MetadataConfig()

    if not os.path.exists(path):
        return MetadataOpResult(False, f"PNG not found: {path}")

    try:
        new_data = insert_xmp_metadata(Path(path).read_bytes(), metadata, config.keyword)
    except (PngFormatError, XMPError) as e:
        return MetadataOpResult(False, f"Failed to insert metadata: {e}", path=str(path))

    return _write_png(path, new_data, output, config)


def write_text(path: Union[str, Path], text: str, keyword: str,
               language_tag: str = "", translated_keyword: str = "",
               compressed: bool = False,
               output: Optional[Union[str, Path]] = None,
               config: Optional[MetadataConfig] = None) -> MetadataOpResult:
    """Insert an arbitrary iTXt chunk into a PNG file."""
    config = config or MetadataConfig()

    if not os.path.exists(path):
        return MetadataOpResult(False, f"PNG not found: {path}")

    try:
        new_data = add_text_chunk(Path(path).read_bytes(), text, keyword,
                                  language_tag, translated_keyword, compressed)
    except PngFormatError as e:
        return MetadataOpResult(False, f"Failed to insert text: {e}", path=str(path))

    return _write_png(path, new_data, output, config)
