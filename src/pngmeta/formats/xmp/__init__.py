"""XMP packet building and parsing for PNG iTXt chunks."""
from .xmp import (
    XMP_KEYWORD, XMPError, XMPMetadata,
    build_xmp_packet, extract_xmp_packet, parse_xmp, read_xmp_text,
)

__all__ = [
    'XMP_KEYWORD', 'XMPError', 'XMPMetadata',
    'build_xmp_packet', 'extract_xmp_packet', 'parse_xmp', 'read_xmp_text',
]
