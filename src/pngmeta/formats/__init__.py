"""pngmeta formats package - file format parsers."""
from .png import PngFile, ChunkDescriptor, PngFormatError
from .xmp import XMPMetadata, XMPError

__all__ = [
    # PNG
    'PngFile', 'ChunkDescriptor', 'PngFormatError',
    # XMP
    'XMPMetadata', 'XMPError',
]
