"""Metadata operations and configuration."""
from .config import MetadataConfig
from .metadata_operations import (
    MetadataOpResult,
    get_image_metadata, insert_xmp_metadata, add_text_chunk, verify_png,
    read_metadata, write_metadata, write_text,
)

__all__ = [
    'MetadataConfig', 'MetadataOpResult',
    'get_image_metadata', 'insert_xmp_metadata', 'add_text_chunk', 'verify_png',
    'read_metadata', 'write_metadata', 'write_text',
]
