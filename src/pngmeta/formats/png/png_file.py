"""
PNG File Container

Read-only chunk-level view of a PNG file. Edits go through insert_chunk,
which returns a new PngFile over the spliced bytes.
"""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator, Union

from .base import ITXT, PNG_SIGNATURE, SIGNATURE_LENGTH, ChunkDescriptor
from .chunks import ImageProperties, get_image_properties, iter_chunks
from .errors import InvalidSignatureError
from .itxt import ITXtFields
from .splice import insert_chunk

logger = logging.getLogger(__name__)


@dataclass
class PngFile:
    """PNG file as a list of chunk descriptors over its raw bytes."""
    filename: str = ""
    verify_crc: bool = False
    data: bytes = b""

    _all_chunks: list[ChunkDescriptor] = field(default_factory=list)

    @classmethod
    def read(cls, path: Union[str, Path], verify_crc: bool = False) -> 'PngFile':
        """Read a PNG file from disk."""
        return cls.from_bytes(Path(path).read_bytes(), filename=str(path), verify_crc=verify_crc)

    @classmethod
    def from_bytes(cls, data: bytes, filename: str = "", verify_crc: bool = False) -> 'PngFile':
        """Parse PNG bytes. Raises InvalidSignatureError for non-PNG input."""
        png = cls(filename=filename, verify_crc=verify_crc, data=bytes(data))
        png._read_chunks()
        return png

    def _read_chunks(self):
        signature = self.data[:SIGNATURE_LENGTH]
        if signature != PNG_SIGNATURE:
            raise InvalidSignatureError(f"Invalid PNG signature: {signature!r}")

        self._all_chunks = list(iter_chunks(self.data, SIGNATURE_LENGTH, self.verify_crc))
        logger.debug(f"Read {len(self._all_chunks)} chunks from {self.filename or '<bytes>'}")

    @property
    def chunks(self) -> list[ChunkDescriptor]:
        """All chunks in the file."""
        return self._all_chunks

    def __iter__(self) -> Iterator[ChunkDescriptor]:
        return iter(self._all_chunks)

    def __len__(self) -> int:
        return len(self._all_chunks)

    def get_by_type_code(self, type_code: str) -> list[ChunkDescriptor]:
        """Get all chunks matching a 4-char type code."""
        return [c for c in self._all_chunks if c.chunk_type == type_code]

    def text_chunks(self) -> list[ITXtFields]:
        """Parsed fields of every iTXt chunk, in file order."""
        return [c.itxt_fields() for c in self.get_by_type_code(ITXT)]

    @property
    def image_properties(self) -> ImageProperties:
        return get_image_properties(self.data)

    def insert_chunk(self, chunk: bytes) -> 'PngFile':
        """New PngFile with chunk spliced in after IHDR."""
        return PngFile.from_bytes(insert_chunk(self.data, chunk),
                                  filename=self.filename, verify_crc=self.verify_crc)

    def to_bytes(self) -> bytes:
        return self.data

    def summary(self) -> str:
        """Get a summary of chunks in this file."""
        lines = [f"PNG: {self.filename}", f"Chunks: {len(self._all_chunks)}"]

        type_counts = {}
        for chunk in self._all_chunks:
            code = chunk.chunk_type
            type_counts[code] = type_counts.get(code, 0) + 1

        for code, count in sorted(type_counts.items()):
            lines.append(f"  {code}: {count}")

        return "\n".join(lines)
