"""
pngmeta - PngFile Container Tests

Can be run standalone: python tests.py --module png_file
"""

import tempfile
from pathlib import Path

import pytest

from png_fixtures import IDAT_CHUNK, minimal_png, pillow_png

from pngmeta.formats.png import (
    ChecksumMismatchError, InvalidSignatureError, PngFile, create_itxt_chunk,
)


def test_from_bytes_lists_chunks():
    png = PngFile.from_bytes(minimal_png(), filename="tiny.png")
    assert len(png) == 3
    assert [c.chunk_type for c in png] == ["IHDR", "IDAT", "IEND"]
    assert png.get_by_type_code("IDAT")[0].data_length == len(IDAT_CHUNK) - 12
    assert png.get_by_type_code("tEXt") == []
    assert png.text_chunks() == []


def test_signature_is_checked():
    with pytest.raises(InvalidSignatureError):
        PngFile.from_bytes(b"GIF89a" + minimal_png()[6:])


def test_strict_crc_on_load():
    bad = bytearray(minimal_png())
    bad[-1] ^= 0x01  # IEND CRC
    PngFile.from_bytes(bytes(bad))
    with pytest.raises(ChecksumMismatchError):
        PngFile.from_bytes(bytes(bad), verify_crc=True)


def test_insert_chunk_returns_new_file():
    png = PngFile.from_bytes(pillow_png())
    updated = png.insert_chunk(create_itxt_chunk("hello", "Comment"))

    assert len(png) + 1 == len(updated)
    assert updated.chunks[1].chunk_type == "iTXt"
    assert updated.text_chunks()[0].text == "hello"
    assert png.to_bytes() == pillow_png()


def test_image_properties_and_summary():
    png = PngFile.from_bytes(pillow_png(size=(9, 2)), filename="grid.png")
    assert png.image_properties.width == 9
    assert png.image_properties.height == 2

    summary = png.summary()
    assert "PNG: grid.png" in summary
    assert "IHDR: 1" in summary
    assert "IEND: 1" in summary


def test_read_from_disk():
    with tempfile.TemporaryDirectory() as tmp:
        path = Path(tmp) / "image.png"
        path.write_bytes(minimal_png())
        png = PngFile.read(path)
        assert png.filename == str(path)
        assert len(png) == 3
