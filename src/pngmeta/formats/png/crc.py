"""
PNG chunk CRC (Cyclic Redundancy Check)
Port of the sample code in the PNG 1.2 specification, CRC appendix:
http://www.libpng.org/pub/png/spec/1.2/PNG-CRCAppendix.html

The result is the standard CRC-32 (ISO 3309 / ITU-T V.42, reversed
polynomial 0xEDB88320) and matches zlib.crc32 bit for bit.
"""

from typing import Optional, Union

CRC_POLYNOMIAL = 0xEDB88320
CRC_SEED = 0xFFFFFFFF

# Table of CRCs of all 8-bit messages, built once at import.
_crc_table: Optional[tuple[int, ...]] = None


def make_crc_table() -> tuple[int, ...]:
    """Build the 256-entry lookup table. Returns the existing table if already built."""
    global _crc_table
    if _crc_table is not None:
        return _crc_table

    table = []
    for n in range(256):
        c = n
        for _ in range(8):
            if c & 1:
                c = CRC_POLYNOMIAL ^ (c >> 1)
            else:
                c = c >> 1
        table.append(c)
    _crc_table = tuple(table)
    return _crc_table


def update_crc(crc: int, data: Union[bytes, bytearray, memoryview]) -> int:
    """
    Update a running CRC with the bytes in data.

    The CRC should be initialized to all 1's (CRC_SEED), and the transmitted
    value is the 1's complement of the final running CRC (see compute_crc).
    """
    table = _crc_table or make_crc_table()
    c = crc & 0xFFFFFFFF
    for b in memoryview(data):
        c = table[(c ^ b) & 0xFF] ^ (c >> 8)
    return c


def compute_crc(data: Union[bytes, bytearray, memoryview]) -> int:
    """Return the CRC of data as an unsigned 32-bit integer."""
    return update_crc(CRC_SEED, data) ^ 0xFFFFFFFF


make_crc_table()

CRC_TABLE = _crc_table
