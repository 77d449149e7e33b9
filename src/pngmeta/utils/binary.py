"""Bounds-checked binary I/O utilities for PNG chunk parsing."""

import struct
from enum import Enum
from typing import BinaryIO, Union
from io import BytesIO


BytesLike = Union[bytes, bytearray, memoryview]


class ByteOrder(Enum):
    """Byte order enum for struct packing/unpacking."""
    BIG_ENDIAN = ">"
    LITTLE_ENDIAN = "<"


class BufferBoundsError(IndexError):
    """A read or write fell outside the buffer."""

    def __init__(self, offset: int, count: int, size: int):
        self.offset = offset
        self.count = count
        self.size = size
        super().__init__(
            f"Cannot access {count} bytes at offset {offset} "
            f"(buffer is {size} bytes)"
        )


def check_range(data: BytesLike, offset: int, count: int):
    """Raise BufferBoundsError unless data[offset:offset+count] is fully readable."""
    if offset < 0 or count < 0 or offset + count > len(data):
        raise BufferBoundsError(offset, count, len(data))


def read_uint32_at(data: BytesLike, offset: int,
                   byte_order: ByteOrder = ByteOrder.BIG_ENDIAN) -> int:
    """Read an unsigned 32-bit integer at an absolute offset."""
    check_range(data, offset, 4)
    return struct.unpack_from(f"{byte_order.value}I", data, offset)[0]


def slice_at(data: BytesLike, offset: int, count: int) -> memoryview:
    """Zero-copy view of count bytes at offset."""
    check_range(data, offset, count)
    return memoryview(data)[offset:offset + count]


class IoBuffer:
    """Binary reader/writer with endian support and strict reads."""

    def __init__(self, stream: BinaryIO, byte_order: ByteOrder = ByteOrder.BIG_ENDIAN):
        self.stream = stream
        self.byte_order = byte_order

    @classmethod
    def from_bytes(cls, data: BytesLike, byte_order: ByteOrder = ByteOrder.BIG_ENDIAN) -> 'IoBuffer':
        """Create a reader over bytes."""
        return cls(BytesIO(bytes(data)), byte_order)

    @classmethod
    def writer(cls, byte_order: ByteOrder = ByteOrder.BIG_ENDIAN) -> 'IoBuffer':
        """Create an empty in-memory writer."""
        return cls(BytesIO(), byte_order)

    @property
    def position(self) -> int:
        """Current position in stream."""
        return self.stream.tell()

    @position.setter
    def position(self, value: int):
        self.stream.seek(value)

    @property
    def size(self) -> int:
        current = self.stream.tell()
        end = self.stream.seek(0, 2)
        self.stream.seek(current)
        return end

    def read_bytes(self, count: int) -> bytes:
        """Read exactly count bytes."""
        start = self.position
        data = self.stream.read(count)
        if len(data) != count:
            raise BufferBoundsError(start, count, self.size)
        return data

    def read_uint8(self) -> int:
        return self.read_bytes(1)[0]

    def read_uint32(self) -> int:
        """Read unsigned 32-bit integer."""
        fmt = f"{self.byte_order.value}I"
        return struct.unpack(fmt, self.read_bytes(4))[0]

    def read_until_null(self) -> bytes:
        """Read up to the next NUL byte, consuming the terminator."""
        start = self.position
        chunks = bytearray()
        while True:
            b = self.stream.read(1)
            if not b:
                raise BufferBoundsError(start, len(chunks) + 1, self.size)
            if b == b"\0":
                return bytes(chunks)
            chunks += b

    def read_remaining(self) -> bytes:
        return self.stream.read()

    def write_bytes(self, data: BytesLike):
        """Write raw bytes."""
        self.stream.write(data)

    def write_uint32(self, value: int):
        """Write unsigned 32-bit integer."""
        fmt = f"{self.byte_order.value}I"
        self.stream.write(struct.pack(fmt, value & 0xFFFFFFFF))

    def getvalue(self) -> bytes:
        return self.stream.getvalue()
