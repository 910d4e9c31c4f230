"""Low-level little-endian primitives for the wire format.

Streams are binary file-like objects: anything with ``read(n)`` returning
bytes and ``write(data)``.
"""

from __future__ import annotations

import struct
from typing import BinaryIO

MAX_SIZE = 0x02000000

_WIDTHS = (1, 2, 4, 8)


class SerializationError(ValueError):
    """Raised when data on a stream is malformed, truncated or too large."""


def _check_width(width: int) -> None:
    if width not in _WIDTHS:
        raise ValueError(f"unsupported integer width: {width}")


def read_exact(stream: BinaryIO, size: int) -> bytes:
    """Read exactly ``size`` bytes or raise SerializationError."""
    if size < 0:
        raise ValueError("size must not be negative")
    data = stream.read(size) if size else b""
    if data is None or len(data) != size:
        raise SerializationError("end of data")
    return bytes(data)


def write_uint(stream: BinaryIO, value: int, width: int) -> None:
    """Write an unsigned integer of ``width`` bytes, little-endian."""
    _check_width(width)
    if not 0 <= value < 1 << (8 * width):
        raise ValueError(f"{value} does not fit in {width} unsigned bytes")
    stream.write(value.to_bytes(width, "little"))


def read_uint(stream: BinaryIO, width: int) -> int:
    """Read an unsigned little-endian integer of ``width`` bytes."""
    _check_width(width)
    return int.from_bytes(read_exact(stream, width), "little")


def write_int(stream: BinaryIO, value: int, width: int) -> None:
    """Write a two's-complement signed integer of ``width`` bytes."""
    _check_width(width)
    bound = 1 << (8 * width - 1)
    if not -bound <= value < bound:
        raise ValueError(f"{value} does not fit in {width} signed bytes")
    stream.write(value.to_bytes(width, "little", signed=True))


def read_int(stream: BinaryIO, width: int) -> int:
    """Read a two's-complement signed little-endian integer."""
    _check_width(width)
    return int.from_bytes(read_exact(stream, width), "little", signed=True)


def write_float(stream: BinaryIO, value: float) -> None:
    """Write an IEEE-754 single-precision float."""
    stream.write(struct.pack("<f", value))


def read_float(stream: BinaryIO) -> float:
    """Read an IEEE-754 single-precision float."""
    return struct.unpack("<f", read_exact(stream, 4))[0]


def write_double(stream: BinaryIO, value: float) -> None:
    """Write an IEEE-754 double-precision float."""
    stream.write(struct.pack("<d", value))


def read_double(stream: BinaryIO) -> float:
    """Read an IEEE-754 double-precision float."""
    return struct.unpack("<d", read_exact(stream, 8))[0]


def write_bool(stream: BinaryIO, value: bool) -> None:
    """Write a boolean as a single byte, 1 or 0."""
    stream.write(b"\x01" if value else b"\x00")


def read_bool(stream: BinaryIO) -> bool:
    """Read a single byte; any non-zero value is true."""
    return read_exact(stream, 1)[0] != 0


def compact_size_length(n: int) -> int:
    """Number of bytes the compact-size encoding of ``n`` takes."""
    if n < 0:
        raise ValueError("compact size must not be negative")
    if n < 253:
        return 1
    if n <= 0xFFFF:
        return 3
    if n <= 0xFFFFFFFF:
        return 5
    return 9


def write_compact_size(stream: BinaryIO, n: int) -> None:
    """Write ``n`` in compact-size form (1, 3, 5 or 9 bytes)."""
    if not 0 <= n < 1 << 64:
        raise ValueError(f"{n} is out of range for a compact size")
    if n < 253:
        write_uint(stream, n, 1)
    elif n <= 0xFFFF:
        write_uint(stream, 253, 1)
        write_uint(stream, n, 2)
    elif n <= 0xFFFFFFFF:
        write_uint(stream, 254, 1)
        write_uint(stream, n, 4)
    else:
        write_uint(stream, 255, 1)
        write_uint(stream, n, 8)


def read_compact_size(stream: BinaryIO) -> int:
    """Read a canonical compact size no larger than MAX_SIZE."""
    marker = read_uint(stream, 1)
    if marker < 253:
        size = marker
    elif marker == 253:
        size = read_uint(stream, 2)
        if size < 253:
            raise SerializationError("non-canonical ReadCompactSize()")
    elif marker == 254:
        size = read_uint(stream, 4)
        if size < 0x10000:
            raise SerializationError("non-canonical ReadCompactSize()")
    else:
        size = read_uint(stream, 8)
        if size < 0x100000000:
            raise SerializationError("non-canonical ReadCompactSize()")
    if size > MAX_SIZE:
        raise SerializationError("ReadCompactSize(): size too large")
    return size


def varint_length(n: int) -> int:
    """Number of bytes the base-128 varint encoding of ``n`` takes."""
    if n < 0:
        raise ValueError("varint must not be negative")
    length = 1
    while n > 0x7F:
        n = (n >> 7) - 1
        length += 1
    return length


def write_varint(stream: BinaryIO, n: int) -> None:
    """Write ``n`` as an MSB-first base-128 varint with the one-to-one offset."""
    if n < 0:
        raise ValueError("varint must not be negative")
    digits = []
    while True:
        digits.append((n & 0x7F) | (0x80 if digits else 0x00))
        if n <= 0x7F:
            break
        n = (n >> 7) - 1
    stream.write(bytes(reversed(digits)))


def read_varint(stream: BinaryIO) -> int:
    """Read an MSB-first base-128 varint."""
    n = 0
    while True:
        byte = read_exact(stream, 1)[0]
        n = (n << 7) | (byte & 0x7F)
        if byte & 0x80:
            n += 1
        else:
            return n


def write_limited_string(stream: BinaryIO, data: bytes) -> None:
    """Write a length-prefixed byte string."""
    data = bytes(data)
    write_compact_size(stream, len(data))
    if data:
        stream.write(data)


def read_limited_string(stream: BinaryIO, limit: int) -> bytes:
    """Read a length-prefixed byte string of at most ``limit`` bytes."""
    size = read_compact_size(stream)
    if size > limit:
        raise SerializationError("String length limit exceeded")
    return read_exact(stream, size)