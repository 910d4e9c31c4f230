"""Conversions between integers, byte strings and bit vectors."""

from __future__ import annotations

from typing import Iterable, List


def int_to_le_bytes(value: int) -> bytes:
    """Encode an unsigned 64-bit integer as 8 little-endian bytes."""
    if not 0 <= value < 1 << 64:
        raise ValueError(f"{value} does not fit in 64 unsigned bits")
    return value.to_bytes(8, "little")


def bytes_to_bits(data: bytes) -> List[bool]:
    """Expand bytes into booleans, most significant bit of each byte first."""
    return [bool((byte >> (7 - bit)) & 1) for byte in bytes(data) for bit in range(8)]


def bits_to_int(bits: Iterable[bool]) -> int:
    """Read a big-endian boolean vector of at most 64 entries as an integer."""
    bits = list(bits)
    if len(bits) > 64:
        raise ValueError("boolean vector can't be larger than 64 bits")
    result = 0
    for bit in bits:
        result = (result << 1) | (1 if bit else 0)
    return result