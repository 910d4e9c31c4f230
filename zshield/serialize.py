"""Composable codecs for the consensus wire format.

A codec knows how to write a value to a binary stream, read it back and
report how many bytes the encoding takes.  Codecs nest, so a vector of
optional 32-byte blobs is ``VectorOf(OptionalOf(FixedBytes(32)))``.
"""

from __future__ import annotations

import io
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, BinaryIO

from zshield.encoding import (
    SerializationError,
    compact_size_length,
    read_bool,
    read_compact_size,
    read_double,
    read_exact,
    read_float,
    read_int,
    read_limited_string,
    read_uint,
    read_varint,
    varint_length,
    write_bool,
    write_compact_size,
    write_double,
    write_float,
    write_int,
    write_limited_string,
    write_uint,
    write_varint,
)


class SizeComputer:
    """A write-only stream that only counts the bytes written to it."""

    def __init__(self) -> None:
        self._size = 0

    def write(self, data: bytes) -> "SizeComputer":
        self._size += len(data)
        return self

    @property
    def size(self) -> int:
        return self._size


class Codec(ABC):
    """Reads and writes one kind of value."""

    @abstractmethod
    def write(self, stream: BinaryIO, value: Any) -> None:
        """Write ``value`` to ``stream``."""

    @abstractmethod
    def read(self, stream: BinaryIO) -> Any:
        """Read a value from ``stream``."""

    def size(self, value: Any) -> int:
        """Number of bytes ``value`` takes when written."""
        counter = SizeComputer()
        self.write(counter, value)
        return counter.size


_INT_WIDTHS = (1, 2, 4, 8)


@dataclass(frozen=True)
class UInt(Codec):
    """Unsigned little-endian integer of 1, 2, 4 or 8 bytes."""

    width: int = 4

    def __post_init__(self) -> None:
        if self.width not in _INT_WIDTHS:
            raise ValueError(f"unsupported integer width: {self.width}")

    def write(self, stream: BinaryIO, value: int) -> None:
        write_uint(stream, value, self.width)

    def read(self, stream: BinaryIO) -> int:
        return read_uint(stream, self.width)

    def size(self, value: int) -> int:
        return self.width


@dataclass(frozen=True)
class Int(Codec):
    """Signed two's-complement little-endian integer."""

    width: int = 4

    def __post_init__(self) -> None:
        if self.width not in _INT_WIDTHS:
            raise ValueError(f"unsupported integer width: {self.width}")

    def write(self, stream: BinaryIO, value: int) -> None:
        write_int(stream, value, self.width)

    def read(self, stream: BinaryIO) -> int:
        return read_int(stream, self.width)

    def size(self, value: int) -> int:
        return self.width


@dataclass(frozen=True)
class Boolean(Codec):
    """A boolean stored in one byte."""

    def write(self, stream: BinaryIO, value: bool) -> None:
        write_bool(stream, value)

    def read(self, stream: BinaryIO) -> bool:
        return read_bool(stream)

    def size(self, value: bool) -> int:
        return 1


@dataclass(frozen=True)
class Float32(Codec):
    """IEEE-754 single-precision float."""

    def write(self, stream: BinaryIO, value: float) -> None:
        write_float(stream, value)

    def read(self, stream: BinaryIO) -> float:
        return read_float(stream)

    def size(self, value: float) -> int:
        return 4


@dataclass(frozen=True)
class Float64(Codec):
    """IEEE-754 double-precision float."""

    def write(self, stream: BinaryIO, value: float) -> None:
        write_double(stream, value)

    def read(self, stream: BinaryIO) -> float:
        return read_double(stream)

    def size(self, value: float) -> int:
        return 8


@dataclass(frozen=True)
class VarInt(Codec):
    """Non-negative integer in MSB-first base-128 form."""

    def write(self, stream: BinaryIO, value: int) -> None:
        write_varint(stream, value)

    def read(self, stream: BinaryIO) -> int:
        return read_varint(stream)

    def size(self, value: int) -> int:
        return varint_length(value)


@dataclass(frozen=True)
class FixedBytes(Codec):
    """Raw bytes of a fixed length, with no prefix."""

    length: int

    def __post_init__(self) -> None:
        if self.length < 0:
            raise ValueError("length must not be negative")

    def write(self, stream: BinaryIO, value: bytes) -> None:
        value = bytes(value)
        if len(value) != self.length:
            raise ValueError(f"expected {self.length} bytes, got {len(value)}")
        stream.write(value)

    def read(self, stream: BinaryIO) -> bytes:
        return read_exact(stream, self.length)

    def size(self, value: bytes) -> int:
        return self.length


@dataclass(frozen=True)
class Blob(Codec):
    """Byte string prefixed with its compact-size length."""

    def write(self, stream: BinaryIO, value: bytes) -> None:
        write_limited_string(stream, value)

    def read(self, stream: BinaryIO) -> bytes:
        return read_exact(stream, read_compact_size(stream))

    def size(self, value: bytes) -> int:
        return compact_size_length(len(value)) + len(value)


@dataclass(frozen=True)
class LimitedBytes(Codec):
    """Length-prefixed byte string whose length may not exceed ``limit``."""

    limit: int

    def write(self, stream: BinaryIO, value: bytes) -> None:
        write_limited_string(stream, value)

    def read(self, stream: BinaryIO) -> bytes:
        return read_limited_string(stream, self.limit)

    def size(self, value: bytes) -> int:
        return compact_size_length(len(value)) + len(value)


@dataclass(frozen=True)
class VectorOf(Codec):
    """A compact-size count followed by that many items."""

    item: Codec

    def write(self, stream: BinaryIO, value: list) -> None:
        items = list(value)
        write_compact_size(stream, len(items))
        for element in items:
            self.item.write(stream, element)

    def read(self, stream: BinaryIO) -> list:
        count = read_compact_size(stream)
        return [self.item.read(stream) for _ in range(count)]


@dataclass(frozen=True)
class OptionalOf(Codec):
    """A 0x00 byte for None, or 0x01 followed by the value."""

    item: Codec

    def write(self, stream: BinaryIO, value: Any) -> None:
        if value is None:
            write_uint(stream, 0x00, 1)
        else:
            write_uint(stream, 0x01, 1)
            self.item.write(stream, value)

    def read(self, stream: BinaryIO) -> Any:
        discriminant = read_uint(stream, 1)
        if discriminant == 0x00:
            return None
        if discriminant == 0x01:
            return self.item.read(stream)
        raise SerializationError("non-canonical optional discriminant")


@dataclass(frozen=True)
class ArrayOf(Codec):
    """Exactly ``length`` items with no count prefix."""

    item: Codec
    length: int

    def write(self, stream: BinaryIO, value: Any) -> None:
        items = list(value)
        if len(items) != self.length:
            raise ValueError(f"expected {self.length} items, got {len(items)}")
        for element in items:
            self.item.write(stream, element)

    def read(self, stream: BinaryIO) -> list:
        return [self.item.read(stream) for _ in range(self.length)]


@dataclass(frozen=True)
class PairOf(Codec):
    """Two values written one after the other."""

    first: Codec
    second: Codec

    def write(self, stream: BinaryIO, value: tuple) -> None:
        a, b = value
        self.first.write(stream, a)
        self.second.write(stream, b)

    def read(self, stream: BinaryIO) -> tuple:
        a = self.first.read(stream)
        return a, self.second.read(stream)


@dataclass(frozen=True)
class MapOf(Codec):
    """A count followed by key/value pairs in ascending key order."""

    key: Codec
    value: Codec

    def write(self, stream: BinaryIO, value: dict) -> None:
        items = sorted(value.items(), key=lambda kv: kv[0])
        write_compact_size(stream, len(items))
        for k, v in items:
            self.key.write(stream, k)
            self.value.write(stream, v)

    def read(self, stream: BinaryIO) -> dict:
        count = read_compact_size(stream)
        result: dict = {}
        for _ in range(count):
            k = self.key.read(stream)
            v = self.value.read(stream)
            result.setdefault(k, v)
        return result


@dataclass(frozen=True)
class SetOf(Codec):
    """A count followed by distinct items in ascending order."""

    item: Codec

    def write(self, stream: BinaryIO, value: Any) -> None:
        items = sorted(set(value))
        write_compact_size(stream, len(items))
        for element in items:
            self.item.write(stream, element)

    def read(self, stream: BinaryIO) -> set:
        count = read_compact_size(stream)
        return {self.item.read(stream) for _ in range(count)}


class Nested(Codec):
    """Delegates to a class with ``serialize(stream)`` and ``deserialize(stream)``.

    Extra keyword arguments are passed on to ``deserialize``.
    """

    def __init__(self, cls: type, **kwargs: Any) -> None:
        self.cls = cls
        self.kwargs = kwargs

    def __repr__(self) -> str:
        return f"Nested({self.cls.__name__})"

    def __eq__(self, other: object) -> bool:
        return (
            isinstance(other, Nested)
            and other.cls is self.cls
            and other.kwargs == self.kwargs
        )

    def __hash__(self) -> int:
        return hash((Nested, self.cls))

    def write(self, stream: BinaryIO, value: Any) -> None:
        value.serialize(stream)

    def read(self, stream: BinaryIO) -> Any:
        return self.cls.deserialize(stream, **self.kwargs)


def serialize(codec: Codec, value: Any) -> bytes:
    """Encode ``value`` with ``codec`` and return the bytes."""
    buffer = io.BytesIO()
    codec.write(buffer, value)
    return buffer.getvalue()


def deserialize(codec: Codec, data: bytes) -> Any:
    """Decode one value with ``codec`` from the start of ``data``."""
    return codec.read(io.BytesIO(bytes(data)))


def serialized_size(codec: Codec, value: Any) -> int:
    """Number of bytes ``value`` takes when encoded with ``codec``."""
    return codec.size(value)