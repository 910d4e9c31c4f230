"""Compressed zkSNARK proofs: field elements and curve points in wire form."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import BinaryIO

from zshield.encoding import SerializationError, read_uint, write_uint
from zshield.serialize import FixedBytes

G1_PREFIX_MASK = 0x02
G2_PREFIX_MASK = 0x0A

FQ_SIZE = 32
FQ2_SIZE = 64

_FQ = FixedBytes(FQ_SIZE)
_FQ2 = FixedBytes(FQ2_SIZE)


def _check_bytes(value: bytes, length: int, name: str) -> bytes:
    value = bytes(value)
    if len(value) != length:
        raise ValueError(f"{name} must be {length} bytes, got {len(value)}")
    return value


@dataclass(frozen=True)
class Fq:
    """An element of the base field, stored as 32 big-endian bytes."""

    data: bytes = bytes(FQ_SIZE)

    def __post_init__(self) -> None:
        object.__setattr__(self, "data", _check_bytes(self.data, FQ_SIZE, "Fq data"))

    def serialize(self, stream: BinaryIO) -> None:
        _FQ.write(stream, self.data)

    @classmethod
    def deserialize(cls, stream: BinaryIO) -> "Fq":
        return cls(_FQ.read(stream))


@dataclass(frozen=True)
class Fq2:
    """An element of the quadratic extension field, stored as 64 bytes."""

    data: bytes = bytes(FQ2_SIZE)

    def __post_init__(self) -> None:
        object.__setattr__(self, "data", _check_bytes(self.data, FQ2_SIZE, "Fq2 data"))

    def serialize(self, stream: BinaryIO) -> None:
        _FQ2.write(stream, self.data)

    @classmethod
    def deserialize(cls, stream: BinaryIO) -> "Fq2":
        return cls(_FQ2.read(stream))


def _read_lead_byte(stream: BinaryIO, mask: int, group: str) -> bool:
    lead = read_uint(stream, 1)
    if (lead & 0xFE) != mask:
        raise SerializationError(f"lead byte of {group} point not recognized")
    return bool(lead & 1)


@dataclass(frozen=True)
class CompressedG1:
    """A point in G1: its x coordinate and the low bit of y."""

    y_lsb: bool = False
    x: Fq = field(default_factory=Fq)

    def serialize(self, stream: BinaryIO) -> None:
        write_uint(stream, G1_PREFIX_MASK | (1 if self.y_lsb else 0), 1)
        self.x.serialize(stream)

    @classmethod
    def deserialize(cls, stream: BinaryIO) -> "CompressedG1":
        y_lsb = _read_lead_byte(stream, G1_PREFIX_MASK, "G1")
        return cls(y_lsb, Fq.deserialize(stream))


@dataclass(frozen=True)
class CompressedG2:
    """A point in G2: its x coordinate and which of the two roots y is."""

    y_gt: bool = False
    x: Fq2 = field(default_factory=Fq2)

    def serialize(self, stream: BinaryIO) -> None:
        write_uint(stream, G2_PREFIX_MASK | (1 if self.y_gt else 0), 1)
        self.x.serialize(stream)

    @classmethod
    def deserialize(cls, stream: BinaryIO) -> "CompressedG2":
        y_gt = _read_lead_byte(stream, G2_PREFIX_MASK, "G2")
        return cls(y_gt, Fq2.deserialize(stream))


@dataclass(frozen=True)
class ZCProof:
    """A compressed zkSNARK proof of eight curve points."""

    g_A: CompressedG1 = field(default_factory=CompressedG1)
    g_A_prime: CompressedG1 = field(default_factory=CompressedG1)
    g_B: CompressedG2 = field(default_factory=CompressedG2)
    g_B_prime: CompressedG1 = field(default_factory=CompressedG1)
    g_C: CompressedG1 = field(default_factory=CompressedG1)
    g_C_prime: CompressedG1 = field(default_factory=CompressedG1)
    g_K: CompressedG1 = field(default_factory=CompressedG1)
    g_H: CompressedG1 = field(default_factory=CompressedG1)

    def serialize(self, stream: BinaryIO) -> None:
        for point in (
            self.g_A,
            self.g_A_prime,
            self.g_B,
            self.g_B_prime,
            self.g_C,
            self.g_C_prime,
            self.g_K,
            self.g_H,
        ):
            point.serialize(stream)

    @classmethod
    def deserialize(cls, stream: BinaryIO) -> "ZCProof":
        g_A = CompressedG1.deserialize(stream)
        g_A_prime = CompressedG1.deserialize(stream)
        g_B = CompressedG2.deserialize(stream)
        g_B_prime = CompressedG1.deserialize(stream)
        g_C = CompressedG1.deserialize(stream)
        g_C_prime = CompressedG1.deserialize(stream)
        g_K = CompressedG1.deserialize(stream)
        g_H = CompressedG1.deserialize(stream)
        return cls(g_A, g_A_prime, g_B, g_B_prime, g_C, g_C_prime, g_K, g_H)