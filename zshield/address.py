"""Shielded payment addresses and the keys they are derived from."""

from __future__ import annotations

from dataclasses import dataclass
from typing import BinaryIO

from zshield.hashing import hash256
from zshield.note_encryption import NoteEncryption, random_uint252
from zshield.prf import prf_addr_a_pk
from zshield.serialize import FixedBytes, serialize

SERIALIZED_PAYMENT_ADDRESS_SIZE = 64
SERIALIZED_SPENDING_KEY_SIZE = 32

_HASH = FixedBytes(32)


def _as_256(value: bytes, name: str) -> bytes:
    value = bytes(value)
    if len(value) != 32:
        raise ValueError(f"{name} must be 32 bytes, got {len(value)}")
    return value


@dataclass(frozen=True, order=True)
class PaymentAddress:
    """A paying key and a transmission public key."""

    a_pk: bytes = bytes(32)
    pk_enc: bytes = bytes(32)

    def __post_init__(self) -> None:
        object.__setattr__(self, "a_pk", _as_256(self.a_pk, "a_pk"))
        object.__setattr__(self, "pk_enc", _as_256(self.pk_enc, "pk_enc"))

    def get_hash(self) -> bytes:
        """Double SHA-256 of the serialized address."""
        return hash256(serialize(_SELF_CODEC, self))

    def serialize(self, stream: BinaryIO) -> None:
        _HASH.write(stream, self.a_pk)
        _HASH.write(stream, self.pk_enc)

    @classmethod
    def deserialize(cls, stream: BinaryIO) -> "PaymentAddress":
        a_pk = _HASH.read(stream)
        return cls(a_pk, _HASH.read(stream))


class _AddressCodec(FixedBytes):
    def write(self, stream: BinaryIO, value: PaymentAddress) -> None:
        value.serialize(stream)

    def read(self, stream: BinaryIO) -> PaymentAddress:
        return PaymentAddress.deserialize(stream)


_SELF_CODEC = _AddressCodec(SERIALIZED_PAYMENT_ADDRESS_SIZE)


class ViewingKey(bytes):
    """A 32-byte transmission private key."""

    def __new__(cls, sk_enc: bytes) -> "ViewingKey":
        return super().__new__(cls, _as_256(sk_enc, "sk_enc"))

    def pk_enc(self) -> bytes:
        """The matching transmission public key."""
        return NoteEncryption.generate_pubkey(bytes(self))


class SpendingKey(bytes):
    """A 252-bit spending key stored as 32 bytes with the top nibble clear."""

    def __new__(cls, a_sk: bytes = bytes(32)) -> "SpendingKey":
        a_sk = _as_256(a_sk, "a_sk")
        if a_sk[0] & 0xF0:
            raise ValueError("spending key must fit in 252 bits")
        return super().__new__(cls, a_sk)

    @classmethod
    def random(cls) -> "SpendingKey":
        return cls(random_uint252())

    def viewing_key(self) -> ViewingKey:
        return ViewingKey(NoteEncryption.generate_privkey(bytes(self)))

    def address(self) -> PaymentAddress:
        return PaymentAddress(prf_addr_a_pk(bytes(self)), self.viewing_key().pk_enc())