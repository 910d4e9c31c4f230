"""Notes, their commitments and nullifiers, and encrypted note plaintexts."""

from __future__ import annotations

import hashlib
import io
from dataclasses import dataclass, field
from typing import BinaryIO

from zshield.address import PaymentAddress
from zshield.encoding import SerializationError, read_uint, write_uint
from zshield.note_encryption import (
    ZC_MEMO_SIZE,
    ZC_NOTEPLAINTEXT_SIZE,
    NoteDecryption,
    NoteEncryption,
    random_uint256,
)
from zshield.prf import prf_nf
from zshield.serialize import FixedBytes
from zshield.util import int_to_le_bytes

_HASH = FixedBytes(32)
_MEMO = FixedBytes(ZC_MEMO_SIZE)
_MAX_VALUE = 1 << 64


def _as_256(value: bytes, name: str) -> bytes:
    value = bytes(value)
    if len(value) != 32:
        raise ValueError(f"{name} must be 32 bytes, got {len(value)}")
    return value


def _check_value(value: int) -> int:
    if not 0 <= value < _MAX_VALUE:
        raise ValueError(f"note value {value} does not fit in 64 unsigned bits")
    return value


@dataclass
class Note:
    """A shielded note: owner, value and the randomness behind its commitment."""

    a_pk: bytes
    value: int
    rho: bytes
    r: bytes

    def __post_init__(self) -> None:
        self.a_pk = _as_256(self.a_pk, "a_pk")
        self.value = _check_value(self.value)
        self.rho = _as_256(self.rho, "rho")
        self.r = _as_256(self.r, "r")

    @classmethod
    def random(cls) -> "Note":
        """A zero-value note with random owner and randomness."""
        return cls(random_uint256(), 0, random_uint256(), random_uint256())

    def cm(self) -> bytes:
        """The note commitment."""
        hasher = hashlib.sha256()
        hasher.update(b"\xb0")
        hasher.update(self.a_pk)
        hasher.update(int_to_le_bytes(self.value))
        hasher.update(self.rho)
        hasher.update(self.r)
        return hasher.digest()

    def nullifier(self, a_sk: bytes) -> bytes:
        """The nullifier that spending this note with ``a_sk`` reveals."""
        return prf_nf(a_sk, self.rho)


@dataclass
class NotePlaintext:
    """The part of a note that is encrypted to its recipient, with a memo."""

    value: int = 0
    rho: bytes = bytes(32)
    r: bytes = bytes(32)
    memo: bytes = field(default=bytes(ZC_MEMO_SIZE))

    def __post_init__(self) -> None:
        self.value = _check_value(self.value)
        self.rho = _as_256(self.rho, "rho")
        self.r = _as_256(self.r, "r")
        self.memo = bytes(self.memo)
        if len(self.memo) != ZC_MEMO_SIZE:
            raise ValueError(f"memo must be {ZC_MEMO_SIZE} bytes, got {len(self.memo)}")

    @classmethod
    def from_note(cls, note: Note, memo: bytes) -> "NotePlaintext":
        return cls(note.value, note.rho, note.r, memo)

    def note(self, addr: PaymentAddress) -> Note:
        """Rebuild the note for the address it was sent to."""
        return Note(addr.a_pk, self.value, self.rho, self.r)

    def serialize(self, stream: BinaryIO) -> None:
        write_uint(stream, 0x00, 1)
        write_uint(stream, self.value, 8)
        _HASH.write(stream, self.rho)
        _HASH.write(stream, self.r)
        _MEMO.write(stream, self.memo)

    @classmethod
    def deserialize(cls, stream: BinaryIO) -> "NotePlaintext":
        if read_uint(stream, 1) != 0x00:
            raise SerializationError("lead byte of NotePlaintext is not recognized")
        value = read_uint(stream, 8)
        rho = _HASH.read(stream)
        r = _HASH.read(stream)
        memo = _MEMO.read(stream)
        return cls(value, rho, r, memo)

    def to_bytes(self) -> bytes:
        buffer = io.BytesIO()
        self.serialize(buffer)
        return buffer.getvalue()

    @classmethod
    def decrypt(
        cls,
        decryptor: NoteDecryption,
        ciphertext: bytes,
        ephemeral_key: bytes,
        h_sig: bytes,
        nonce: int,
    ) -> "NotePlaintext":
        """Decrypt and parse a note plaintext."""
        plaintext = decryptor.decrypt(ciphertext, ephemeral_key, h_sig, nonce)
        stream = io.BytesIO(plaintext)
        result = cls.deserialize(stream)
        if stream.read(1):
            raise SerializationError("trailing data after NotePlaintext")
        return result

    def encrypt(self, encryptor: NoteEncryption, pk_enc: bytes) -> bytes:
        """Encrypt this plaintext to ``pk_enc``."""
        data = self.to_bytes()
        assert len(data) == ZC_NOTEPLAINTEXT_SIZE
        return encryptor.encrypt(pk_enc, data)