"""JoinSplit inputs and outputs and the signature hash that binds them."""

from __future__ import annotations

import hashlib
from dataclasses import dataclass, field
from typing import Iterable

from zshield.address import PaymentAddress, SpendingKey
from zshield.merkle import (
    INCREMENTAL_MERKLE_TREE_DEPTH,
    IncrementalMerkleTree,
    IncrementalWitness,
)
from zshield.note import Note
from zshield.note_encryption import ZC_MEMO_SIZE, random_uint256
from zshield.prf import prf_rho

H_SIG_PERSONALIZATION = b"ZcashComputehSig"

# 0xF6 is invalid UTF-8; the rest of the memo is zero.
DEFAULT_MEMO = b"\xf6" + bytes(ZC_MEMO_SIZE - 1)


def _as_256(value: bytes, name: str) -> bytes:
    value = bytes(value)
    if len(value) != 32:
        raise ValueError(f"{name} must be 32 bytes, got {len(value)}")
    return value


def h_sig(random_seed: bytes, nullifiers: Iterable[bytes], pub_key_hash: bytes) -> bytes:
    """Hash the random seed, input nullifiers and public key hash together."""
    block = _as_256(random_seed, "random_seed")
    for nf in nullifiers:
        block += _as_256(nf, "nullifier")
    block += _as_256(pub_key_hash, "pub_key_hash")
    return hashlib.blake2b(block, digest_size=32, person=H_SIG_PERSONALIZATION).digest()


@dataclass
class JSOutput:
    """A value to be sent to an address, with its memo."""

    addr: PaymentAddress
    value: int
    memo: bytes = field(default=DEFAULT_MEMO)

    def __post_init__(self) -> None:
        if not 0 <= self.value < 1 << 64:
            raise ValueError(f"output value {self.value} does not fit in 64 unsigned bits")
        self.memo = bytes(self.memo)
        if len(self.memo) != ZC_MEMO_SIZE:
            raise ValueError(f"memo must be {ZC_MEMO_SIZE} bytes, got {len(self.memo)}")

    @classmethod
    def dummy(cls) -> "JSOutput":
        """A zero-value output to a fresh random address."""
        return cls(SpendingKey.random().address(), 0)

    def note(self, phi: bytes, r: bytes, i: int, h_sig: bytes) -> Note:
        """The note for output ``i``, with rho derived from phi and h_sig."""
        rho = prf_rho(phi, i, h_sig)
        return Note(self.addr.a_pk, self.value, rho, r)


@dataclass
class JSInput:
    """A note to be spent, its witness and the key that spends it."""

    witness: IncrementalWitness
    note: Note
    key: SpendingKey

    @classmethod
    def dummy(cls) -> "JSInput":
        """A zero-value input in a one-leaf tree, spendable by a random key."""
        key = SpendingKey.random()
        note = Note(key.address().a_pk, 0, random_uint256(), random_uint256())
        tree = IncrementalMerkleTree(INCREMENTAL_MERKLE_TREE_DEPTH)
        tree.append(note.cm())
        return cls(tree.witness(), note, key)

    def nullifier(self) -> bytes:
        """The nullifier revealed when this input is spent."""
        return self.note.nullifier(bytes(self.key))