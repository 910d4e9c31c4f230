"""A minimal BLAKE2b set up for the Equihash proof-of-work personalization."""

from __future__ import annotations

import struct
from typing import List

BLAKE2B_BLOCK_LEN = 128
BLAKE2B_ROUNDS = 12

_MASK64 = 0xFFFFFFFFFFFFFFFF

BLAKE2B_IV = (
    0x6A09E667F3BCC908, 0xBB67AE8584CAA73B,
    0x3C6EF372FE94F82B, 0xA54FF53A5F1D36F1,
    0x510E527FADE682D1, 0x9B05688C2B3E6C1F,
    0x1F83D9ABFB41BD6B, 0x5BE0CD19137E2179,
)

BLAKE2B_SIGMA = (
    (0, 1, 2, 3, 4, 5, 6, 7, 8, 9, 10, 11, 12, 13, 14, 15),
    (14, 10, 4, 8, 9, 15, 13, 6, 1, 12, 0, 2, 11, 7, 5, 3),
    (11, 8, 12, 0, 5, 2, 15, 13, 10, 14, 3, 6, 7, 1, 9, 4),
    (7, 9, 3, 1, 13, 12, 11, 14, 2, 6, 5, 10, 4, 0, 15, 8),
    (9, 0, 5, 7, 2, 4, 10, 15, 14, 1, 11, 12, 6, 8, 3, 13),
    (2, 12, 6, 10, 0, 11, 8, 3, 4, 13, 7, 5, 15, 14, 1, 9),
    (12, 5, 1, 15, 14, 13, 4, 10, 0, 7, 6, 3, 9, 2, 8, 11),
    (13, 11, 7, 14, 12, 1, 3, 9, 5, 0, 15, 4, 8, 6, 2, 10),
    (6, 15, 14, 9, 11, 3, 0, 8, 12, 2, 13, 7, 1, 4, 10, 5),
    (10, 2, 8, 4, 7, 6, 1, 5, 15, 11, 9, 14, 3, 12, 13, 0),
    (0, 1, 2, 3, 4, 5, 6, 7, 8, 9, 10, 11, 12, 13, 14, 15),
    (14, 10, 4, 8, 9, 15, 13, 6, 1, 12, 0, 2, 11, 7, 5, 3),
)

_PERSONAL_PREFIX = struct.unpack("<Q", b"ZERO_PoW")[0]

_MIX_LANES = (
    (0, 4, 8, 12),
    (1, 5, 9, 13),
    (2, 6, 10, 14),
    (3, 7, 11, 15),
    (0, 5, 10, 15),
    (1, 6, 11, 12),
    (2, 7, 8, 13),
    (3, 4, 9, 14),
)


def _rotr64(a: int, bits: int) -> int:
    return ((a >> bits) | (a << (64 - bits))) & _MASK64


class ZcashBlake2bState:
    """BLAKE2b state initialised with the Equihash parameters n and k.

    Blocks are fed one at a time; a short block is only allowed as the final
    one and is zero-padded to the block length.
    """

    def __init__(self, hash_len: int, n: int, k: int) -> None:
        if not n > k:
            raise ValueError("n must be greater than k")
        if not 0 < hash_len <= 64:
            raise ValueError("hash length must be between 1 and 64")
        if not (0 <= n < 1 << 32 and 0 <= k < 1 << 32):
            raise ValueError("n and k must fit in 32 bits")
        self.h: List[int] = list(BLAKE2B_IV)
        self.h[0] ^= 0x01010000 | hash_len
        self.h[6] ^= _PERSONAL_PREFIX
        self.h[7] ^= (k << 32) | n
        self.byte_count = 0

    def copy(self) -> "ZcashBlake2bState":
        clone = object.__new__(ZcashBlake2bState)
        clone.h = list(self.h)
        clone.byte_count = self.byte_count
        return clone

    def update(self, msg: bytes, is_final: bool = False) -> None:
        """Compress one block of at most 128 bytes."""
        msg = bytes(msg)
        if len(msg) > BLAKE2B_BLOCK_LEN:
            raise ValueError("a block holds at most 128 bytes")
        if self.byte_count > _MASK64 - len(msg):
            raise OverflowError("byte counter overflow")
        block = msg.ljust(BLAKE2B_BLOCK_LEN, b"\x00")
        m = struct.unpack("<16Q", block)

        self.byte_count += len(msg)
        v = list(self.h) + list(BLAKE2B_IV)
        v[12] ^= self.byte_count
        if is_final:
            v[14] ^= _MASK64

        for sigma in BLAKE2B_SIGMA:
            for lane, (a, b, c, d) in enumerate(_MIX_LANES):
                x = m[sigma[2 * lane]]
                y = m[sigma[2 * lane + 1]]
                v[a] = (v[a] + v[b] + x) & _MASK64
                v[d] = _rotr64(v[d] ^ v[a], 32)
                v[c] = (v[c] + v[d]) & _MASK64
                v[b] = _rotr64(v[b] ^ v[c], 24)
                v[a] = (v[a] + v[b] + y) & _MASK64
                v[d] = _rotr64(v[d] ^ v[a], 16)
                v[c] = (v[c] + v[d]) & _MASK64
                v[b] = _rotr64(v[b] ^ v[c], 63)

        self.h = [h ^ v[i] ^ v[i + 8] for i, h in enumerate(self.h)]

    def final(self, outlen: int) -> bytes:
        """The first ``outlen`` bytes of the chaining value."""
        if not 0 <= outlen <= 64:
            raise ValueError("output length must be at most 64")
        return struct.pack("<8Q", *self.h)[:outlen]