"""Pseudo-random functions built on the raw SHA-256 compression function."""

from __future__ import annotations

import struct

_K = (
    0x428A2F98, 0x71374491, 0xB5C0FBCF, 0xE9B5DBA5, 0x3956C25B, 0x59F111F1, 0x923F82A4, 0xAB1C5ED5,
    0xD807AA98, 0x12835B01, 0x243185BE, 0x550C7DC3, 0x72BE5D74, 0x80DEB1FE, 0x9BDC06A7, 0xC19BF174,
    0xE49B69C1, 0xEFBE4786, 0x0FC19DC6, 0x240CA1CC, 0x2DE92C6F, 0x4A7484AA, 0x5CB0A9DC, 0x76F988DA,
    0x983E5152, 0xA831C66D, 0xB00327C8, 0xBF597FC7, 0xC6E00BF3, 0xD5A79147, 0x06CA6351, 0x14292967,
    0x27B70A85, 0x2E1B2138, 0x4D2C6DFC, 0x53380D13, 0x650A7354, 0x766A0ABB, 0x81C2C92E, 0x92722C85,
    0xA2BFE8A1, 0xA81A664B, 0xC24B8B70, 0xC76C51A3, 0xD192E819, 0xD6990624, 0xF40E3585, 0x106AA070,
    0x19A4C116, 0x1E376C08, 0x2748774C, 0x34B0BCB5, 0x391C0CB3, 0x4ED8AA4A, 0x5B9CCA4F, 0x682E6FF3,
    0x748F82EE, 0x78A5636F, 0x84C87814, 0x8CC70208, 0x90BEFFFA, 0xA4506CEB, 0xBEF9A3F7, 0xC67178F2,
)

_IV = (
    0x6A09E667, 0xBB67AE85, 0x3C6EF372, 0xA54FF53A,
    0x510E527F, 0x9B05688C, 0x1F83D9AB, 0x5BE0CD19,
)

_MASK = 0xFFFFFFFF


def _rotr(x: int, n: int) -> int:
    return ((x >> n) | (x << (32 - n))) & _MASK


def sha256_compress(data: bytes) -> bytes:
    """Apply the SHA-256 compression function to one 64-byte block from the IV.

    No padding or length is added; the resulting state is returned big-endian.
    """
    data = bytes(data)
    if len(data) != 64:
        raise ValueError(f"SHA-256 compression takes 64 bytes, got {len(data)}")
    w = list(struct.unpack(">16I", data))
    for t in range(16, 64):
        s0 = _rotr(w[t - 15], 7) ^ _rotr(w[t - 15], 18) ^ (w[t - 15] >> 3)
        s1 = _rotr(w[t - 2], 17) ^ _rotr(w[t - 2], 19) ^ (w[t - 2] >> 10)
        w.append((w[t - 16] + s0 + w[t - 7] + s1) & _MASK)

    a, b, c, d, e, f, g, h = _IV
    for k, word in zip(_K, w):
        s1 = _rotr(e, 6) ^ _rotr(e, 11) ^ _rotr(e, 25)
        ch = (e & f) ^ (~e & g)
        t1 = (h + s1 + ch + k + word) & _MASK
        s0 = _rotr(a, 2) ^ _rotr(a, 13) ^ _rotr(a, 22)
        maj = (a & b) ^ (a & c) ^ (b & c)
        t2 = (s0 + maj) & _MASK
        h, g, f, e = g, f, e, (d + t1) & _MASK
        d, c, b, a = c, b, a, (t1 + t2) & _MASK

    state = [(x + y) & _MASK for x, y in zip(_IV, (a, b, c, d, e, f, g, h))]
    return struct.pack(">8I", *state)


def _as_256(value: bytes, name: str) -> bytes:
    value = bytes(value)
    if len(value) != 32:
        raise ValueError(f"{name} must be 32 bytes, got {len(value)}")
    return value


def _prf(a: bool, b: bool, c: bool, d: bool, x: bytes, y: bytes) -> bytes:
    x = _as_256(x, "x")
    y = _as_256(y, "y")
    head = (x[0] & 0x0F) | (0x80 if a else 0) | (0x40 if b else 0) | (0x20 if c else 0) | (0x10 if d else 0)
    return sha256_compress(bytes([head]) + x[1:] + y)


def _prf_addr(a_sk: bytes, t: int) -> bytes:
    y = bytes([t]) + bytes(31)
    return _prf(True, True, False, False, a_sk, y)


def prf_addr_a_pk(a_sk: bytes) -> bytes:
    """Derive the paying key a_pk from a spending key."""
    return _prf_addr(a_sk, 0)


def prf_addr_sk_enc(a_sk: bytes) -> bytes:
    """Derive the (unclamped) transmission private key from a spending key."""
    return _prf_addr(a_sk, 1)


def prf_nf(a_sk: bytes, rho: bytes) -> bytes:
    """Derive the nullifier of a note with the given rho."""
    return _prf(True, True, True, False, a_sk, rho)


def _check_index(i0: int, name: str) -> None:
    if i0 not in (0, 1):
        raise ValueError(f"{name} invoked with index out of bounds")


def prf_pk(a_sk: bytes, i0: int, h_sig: bytes) -> bytes:
    """Authenticate h_sig with input ``i0`` (0 or 1)."""
    _check_index(i0, "PRF_pk")
    return _prf(False, bool(i0), False, False, a_sk, h_sig)


def prf_rho(phi: bytes, i0: int, h_sig: bytes) -> bytes:
    """Derive rho for output ``i0`` (0 or 1)."""
    _check_index(i0, "PRF_rho")
    return _prf(False, bool(i0), True, False, phi, h_sig)