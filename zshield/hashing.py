"""Double SHA-256 hashing helpers."""

from __future__ import annotations

import hashlib
from typing import Any

from zshield.serialize import Codec

OUTPUT_SIZE = 32


class Hash256:
    """Incremental double SHA-256 (SHA-256 of SHA-256)."""

    OUTPUT_SIZE = OUTPUT_SIZE

    def __init__(self) -> None:
        self._sha = hashlib.sha256()

    def update(self, data: bytes) -> "Hash256":
        self._sha.update(bytes(data))
        return self

    def digest(self) -> bytes:
        return hashlib.sha256(self._sha.digest()).digest()

    def reset(self) -> "Hash256":
        self._sha = hashlib.sha256()
        return self


def hash256(*args: bytes) -> bytes:
    """Double SHA-256 of the concatenation of the given byte strings."""
    hasher = Hash256()
    for part in args:
        hasher.update(part)
    return hasher.digest()


class HashWriter:
    """A write-only stream whose contents are double SHA-256 hashed."""

    def __init__(self) -> None:
        self._ctx = Hash256()

    def write(self, data: bytes) -> "HashWriter":
        self._ctx.update(data)
        return self

    def get_hash(self) -> bytes:
        return self._ctx.digest()


def serialize_hash(codec: Codec, value: Any) -> bytes:
    """Double SHA-256 of ``value`` encoded with ``codec``."""
    writer = HashWriter()
    codec.write(writer, value)
    return writer.get_hash()