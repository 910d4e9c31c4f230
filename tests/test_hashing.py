from __future__ import annotations

from zshield.hashing import Hash256, HashWriter, hash256, serialize_hash
from zshield.serialize import Blob, UInt, VectorOf, serialize

EMPTY_DOUBLE_SHA = bytes.fromhex(
    "5df6e0e2761359d30a8275058e299fcc0381534545f55cf43e41983f5d4c9456"
)


def test_hash_of_empty_input():
    assert hash256() == EMPTY_DOUBLE_SHA
    assert hash256(b"") == EMPTY_DOUBLE_SHA


def test_output_size():
    assert len(hash256(b"abc")) == Hash256.OUTPUT_SIZE == 32


def test_concatenation_equivalence():
    assert hash256(b"ab", b"c") == hash256(b"abc")
    assert hash256(b"a", b"", b"bc") == hash256(b"abc")


def test_incremental_matches_one_shot():
    hasher = Hash256().update(b"hello ").update(b"world")
    assert hasher.digest() == hash256(b"hello world")


def test_digest_does_not_consume_state():
    hasher = Hash256().update(b"x")
    first = hasher.digest()
    assert hasher.digest() == first


def test_reset():
    hasher = Hash256().update(b"garbage")
    hasher.reset()
    assert hasher.digest() == EMPTY_DOUBLE_SHA


def test_hash_writer():
    writer = HashWriter()
    writer.write(b"ab").write(b"cd")
    assert writer.get_hash() == hash256(b"abcd")


def test_serialize_hash_matches_serialized_bytes():
    assert serialize_hash(UInt(4), 1) == hash256(b"\x01\x00\x00\x00")
    codec = VectorOf(Blob())
    value = [b"one", b"two"]
    assert serialize_hash(codec, value) == hash256(serialize(codec, value))


def test_different_inputs_differ():
    assert hash256(b"a") != hash256(b"b")
    assert len({hash256(bytes([i])) for i in range(16)}) == 16