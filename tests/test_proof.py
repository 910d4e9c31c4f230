import io

import pytest

from zshield.encoding import SerializationError
from zshield.proof import (
    G1_PREFIX_MASK,
    G2_PREFIX_MASK,
    CompressedG1,
    CompressedG2,
    Fq,
    Fq2,
    ZCProof,
)


def _bytes_of(obj):
    buffer = io.BytesIO()
    obj.serialize(buffer)
    return buffer.getvalue()


def _sample_proof():
    return ZCProof(
        g_A=CompressedG1(True, Fq(bytes(range(32)))),
        g_A_prime=CompressedG1(False, Fq(bytes([1]) * 32)),
        g_B=CompressedG2(True, Fq2(bytes(range(64)))),
        g_B_prime=CompressedG1(True, Fq(bytes([2]) * 32)),
        g_C=CompressedG1(False, Fq(bytes([3]) * 32)),
        g_C_prime=CompressedG1(True, Fq(bytes([4]) * 32)),
        g_K=CompressedG1(False, Fq(bytes([5]) * 32)),
        g_H=CompressedG1(True, Fq(bytes([6]) * 32)),
    )


def test_default_proof_is_296_bytes():
    assert len(_bytes_of(ZCProof())) == 296


def test_g1_wire_form():
    data = _bytes_of(CompressedG1(False, Fq(bytes(32))))
    assert data == bytes([G1_PREFIX_MASK]) + bytes(32)
    assert _bytes_of(CompressedG1(True))[0] == G1_PREFIX_MASK | 1


def test_g2_wire_form():
    data = _bytes_of(CompressedG2(True, Fq2(bytes(64))))
    assert data == bytes([G2_PREFIX_MASK | 1]) + bytes(64)
    assert len(data) == 65


def test_g1_round_trip():
    point = CompressedG1(True, Fq(bytes(range(32))))
    assert CompressedG1.deserialize(io.BytesIO(_bytes_of(point))) == point


def test_g2_round_trip():
    point = CompressedG2(True, Fq2(bytes(range(64))))
    assert CompressedG2.deserialize(io.BytesIO(_bytes_of(point))) == point


def test_proof_round_trip():
    proof = _sample_proof()
    restored = ZCProof.deserialize(io.BytesIO(_bytes_of(proof)))
    assert restored == proof
    assert restored != ZCProof()


def test_bad_g1_lead_byte_rejected():
    data = bytes([G2_PREFIX_MASK]) + bytes(32)
    with pytest.raises(SerializationError):
        CompressedG1.deserialize(io.BytesIO(data))


def test_bad_g2_lead_byte_rejected():
    data = bytes([G1_PREFIX_MASK]) + bytes(64)
    with pytest.raises(SerializationError):
        CompressedG2.deserialize(io.BytesIO(data))


def test_truncated_proof_rejected():
    data = _bytes_of(ZCProof())[:-1]
    with pytest.raises(SerializationError):
        ZCProof.deserialize(io.BytesIO(data))


def test_fq_wrong_length_rejected():
    with pytest.raises(ValueError):
        Fq(bytes(31))
    with pytest.raises(ValueError):
        Fq2(bytes(32))