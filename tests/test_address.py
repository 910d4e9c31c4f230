import io

import pytest

from zshield.address import PaymentAddress, SpendingKey, ViewingKey
from zshield.hashing import hash256
from zshield.note_encryption import NoteEncryption
from zshield.prf import prf_addr_a_pk


def test_spending_key_rejects_top_nibble():
    with pytest.raises(ValueError):
        SpendingKey(bytes([0x10]) + bytes(31))


def test_spending_key_rejects_wrong_length():
    with pytest.raises(ValueError):
        SpendingKey(bytes(16))


def test_random_spending_key_fits_252_bits():
    for _ in range(10):
        key = SpendingKey.random()
        assert len(key) == 32
        assert key[0] & 0xF0 == 0


def test_default_spending_key_is_zero():
    assert bytes(SpendingKey()) == bytes(32)


def test_address_derivation():
    key = SpendingKey(bytes([0x0A]) + bytes(range(31)))
    addr = key.address()
    assert addr.a_pk == prf_addr_a_pk(bytes(key))
    assert addr.pk_enc == key.viewing_key().pk_enc()
    assert addr == key.address()


def test_viewing_key_matches_generate_privkey():
    key = SpendingKey(bytes(32))
    vk = key.viewing_key()
    assert bytes(vk) == NoteEncryption.generate_privkey(bytes(key))
    assert vk[0] & 7 == 0
    assert vk[31] & 0x40 == 0x40


def test_viewing_key_length_checked():
    with pytest.raises(ValueError):
        ViewingKey(bytes(5))


def test_payment_address_round_trip():
    addr = PaymentAddress(bytes([1]) * 32, bytes([2]) * 32)
    buf = io.BytesIO()
    addr.serialize(buf)
    data = buf.getvalue()
    assert data == bytes([1]) * 32 + bytes([2]) * 32
    assert PaymentAddress.deserialize(io.BytesIO(data)) == addr


def test_payment_address_hash():
    addr = PaymentAddress(bytes([1]) * 32, bytes([2]) * 32)
    assert addr.get_hash() == hash256(bytes([1]) * 32 + bytes([2]) * 32)


def test_payment_address_ordering():
    a = PaymentAddress(bytes(32), bytes([9]) * 32)
    b = PaymentAddress(bytes([1]) * 32, bytes(32))
    c = PaymentAddress(bytes(32), bytes([10]) * 32)
    assert a < b
    assert a < c
    assert not b < a


def test_payment_address_rejects_short_fields():
    with pytest.raises(ValueError):
        PaymentAddress(bytes(3), bytes(32))