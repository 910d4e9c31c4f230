import pytest

from zshield.note_encryption import (
    ZC_NOTEPLAINTEXT_SIZE,
    NoteDecryption,
    NoteDecryptionFailed,
    NoteEncryption,
    clamp_curve25519,
    kdf,
    random_uint252,
    random_uint256,
)

H_SIG = bytes(range(32))
MESSAGE = bytes(i % 256 for i in range(ZC_NOTEPLAINTEXT_SIZE))


def _recipient():
    sk = NoteEncryption.generate_privkey(bytes(32))
    return NoteDecryption(sk)


def test_clamp_sets_and_clears_bits():
    clamped = clamp_curve25519(bytes([0xFF] * 32))
    assert clamped[0] == 248
    assert clamped[31] == 127
    assert clamped[1:31] == bytes([0xFF] * 30)
    assert clamp_curve25519(bytes(32))[31] == 64


def test_clamp_rejects_wrong_length():
    with pytest.raises(ValueError):
        clamp_curve25519(bytes(31))


def test_kdf_rejects_last_nonce():
    with pytest.raises(ValueError):
        kdf(bytes(32), bytes(32), bytes(32), bytes(32), 0xFF)


def test_kdf_depends_on_nonce():
    a = kdf(bytes(32), bytes(32), bytes(32), H_SIG, 0)
    b = kdf(bytes(32), bytes(32), bytes(32), H_SIG, 1)
    assert len(a) == 32
    assert a != b
    assert a == kdf(bytes(32), bytes(32), bytes(32), H_SIG, 0)


def test_random_values():
    assert len(random_uint256()) == 32
    for _ in range(20):
        value = random_uint252()
        assert len(value) == 32
        assert value[0] & 0xF0 == 0


def test_generate_pubkey_known_vector():
    sk = bytes.fromhex("77076d0a7318a57d3c16c17251b26645df4c2f87ebc0992ab177fba51db92c2a")
    assert NoteEncryption.generate_pubkey(sk) == bytes.fromhex(
        "8520f0098930a754748b7ddcb43ef75a0dbf3a0d26381af4eba4a98eaa9b4e6a"
    )


def test_privkey_is_clamped():
    sk = NoteEncryption.generate_privkey(bytes(32))
    assert sk[0] & 7 == 0
    assert sk[31] & 0x80 == 0
    assert sk[31] & 0x40 == 0x40


def test_encrypt_decrypt_round_trip():
    recipient = _recipient()
    enc = NoteEncryption(H_SIG)
    ct = enc.encrypt(recipient.pk_enc, MESSAGE)
    assert len(ct) == 585 + 16
    assert recipient.decrypt(ct, enc.epk, H_SIG, 0) == MESSAGE


def test_nonce_increments_per_encryption():
    recipient = _recipient()
    enc = NoteEncryption(H_SIG)
    enc.encrypt(recipient.pk_enc, MESSAGE)
    ct2 = enc.encrypt(recipient.pk_enc, MESSAGE)
    assert enc.nonce == 2
    assert recipient.decrypt(ct2, enc.epk, H_SIG, 1) == MESSAGE
    with pytest.raises(NoteDecryptionFailed):
        recipient.decrypt(ct2, enc.epk, H_SIG, 0)


def test_tampered_ciphertext_fails():
    recipient = _recipient()
    enc = NoteEncryption(H_SIG)
    ct = bytearray(enc.encrypt(recipient.pk_enc, MESSAGE))
    ct[0] ^= 1
    with pytest.raises(NoteDecryptionFailed):
        recipient.decrypt(bytes(ct), enc.epk, H_SIG, 0)


def test_wrong_recipient_fails():
    recipient = _recipient()
    other = NoteDecryption(NoteEncryption.generate_privkey(bytes([1]) + bytes(31)))
    enc = NoteEncryption(H_SIG)
    ct = enc.encrypt(recipient.pk_enc, MESSAGE)
    with pytest.raises(NoteDecryptionFailed):
        other.decrypt(ct, enc.epk, H_SIG, 0)


def test_wrong_h_sig_fails():
    recipient = _recipient()
    enc = NoteEncryption(H_SIG)
    ct = enc.encrypt(recipient.pk_enc, MESSAGE)
    with pytest.raises(NoteDecryptionFailed):
        recipient.decrypt(ct, enc.epk, bytes(32), 0)


def test_encrypt_rejects_wrong_message_length():
    enc = NoteEncryption(H_SIG)
    with pytest.raises(ValueError):
        enc.encrypt(_recipient().pk_enc, bytes(10))


def test_encrypt_to_zero_point_fails():
    enc = NoteEncryption(H_SIG)
    with pytest.raises(ValueError):
        enc.encrypt(bytes(32), MESSAGE)


def test_decryption_equality_and_order():
    a = _recipient()
    b = _recipient()
    c = NoteDecryption(NoteEncryption.generate_privkey(bytes([1]) + bytes(31)))
    assert a == b
    assert hash(a) == hash(b)
    assert a != c
    assert (a < c) != (c < a)