"""Note encryption: X25519 key agreement, a BLAKE2b KDF and ChaCha20-Poly1305."""

from __future__ import annotations

import hashlib
import secrets

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.asymmetric.x25519 import (
    X25519PrivateKey,
    X25519PublicKey,
)
from cryptography.hazmat.primitives.ciphers.aead import ChaCha20Poly1305

from zshield.prf import prf_addr_sk_enc

ZC_NUM_JS_INPUTS = 2
ZC_NUM_JS_OUTPUTS = 2
ZC_NOTEPLAINTEXT_LEADING = 1
ZC_V_SIZE = 8
ZC_RHO_SIZE = 32
ZC_R_SIZE = 32
ZC_MEMO_SIZE = 512
ZC_NOTEPLAINTEXT_SIZE = (
    ZC_NOTEPLAINTEXT_LEADING + ZC_V_SIZE + ZC_RHO_SIZE + ZC_R_SIZE + ZC_MEMO_SIZE
)

NOTEENCRYPTION_AUTH_BYTES = 16
NOTEENCRYPTION_CIPHER_KEYSIZE = 32

_CIPHER_NONCE = bytes(12)


class NoteDecryptionFailed(RuntimeError):
    """Raised when a ciphertext does not authenticate under the derived key."""

    def __init__(self, message: str = "Could not decrypt message") -> None:
        super().__init__(message)


def _as_256(value: bytes, name: str) -> bytes:
    value = bytes(value)
    if len(value) != 32:
        raise ValueError(f"{name} must be 32 bytes, got {len(value)}")
    return value


def clamp_curve25519(key: bytes) -> bytes:
    """Return ``key`` with the Curve25519 scalar bits cleared and set."""
    clamped = bytearray(_as_256(key, "key"))
    clamped[0] &= 248
    clamped[31] &= 127
    clamped[31] |= 64
    return bytes(clamped)


def kdf(dhsecret: bytes, epk: bytes, pk_enc: bytes, h_sig: bytes, nonce: int) -> bytes:
    """Derive the 32-byte symmetric key for encryption number ``nonce``."""
    if not 0 <= nonce <= 0xFF:
        raise ValueError("nonce must fit in one byte")
    if nonce == 0xFF:
        raise ValueError("no additional nonce space for KDF")
    block = (
        _as_256(h_sig, "h_sig")
        + _as_256(dhsecret, "dhsecret")
        + _as_256(epk, "epk")
        + _as_256(pk_enc, "pk_enc")
    )
    personalization = b"ZcashKDF" + bytes([nonce]) + bytes(7)
    return hashlib.blake2b(
        block, digest_size=NOTEENCRYPTION_CIPHER_KEYSIZE, person=personalization
    ).digest()


def random_uint256() -> bytes:
    """32 random bytes."""
    return secrets.token_bytes(32)


def random_uint252() -> bytes:
    """32 random bytes with the top four bits cleared."""
    rand = bytearray(random_uint256())
    rand[0] &= 0x0F
    return bytes(rand)


def _scalarmult(scalar: bytes, point: bytes) -> bytes:
    try:
        private = X25519PrivateKey.from_private_bytes(scalar)
        return private.exchange(X25519PublicKey.from_public_bytes(point))
    except ValueError as exc:
        raise ValueError("Could not create DH secret") from exc


class NoteEncryption:
    """Encrypts notes for recipients under one ephemeral key pair."""

    def __init__(self, h_sig: bytes, mlen: int = ZC_NOTEPLAINTEXT_SIZE) -> None:
        self.h_sig = _as_256(h_sig, "h_sig")
        self.mlen = mlen
        self.nonce = 0
        self.esk = random_uint256()
        self.epk = self.generate_pubkey(self.esk)

    @property
    def clen(self) -> int:
        return self.mlen + NOTEENCRYPTION_AUTH_BYTES

    def encrypt(self, pk_enc: bytes, message: bytes) -> bytes:
        """Encrypt ``message`` (exactly ``mlen`` bytes) to ``pk_enc``."""
        pk_enc = _as_256(pk_enc, "pk_enc")
        message = bytes(message)
        if len(message) != self.mlen:
            raise ValueError(f"message must be {self.mlen} bytes, got {len(message)}")
        dhsecret = _scalarmult(self.esk, pk_enc)
        key = kdf(dhsecret, self.epk, pk_enc, self.h_sig, self.nonce)
        self.nonce = (self.nonce + 1) & 0xFF
        return ChaCha20Poly1305(key).encrypt(_CIPHER_NONCE, message, None)

    @staticmethod
    def generate_privkey(a_sk: bytes) -> bytes:
        """Derive the clamped transmission private key from a spending key."""
        return clamp_curve25519(prf_addr_sk_enc(a_sk))

    @staticmethod
    def generate_pubkey(sk_enc: bytes) -> bytes:
        """Derive the transmission public key from a private key."""
        private = X25519PrivateKey.from_private_bytes(_as_256(sk_enc, "sk_enc"))
        return private.public_key().public_bytes_raw()


class NoteDecryption:
    """Decrypts notes sent to one transmission key."""

    def __init__(self, sk_enc: bytes, mlen: int = ZC_NOTEPLAINTEXT_SIZE) -> None:
        self.sk_enc = _as_256(sk_enc, "sk_enc")
        self.mlen = mlen
        self.pk_enc = NoteEncryption.generate_pubkey(self.sk_enc)

    @property
    def clen(self) -> int:
        return self.mlen + NOTEENCRYPTION_AUTH_BYTES

    def decrypt(self, ciphertext: bytes, epk: bytes, h_sig: bytes, nonce: int) -> bytes:
        """Decrypt a ciphertext; raises NoteDecryptionFailed if it does not verify."""
        ciphertext = bytes(ciphertext)
        if len(ciphertext) != self.clen:
            raise ValueError(f"ciphertext must be {self.clen} bytes, got {len(ciphertext)}")
        epk = _as_256(epk, "epk")
        dhsecret = _scalarmult(self.sk_enc, epk)
        key = kdf(dhsecret, epk, self.pk_enc, h_sig, nonce)
        try:
            return ChaCha20Poly1305(key).decrypt(_CIPHER_NONCE, ciphertext, None)
        except InvalidTag as exc:
            raise NoteDecryptionFailed() from exc

    def _key(self) -> tuple:
        return (self.sk_enc, self.pk_enc)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, NoteDecryption):
            return NotImplemented
        return self._key() == other._key()

    def __lt__(self, other: "NoteDecryption") -> bool:
        if not isinstance(other, NoteDecryption):
            return NotImplemented
        return self._key() < other._key()

    def __hash__(self) -> int:
        return hash(self._key())