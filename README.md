# zshield

Building blocks for shielded value transfers, in plain Python. The only
third-party dependency is `cryptography` (X25519 and ChaCha20-Poly1305).

## Modules

- `zshield.encoding`: little-endian primitives on binary streams:
  `read_uint`/`write_uint`, `read_int`/`write_int`, floats, booleans,
  compact sizes (`write_compact_size`, `read_compact_size`), base-128
  var-ints (`write_varint`, `read_varint`) and length-limited strings.
- `zshield.serialize`: composable `Codec` objects (`UInt`, `Int`, `Boolean`,
  `Float32`, `Float64`, `VarInt`, `FixedBytes`, `Blob`, `LimitedBytes`,
  `VectorOf`, `OptionalOf`, `ArrayOf`, `PairOf`, `MapOf`, `SetOf`, `Nested`)
  with the helpers `serialize`, `deserialize` and `serialized_size`.
- `zshield.hashing`: double SHA-256 (`Hash256`, `hash256`, `HashWriter`,
  `serialize_hash`).
- `zshield.prf`: the raw SHA-256 compression function (`sha256_compress`) and
  the PRFs built on it: `prf_addr_a_pk`, `prf_addr_sk_enc`, `prf_nf`,
  `prf_pk`, `prf_rho`.
- `zshield.util`: `int_to_le_bytes`, `bytes_to_bits`, `bits_to_int`.
- `zshield.merkle`: `IncrementalMerkleTree` and `IncrementalWitness` over
  32-byte hashes, `MerklePath`, `EmptyMerkleRoots` and `combine`.
- `zshield.note_encryption`: `NoteEncryption` / `NoteDecryption`
  (X25519 key agreement, a personalised BLAKE2b `kdf`, ChaCha20-Poly1305),
  plus `clamp_curve25519`, `random_uint256`, `random_uint252`.
- `zshield.address`: `SpendingKey`, `ViewingKey`, `PaymentAddress`.
- `zshield.note`: `Note` (commitment `cm()`, `nullifier()`) and
  `NotePlaintext` (serialize, encrypt, decrypt).
- `zshield.proof`: wire encodings of compressed proofs: `Fq`, `Fq2`,
  `CompressedG1`, `CompressedG2`, `ZCProof`.
- `zshield.joinsplit`: `h_sig`, `JSInput`, `JSOutput`.
- `zshield.blake`: `ZcashBlake2bState`, a block-at-a-time BLAKE2b set up with
  the Equihash `n`/`k` personalization.
- `zshield.silentarmy`: Equihash (n=192, k=7) parameters and solution
  post-processing: `verify_solution`, `sort_pair`, `compress_solution`,
  `select_work_size_blake`, `hex2val`, `s_hexdump`.

## Installation

```
pip install .
```

Run the tests with:

```
pip install ".[test]"
pytest
```

## Examples

Wire format:

```python
from zshield.serialize import UInt, VectorOf, deserialize, serialize

data = serialize(VectorOf(UInt(4)), [1, 2])
assert data == b"\x02\x01\x00\x00\x00\x02\x00\x00\x00"
assert deserialize(VectorOf(UInt(4)), data) == [1, 2]
```

Merkle tree and witness:

```python
from zshield.merkle import IncrementalMerkleTree
from zshield.note import Note

note = Note.random()
tree = IncrementalMerkleTree(4)
tree.append(note.cm())
witness = tree.witness()
assert witness.root() == tree.root()
assert witness.element() == note.cm()
```

Encrypting a note to an address and reading it back:

```python
from zshield.address import SpendingKey
from zshield.note import Note, NotePlaintext
from zshield.note_encryption import NoteDecryption, NoteEncryption, random_uint256

key = SpendingKey.random()
addr = key.address()
note = Note(addr.a_pk, 1000, random_uint256(), random_uint256())

h_sig = bytes(32)
encryptor = NoteEncryption(h_sig)
ciphertext = NotePlaintext.from_note(note, bytes(512)).encrypt(encryptor, addr.pk_enc)

decryptor = NoteDecryption(key.viewing_key())
plaintext = NotePlaintext.decrypt(decryptor, ciphertext, encryptor.epk, h_sig, 0)
assert plaintext.note(addr) == note
```

## Errors

Malformed or truncated input raises `zshield.encoding.SerializationError`
(a `ValueError`). A ciphertext that does not authenticate raises
`zshield.note_encryption.NoteDecryptionFailed`. Appending to a full tree
raises `RuntimeError`; wrongly sized keys and hashes raise `ValueError`.

## What this package does not do

- It does not create or verify zero-knowledge proofs. `zshield.proof` only
  reads and writes the compressed point encodings; `zshield.joinsplit` offers
  `h_sig` and input/output helpers but no prover or verifier.
- It does not search for Equihash solutions. `zshield.silentarmy` and
  `zshield.blake` provide the parameters, hashing state and the checks and
  encoding applied to solutions found elsewhere.
- It has no command-line program, no network client and no storage.