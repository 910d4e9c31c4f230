import pytest

from zshield.address import SpendingKey
from zshield.joinsplit import DEFAULT_MEMO, JSInput, JSOutput, h_sig
from zshield.merkle import IncrementalMerkleTree
from zshield.note_encryption import ZC_MEMO_SIZE
from zshield.prf import prf_nf, prf_rho

SEED = bytes([1]) * 32
NF1 = bytes([2]) * 32
NF2 = bytes([3]) * 32
PKH = bytes([4]) * 32


def test_h_sig_is_deterministic_and_32_bytes():
    first = h_sig(SEED, [NF1, NF2], PKH)
    assert len(first) == 32
    assert first == h_sig(SEED, [NF1, NF2], PKH)


def test_h_sig_depends_on_every_input():
    base = h_sig(SEED, [NF1, NF2], PKH)
    assert h_sig(PKH, [NF1, NF2], PKH) != base
    assert h_sig(SEED, [NF2, NF1], PKH) != base
    assert h_sig(SEED, [NF1, NF2], SEED) != base


def test_h_sig_rejects_short_values():
    with pytest.raises(ValueError):
        h_sig(bytes(31), [NF1, NF2], PKH)
    with pytest.raises(ValueError):
        h_sig(SEED, [bytes(5)], PKH)


def test_default_memo():
    output = JSOutput.dummy()
    assert output.memo == DEFAULT_MEMO
    assert output.memo[0] == 0xF6
    assert output.memo[1:] == bytes(ZC_MEMO_SIZE - 1)
    assert output.value == 0


def test_output_note():
    key = SpendingKey(bytes([5]) * 32)
    output = JSOutput(key.address(), 1000)
    phi = bytes([6]) * 32
    r = bytes([7]) * 32
    note = output.note(phi, r, 1, PKH)
    assert note.a_pk == key.address().a_pk
    assert note.value == 1000
    assert note.r == r
    assert note.rho == prf_rho(phi, 1, PKH)
    assert output.note(phi, r, 0, PKH).rho != note.rho


def test_output_note_index_out_of_range():
    output = JSOutput.dummy()
    with pytest.raises(ValueError):
        output.note(bytes(32), bytes(32), 2, PKH)


def test_output_rejects_bad_memo_and_value():
    addr = JSOutput.dummy().addr
    with pytest.raises(ValueError):
        JSOutput(addr, 0, b"short")
    with pytest.raises(ValueError):
        JSOutput(addr, -1)


def test_dummy_input_is_consistent():
    js_input = JSInput.dummy()
    assert js_input.note.value == 0
    assert js_input.note.a_pk == js_input.key.address().a_pk
    assert js_input.witness.element() == js_input.note.cm()
    tree = IncrementalMerkleTree()
    tree.append(js_input.note.cm())
    assert js_input.witness.root() == tree.root()


def test_input_nullifier():
    js_input = JSInput.dummy()
    assert js_input.nullifier() == prf_nf(bytes(js_input.key), js_input.note.rho)
    assert JSInput.dummy().nullifier() != js_input.nullifier()