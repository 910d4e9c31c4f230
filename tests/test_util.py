import pytest

from zshield.util import bits_to_int, bytes_to_bits, int_to_le_bytes


def test_int_to_le_bytes_one():
    assert int_to_le_bytes(1) == b"\x01" + bytes(7)


def test_int_to_le_bytes_round_trip():
    value = 0x0123456789ABCDEF
    assert int.from_bytes(int_to_le_bytes(value), "little") == value
    assert len(int_to_le_bytes(value)) == 8


def test_int_to_le_bytes_out_of_range():
    with pytest.raises(ValueError):
        int_to_le_bytes(1 << 64)
    with pytest.raises(ValueError):
        int_to_le_bytes(-1)


def test_bytes_to_bits_msb_first():
    assert bytes_to_bits(b"\x80") == [True] + [False] * 7
    assert bytes_to_bits(b"\x01") == [False] * 7 + [True]


def test_bytes_to_bits_length():
    assert len(bytes_to_bits(bytes(32))) == 256


def test_bits_round_trip():
    data = b"\xde\xad\xbe\xef"
    assert bits_to_int(bytes_to_bits(data)) == int.from_bytes(data, "big")


def test_bits_to_int_empty():
    assert bits_to_int([]) == 0


def test_bits_to_int_too_long():
    with pytest.raises(ValueError):
        bits_to_int([True] * 65)


def test_bits_to_int_max():
    assert bits_to_int([True] * 64) == (1 << 64) - 1