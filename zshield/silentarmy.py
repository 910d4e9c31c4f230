"""Host-side helpers of the Equihash (n=192, k=7) GPU solver.

Parameters, work sizing, solution verification and the compact encoding
of a solution's indices.
"""

from __future__ import annotations

from typing import List, Optional, Sequence

PARAM_N = 192
PARAM_K = 7
PREFIX = PARAM_N // (PARAM_K + 1)
NR_INPUTS = 1 << PREFIX
APX_NR_ELMS_LOG = PREFIX + 1
NR_ROWS_LOG = 20

_OVERHEADS = {16: 3, 18: 5, 19: 9, 20: 13}
OVERHEAD = _OVERHEADS[NR_ROWS_LOG]

NR_ROWS = 1 << NR_ROWS_LOG
NR_SLOTS = (1 << (APX_NR_ELMS_LOG - NR_ROWS_LOG)) * OVERHEAD
SLOT_LEN = 32
HT_SIZE = NR_ROWS * NR_SLOTS * SLOT_LEN
ZCASH_BLOCK_HEADER_LEN = 140
ZCASH_NONCE_LEN = 32
ZCASH_HASH_LEN = 50
BLAKE_WPS = 10
MAX_SOLS = 2000
SOL_SIZE = (1 << PARAM_K) * 4
PROOFSIZE = 1 << PARAM_K

COLLISION_BIT_LENGTH = PARAM_N // (PARAM_K + 1)
COMPRESSED_PROOFSIZE = (COLLISION_BIT_LENGTH + 1) * PROOFSIZE * 4 // (8 * 4)

_INDEX_BITS = PREFIX + 1
_HEXDUMP_LIMIT = 1022

_COMPUTE_UNITS = {"rx480": 36}


def xi_offset_for_round(round_: int) -> int:
    """Offset of Xi in bytes from the beginning of a slot."""
    return 8 + (round_ // 2) * 4


def compress_solution(inputs: Sequence[int]) -> bytes:
    """Pack each index into PREFIX + 1 bits, most significant bit first.

    Bits that do not fill a whole final byte are dropped.
    """
    mask = (1 << _INDEX_BITS) - 1
    values = list(inputs)
    total_bits = len(values) * _INDEX_BITS
    acc = 0
    for value in values:
        acc = (acc << _INDEX_BITS) | (value & mask)
    nbytes = total_bits // 8
    acc >>= total_bits - nbytes * 8
    return acc.to_bytes(nbytes, "big")


def sort_pair(values: Sequence[int], length: int) -> List[int]:
    """Order the two consecutive halves of ``values[:2 * length]`` lexicographically."""
    items = list(values)
    if length < 0 or 2 * length > len(items):
        raise ValueError("pair does not fit in the values given")
    a = items[:length]
    b = items[length:2 * length]
    head = b + a if b < a else a + b
    return head + items[2 * length:]


def verify_solution(inputs: Sequence[int]) -> Optional[List[int]]:
    """Reject solutions with duplicate indices and sort the pairs of the rest.

    Returns the canonically ordered indices, or None if any index repeats.
    """
    values = list(inputs)
    if len(values) != PROOFSIZE:
        raise ValueError(f"a solution holds {PROOFSIZE} indices, got {len(values)}")
    limit = 1 << _INDEX_BITS
    if any(not 0 <= v < limit for v in values):
        raise ValueError(f"indices must be below {limit}")
    if len(set(values)) != len(values):
        return None
    for level in range(PARAM_K):
        width = 1 << level
        step = 2 << level
        values = [
            x
            for start in range(0, PROOFSIZE, step)
            for x in sort_pair(values[start:start + step], width)
        ]
    return values


def hex2val(text: str, offset: int) -> int:
    """Value of the hex digit at ``offset`` in ``text``."""
    c = text[offset]
    if "0" <= c <= "9":
        return ord(c) - ord("0")
    if "a" <= c <= "f":
        return 10 + ord(c) - ord("a")
    if "A" <= c <= "F":
        return 10 + ord(c) - ord("A")
    raise ValueError(f"Invalid hex char at offset {offset}: ...{c}...")


def s_hexdump(data: bytes) -> str:
    """Lower-case hex of at most the first 1022 bytes of ``data``."""
    return bytes(data)[:_HEXDUMP_LIMIT].hex()


def nr_compute_units(gpu: str) -> int:
    """Number of compute units of a known GPU model."""
    try:
        return _COMPUTE_UNITS[gpu]
    except KeyError:
        raise ValueError(f"Unknown GPU: {gpu}") from None


def select_work_size_blake() -> int:
    """Global work size for the Blake kernel: a multiple of 64 dividing NR_INPUTS."""
    work_size = 64 * BLAKE_WPS * 4 * nr_compute_units("rx480")
    while NR_INPUTS % work_size:
        work_size += 64
    return work_size