"""
Poseidon Hash Function for memtree.

This module provides ZK-friendly hashing using the Poseidon hash function,
which is optimized for arithmetic circuits (low constraint count in SNARKs).

The parameters are circomlib's, so hashes computed here match the Poseidon
templates used by the membership circuit. Round constants and matrices come
from circomlibpy, which ships the optimized constant set of circomlibjs
(poseidon_constants_opt).

The sponge width follows the number of inputs (t = inputs + 1), so the same
function serves leaf hashing (1 input), binary trees (2 inputs) and n-ary
trees (up to 16 inputs).

References:
- Poseidon paper: https://eprint.iacr.org/2019/458
- circomlib implementation: https://github.com/iden3/circomlib

Parameters (BN254 / alt_bn128):
- Field: 21888242871839275222246405745257275088548364400416034343698204186575808495617
- t = len(inputs) + 1 (inputs + 1 capacity element)
- rounds_f=8 (full rounds)
- rounds_p from the per-width table below (partial rounds)
- alpha=5 (S-box exponent)
"""

from functools import lru_cache
from typing import List, NamedTuple, Sequence, Tuple

from circomlibpy.poseidon_constants import opt_c, opt_m, opt_p, opt_s
from py_ecc.bn128 import curve_order

# BN254 scalar field prime
FIELD_PRIME = curve_order

# Full rounds are the same for every width
ROUNDS_F = 8

# Partial rounds indexed by t - 2 (t = 2 .. 17)
ROUNDS_P = [56, 57, 56, 60, 60, 63, 64, 63, 60, 66, 60, 65, 70, 60, 64, 68]

MAX_INPUTS = len(ROUNDS_P)


# =============================================================================
# Constants
# =============================================================================


class PoseidonConstants(NamedTuple):
    """
    Optimized constant set for one width.

    C: ROUNDS_F * t + rounds_p round constants
    S: sparse matrices of the partial rounds, (2t - 1) entries per round
    M: MDS matrix
    P: pre-sparse matrix applied before the partial rounds
    """
    C: Tuple[int, ...]
    S: Tuple[int, ...]
    M: Tuple[Tuple[int, ...], ...]
    P: Tuple[Tuple[int, ...], ...]


@lru_cache(maxsize=None)
def get_constants(t: int) -> PoseidonConstants:
    """Get the circomlib constants for width t."""
    if not 2 <= t <= MAX_INPUTS + 1:
        raise ValueError(f"Unsupported Poseidon width t={t}")

    return PoseidonConstants(
        C=tuple(opt_c(t)),
        S=tuple(opt_s(t)),
        M=tuple(tuple(row) for row in opt_m(t)),
        P=tuple(tuple(row) for row in opt_p(t)),
    )


# =============================================================================
# Poseidon Core Implementation
# =============================================================================


def _sbox(x: int) -> int:
    """Apply S-box: x^5 mod p."""
    return pow(x, 5, FIELD_PRIME)


def _mix(state: List[int], matrix: Sequence[Sequence[int]]) -> List[int]:
    """Multiply state by a (column-major) matrix, as circomlib lays it out."""
    t = len(state)
    result = []
    for i in range(t):
        acc = 0
        for j in range(t):
            acc += matrix[j][i] * state[j]
        result.append(acc % FIELD_PRIME)
    return result


def _add_round_constants(state: List[int], constants: Sequence[int], offset: int) -> List[int]:
    """Add round constants to state."""
    return [(x + constants[offset + i]) % FIELD_PRIME for i, x in enumerate(state)]


def _full_round(state: List[int], constants: Sequence[int], offset: int, matrix: Sequence[Sequence[int]]) -> List[int]:
    """S-box on all elements, then constants, then mix."""
    state = [_sbox(x) for x in state]
    state = _add_round_constants(state, constants, offset)
    return _mix(state, matrix)


def _partial_round(state: List[int], c: PoseidonConstants, round_idx: int, constant_idx: int) -> List[int]:
    """S-box on the first element only, then the sparse matrix of this round."""
    t = len(state)
    sparse = (2 * t - 1) * round_idx

    first = (_sbox(state[0]) + c.C[constant_idx]) % FIELD_PRIME
    state = [first] + state[1:]

    mixed = sum(c.S[sparse + j] * x for j, x in enumerate(state)) % FIELD_PRIME
    rest = [(state[k] + first * c.S[sparse + t + k - 1]) % FIELD_PRIME for k in range(1, t)]
    return [mixed] + rest


def poseidon_hash(inputs: Sequence[int], domain_sep: int = 0) -> int:
    """
    Compute Poseidon hash of inputs.

    Args:
        inputs: 1 to MAX_INPUTS field elements (integers < FIELD_PRIME)
        domain_sep: Optional domain separator, used as circomlib's initial state

    Returns:
        Hash as a field element (integer)

    Raises:
        ValueError: If inputs are out of range or wrong count
    """
    if not 1 <= len(inputs) <= MAX_INPUTS:
        raise ValueError(f"Poseidon takes 1 to {MAX_INPUTS} inputs, got {len(inputs)}")

    for i, val in enumerate(inputs):
        if not isinstance(val, int) or not (0 <= val < FIELD_PRIME):
            raise ValueError(f"Input {i} out of field range: {val}")

    t = len(inputs) + 1
    c = get_constants(t)
    half_f = ROUNDS_F // 2
    rounds_p = ROUNDS_P[t - 2]

    # Initialize state: [capacity, input1, ..., inputN]
    state = [domain_sep % FIELD_PRIME] + list(inputs)
    state = _add_round_constants(state, c.C, 0)

    # First half of full rounds, the last one mixing with P
    for r in range(half_f - 1):
        state = _full_round(state, c.C, (r + 1) * t, c.M)
    state = _full_round(state, c.C, half_f * t, c.P)

    # Partial rounds
    for r in range(rounds_p):
        state = _partial_round(state, c, r, (half_f + 1) * t + r)

    # Second half of full rounds, the last one without constants
    for r in range(half_f - 1):
        state = _full_round(state, c.C, (half_f + 1) * t + rounds_p + r * t, c.M)
    state = _mix([_sbox(x) for x in state], c.M)

    return state[0]


# =============================================================================
# Convenience Functions
# =============================================================================


def poseidon2(a: int, b: int, domain_sep: int = 0) -> int:
    """Hash two field elements."""
    return poseidon_hash([a, b], domain_sep)


def poseidon1(a: int, domain_sep: int = 0) -> int:
    """Hash one field element."""
    return poseidon_hash([a], domain_sep)
