"""
Cryptographic primitives for memtree.

This module provides:
- Poseidon hash over the BN254 scalar field (tree and leaf hashing)
- Keccak-256 (Ethereum-style, used for EIP-55 address checksums)
- Address format and EIP-55 checksum helpers

Design Notes:
-------------
Poseidon is the only hash that ever touches tree values: leaves and
internal nodes must be recomputable inside the membership circuit, so
they use the arithmetic-friendly hash.

Keccak is retained for:
- EIP-55 checksummed display of member addresses
"""

import string

from Crypto.Hash import keccak


# =============================================================================
# Hashing
# =============================================================================


def keccak256(data: bytes) -> bytes:
    """
    Compute Keccak-256 hash (Ethereum-style).

    Used for: EIP-55 checksum addresses.
    """
    k = keccak.new(digest_bits=256)
    k.update(data)
    return k.digest()


# =============================================================================
# Addresses
# =============================================================================


def is_valid_address(address: str) -> bool:
    """Check if string is a valid address format (any letter case)."""
    if not isinstance(address, str):
        return False
    if not (address.startswith("0x") or address.startswith("0X")):
        return False
    if len(address) != 42:  # 0x + 40 hex chars
        return False
    return all(c in string.hexdigits for c in address[2:])


def to_checksum_address(address: str) -> str:
    """
    Return the EIP-55 mixed-case form of an address.

    Each hex letter is uppercased when the matching nibble of
    keccak256(lowercase_hex) is >= 8.
    """
    if not is_valid_address(address):
        raise ValueError(f"Invalid address: {address!r}")

    lowered = address[2:].lower()
    digest = keccak256(lowered.encode("ascii")).hex()

    chars = []
    for i, ch in enumerate(lowered):
        if ch.isalpha() and int(digest[i], 16) >= 8:
            chars.append(ch.upper())
        else:
            chars.append(ch)
    return "0x" + "".join(chars)


# =============================================================================
# Poseidon Hash (ZK-friendly)
# =============================================================================

from memtree.crypto.poseidon import (
    poseidon_hash,
    poseidon1,
    poseidon2,
    FIELD_PRIME,
    MAX_INPUTS,
)
