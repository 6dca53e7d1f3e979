"""
Input Validation - sanitization for every value that enters the core.

Provides validation for external inputs to prevent:
- Out-of-field values reaching the hasher
- Malformed identifiers and artifacts
- Trees too large to build in memory
"""

import re
from typing import Any, Optional, Tuple

from memtree.crypto import FIELD_PRIME

# =============================================================================
# Constants
# =============================================================================

# Ethereum address: 20 bytes
ADDRESS_SIZE = 20

# Tree shape bounds
MIN_DEPTH = 1
MAX_DEPTH = 32
MIN_ARITY = 2
MAX_ARITY = 16

# Leaf count beyond which we refuse to materialize a full tree
MAX_CAPACITY = 2**24

# Canonical decimal: no sign, no leading zeros
DECIMAL_PATTERN = re.compile(r"0|[1-9][0-9]*")

HEX_PATTERN = re.compile(r"[0-9a-fA-F]*")


# =============================================================================
# Validation Functions
# =============================================================================


def validate_integer(
    value: Any,
    name: str,
    min_val: int = 0,
    max_val: Optional[int] = None,
) -> Tuple[bool, str]:
    """
    Validate integer within bounds.

    Args:
        value: Value to validate
        name: Field name for errors
        min_val: Minimum allowed value
        max_val: Maximum allowed value (None for unbounded)

    Returns:
        (is_valid, error_message)
    """
    if not isinstance(value, int) or isinstance(value, bool):
        return False, f"{name} must be int, got {type(value).__name__}"

    if value < min_val:
        return False, f"{name} must be >= {min_val}, got {value}"

    if max_val is not None and value > max_val:
        return False, f"{name} must be <= {max_val}, got {value}"

    return True, ""


def validate_field_element(value: Any, name: str = "field_element") -> Tuple[bool, str]:
    """Validate a field element (< FIELD_PRIME)."""
    return validate_integer(value, name, 0, FIELD_PRIME - 1)


def validate_decimal_string(value: Any, name: str = "value") -> Tuple[bool, str]:
    """Validate the canonical decimal form of a field element."""
    if not isinstance(value, str):
        return False, f"{name} must be str, got {type(value).__name__}"

    if not DECIMAL_PATTERN.fullmatch(value):
        return False, f"{name} is not a canonical decimal string: {value!r}"

    if int(value) >= FIELD_PRIME:
        return False, f"{name} exceeds field prime"

    return True, ""


def validate_hex_string(
    value: Any,
    name: str,
    expected_bytes: Optional[int] = None,
    require_prefix: bool = False,
) -> Tuple[bool, str]:
    """
    Validate a hex string (with or without 0x prefix).

    Args:
        value: Value to validate
        name: Field name
        expected_bytes: Expected byte length when decoded
        require_prefix: Reject strings without a 0x / 0X prefix

    Returns:
        (is_valid, error_message)
    """
    if not isinstance(value, str):
        return False, f"{name} must be str, got {type(value).__name__}"

    has_prefix = value.startswith("0x") or value.startswith("0X")
    if require_prefix and not has_prefix:
        return False, f"{name} must start with 0x"

    hex_str = value[2:] if has_prefix else value

    if len(hex_str) % 2 != 0:
        return False, f"{name} has odd length, invalid hex"

    if not HEX_PATTERN.fullmatch(hex_str):
        return False, f"{name} contains invalid hex characters"

    if expected_bytes is not None:
        actual_bytes = len(hex_str) // 2
        if actual_bytes != expected_bytes:
            return False, f"{name} must be {expected_bytes} bytes, got {actual_bytes}"

    return True, ""


def validate_address(value: Any, name: str = "address") -> Tuple[bool, str]:
    """Validate a 0x-prefixed 20-byte address, any letter case."""
    return validate_hex_string(value, name, expected_bytes=ADDRESS_SIZE, require_prefix=True)


def validate_tree_shape(depth: Any, arity: Any) -> Tuple[bool, str]:
    """
    Validate a (depth, arity) pair.

    Returns:
        (is_valid, error_message)
    """
    valid, err = validate_integer(depth, "depth", MIN_DEPTH, MAX_DEPTH)
    if not valid:
        return False, err

    return validate_integer(arity, "arity", MIN_ARITY, MAX_ARITY)


def validate_capacity(depth: int, arity: int, max_capacity: int = MAX_CAPACITY) -> Tuple[bool, str]:
    """Check that a fully materialized tree of this shape fits in memory."""
    if arity ** depth > max_capacity:
        return False, f"capacity {arity}^{depth} exceeds {max_capacity} leaves"
    return True, ""


# =============================================================================
# Module Exports
# =============================================================================

__all__ = [
    "validate_integer",
    "validate_field_element",
    "validate_decimal_string",
    "validate_hex_string",
    "validate_address",
    "validate_tree_shape",
    "validate_capacity",
    "ADDRESS_SIZE",
    "MAX_DEPTH",
    "MAX_ARITY",
    "MAX_CAPACITY",
]
