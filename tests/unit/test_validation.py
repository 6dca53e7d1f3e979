"""
Tests for input validation helpers.
"""

import pytest
from memtree.crypto import FIELD_PRIME
from memtree.utils.validation import (
    MAX_CAPACITY,
    validate_address,
    validate_capacity,
    validate_decimal_string,
    validate_field_element,
    validate_hex_string,
    validate_integer,
    validate_tree_shape,
)


class TestIntegers:
    """validate_integer / validate_field_element"""

    def test_in_range(self):
        """Values inside the bounds pass with no message."""
        assert validate_integer(5, "x", 0, 10) == (True, "")

    def test_below_min(self):
        """Below the minimum fails and names the field."""
        valid, err = validate_integer(-1, "x")
        assert not valid
        assert "x" in err

    def test_above_max(self):
        """Above the maximum fails."""
        valid, _ = validate_integer(11, "x", 0, 10)
        assert not valid

    def test_bool_rejected(self):
        """Booleans are not integers here."""
        valid, _ = validate_integer(True, "x")
        assert not valid

    def test_string_rejected(self):
        """Numeric strings are not integers."""
        valid, _ = validate_integer("5", "x")
        assert not valid

    def test_field_element_bounds(self):
        """Field elements are in [0, p)."""
        assert validate_field_element(FIELD_PRIME - 1)[0]
        assert not validate_field_element(FIELD_PRIME)[0]


class TestDecimalStrings:
    """Canonical decimal strings."""

    @pytest.mark.parametrize("value", ["0", "1", "1234567890"])
    def test_canonical(self, value):
        """Plain base-10 without leading zeros."""
        assert validate_decimal_string(value)[0]

    @pytest.mark.parametrize("value", ["", "01", "-1", "+1", "1.0", " 1", "1\n", "0x10"])
    def test_non_canonical(self, value):
        """Signs, padding, whitespace and other bases are rejected."""
        assert not validate_decimal_string(value)[0]

    def test_int_rejected(self):
        """Only strings are decimal strings."""
        assert not validate_decimal_string(5)[0]

    def test_out_of_field(self):
        """The field prime itself is out of range."""
        assert not validate_decimal_string(str(FIELD_PRIME))[0]


class TestHexStrings:
    """Hex strings and addresses."""

    def test_prefix_optional(self):
        """0x is optional by default."""
        assert validate_hex_string("abcd", "h")[0]
        assert validate_hex_string("0xabcd", "h")[0]

    def test_prefix_required(self):
        """require_prefix demands 0x."""
        assert not validate_hex_string("abcd", "h", require_prefix=True)[0]

    def test_odd_length(self):
        """Hex must be whole bytes."""
        assert not validate_hex_string("abc", "h")[0]

    def test_byte_length(self):
        """expected_bytes is enforced and reported."""
        valid, err = validate_hex_string("0xabcd", "h", expected_bytes=3)
        assert not valid
        assert "3 bytes" in err

    def test_address(self):
        """Addresses are 20 bytes of hex after 0x."""
        assert validate_address("0x" + "0" * 40)[0]
        assert validate_address("0xAbCdEf" + "0" * 34)[0]
        assert not validate_address("0x" + "0" * 38)[0]
        assert not validate_address("0x" + "g" * 40)[0]
        assert not validate_address("0x" + "a" * 38 + " a")[0]


class TestTreeShape:
    """Depth / arity / capacity bounds."""

    def test_valid_shapes(self):
        """Depth 1..32 and arity 2..16 are accepted."""
        assert validate_tree_shape(1, 2)[0]
        assert validate_tree_shape(32, 16)[0]

    def test_zero_depth(self):
        """Depth 0 is rejected."""
        assert not validate_tree_shape(0, 2)[0]

    def test_unary(self):
        """Arity 1 is rejected."""
        assert not validate_tree_shape(3, 1)[0]

    def test_arity_too_large(self):
        """Arity above Poseidon's widest sponge is rejected."""
        assert not validate_tree_shape(3, 17)[0]

    def test_capacity(self):
        """Materialized trees stop at MAX_CAPACITY leaves."""
        assert validate_capacity(24, 2)[0]
        assert not validate_capacity(25, 2)[0]
        assert not validate_capacity(2, 2, max_capacity=3)[0]
        assert MAX_CAPACITY == 2 ** 24


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
