"""
Error taxonomy for memtree.

Every error is local and fail-fast: the operation that raised it is
aborted and no partially built tree or proof is handed back. Each class
also derives from the built-in exception callers would otherwise catch
(ValueError, IndexError, LookupError).
"""

from typing import Any, Optional


class MemTreeError(Exception):
    """Base exception for memtree errors."""

    pass


class ConfigurationError(MemTreeError, ValueError):
    """Invalid tree shape or settings value."""

    pass


class AddressParseError(MemTreeError, ValueError):
    """Malformed member identifier in the source list."""

    def __init__(self, value: Any, index: Optional[int] = None, reason: str = "malformed address"):
        self.value = value
        self.index = index
        where = f" at index {index}" if index is not None else ""
        super().__init__(f"{reason}{where}: {value!r}")


class HashInputError(MemTreeError, ValueError):
    """Wrong number of children (or a non-field value) passed to the hasher."""

    pass


class CapacityExceeded(MemTreeError, ValueError):
    """More leaves than arity ** depth."""

    def __init__(self, count: int, capacity: int):
        self.count = count
        self.capacity = capacity
        super().__init__(f"{count} leaves exceed tree capacity {capacity}")


class LeafNotFound(MemTreeError, LookupError):
    """No leaf matches the requested value."""

    def __init__(self, leaf: int):
        self.leaf = leaf
        super().__init__(f"Leaf {leaf} not found in tree")


class IndexOutOfRange(MemTreeError, IndexError):
    """Requested leaf index has not been inserted."""

    def __init__(self, index: int, leaf_count: int):
        self.index = index
        self.leaf_count = leaf_count
        super().__init__(f"Leaf index {index} out of range [0, {leaf_count})")


class ProofFormatError(MemTreeError, ValueError):
    """Malformed or length-mismatched serialized proof."""

    pass


__all__ = [
    "MemTreeError",
    "ConfigurationError",
    "AddressParseError",
    "HashInputError",
    "CapacityExceeded",
    "LeafNotFound",
    "IndexOutOfRange",
    "ProofFormatError",
]
