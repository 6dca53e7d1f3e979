"""
HashAdapter - the only place tree code meets the hash primitive.

Both tree variants and the verifier call leaf_hash / node_hash on an
adapter they are given; none of them import Poseidon directly. The
adapter is polymorphic over pairwise (arity 2) and n-ary combination, so
one tree implementation serves both shapes.

Field semantics live here too: values are reduced modulo the field before
they reach the primitive, and is_field_element() is the single canonical
range check used elsewhere.

Usage:
    hasher = build_hash_adapter(arity=2)
    leaf = hasher.leaf_hash("0xAbC...")
    parent = hasher.node_hash([left, right])
"""

from enum import Enum
from typing import Callable, List, Optional, Sequence

from memtree.core.errors import ConfigurationError, HashInputError
from memtree.core.identifiers import address_to_field, parse_address
from memtree.crypto import FIELD_PRIME, MAX_INPUTS, poseidon_hash
from memtree.utils.logger import get_logger

logger = get_logger("hasher")

# Opaque hash-over-field-elements: list of field elements -> field element
FieldHash = Callable[[Sequence[int]], int]


class HashMode(Enum):
    """How children are combined"""

    PAIRWISE = "pairwise"
    NARY = "nary"


class HashAdapter:
    """
    Wraps a hash primitive for one tree arity.

    Attributes:
        arity: Number of children per internal node
        mode: PAIRWISE for arity 2, NARY otherwise
        modulus: Field modulus values are reduced by
    """

    def __init__(self, primitive: FieldHash, arity: int, modulus: int = FIELD_PRIME):
        if arity < 2:
            raise ConfigurationError(f"arity must be >= 2, got {arity}")
        self._primitive = primitive
        self.arity = arity
        self.modulus = modulus
        self.mode = HashMode.PAIRWISE if arity == 2 else HashMode.NARY

    def __repr__(self) -> str:
        return f"HashAdapter(arity={self.arity}, mode={self.mode.value})"

    # -------------------------------------------------------------------------
    # Field range
    # -------------------------------------------------------------------------

    def is_field_element(self, value: object) -> bool:
        """True for canonical field elements: ints in [0, modulus)."""
        return isinstance(value, int) and not isinstance(value, bool) and 0 <= value < self.modulus

    def check_field_element(self, value: object, name: str = "value") -> int:
        """Return value unchanged or raise HashInputError."""
        if not self.is_field_element(value):
            raise HashInputError(f"{name} is not a field element: {value!r}")
        return value

    # -------------------------------------------------------------------------
    # Hashing
    # -------------------------------------------------------------------------

    def leaf_hash(self, identifier: str) -> int:
        """
        Hash one member identifier into a leaf.

        The identifier is normalized to lowercase first.

        Raises:
            AddressParseError: If the identifier is malformed
        """
        address = parse_address(identifier)
        return self._primitive([address_to_field(address)])

    def node_hash(self, children: Sequence[int]) -> int:
        """
        Hash exactly `arity` children into their parent.

        Raises:
            HashInputError: On a wrong child count or non-integer child
        """
        if len(children) != self.arity:
            raise HashInputError(
                f"node_hash expects {self.arity} children, got {len(children)}"
            )
        reduced = []
        for i, child in enumerate(children):
            if not isinstance(child, int) or isinstance(child, bool):
                raise HashInputError(f"child {i} is not an integer: {child!r}")
            reduced.append(child % self.modulus)
        return self._primitive(reduced)

    def hash_pair(self, left: int, right: int) -> int:
        """Pairwise hash; only available on binary adapters."""
        if self.mode is not HashMode.PAIRWISE:
            raise HashInputError(f"hash_pair used on an arity-{self.arity} adapter")
        return self.node_hash([left, right])

    def zero_elements(self, sentinel: int, depth: int) -> List[int]:
        """
        Per-level padding values.

        zeros[0] is the sentinel and zeros[i + 1] hashes `arity` copies of
        zeros[i]. Returns depth + 1 values.
        """
        self.check_field_element(sentinel, "zero sentinel")
        zeros = [sentinel]
        for _ in range(depth):
            zeros.append(self.node_hash([zeros[-1]] * self.arity))
        return zeros


def build_hash_adapter(arity: int, primitive: Optional[FieldHash] = None) -> HashAdapter:
    """
    Initialize the hash primitive and wrap it for `arity`.

    With no primitive, Poseidon is used: its constants for the leaf width
    and the node width are loaded here, once, so later hashing does not
    pay for it and an unsupported arity fails before any tree is built.

    Raises:
        ConfigurationError: If the primitive cannot hash `arity` inputs
    """
    if primitive is None:
        if not 2 <= arity <= MAX_INPUTS:
            raise ConfigurationError(
                f"Poseidon supports arity 2..{MAX_INPUTS}, got {arity}"
            )
        primitive = poseidon_hash

    adapter = HashAdapter(primitive, arity)
    try:
        adapter.node_hash([0] * arity)
        primitive([0])
    except ValueError as e:
        raise ConfigurationError(f"hash primitive rejected arity {arity}: {e}") from e

    logger.debug(f"Hash adapter ready: arity={arity}, mode={adapter.mode.value}")
    return adapter
