"""
FixedDepthTree - static, zero-padded Merkle tree of a declared shape.

The leaf list is fixed at construction. Unused slots on the right are
filled with the zero sentinel, every level is materialized bottom-up, and
proofs are looked up by leaf value (first match) or by index.

Properties:
----------
- Build: O(capacity) hashes
- Root: O(1) (precomputed)
- Prove: O(depth * arity)
"""

from typing import List, Sequence, Tuple

from memtree.core.config import TreeConfig
from memtree.core.errors import (
    CapacityExceeded,
    ConfigurationError,
    IndexOutOfRange,
    LeafNotFound,
)
from memtree.core.hasher import HashAdapter
from memtree.core.tree.base import Proof, collect_path
from memtree.utils.logger import get_logger
from memtree.utils.validation import validate_capacity

logger = get_logger("tree.fixed")


class FixedDepthTree:
    """
    Complete tree over a static leaf list.

    Attributes:
        config: Tree shape
        hasher: Hash adapter for config.arity
        zeros: Per-level padding values (depth + 1 entries)
        levels: levels[0] are the padded leaves, levels[depth] == (root,)
    """

    def __init__(self, leaves: Sequence[int], config: TreeConfig, hasher: HashAdapter):
        if hasher.arity != config.arity:
            raise ConfigurationError(
                f"hasher arity {hasher.arity} does not match tree arity {config.arity}"
            )
        if len(leaves) > config.capacity:
            raise CapacityExceeded(len(leaves), config.capacity)
        valid, err = validate_capacity(config.depth, config.arity)
        if not valid:
            raise ConfigurationError(err)

        for i, leaf in enumerate(leaves):
            hasher.check_field_element(leaf, f"leaf {i}")

        self.config = config
        self.hasher = hasher
        self.zeros: Tuple[int, ...] = tuple(hasher.zero_elements(config.zero_sentinel, config.depth))
        self._leaves: Tuple[int, ...] = tuple(leaves)
        self.levels: Tuple[Tuple[int, ...], ...] = self._build_levels()

        logger.debug(
            f"Built fixed tree: depth={config.depth}, arity={config.arity}, "
            f"leaves={len(self._leaves)}/{config.capacity}, root={self.root}"
        )

    @classmethod
    def build(cls, leaves: Sequence[int], config: TreeConfig, hasher: HashAdapter) -> "FixedDepthTree":
        """Build a tree from `leaves` (alias of the constructor)."""
        return cls(leaves, config, hasher)

    def _build_levels(self) -> Tuple[Tuple[int, ...], ...]:
        arity = self.config.arity
        padding = self.config.capacity - len(self._leaves)
        layer: List[int] = list(self._leaves) + [self.zeros[0]] * padding

        levels = [tuple(layer)]
        for _ in range(self.config.depth):
            layer = [
                self.hasher.node_hash(layer[i:i + arity])
                for i in range(0, len(layer), arity)
            ]
            levels.append(tuple(layer))
        return tuple(levels)

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    @property
    def root(self) -> int:
        """Get the Merkle root."""
        return self.levels[-1][0]

    @property
    def capacity(self) -> int:
        return self.config.capacity

    @property
    def leaves(self) -> Tuple[int, ...]:
        """The caller's leaves, without padding."""
        return self._leaves

    def index_of(self, leaf: int) -> int:
        """
        First index holding `leaf`.

        Duplicate values resolve to the lowest index.

        Raises:
            LeafNotFound: If no leaf has this value
        """
        try:
            return self._leaves.index(leaf)
        except ValueError:
            raise LeafNotFound(leaf) from None

    def proof(self, leaf: int) -> Proof:
        """
        Inclusion proof for the first leaf equal to `leaf`.

        Raises:
            LeafNotFound: If no leaf has this value
        """
        return self.path(self.index_of(leaf))

    def path(self, index: int) -> Proof:
        """
        Inclusion proof for the leaf at `index`.

        Raises:
            IndexOutOfRange: If index is not one of the caller's leaves
        """
        if not isinstance(index, int) or index < 0 or index >= len(self._leaves):
            raise IndexOutOfRange(index, len(self._leaves))

        elements, indices = collect_path(
            lambda level, position: self.levels[level][position],
            index,
            self.config,
        )
        logger.debug(f"Fixed-tree proof for index {index}")
        return Proof(
            leaf=self._leaves[index],
            path_elements=elements,
            path_indices=indices,
            root=self.root,
        )

    def __len__(self) -> int:
        return len(self._leaves)

    def __contains__(self, leaf: int) -> bool:
        return leaf in self._leaves
