"""
IncrementalTree - append-only Merkle tree built one leaf at a time.

Only the filled prefix of each level is stored. Inserting leaf i rehashes
the depth nodes on i's path to the root; the other members of each block
come from the stored prefix or, where the subtree is still empty, from
zeros[level]. The result is identical to a FixedDepthTree over the same
leaves, without rebuilding the whole tree per insertion.

Properties:
----------
- Insert: O(depth * arity)
- Root: O(1)
- Prove: O(depth * arity)
"""

from typing import Iterable, List, Tuple

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

logger = get_logger("tree.incremental")


class IncrementalTree:
    """
    Append-only tree of fixed depth and arity.

    Attributes:
        config: Tree shape
        hasher: Hash adapter for config.arity
        zeros: Per-level padding values (depth + 1 entries)
    """

    def __init__(self, config: TreeConfig, hasher: HashAdapter):
        if hasher.arity != config.arity:
            raise ConfigurationError(
                f"hasher arity {hasher.arity} does not match tree arity {config.arity}"
            )
        self.config = config
        self.hasher = hasher
        self.zeros: Tuple[int, ...] = tuple(hasher.zero_elements(config.zero_sentinel, config.depth))

        # _nodes[level] is the filled prefix of that level; _nodes[0] are the leaves
        self._nodes: List[List[int]] = [[] for _ in range(config.depth)]
        self._root: int = self.zeros[config.depth]

    @property
    def root(self) -> int:
        """Current root; zeros[depth] while the tree is empty."""
        return self._root

    @property
    def capacity(self) -> int:
        return self.config.capacity

    @property
    def leaves(self) -> Tuple[int, ...]:
        return tuple(self._nodes[0])

    def _node_at(self, level: int, position: int) -> int:
        nodes = self._nodes[level]
        return nodes[position] if position < len(nodes) else self.zeros[level]

    def insert(self, leaf: int) -> int:
        """
        Append a leaf and update its path to the root.

        Args:
            leaf: Field element to insert

        Returns:
            Index of the inserted leaf

        Raises:
            CapacityExceeded: If the tree already holds arity ** depth leaves
            HashInputError: If leaf is not a field element
        """
        count = len(self._nodes[0])
        if count >= self.config.capacity:
            raise CapacityExceeded(count + 1, self.config.capacity)
        self.hasher.check_field_element(leaf, f"leaf {count}")

        arity = self.config.arity

        # Compute the new path first, then commit it, so a hashing failure
        # leaves the tree untouched.
        path: List[int] = []
        node = leaf
        index = count
        for level in range(self.config.depth):
            path.append(node)
            position = index % arity
            start = index - position
            children = [
                node if start + i == index else self._node_at(level, start + i)
                for i in range(arity)
            ]
            node = self.hasher.node_hash(children)
            index //= arity

        index = count
        for level, value in enumerate(path):
            nodes = self._nodes[level]
            if index < len(nodes):
                nodes[index] = value
            else:
                nodes.append(value)
            index //= arity
        self._root = node

        logger.debug(f"Inserted leaf {count}, root={self._root}")
        return count

    def insert_many(self, leaves: Iterable[int]) -> List[int]:
        """Insert leaves in order; returns their indices."""
        return [self.insert(leaf) for leaf in leaves]

    def index_of(self, leaf: int) -> int:
        """First index holding `leaf`; LeafNotFound if absent."""
        try:
            return self._nodes[0].index(leaf)
        except ValueError:
            raise LeafNotFound(leaf) from None

    def proof(self, index: int) -> Proof:
        """
        Inclusion proof for the leaf at `index`.

        Raises:
            IndexOutOfRange: If index has not been inserted
        """
        count = len(self._nodes[0])
        if not isinstance(index, int) or index < 0 or index >= count:
            raise IndexOutOfRange(index, count)

        elements, indices = collect_path(self._node_at, index, self.config)
        logger.debug(f"Incremental-tree proof for index {index}")
        return Proof(
            leaf=self._nodes[0][index],
            path_elements=elements,
            path_indices=indices,
            root=self._root,
        )

    def __len__(self) -> int:
        return len(self._nodes[0])

    def __contains__(self, leaf: int) -> bool:
        return leaf in self._nodes[0]
