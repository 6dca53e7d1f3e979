"""
Shared tree types: the Proof snapshot and the authentication-path walk.

Proof shape
-----------
path_indices[level] is the position (0 .. arity-1) of the path node inside
its block of `arity` siblings. path_elements[level] holds the other
members of that block, left to right:

- arity == 2: a single field element per level (flat tuple), the shape the
  binary inclusion circuit takes
- arity > 2: a tuple of arity - 1 field elements per level
"""

from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple, Union

from memtree.core.config import TreeConfig

PathElement = Union[int, Tuple[int, ...]]


@dataclass(frozen=True)
class Proof:
    """
    Inclusion proof for one leaf.

    Invariant: folding node_hash from `leaf` along path_elements /
    path_indices reproduces `root`.
    """
    leaf: int
    path_elements: Tuple[PathElement, ...]
    path_indices: Tuple[int, ...]
    root: int

    @property
    def depth(self) -> int:
        return len(self.path_indices)

    def leaf_index(self, arity: int) -> int:
        """Recover the leaf's index from its path positions."""
        index = 0
        for position in reversed(self.path_indices):
            index = index * arity + position
        return index

    def sibling_group(self, level: int) -> List[int]:
        """Siblings at `level` as a list, for either proof shape."""
        element = self.path_elements[level]
        if isinstance(element, (tuple, list)):
            return list(element)
        return [element]


def shape_error(proof: Proof, config: TreeConfig) -> Optional[str]:
    """
    Describe why `proof` does not fit `config`, or None if it does.

    Checks lengths, sibling group sizes, index ranges and element types;
    field range is left to the hasher.
    """
    if len(proof.path_indices) != config.depth:
        return f"pathIndices has {len(proof.path_indices)} entries, expected {config.depth}"
    if len(proof.path_elements) != config.depth:
        return f"pathElements has {len(proof.path_elements)} entries, expected {config.depth}"

    for level, position in enumerate(proof.path_indices):
        if not _is_int(position) or not 0 <= position < config.arity:
            return f"pathIndices[{level}]={position!r} not in [0, {config.arity})"

        element = proof.path_elements[level]
        if config.arity == 2:
            if not _is_int(element):
                return f"pathElements[{level}] must be a single element for arity 2"
        else:
            if not isinstance(element, (tuple, list)) or len(element) != config.arity - 1:
                return f"pathElements[{level}] must hold {config.arity - 1} siblings"
            if not all(_is_int(e) for e in element):
                return f"pathElements[{level}] holds a non-integer sibling"

    if not _is_int(proof.leaf) or not _is_int(proof.root):
        return "leaf and root must be integers"
    return None


def _is_int(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def pack_siblings(group: Sequence[int], arity: int) -> PathElement:
    """Store one level's siblings in the shape used for this arity."""
    if arity == 2:
        return group[0]
    return tuple(group)


def collect_path(
    node_at: Callable[[int, int], int],
    index: int,
    config: TreeConfig,
) -> Tuple[Tuple[PathElement, ...], Tuple[int, ...]]:
    """
    Walk from leaf `index` to the root collecting siblings and positions.

    Args:
        node_at: (level, position) -> node value, zero-padded by the caller
        index: Leaf index
        config: Tree shape

    Returns:
        (path_elements, path_indices)
    """
    arity = config.arity
    elements: List[PathElement] = []
    indices: List[int] = []

    for level in range(config.depth):
        position = index % arity
        start = index - position
        group = [node_at(level, start + i) for i in range(arity) if i != position]
        elements.append(pack_siblings(group, arity))
        indices.append(position)
        index //= arity

    return tuple(elements), tuple(indices)
