"""
LocalVerifier - recompute a root from a leaf and its proof.

Used to pre-check genuine proofs before handing them to the (expensive)
external prover, and to build negative fixtures: a proof with exactly one
field perturbed must fail verification.
"""

import dataclasses
from typing import Iterator, List, Tuple

from memtree.core.config import TreeConfig
from memtree.core.errors import ProofFormatError
from memtree.core.hasher import HashAdapter
from memtree.core.tree.base import PathElement, Proof, pack_siblings, shape_error
from memtree.utils.logger import get_logger

logger = get_logger("proof.verifier")


# =============================================================================
# Verification
# =============================================================================


def compute_root(proof: Proof, config: TreeConfig, hasher: HashAdapter) -> int:
    """
    Fold node_hash from the leaf up the recorded path.

    Raises:
        ProofFormatError: If the proof does not fit the tree shape
    """
    err = shape_error(proof, config)
    if err:
        raise ProofFormatError(err)

    current = proof.leaf
    for level, position in enumerate(proof.path_indices):
        group = proof.sibling_group(level)
        group.insert(position, current)
        current = hasher.node_hash(group)
    return current


def verify(proof: Proof, config: TreeConfig, hasher: HashAdapter) -> bool:
    """
    Check that `proof` reproduces its root.

    Never raises: a malformed proof, an out-of-field value or a root
    mismatch all return False.
    """
    if hasher.arity != config.arity:
        logger.debug(f"Rejected: hasher arity {hasher.arity} != tree arity {config.arity}")
        return False

    err = shape_error(proof, config)
    if err:
        logger.debug(f"Rejected: {err}")
        return False

    values = [proof.leaf, proof.root]
    for level in range(proof.depth):
        values.extend(proof.sibling_group(level))
    if not all(hasher.is_field_element(v) for v in values):
        logger.debug("Rejected: proof holds a value outside the field")
        return False

    computed = compute_root(proof, config, hasher)
    if computed != proof.root:
        logger.debug(f"Rejected: computed root {computed} != claimed root {proof.root}")
        return False
    return True


# =============================================================================
# Negative Fixtures
# =============================================================================


def _check_delta(delta: int) -> None:
    if delta == 0:
        raise ValueError("delta must be nonzero")


def tamper_leaf(proof: Proof, delta: int = 1) -> Proof:
    """Copy of `proof` with leaf shifted by delta."""
    _check_delta(delta)
    return dataclasses.replace(proof, leaf=proof.leaf + delta)


def tamper_root(proof: Proof, delta: int = 1) -> Proof:
    """Copy of `proof` with root shifted by delta."""
    _check_delta(delta)
    return dataclasses.replace(proof, root=proof.root + delta)


def tamper_path_element(proof: Proof, level: int, position: int = 0, delta: int = 1) -> Proof:
    """
    Copy of `proof` with one sibling shifted by delta.

    Args:
        level: Tree level of the sibling
        position: Index within that level's sibling group (0 for binary)
        delta: Nonzero amount added to the sibling
    """
    _check_delta(delta)
    group = proof.sibling_group(level)
    if not 0 <= position < len(group):
        raise IndexError(f"level {level} has {len(group)} siblings, no position {position}")
    group[position] += delta

    element: PathElement
    if isinstance(proof.path_elements[level], (tuple, list)):
        element = tuple(group)
    else:
        element = pack_siblings(group, 2)

    elements = list(proof.path_elements)
    elements[level] = element
    return dataclasses.replace(proof, path_elements=tuple(elements))


def negative_fixtures(proof: Proof, delta: int = 1) -> Iterator[Tuple[str, Proof]]:
    """
    Yield (label, tampered proof) for the leaf, every sibling and the root.

    Labels: "leaf", "pathElements[<level>]" or
    "pathElements[<level>][<position>]" for grouped proofs, "root".
    """
    yield "leaf", tamper_leaf(proof, delta)

    for level in range(proof.depth):
        grouped = isinstance(proof.path_elements[level], (tuple, list))
        for position in range(len(proof.sibling_group(level))):
            label = f"pathElements[{level}][{position}]" if grouped else f"pathElements[{level}]"
            yield label, tamper_path_element(proof, level, position, delta)

    yield "root", tamper_root(proof, delta)


def verify_all(proofs: List[Proof], config: TreeConfig, hasher: HashAdapter) -> bool:
    """True if every proof verifies."""
    return all(verify(p, config, hasher) for p in proofs)


__all__ = [
    "compute_root",
    "verify",
    "verify_all",
    "tamper_leaf",
    "tamper_root",
    "tamper_path_element",
    "negative_fixtures",
]
