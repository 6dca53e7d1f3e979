"""Merkle tree variants: static fixed-depth and append-only incremental"""
from memtree.core.tree.base import Proof, collect_path, pack_siblings, shape_error
from memtree.core.tree.fixed import FixedDepthTree
from memtree.core.tree.incremental import IncrementalTree

__all__ = [
    "Proof",
    "collect_path",
    "pack_siblings",
    "shape_error",
    "FixedDepthTree",
    "IncrementalTree",
]
