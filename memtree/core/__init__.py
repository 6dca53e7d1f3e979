"""Core membership-tree logic: hashing, trees, proofs"""
