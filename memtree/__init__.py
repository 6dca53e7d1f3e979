"""
memtree

Merkle membership trees over Poseidon for zero-knowledge inclusion proofs:
- Address list to field-element leaves
- Fixed-depth and incremental trees with identical roots
- Circuit-input proof artifacts and local verification
- snarkjs prover boundary and Solidity calldata
"""
