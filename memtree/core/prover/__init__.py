"""External snarkjs prover boundary"""

from memtree.core.prover.prover import (
    PLONK_PROOF_LENGTH,
    ProofBundle,
    SnarkJSProver,
    SolidityCalldata,
    parse_solidity_calldata,
)

__all__ = [
    "PLONK_PROOF_LENGTH",
    "ProofBundle",
    "SnarkJSProver",
    "SolidityCalldata",
    "parse_solidity_calldata",
]
