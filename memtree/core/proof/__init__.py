"""Proof serialization and local verification"""
from memtree.core.proof.codec import (
    ProofArtifact,
    to_circuit_input,
    from_circuit_input,
    encode,
    decode,
    write_proof,
    read_proof,
)
from memtree.core.proof.verifier import (
    compute_root,
    verify,
    verify_all,
    tamper_leaf,
    tamper_root,
    tamper_path_element,
    negative_fixtures,
)

__all__ = [
    "ProofArtifact",
    "to_circuit_input",
    "from_circuit_input",
    "encode",
    "decode",
    "write_proof",
    "read_proof",
    "compute_root",
    "verify",
    "verify_all",
    "tamper_leaf",
    "tamper_root",
    "tamper_path_element",
    "negative_fixtures",
]
