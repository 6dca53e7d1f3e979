"""
ZK Prover boundary - hand proof artifacts to snarkjs and read back calldata.

The membership circuit is compiled and set up outside this package. This
module only:
1. Writes the circuit input for a Proof and runs `snarkjs plonk fullprove`
2. Verifies the resulting proof with `snarkjs plonk verify`
3. Exports and parses Solidity calldata for the on-chain verifier:
   verifyProof(uint256[24] proof, uint256[N] pubSignals)

Subprocess failures are reported as (None, error_message) / (False, error)
tuples rather than exceptions, so a pipeline can log and stop.
"""

import json
import re
import subprocess
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple

from memtree.core.errors import ProofFormatError
from memtree.core.proof.codec import to_circuit_input
from memtree.core.tree.base import Proof
from memtree.utils.logger import get_logger

logger = get_logger("prover")

# PLONK proof as laid out by snarkjs exportSolidityCallData
PLONK_PROOF_LENGTH = 24

_CALLDATA_ARRAYS = re.compile(r"\[([^\[\]]*)\]")


# =============================================================================
# Solidity Calldata
# =============================================================================


@dataclass
class SolidityCalldata:
    """
    Arguments for the verifier contract's verifyProof method.
    """
    proof: List[int]
    public_signals: List[int]

    def as_args(self) -> Tuple[List[int], List[int]]:
        return list(self.proof), list(self.public_signals)

    def tampered_public_signals(self) -> "SolidityCalldata":
        """Every public signal + 1; the verifier must reject it."""
        return SolidityCalldata(
            proof=list(self.proof),
            public_signals=[x + 1 for x in self.public_signals],
        )

    def tampered_proof(self) -> "SolidityCalldata":
        """First proof element + 1; the verifier must reject it."""
        proof = list(self.proof)
        proof[0] += 1
        return SolidityCalldata(proof=proof, public_signals=list(self.public_signals))

    def to_dict(self) -> dict:
        """Convert to JSON-serializable dict (hex strings, as snarkjs emits)."""
        return {
            "proof": [hex(x) for x in self.proof],
            "publicSignals": [hex(x) for x in self.public_signals],
        }


def _parse_uint(token: str) -> int:
    token = token.strip().strip('"').strip("'")
    if not token:
        raise ValueError("empty value")
    value = int(token, 16) if token.lower().startswith("0x") else int(token, 10)
    if value < 0:
        raise ValueError("negative value")
    return value


def parse_solidity_calldata(raw: str, proof_length: Optional[int] = PLONK_PROOF_LENGTH) -> SolidityCalldata:
    """
    Parse snarkjs Solidity calldata.

    snarkjs prints two bracketed arrays back to back, "[..][..]"; the
    first is the proof, the second the public signals.

    Args:
        raw: Calldata text
        proof_length: Expected number of proof elements (None to skip)

    Raises:
        ProofFormatError: If the text is not two arrays of uint256 values
    """
    arrays = _CALLDATA_ARRAYS.findall(raw)
    if len(arrays) != 2:
        raise ProofFormatError(f"expected 2 calldata arrays, found {len(arrays)}")

    parsed = []
    for name, body in zip(("proof", "publicSignals"), arrays):
        tokens = [t for t in body.split(",") if t.strip()]
        try:
            values = [_parse_uint(t) for t in tokens]
        except ValueError as e:
            raise ProofFormatError(f"{name}: invalid uint256 in calldata: {e}") from e
        if any(v >= 2**256 for v in values):
            raise ProofFormatError(f"{name}: value exceeds uint256")
        parsed.append(values)

    proof, public_signals = parsed
    if proof_length is not None and len(proof) != proof_length:
        raise ProofFormatError(f"proof has {len(proof)} elements, expected {proof_length}")
    if not public_signals:
        raise ProofFormatError("calldata has no public signals")

    return SolidityCalldata(proof=proof, public_signals=public_signals)


# =============================================================================
# snarkjs Prover
# =============================================================================


@dataclass
class ProofBundle:
    """Files produced by one external proving run."""
    proof_path: Path
    public_path: Path
    public_signals: List[str] = field(default_factory=list)
    proving_time_ms: int = 0
    verified: bool = False


class SnarkJSProver:
    """
    External PLONK prover using snarkjs via subprocess.

    Requires:
    - Node.js installed
    - snarkjs installed globally (npm install -g snarkjs)
    - Compiled circuit files (<name>.wasm, <name>_final.zkey, verification_key.json)
    """

    def __init__(
        self,
        circuit_dir: Path,
        circuit_name: str = "membership",
        snarkjs: str = "snarkjs",
        timeout: int = 300,
    ):
        """
        Initialize snarkjs prover.

        Args:
            circuit_dir: Directory containing compiled circuit files
            circuit_name: Name of the circuit
            snarkjs: snarkjs executable
            timeout: Seconds allowed for proving
        """
        self.circuit_dir = Path(circuit_dir)
        self.circuit_name = circuit_name
        self.snarkjs = snarkjs
        self.timeout = timeout

        # Expected file paths
        self.wasm_path = self.circuit_dir / f"{circuit_name}_js" / f"{circuit_name}.wasm"
        self.zkey_path = self.circuit_dir / f"{circuit_name}_final.zkey"
        self.vkey_path = self.circuit_dir / "verification_key.json"

        self.proofs_generated = 0

    def is_setup_complete(self) -> bool:
        """Check if circuit files exist."""
        return (
            self.wasm_path.exists() and
            self.zkey_path.exists() and
            self.vkey_path.exists()
        )

    def _run(self, args: List[str], timeout: int) -> Tuple[Optional[subprocess.CompletedProcess], str]:
        try:
            result = subprocess.run(
                [self.snarkjs] + args,
                capture_output=True,
                text=True,
                timeout=timeout,
            )
        except subprocess.TimeoutExpired:
            return None, f"snarkjs {args[0]} {args[1]} timed out"
        except FileNotFoundError:
            return None, "snarkjs not found"
        if result.returncode != 0:
            return None, f"snarkjs {args[0]} {args[1]} failed: {result.stderr or result.stdout}"
        return result, ""

    def generate_proof(self, proof: Proof) -> Tuple[Optional[ProofBundle], str]:
        """
        Prove membership for a locally built Proof.

        Args:
            proof: Inclusion proof whose fields become the circuit input

        Returns:
            (ProofBundle, error_message)
        """
        if not self.is_setup_complete():
            return None, "Circuit not compiled. Run setup first."

        start_time = time.time()

        input_path = self.circuit_dir / "input.json"
        input_path.write_text(json.dumps(to_circuit_input(proof), indent=2))

        proof_path = self.circuit_dir / "proof.json"
        public_path = self.circuit_dir / "public.json"
        result, error = self._run(
            [
                "plonk", "fullprove",
                str(input_path),
                str(self.wasm_path),
                str(self.zkey_path),
                str(proof_path),
                str(public_path),
            ],
            self.timeout,
        )
        if result is None:
            return None, error

        try:
            public_signals = json.loads(public_path.read_text())
        except (OSError, json.JSONDecodeError) as e:
            return None, f"Failed to read public signals: {e}"

        proving_time_ms = int((time.time() - start_time) * 1000)
        self.proofs_generated += 1
        logger.info(f"Membership proof generated in {proving_time_ms}ms")

        return ProofBundle(
            proof_path=proof_path,
            public_path=public_path,
            public_signals=[str(s) for s in public_signals],
            proving_time_ms=proving_time_ms,
        ), ""

    def verify_proof(self, bundle: ProofBundle) -> Tuple[bool, str]:
        """
        Verify a proof bundle using snarkjs.

        Returns:
            (is_valid, error_message)
        """
        if not self.vkey_path.exists():
            return False, "Verification key not found"

        result, error = self._run(
            [
                "plonk", "verify",
                str(self.vkey_path),
                str(bundle.public_path),
                str(bundle.proof_path),
            ],
            30,
        )
        if result is None:
            return False, error
        if "OK" not in result.stdout:
            return False, f"Verification failed: {result.stdout}"

        bundle.verified = True
        return True, ""

    def export_calldata(self, bundle: ProofBundle) -> Tuple[Optional[SolidityCalldata], str]:
        """
        Export Solidity calldata for the on-chain verifier.

        Returns:
            (SolidityCalldata, error_message)
        """
        result, error = self._run(
            [
                "zkey", "export", "soliditycalldata",
                str(bundle.public_path),
                str(bundle.proof_path),
            ],
            30,
        )
        if result is None:
            return None, error

        try:
            return parse_solidity_calldata(result.stdout), ""
        except ProofFormatError as e:
            return None, str(e)
