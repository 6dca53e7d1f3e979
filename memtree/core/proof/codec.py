"""
ProofCodec - canonical text form of an inclusion proof.

The artifact is the circuit input document handed to the external prover:

    {
      "root": "<decimal>",
      "leaf": "<decimal>",
      "pathElements": ["<decimal>", ...],        # arity 2
      "pathIndices": [0, 1, ...]
    }

For arity > 2, pathElements is a list of lists of arity - 1 decimals.
Field elements are canonical decimal strings (no sign, no leading zeros)
so that the same proof always serializes to the same bytes.
"""

import json
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictInt,
    StrictStr,
    ValidationError,
    ValidationInfo,
    field_validator,
    model_validator,
)

from memtree.core.config import TreeConfig
from memtree.core.errors import ProofFormatError
from memtree.core.tree.base import PathElement, Proof, shape_error
from memtree.utils.logger import get_logger
from memtree.utils.validation import validate_decimal_string

logger = get_logger("proof.codec")

PathLike = Union[str, Path]


# =============================================================================
# Artifact schema
# =============================================================================


def _check_decimal(value: str, name: str) -> str:
    valid, err = validate_decimal_string(value, name)
    if not valid:
        raise ValueError(err)
    return value


class ProofArtifact(BaseModel):
    """Schema of the serialized proof document."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    root: StrictStr
    leaf: StrictStr
    path_elements: List[Union[StrictStr, List[StrictStr]]] = Field(alias="pathElements")
    path_indices: List[StrictInt] = Field(alias="pathIndices")

    @field_validator("root", "leaf")
    @classmethod
    def _field_element(cls, value: str, info: ValidationInfo) -> str:
        return _check_decimal(value, info.field_name)

    @field_validator("path_elements")
    @classmethod
    def _siblings(cls, value: List[Union[str, List[str]]]) -> List[Union[str, List[str]]]:
        nested = [isinstance(item, list) for item in value]
        if any(nested) and not all(nested):
            raise ValueError("pathElements mixes single elements and groups")
        if value and all(nested):
            sizes = {len(group) for group in value}
            if len(sizes) != 1 or 0 in sizes:
                raise ValueError("pathElements groups must be non-empty and equally sized")

        for level, item in enumerate(value):
            if isinstance(item, list):
                for j, element in enumerate(item):
                    _check_decimal(element, f"pathElements[{level}][{j}]")
            else:
                _check_decimal(item, f"pathElements[{level}]")
        return value

    @field_validator("path_indices")
    @classmethod
    def _positions(cls, value: List[int]) -> List[int]:
        for level, position in enumerate(value):
            if position < 0:
                raise ValueError(f"pathIndices[{level}] is negative: {position}")
        return value

    @model_validator(mode="after")
    def _same_depth(self) -> "ProofArtifact":
        if len(self.path_elements) != len(self.path_indices):
            raise ValueError(
                f"pathElements has {len(self.path_elements)} levels "
                f"but pathIndices has {len(self.path_indices)}"
            )
        return self

    def to_proof(self) -> Proof:
        elements: List[PathElement] = []
        for item in self.path_elements:
            if isinstance(item, list):
                elements.append(tuple(int(e) for e in item))
            else:
                elements.append(int(item))
        return Proof(
            leaf=int(self.leaf),
            path_elements=tuple(elements),
            path_indices=tuple(self.path_indices),
            root=int(self.root),
        )


# =============================================================================
# Encoding
# =============================================================================


def _decimal(value: Any, name: str) -> str:
    if not isinstance(value, int) or isinstance(value, bool) or value < 0:
        raise ProofFormatError(f"{name} is not a field element: {value!r}")
    return str(value)


def to_circuit_input(proof: Proof) -> Dict[str, Any]:
    """
    Convert a proof to the circuit-input mapping (decimal strings).

    Raises:
        ProofFormatError: If a value is not a non-negative integer
    """
    elements: List[Any] = []
    for level, element in enumerate(proof.path_elements):
        if isinstance(element, (tuple, list)):
            elements.append([_decimal(e, f"pathElements[{level}]") for e in element])
        else:
            elements.append(_decimal(element, f"pathElements[{level}]"))

    for level, position in enumerate(proof.path_indices):
        if not isinstance(position, int) or isinstance(position, bool) or position < 0:
            raise ProofFormatError(f"pathIndices[{level}] is not a position: {position!r}")

    return {
        "root": _decimal(proof.root, "root"),
        "leaf": _decimal(proof.leaf, "leaf"),
        "pathElements": elements,
        "pathIndices": list(proof.path_indices),
    }


def from_circuit_input(data: Mapping[str, Any], config: Optional[TreeConfig] = None) -> Proof:
    """
    Validate a circuit-input mapping and build the Proof.

    Raises:
        ProofFormatError: On missing, extra or malformed fields, or when the
            proof does not fit `config`
    """
    if not isinstance(data, Mapping):
        raise ProofFormatError(f"proof document must be an object, got {type(data).__name__}")

    try:
        artifact = ProofArtifact.model_validate(dict(data))
    except ValidationError as e:
        raise ProofFormatError(f"invalid proof document: {e}") from e

    proof = artifact.to_proof()
    if config is not None:
        err = shape_error(proof, config)
        if err:
            raise ProofFormatError(err)
    return proof


def encode(proof: Proof) -> str:
    """Serialize a proof to its canonical JSON text."""
    return json.dumps(to_circuit_input(proof), indent=2)


def decode(text: Union[str, bytes], config: Optional[TreeConfig] = None) -> Proof:
    """
    Parse proof text produced by encode().

    Args:
        text: JSON document
        config: When given, also check depth, group size and index range

    Raises:
        ProofFormatError: On any malformed or mismatched field
    """
    try:
        data = json.loads(text)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ProofFormatError(f"proof is not valid JSON: {e}") from e
    return from_circuit_input(data, config)


# =============================================================================
# Files
# =============================================================================


def write_proof(path: PathLike, proof: Proof) -> Path:
    """Write the proof artifact, creating parent directories."""
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(encode(proof))
    logger.info(f"Wrote proof artifact to {out}")
    return out


def read_proof(path: PathLike, config: Optional[TreeConfig] = None) -> Proof:
    """Read and decode a proof artifact."""
    try:
        text = Path(path).read_text()
    except FileNotFoundError:
        raise ProofFormatError(f"proof artifact not found: {path}") from None
    return decode(text, config)


__all__ = [
    "ProofArtifact",
    "to_circuit_input",
    "from_circuit_input",
    "encode",
    "decode",
    "write_proof",
    "read_proof",
]
