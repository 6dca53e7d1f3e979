"""
Member identifier source and hashed-leaf artifact.

Identifiers are Ethereum addresses: "0x" followed by 40 hex digits, in any
letter case. They are normalized to lowercase before hashing so that the
checksummed and plain forms of an address map to the same leaf.

Artifacts:
- identifier source: {"members": ["0x...", ...]} or a bare JSON list
- hashed leaves: JSON list of decimal strings, index-aligned with the source
"""

import json
from pathlib import Path
from typing import TYPE_CHECKING, Any, Iterable, List, Optional, Union

from memtree.core.errors import AddressParseError, ProofFormatError
from memtree.utils.logger import get_logger
from memtree.utils.validation import validate_address, validate_decimal_string

if TYPE_CHECKING:
    from memtree.core.hasher import HashAdapter

logger = get_logger("identifiers")

PathLike = Union[str, Path]


# =============================================================================
# Parsing
# =============================================================================


def parse_address(value: Any, index: Optional[int] = None) -> str:
    """
    Validate an identifier and return its canonical lowercase form.

    Raises:
        AddressParseError: If the value is not 0x + 40 hex digits
    """
    valid, err = validate_address(value)
    if not valid:
        raise AddressParseError(value, index=index, reason=err)
    return "0x" + value[2:].lower()


def address_to_field(address: str) -> int:
    """Interpret a canonical address as an integer (fits the field: 160 bits)."""
    return int(address, 16)


def parse_identifiers(values: Iterable[Any]) -> List[str]:
    """Parse a whole source list, failing on the first malformed entry."""
    return [parse_address(value, index=i) for i, value in enumerate(values)]


def hash_identifiers(identifiers: Iterable[Any], hasher: "HashAdapter") -> List[int]:
    """
    Hash every identifier into a leaf, preserving order.

    All identifiers are parsed before any hashing starts.
    """
    parsed = parse_identifiers(identifiers)
    leaves = [hasher.leaf_hash(address) for address in parsed]
    logger.debug(f"Hashed {len(leaves)} identifiers")
    return leaves


# =============================================================================
# Artifact I/O
# =============================================================================


def load_identifiers(path: PathLike) -> List[str]:
    """
    Load and parse an identifier source file.

    Accepts {"members": [...]} or a plain list.
    """
    data = json.loads(Path(path).read_text())
    if isinstance(data, dict):
        if "members" not in data:
            raise AddressParseError(data, reason="identifier source has no 'members' list")
        data = data["members"]
    if not isinstance(data, list):
        raise AddressParseError(data, reason="identifier source must be a list")
    return parse_identifiers(data)


def write_hashed_leaves(path: PathLike, leaves: List[int]) -> Path:
    """Write leaves as a JSON list of decimal strings."""
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(json.dumps([str(leaf) for leaf in leaves], indent=2))
    logger.info(f"Wrote {len(leaves)} hashed leaves to {out}")
    return out


def read_hashed_leaves(path: PathLike) -> List[int]:
    """
    Read a hashed-leaf artifact.

    Raises:
        ProofFormatError: If the document is not a list of canonical decimals
    """
    try:
        data = json.loads(Path(path).read_text())
    except json.JSONDecodeError as e:
        raise ProofFormatError(f"{path}: invalid JSON: {e}") from e

    if not isinstance(data, list):
        raise ProofFormatError(f"{path}: hashed leaves must be a JSON list")

    leaves = []
    for i, item in enumerate(data):
        valid, err = validate_decimal_string(item, f"leaf[{i}]")
        if not valid:
            raise ProofFormatError(f"{path}: {err}")
        leaves.append(int(item))
    return leaves
