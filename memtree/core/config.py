"""
Configuration for memtree.

TreeConfig fixes the shape of one tree (depth, arity, zero sentinel).
Settings holds run-level defaults (tree shape, artifact directories,
circuit name, log level), read from the environment and an optional
.env file.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional, TypeVar

from dotenv import find_dotenv, load_dotenv

from memtree.core.errors import ConfigurationError
from memtree.utils.validation import validate_field_element, validate_tree_shape

T = TypeVar("T")

ENV_PREFIX = "MEMTREE_"


@dataclass(frozen=True)
class TreeConfig:
    """Immutable tree shape: capacity is arity ** depth"""

    depth: int
    arity: int = 2
    zero_sentinel: int = 0

    def __post_init__(self):
        valid, err = validate_tree_shape(self.depth, self.arity)
        if not valid:
            raise ConfigurationError(err)
        valid, err = validate_field_element(self.zero_sentinel, "zero_sentinel")
        if not valid:
            raise ConfigurationError(err)

    @property
    def capacity(self) -> int:
        return self.arity ** self.depth

    @property
    def siblings_per_level(self) -> int:
        return self.arity - 1


@dataclass
class Settings:
    """Run-level defaults"""

    # Tree shape
    tree_depth: int = 5
    tree_arity: int = 2
    zero_sentinel: int = 0

    # Paths
    data_dir: Path = Path("data")
    inputs_dir: Path = Path("inputs")
    build_dir: Path = Path("build")

    # External prover
    circuit_name: str = "membership"

    log_level: str = "INFO"

    def tree_config(self) -> TreeConfig:
        return TreeConfig(
            depth=self.tree_depth,
            arity=self.tree_arity,
            zero_sentinel=self.zero_sentinel,
        )

    @property
    def hashed_leaves_path(self) -> Path:
        return self.data_dir / "hashedLeaves.json"

    @property
    def proof_input_path(self) -> Path:
        return self.inputs_dir / "membership_input.json"

    @property
    def circuit_dir(self) -> Path:
        return self.build_dir / f"{self.circuit_name}-circuit"

    def ensure_dirs(self) -> None:
        """Create artifact directories"""
        for directory in (self.data_dir, self.inputs_dir, self.build_dir):
            directory.mkdir(parents=True, exist_ok=True)


def _env(name: str, parse: Callable[[str], T], default: T) -> T:
    raw = os.environ.get(ENV_PREFIX + name)
    if raw is None or raw == "":
        return default
    try:
        return parse(raw)
    except ValueError as e:
        raise ConfigurationError(f"{ENV_PREFIX}{name}={raw!r} is invalid: {e}") from e


def load_settings(env_file: Optional[str] = None) -> Settings:
    """
    Load settings from the environment.

    Args:
        env_file: Optional path to a .env file. Variables already present
                  in the process environment take precedence.

    Returns:
        Settings instance
    """
    if env_file:
        if not Path(env_file).exists():
            raise ConfigurationError(f"env file not found: {env_file}")
        load_dotenv(env_file, override=False)
    else:
        found = find_dotenv(usecwd=True)
        if found:
            load_dotenv(found, override=False)

    defaults = Settings()
    settings = Settings(
        tree_depth=_env("TREE_DEPTH", int, defaults.tree_depth),
        tree_arity=_env("TREE_ARITY", int, defaults.tree_arity),
        zero_sentinel=_env("ZERO_SENTINEL", int, defaults.zero_sentinel),
        data_dir=_env("DATA_DIR", Path, defaults.data_dir),
        inputs_dir=_env("INPUTS_DIR", Path, defaults.inputs_dir),
        build_dir=_env("BUILD_DIR", Path, defaults.build_dir),
        circuit_name=_env("CIRCUIT_NAME", str, defaults.circuit_name),
        log_level=_env("LOG_LEVEL", str, defaults.log_level).upper(),
    )

    # Fail on a bad shape now rather than at first tree build
    settings.tree_config()
    return settings
