"""
Logging for memtree.

Every subsystem logs under the "memtree" namespace (memtree.tree,
memtree.proof, memtree.prover, memtree.cli, ...). Console output goes to
stderr so command results printed on stdout stay machine-readable.
"""

import logging
import sys
from pathlib import Path
from typing import Optional, Union

import colorlog

ROOT_LOGGER = "memtree"
LOG_FILE = "memtree.log"

LOG_FORMAT = "%(asctime)s [%(name)s] %(levelname)-8s %(message)s"
CONSOLE_FORMAT = "%(log_color)s%(asctime)s [%(name)s] %(levelname)-8s%(reset)s %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

LOG_COLORS = {
    "DEBUG": "cyan",
    "INFO": "green",
    "WARNING": "yellow",
    "ERROR": "red",
    "CRITICAL": "red,bg_white",
}


def parse_level(level: Union[int, str]) -> int:
    """Level from an int or a name such as "debug"; unknown names mean INFO."""
    if isinstance(level, int):
        return level
    value = logging.getLevelName(level.strip().upper())
    return value if isinstance(value, int) else logging.INFO


def _console_handler(level: int, color: Optional[bool]) -> logging.Handler:
    handler = colorlog.StreamHandler(sys.stderr)
    handler.setLevel(level)
    # color=None leaves the choice to colorlog (tty detection, NO_COLOR)
    handler.setFormatter(colorlog.ColoredFormatter(
        CONSOLE_FORMAT,
        datefmt=DATE_FORMAT,
        log_colors=LOG_COLORS,
        stream=sys.stderr,
        no_color=color is False,
        force_color=color is True,
    ))
    return handler


def _file_handler(path: Path, level: int) -> logging.Handler:
    handler = logging.FileHandler(path)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    return handler


class MemTreeLogger:
    """Owns the handlers of the memtree logger tree"""

    _initialized = False
    log_path: Optional[Path] = None

    @classmethod
    def setup(
        cls,
        level: Union[int, str] = logging.INFO,
        log_dir: Optional[str] = None,
        log_to_file: bool = False,
        color: Optional[bool] = None,
        force: bool = False,
    ):
        """
        Attach the console handler and, if asked, a file handler.

        Args:
            level: Logging level as int or name
            log_dir: Directory for memtree.log. If None, uses ./logs
            log_to_file: Whether to also write logs to memtree.log
            color: Force colors on (True) or off (False); None auto-detects
            force: Reconfigure even if logging was already set up
        """
        if cls._initialized and not force:
            return

        level = parse_level(level)
        root_logger = logging.getLogger(ROOT_LOGGER)
        root_logger.setLevel(level)
        for handler in list(root_logger.handlers):
            root_logger.removeHandler(handler)
            handler.close()

        root_logger.addHandler(_console_handler(level, color))

        cls.log_path = None
        if log_to_file:
            log_path = Path(log_dir or "logs") / LOG_FILE
            log_path.parent.mkdir(parents=True, exist_ok=True)
            root_logger.addHandler(_file_handler(log_path, level))
            cls.log_path = log_path

        cls._initialized = True

    @classmethod
    def get_logger(cls, name: str) -> logging.Logger:
        """Logger for one subsystem, e.g. 'tree' -> memtree.tree"""
        if not cls._initialized:
            cls.setup()

        return logging.getLogger(f"{ROOT_LOGGER}.{name}")


def get_logger(name: str) -> logging.Logger:
    return MemTreeLogger.get_logger(name)


def setup_logging(
    level: Union[int, str] = logging.INFO,
    log_dir: Optional[str] = None,
    log_to_file: bool = False,
    color: Optional[bool] = None,
):
    """Setup logging configuration (replaces any earlier setup)"""
    MemTreeLogger.setup(level=level, log_dir=log_dir, log_to_file=log_to_file, color=color, force=True)
