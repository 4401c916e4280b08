"""Logging for glfast: rich console output plus an optional log file."""
import logging
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

# Diagnostics go to stderr so command output (tables, JSON) stays clean.
console = Console(stderr=True)

ROOT_LOGGER = "glfast"
LOG_FILE = Path.home() / ".glfast" / "glfast.log"
FALLBACK_LOG_FILE = Path("/tmp/glfast.log")


def _root() -> logging.Logger:
    root = logging.getLogger(ROOT_LOGGER)
    if not any(isinstance(h, RichHandler) for h in root.handlers):
        handler = RichHandler(console=console, show_path=False, markup=False)
        handler.setFormatter(logging.Formatter("%(message)s"))
        root.addHandler(handler)
        root.setLevel(logging.INFO)
    return root


def get_logger(name: str) -> logging.Logger:
    """Get a logger below the ``glfast`` namespace.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Logger whose records reach the shared Rich console handler
    """
    _root()
    if name != ROOT_LOGGER and not name.startswith(ROOT_LOGGER + "."):
        name = f"{ROOT_LOGGER}.{name}"
    return logging.getLogger(name)


def set_verbosity(verbose: bool) -> None:
    """Switch the glfast loggers between INFO and DEBUG."""
    _root().setLevel(logging.DEBUG if verbose else logging.INFO)


def setup_file_logging(log_file: Optional[str] = None, verbose: bool = False) -> Path:
    """Mirror glfast log records into a file.

    Args:
        log_file: Path to log file (defaults to ~/.glfast/glfast.log)
        verbose: Record debug-level messages as well

    Returns:
        Path of the file actually used. Falls back to /tmp/glfast.log
        when the default location is not writable.
    """
    root = _root()
    target = Path(log_file) if log_file else LOG_FILE

    for handler in root.handlers:
        if isinstance(handler, logging.FileHandler):
            return Path(handler.baseFilename)

    try:
        target.parent.mkdir(parents=True, exist_ok=True)
    except PermissionError:
        target = FALLBACK_LOG_FILE

    file_handler = logging.FileHandler(target)
    file_handler.setLevel(logging.DEBUG if verbose else logging.INFO)
    file_handler.setFormatter(
        logging.Formatter(
            "%(asctime)s | %(name)s | %(levelname)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    root.addHandler(file_handler)
    set_verbosity(verbose)

    root.debug(f"File logging enabled: {target}")
    return target
