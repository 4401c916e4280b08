"""Shared utilities for glfast CLI modules."""
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape

from glfast.config.loader import ConfigLoader
from glfast.models.config import ConfigValidationError, GlfastSettings


def setup_logging(log_file: Optional[str] = None, verbose: bool = False) -> None:
    """Set up console verbosity and, when requested, a log file.

    Args:
        log_file: Path to log file (optional)
        verbose: Enable debug output
    """
    from glfast.core.logger import set_verbosity, setup_file_logging

    set_verbosity(verbose)
    if log_file:
        setup_file_logging(log_file=log_file, verbose=verbose)


def load_settings_or_exit(config_path: Optional[str], console: Console) -> GlfastSettings:
    """Load configuration, turning validation problems into a clean exit."""
    try:
        return ConfigLoader(config_path).load()
    except ConfigValidationError as e:
        print_error(console, str(e))
        raise typer.Exit(1)


def handle_cli_error(
    e: Exception,
    console: Console,
    verbose: bool = False,
    exit_code: int = 1
) -> None:
    """Handle CLI errors with consistent formatting.

    Args:
        e: Exception to handle
        console: Rich console for output
        verbose: Show exception traceback if True
        exit_code: Exit code to use
    """
    print_error(console, f"Error: {e}")
    if verbose:
        console.print_exception()
    raise typer.Exit(exit_code)


def print_success(console: Console, message: str, prefix: str = "✓") -> None:
    """Print success message with consistent formatting."""
    console.print(f"[green]{prefix}[/green] {escape(message)}")


def print_error(console: Console, message: str, prefix: str = "✗") -> None:
    """Print error message with consistent formatting."""
    console.print(f"[red]{prefix}[/red] {escape(message)}")


def print_warning(console: Console, message: str, prefix: str = "⚠") -> None:
    """Print warning message with consistent formatting."""
    console.print(f"[yellow]{prefix}[/yellow] {escape(message)}")


def print_info(console: Console, message: str, prefix: str = "ℹ") -> None:
    """Print info message with consistent formatting."""
    console.print(f"[cyan]{prefix}[/cyan] {escape(message)}")
