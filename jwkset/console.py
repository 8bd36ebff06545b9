"""Console helpers shared by the command line tools.

Decorative output (headers, warnings) is only shown when stdout is an
interactive terminal, so piping a command keeps its output machine readable.
"""

from __future__ import annotations

import sys
import time
from typing import Any

import typer


def now_as_numeric_date() -> int:
    """Return the current time as a NumericDate (whole seconds since the epoch)."""
    return int(time.time())


def is_terminal() -> bool:
    return sys.stdout.isatty()


def log_if_terminal(message: str, **style: Any) -> None:
    """Print a styled line to stdout, only when stdout is interactive."""
    if not is_terminal():
        return
    typer.secho(message, **style)


def warn_if_terminal(message: str, **style: Any) -> None:
    """Print a styled line to stderr, only when stdout is interactive."""
    if not is_terminal():
        return
    typer.secho(message, err=True, **style)


def error(message: str) -> None:
    """Print an error line to stderr regardless of terminal status."""
    typer.echo(message, err=True)


def label(text: str, color: str) -> str:
    return typer.style(text, fg=color, bold=True)


def highlight(text: str) -> str:
    return typer.style(text, fg=typer.colors.BLUE, bold=True, italic=True)
