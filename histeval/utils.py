from __future__ import annotations

import logging
import os
import subprocess
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler


def common_prefix_length(left: str, right: str) -> int:
    """Length of the longest common prefix of two strings."""
    return len(os.path.commonprefix([left, right]))


def configure_logging(verbose: bool = False, console: Console | None = None) -> None:
    """Route log records through rich on stderr."""
    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=verbose,
        rich_tracebacks=True,
    )
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[handler],
        force=True,
    )


def git_revision(path: Path | None = None) -> str:
    """Short git revision of the checkout holding the package, or "unknown"."""
    try:
        completed = subprocess.run(
            ["git", "rev-parse", "--short", "HEAD"],
            cwd=path or Path(__file__).resolve().parent,
            capture_output=True,
            text=True,
            check=False,
        )
    except OSError:
        return "unknown"
    if completed.returncode != 0:
        return "unknown"
    return completed.stdout.strip() or "unknown"
