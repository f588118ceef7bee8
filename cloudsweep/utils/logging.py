"""Logging setup for the CLI."""

from __future__ import annotations

import logging
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler


def setup_logging(level: str = "INFO", verbose: bool = False, console: Optional[Console] = None) -> None:
    """Configure root logging with a Rich handler.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR)
        verbose: Show timestamps and module paths
        console: Console the handler writes to (default: stderr)
    """
    handler = RichHandler(
        console=console or Console(stderr=True),
        show_time=verbose,
        show_path=verbose,
        markup=False,
        rich_tracebacks=verbose,
    )
    handler.setFormatter(logging.Formatter("%(message)s"))

    root = logging.getLogger()
    for existing in root.handlers[:]:
        root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    # boto is very chatty below WARNING unless explicitly debugging
    if not verbose:
        for name in ("boto3", "botocore", "urllib3", "s3transfer"):
            logging.getLogger(name).setLevel(logging.WARNING)
