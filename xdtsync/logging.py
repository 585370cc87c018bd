"""
xdtsync.logging - Logging setup for the CLI.

Log records go to stderr through rich so debug output stays apart from
the tables printed on stdout.
"""

from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler

logger = logging.getLogger("xdtsync")


def configure_logging(verbose: bool = False) -> None:
    """Attach a rich handler to the xdtsync logger.

    Args:
        verbose: If True, log at DEBUG level; otherwise only warnings
    """
    level = logging.DEBUG if verbose else logging.WARNING
    if not any(isinstance(h, RichHandler) for h in logger.handlers):
        handler = RichHandler(
            console=Console(stderr=True),
            show_time=False,
            show_path=False,
            markup=False,
        )
        handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
        logger.addHandler(handler)
    logger.setLevel(level)
