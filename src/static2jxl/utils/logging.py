"""Logging setup."""

from __future__ import annotations

import logging


def setup_logging(verbose: bool = False) -> None:
    """Configure root logging; ``verbose`` shows per-file decisions."""

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(threadName)s] %(levelname)s %(name)s: %(message)s",
    )
