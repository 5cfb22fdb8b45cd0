from __future__ import annotations

import logging


def setup_logging(level: str = "INFO") -> None:
    """
    Console logging for the CLI and request handler.

    Safe to call multiple times (won't double-add handlers).
    """
    root = logging.getLogger()
    if root.handlers:
        return

    formatter = logging.Formatter(
        fmt="%(asctime)s %(levelname)s %(name)s %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%S%z",
    )

    console = logging.StreamHandler()
    console.setFormatter(formatter)

    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), handlers=[console])
