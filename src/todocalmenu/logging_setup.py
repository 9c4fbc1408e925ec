from __future__ import annotations

import logging
import sys


class _ConsoleNoiseFilter(logging.Filter):
    """Let todocalmenu records through; other libraries only at ERROR and above."""

    def filter(self, record: logging.LogRecord) -> bool:
        if record.name == "todocalmenu" or record.name.startswith("todocalmenu."):
            return True
        return record.levelno >= logging.ERROR


def setup_logging(*, verbose: bool = False) -> None:
    """Configure a single stderr handler. Call once, before the first log call."""
    root = logging.getLogger()
    root.setLevel(logging.DEBUG if verbose else logging.WARNING)

    # Remove any pre-existing handlers to avoid duplicates.
    for handler in list(root.handlers):
        root.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        logging.Formatter(
            fmt="%(asctime)s %(levelname)s %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
    )
    handler.addFilter(_ConsoleNoiseFilter())
    root.addHandler(handler)

    logging.captureWarnings(True)
