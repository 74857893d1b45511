from __future__ import annotations

import logging
import sys


def setup_logging(level: str = "INFO") -> None:
    """
    Configure the root logger with a single stderr handler.

    Call this once at process start, before the first log line.
    """
    root = logging.getLogger()
    root.setLevel(level)

    # Avoid duplicate lines when uvicorn or a test runner already attached handlers.
    for h in list(root.handlers):
        root.removeHandler(h)

    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(fmt)
    root.addHandler(handler)

    # pymongo logs every heartbeat and command at DEBUG.
    logging.getLogger("pymongo").setLevel(logging.WARNING)
