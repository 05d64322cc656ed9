"""Process-wide logging configuration for the Vezir API and CLI."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

_FORMAT = "%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s"
_DATEFMT = "%Y-%m-%d %H:%M:%S"

# Third-party loggers that are only interesting when something breaks.
_NOISY_LOGGERS = ("sqlalchemy.engine", "passlib", "multipart", "httpx")


def setup_logging(level: str | int = logging.INFO, log_file: str | Path | None = None) -> None:
    """
    Configure the root logger with:
    - a console handler on stderr
    - an optional file handler (full DEBUG output)

    Safe to call more than once; previous handlers are replaced.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    root = logging.getLogger()
    root.setLevel(logging.DEBUG if log_file else level)

    for h in list(root.handlers):
        root.removeHandler(h)

    fmt = logging.Formatter(fmt=_FORMAT, datefmt=_DATEFMT)

    ch = logging.StreamHandler(sys.stderr)
    ch.setLevel(level)
    ch.setFormatter(fmt)
    root.addHandler(ch)

    if log_file:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        fh = logging.FileHandler(str(path), encoding="utf-8")
        fh.setLevel(logging.DEBUG)
        fh.setFormatter(fmt)
        root.addHandler(fh)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.captureWarnings(True)
