"""Logging configuration for the forwarding simulation."""

import logging
import sys
from typing import Optional, Union

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def configure_logging(level: Union[int, str] = logging.INFO, filename: Optional[str] = None) -> None:
    """Configure application logging and capture uncaught exceptions.

    Args:
        level: Logging level or its name.
        filename: Log file to append to, or None to log to stderr.
    """
    if isinstance(level, str):
        name = level.upper()
        level = logging.getLevelName(name)
        if not isinstance(level, int):
            raise ValueError(f"Unknown log level: {name}")

    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        filename=filename,
        filemode="a",
        force=True,
    )

    def _log_excepthook(exc_type, exc, tb) -> None:
        logging.getLogger(__name__).error("Uncaught exception", exc_info=(exc_type, exc, tb))

    sys.excepthook = _log_excepthook
