from __future__ import annotations

import logging
import os
from typing import Literal

import coloredlogs  # type: ignore[import]

LogLevel = Literal["CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"]

DEFAULT_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"
DEFAULT_DATE_FORMAT = "%H:%M:%S"

# per-datagram logs, only useful when debugging the wire protocol
CHATTY_LOGGERS = ("wizlan.core.shared_socket",)


def setup_logging(level: LogLevel | None = None, wire: bool = False) -> None:
    resolved = (level or os.environ.get("LOGLEVEL", "INFO")).upper()

    coloredlogs.install(
        level=resolved,
        fmt=DEFAULT_FORMAT,
        datefmt=DEFAULT_DATE_FORMAT,
    )

    if resolved == "DEBUG" and not wire:
        for name in CHATTY_LOGGERS:
            logging.getLogger(name).setLevel(logging.INFO)
