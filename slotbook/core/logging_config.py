"""Process-wide logging setup for hosts embedding the engine."""

from __future__ import annotations

import logging
from typing import Optional

from .config import Settings, settings
from .request_context import attach_request_id_filter

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - [%(request_id)s] %(message)s"

# Loggers that are too chatty at INFO for normal operation
_QUIET_LOGGERS = ("sqlalchemy.engine", "sqlalchemy.pool")


def configure_logging(config: Optional[Settings] = None, *, force: bool = False) -> None:
    """Configure the root logger and tag every record with the current request id."""
    cfg = config or settings
    logging.basicConfig(
        level=getattr(logging, cfg.log_level, logging.INFO),
        format=LOG_FORMAT,
        force=force,
    )
    attach_request_id_filter()

    if not cfg.sql_echo:
        for name in _QUIET_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)
