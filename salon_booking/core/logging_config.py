"""Logging setup shared by the service processes and scripts."""

from __future__ import annotations

import logging
from typing import Optional

from .config import Settings, settings as default_settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

# SQLAlchemy engine logging is controlled by DB_ECHO, not LOG_LEVEL.
_NOISY_LOGGERS = ("sqlalchemy.engine", "sqlalchemy.pool")


def configure_logging(config: Optional[Settings] = None) -> None:
    """Apply the configured level and format to the root logger (idempotent)."""
    cfg = config or default_settings
    root = logging.getLogger()
    root.setLevel(cfg.log_level)

    if not any(getattr(h, "_salon_booking", False) for h in root.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._salon_booking = True  # type: ignore[attr-defined]
        root.addHandler(handler)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.INFO if cfg.db_echo else logging.WARNING)
