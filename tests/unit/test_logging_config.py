import logging

import pytest

from salon_booking.core.config import Settings
from salon_booking.core.logging_config import configure_logging


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    level, handlers = root.level, list(root.handlers)
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)


def test_applies_level_and_adds_one_handler(restore_root_logger):
    cfg = Settings(LOG_LEVEL="warning")

    configure_logging(cfg)
    configure_logging(cfg)

    root = restore_root_logger
    assert root.level == logging.WARNING
    ours = [h for h in root.handlers if getattr(h, "_salon_booking", False)]
    assert len(ours) == 1


def test_sqlalchemy_logging_follows_db_echo(restore_root_logger):
    configure_logging(Settings(DB_ECHO=True))
    assert logging.getLogger("sqlalchemy.engine").level == logging.INFO

    configure_logging(Settings(DB_ECHO=False))
    assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING
