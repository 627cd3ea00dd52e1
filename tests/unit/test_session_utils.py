from types import SimpleNamespace
from unittest.mock import Mock

import pytest
from sqlalchemy.exc import UnboundExecutionError
from sqlalchemy.orm import Session

from salon_booking.database.session_utils import get_dialect_name, supports_row_locks


def session_for(dialect_name: str) -> Mock:
    session = Mock(spec=Session)
    session.get_bind.return_value = SimpleNamespace(dialect=SimpleNamespace(name=dialect_name))
    return session


@pytest.mark.parametrize("dialect_name", ["postgresql", "mysql", "mariadb", "oracle"])
def test_row_locking_dialects(dialect_name):
    assert supports_row_locks(session_for(dialect_name))


@pytest.mark.parametrize("dialect_name", ["sqlite", "mssql"])
def test_dialects_without_for_update_row_locks(dialect_name):
    assert not supports_row_locks(session_for(dialect_name))


def test_unbound_session_falls_back_to_default():
    session = Mock(spec=Session)
    session.get_bind.side_effect = UnboundExecutionError("no bind")

    assert get_dialect_name(session) == "sqlite"
