"""Dialect helpers for code that must behave differently per backend."""

from __future__ import annotations

from sqlalchemy.exc import UnboundExecutionError
from sqlalchemy.orm import Session

# Dialects whose SELECT ... FOR UPDATE takes a real row lock.
ROW_LOCKING_DIALECTS = frozenset({"postgresql", "mysql", "mariadb", "oracle"})


def get_dialect_name(session: Session, default: str = "sqlite") -> str:
    """Name of the dialect the session is bound to, or ``default`` if unbound."""
    try:
        bind = session.get_bind()
    except UnboundExecutionError:
        return default
    dialect = getattr(bind, "dialect", None)
    return getattr(dialect, "name", None) or default


def supports_row_locks(session: Session) -> bool:
    return get_dialect_name(session) in ROW_LOCKING_DIALECTS
