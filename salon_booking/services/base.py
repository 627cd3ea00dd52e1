# salon_booking/services/base.py
"""
Base Service Pattern for the salon booking backend.

Provides common functionality for all service classes including:
- The scoped transaction every booking write runs in, and a read scope
- Logging
- Performance monitoring
"""

from contextlib import contextmanager
from functools import wraps
import logging
import time
from typing import Any, Callable, Dict, Generator, TypeVar, cast

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import PersistenceException, RepositoryException

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])

SLOW_OPERATION_SECONDS = 1.0


class BaseService:
    """
    Base class for all service layer components.

    The session is injected by the caller and owned by it; services never
    create or close sessions, they only delimit transactions on them.
    """

    def __init__(self, db: Session):
        self.db = db
        self.logger = logging.getLogger(self.__class__.__name__)
        self._metrics: Dict[str, Dict[str, Any]] = {}

    @contextmanager
    def transaction(self) -> Generator[Session, None, None]:
        """
        Scoped unit of work: commit on normal exit, roll back on any exception.

        Store failures surface as ``PersistenceException``; domain
        exceptions propagate unchanged once the rollback is done.

        Usage:
            with self.transaction():
                # Do multiple operations
                repository.create(...)
                # Note: commit is handled automatically
        """
        try:
            yield self.db
            self.db.commit()
            self.logger.debug("Transaction committed successfully")
        except (SQLAlchemyError, RepositoryException) as e:
            self.logger.error(f"Transaction failed: {str(e)}")
            self.db.rollback()
            raise PersistenceException(
                f"Database operation failed: {str(e)}", code="PERSISTENCE_ERROR"
            ) from e
        except Exception:
            self.db.rollback()
            raise

    @contextmanager
    def read_scope(self) -> Generator[Session, None, None]:
        """
        Scope for read-only operations.

        When the reads open the transaction themselves it is ended on exit,
        so no database lock outlives the call. Inside a transaction that is
        already running (e.g. a conflict check during a write) it does nothing.
        """
        if self.db.in_transaction():
            yield self.db
            return
        with self.transaction():
            yield self.db

    @staticmethod
    def measure_operation(operation_name: str) -> Callable[[F], F]:
        """
        Decorator to measure operation performance.

        Usage:
            @BaseService.measure_operation("create_booking")
            def create_booking(self, data):
                ...
        """

        def decorator(func: F) -> F:
            @wraps(func)
            def wrapper(self, *args, **kwargs):
                start_time = time.perf_counter()
                success = False
                try:
                    result = func(self, *args, **kwargs)
                    success = True
                    return result
                finally:
                    elapsed = time.perf_counter() - start_time
                    if hasattr(self, "_record_metric"):
                        self._record_metric(operation_name, elapsed, success)
                    if elapsed > SLOW_OPERATION_SECONDS and hasattr(self, "logger"):
                        self.logger.warning(
                            f"Slow operation detected: {operation_name} took {elapsed:.2f}s"
                        )

            wrapper._operation_name = operation_name  # type: ignore[attr-defined]
            return cast(F, wrapper)

        return decorator

    def log_operation(self, operation: str, **context: Any) -> None:
        """
        Log an operation with context.

        Use @measure_operation for timing.
        """
        self.logger.info(f"Operation: {operation}", extra={"operation": operation, **context})

    def get_metrics(self) -> Dict[str, Dict[str, Any]]:
        """Timing counters recorded by this service instance."""
        return {name: dict(data) for name, data in self._metrics.items()}

    def _record_metric(self, operation: str, elapsed: float, success: bool) -> None:
        metric_data = self._metrics.setdefault(
            operation,
            {
                "count": 0,
                "total_time": 0.0,
                "success_count": 0,
                "failure_count": 0,
                "min_time": float("inf"),
                "max_time": 0.0,
            },
        )
        metric_data["count"] += 1
        metric_data["total_time"] += elapsed
        metric_data["min_time"] = min(metric_data["min_time"], elapsed)
        metric_data["max_time"] = max(metric_data["max_time"], elapsed)

        if success:
            metric_data["success_count"] += 1
        else:
            metric_data["failure_count"] += 1
