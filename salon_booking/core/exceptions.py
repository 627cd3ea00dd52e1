# salon_booking/core/exceptions.py
"""
Domain-specific exceptions for the salon booking backend.

Every failure of a booking operation surfaces as one of these typed
exceptions. Callers (an HTTP layer, a CLI) translate them with
``to_http_exception()`` or by matching on the class.
"""

from typing import Any, Dict, Optional

from fastapi import HTTPException, status

HTTP_422_UNPROCESSABLE: int = getattr(status, "HTTP_422_UNPROCESSABLE_CONTENT", 422)


class DomainException(Exception):
    """Base exception for all domain-specific errors."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_http_exception(self) -> HTTPException:
        return HTTPException(
            status_code=self.status_code,
            detail={
                "message": self.message,
                "code": self.code,
                "details": self.details,
            },
        )


class ValidationException(DomainException):
    """Raised when input is malformed or references nothing bookable."""

    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundException(DomainException):
    """Raised when a requested resource is not found."""

    status_code = status.HTTP_404_NOT_FOUND


class ConflictException(DomainException):
    """Raised when there's a conflict with existing data."""

    status_code = status.HTTP_409_CONFLICT


class BusinessRuleException(DomainException):
    """Raised when a business rule is violated."""

    status_code = HTTP_422_UNPROCESSABLE


class PersistenceException(DomainException):
    """Raised after rollback when the underlying store fails."""

    def to_http_exception(self) -> HTTPException:
        # Store internals stay out of the response body.
        return HTTPException(
            status_code=self.status_code,
            detail={
                "message": "An error occurred processing your request",
                "code": self.code,
                "details": {},
            },
        )


# Specific business exceptions


class BookingConflictException(ConflictException):
    """Raised when a booking overlaps an existing booking of the same stylist."""

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(
            message=message or "Stylist is not available at this time. Please choose another time slot.",
            code="BOOKING_CONFLICT",
            details=details or {},
        )


class InvalidTransitionException(BusinessRuleException):
    """Raised when a booking status change is not permitted."""

    def __init__(self, current_status: Optional[str], requested_status: str):
        if current_status is None:
            message = f"Invalid status '{requested_status}'"
        else:
            message = f"Cannot change booking status from '{current_status}' to '{requested_status}'"
        super().__init__(
            message=message,
            code="INVALID_STATUS_TRANSITION",
            details={
                "current_status": current_status,
                "requested_status": requested_status,
            },
        )


class RepositoryException(Exception):
    """
    Exception raised for repository layer errors.

    Repositories raise this when a query or flush fails; the service
    transaction scope turns it into ``PersistenceException`` after
    rolling back.
    """
