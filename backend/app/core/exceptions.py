# backend/app/core/exceptions.py
"""
Domain-specific exceptions for the HubContent platform.

These exceptions provide clear, business-focused error messages
that can be caught and handled appropriately at the API layer.
"""

from typing import Any, Dict, Optional

from fastapi import HTTPException, status


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
        """Convert to an HTTPException carrying message, code and details."""
        return HTTPException(
            status_code=self.status_code,
            detail={
                "message": self.message,
                "code": self.code,
                "details": self.details,
            },
        )


class ValidationException(DomainException):
    """Raised when input is malformed or a business validation fails."""

    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundException(DomainException):
    """Raised when a requested resource is not found."""

    status_code = status.HTTP_404_NOT_FOUND


class ConflictException(DomainException):
    """Raised when there's a conflict with existing data."""

    status_code = status.HTTP_409_CONFLICT


class ForbiddenException(DomainException):
    """Raised when the actor lacks the role or ownership required for an action."""

    status_code = status.HTTP_403_FORBIDDEN


class ServiceException(DomainException):
    """Raised when a service operation fails."""

    def to_http_exception(self) -> HTTPException:
        return HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "message": self.message or "An error occurred processing your request",
                "code": self.code,
                "details": self.details if self.details else {},
            },
        )


# Specific business exceptions


class InvalidTransitionException(ConflictException):
    """
    Raised when an action is attempted from a state that does not permit it.

    ``code`` is ``ALREADY_IN_STATE`` when the entity already sits in the
    requested target state (a duplicate click), ``INVALID_TRANSITION``
    otherwise (a conflicting action).
    """

    def __init__(
        self,
        entity: str,
        entity_id: str,
        current_status: Optional[str],
        target_status: str,
        message: Optional[str] = None,
    ):
        already = current_status == target_status
        super().__init__(
            message=message
            or (
                f"{entity} is already {target_status}"
                if already
                else f"{entity} cannot become {target_status} - current status: {current_status}"
            ),
            code="ALREADY_IN_STATE" if already else "INVALID_TRANSITION",
            details={
                "entity_id": entity_id,
                "current_status": current_status,
                "target_status": target_status,
            },
        )
        self.current_status = current_status
        self.target_status = target_status

    @property
    def is_already_in_state(self) -> bool:
        return self.code == "ALREADY_IN_STATE"


class SessionAlreadyActiveException(ConflictException):
    """Raised when a concurrent session create could not be resolved to the winner's row."""

    def __init__(self, booking_id: str):
        super().__init__(
            message="A live session is already being started for this booking",
            code="SESSION_ALREADY_ACTIVE",
            details={"booking_id": booking_id},
        )


class InsufficientLeadTimeException(ValidationException):
    """Raised when a booking is scheduled too close to now."""

    def __init__(self, required_minutes: int, provided_minutes: float):
        super().__init__(
            message=f"Bookings must be scheduled at least {required_minutes} minutes in advance",
            code="INSUFFICIENT_LEAD_TIME",
            details={
                "required_minutes": required_minutes,
                "provided_minutes": round(provided_minutes, 2),
            },
        )


class JoinWindowClosedException(ValidationException):
    """Raised when an actor tries to enter a session outside its join window."""

    def __init__(self, booking_id: str, opens_at: str, closes_at: str):
        super().__init__(
            message="The live session join window is not open",
            code="JOIN_WINDOW_CLOSED",
            details={"booking_id": booking_id, "opens_at": opens_at, "closes_at": closes_at},
        )


class RepositoryException(Exception):
    """
    Exception raised for repository layer errors.

    This exception is used when data access operations fail,
    such as database connection issues, query failures, or
    constraint violations.
    """
