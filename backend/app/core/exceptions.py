"""
Error taxonomy for the inventory engine plus safe HTTP errors.

Domain errors (InventoryError and subclasses) are raised by the services and
caught at the mutation boundary, where they become a structured
MutationResult. BusinessError builds HTTPExceptions for request-level
failures (auth, missing records on reads) with messages that don't leak
internal details.
"""
from decimal import Decimal

from fastapi import HTTPException, status
import logging

logger = logging.getLogger(__name__)


class InventoryError(Exception):
    """Base class for failures that abort a mutation without changing state."""

    error = "inventory_error"
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(InventoryError):
    """Input breaks a schema or cross-entity rule."""

    error = "validation_error"


class InsufficientStockError(InventoryError):
    """A sale or process would consume more than is available."""

    error = "insufficient_stock"
    status_code = status.HTTP_409_CONFLICT

    def __init__(self, name: str, available: Decimal, required: Decimal):
        self.name = name
        self.available = available
        self.required = required
        super().__init__(
            f"Insufficient stock for {name}. Available: {format_quantity(available)}, Required: {format_quantity(required)}"
        )


class NotFoundError(InventoryError):
    error = "not_found"
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, resource: str):
        super().__init__(f"{resource} not found.")


class PersistenceError(InventoryError):
    """The store rejected a write. The message is deliberately generic."""

    error = "persistence_error"
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str = "Could not save changes. Please try again."):
        super().__init__(message)


def format_quantity(value: Decimal) -> str:
    return format(Decimal(value).normalize(), "f")


class BusinessError:
    """Request-level exceptions with safe (non-leaky) messages."""

    @staticmethod
    def not_found(resource: str = "Resource", reason: str = "") -> HTTPException:
        """
        Generic 404. Records belonging to another account look exactly like
        records that don't exist.
        """
        if reason:
            logger.warning(f"Not found: {resource} - {reason}")

        return HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"{resource} not found",
        )

    @staticmethod
    def unauthorized(reason: str = "") -> HTTPException:
        """Generic 401 for all authentication failures."""
        logger.warning(f"Unauthorized access attempt: {reason}")
        return HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication failed",
            headers={"WWW-Authenticate": "Bearer"},
        )

    @staticmethod
    def bad_request(detail: str) -> HTTPException:
        """400 for input errors the user caused. Details are safe to return."""
        logger.info(f"Bad request: {detail}")
        return HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=detail,
        )

    @staticmethod
    def conflict(detail: str) -> HTTPException:
        """
        409 for resource conflicts.
        Example: "Username already exists"
        """
        logger.info(f"Conflict: {detail}")
        return HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=detail,
        )

    @staticmethod
    def server_error(original_error: Exception = None) -> HTTPException:
        """Generic 500 - logs the actual error internally, hides it from the user."""
        if original_error:
            logger.error(
                f"Internal server error: {type(original_error).__name__}: {str(original_error)}",
                exc_info=True
            )
        else:
            logger.error("Internal server error occurred", exc_info=True)

        return HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="An internal error occurred. Please try again later.",
        )


# MutationResult.error -> HTTP status
ERROR_STATUS = {
    cls.error: cls.status_code
    for cls in (InventoryError, ValidationError, InsufficientStockError, NotFoundError, PersistenceError)
}
