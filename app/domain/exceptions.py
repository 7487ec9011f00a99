"""Domain exceptions.

All errors raised by the catalog core. Each kind carries the HTTP status
and machine-readable code the API layer translates it into, so controllers
never have to inspect messages.
"""

from typing import Any


class DomainError(Exception):
    """Base class for all domain exceptions.

    All domain errors should inherit from this class to allow
    catching domain-specific errors at the application layer.
    """

    status_code: int = 500
    error_code: str = "DOMAIN_ERROR"

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """Initialize domain error.

        Args:
            message: Human-readable error message.
            details: Optional dictionary with additional error context.
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}


class NotFoundError(DomainError):
    """Raised when an id does not resolve to a visible node."""

    status_code = 404
    error_code = "NOT_FOUND"

    def __init__(self, entity: str, entity_id: str, details: dict[str, Any] | None = None) -> None:
        """Initialize not found error.

        Args:
            entity: Entity or level name (e.g., "series").
            entity_id: Requested identifier.
            details: Optional extra context merged into the details dict.
        """
        super().__init__(
            f"{entity} not found: {entity_id}",
            details={"entity": entity, "id": entity_id, **(details or {})},
        )
        self.entity = entity
        self.entity_id = entity_id


class BadRequestError(DomainError):
    """Raised for invalid input.

    Covers unknown level names, operations unsupported at a root or leaf
    boundary, malformed ids or parent references, and missing fields.
    """

    status_code = 400
    error_code = "BAD_REQUEST"


class ConflictError(DomainError):
    """Raised by callers layering uniqueness checks on top of the core."""

    status_code = 409
    error_code = "CONFLICT"


class InternalError(DomainError):
    """Raised when the store fails unexpectedly.

    The details identify which entity, operation and id were being
    processed.
    """

    status_code = 500
    error_code = "INTERNAL_ERROR"
