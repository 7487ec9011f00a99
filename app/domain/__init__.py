"""Domain layer - error taxonomy shared by the catalog core and the API.

Example usage:
    from app.domain import NotFoundError

    raise NotFoundError("series", series_id)
"""

from app.domain.exceptions import (
    BadRequestError,
    ConflictError,
    DomainError,
    InternalError,
    NotFoundError,
)

__all__ = [
    "BadRequestError",
    "ConflictError",
    "DomainError",
    "InternalError",
    "NotFoundError",
]
