"""Tests for domain exceptions."""

import pytest

from app.domain.exceptions import (
    BadRequestError,
    ConflictError,
    DomainError,
    InternalError,
    NotFoundError,
)


class TestDomainErrors:
    """Tests for the error taxonomy."""

    @pytest.mark.parametrize(
        "error_class, status_code, error_code",
        [
            (BadRequestError, 400, "BAD_REQUEST"),
            (ConflictError, 409, "CONFLICT"),
            (InternalError, 500, "INTERNAL_ERROR"),
        ],
    )
    def test_status_and_code(self, error_class, status_code, error_code) -> None:
        error = error_class("boom", details={"field": "code"})
        assert isinstance(error, DomainError)
        assert error.status_code == status_code
        assert error.error_code == error_code
        assert error.message == "boom"
        assert error.details == {"field": "code"}

    def test_not_found(self) -> None:
        error = NotFoundError("series", "abc", details={"is_active": True})
        assert error.status_code == 404
        assert error.error_code == "NOT_FOUND"
        assert str(error) == "series not found: abc"
        assert error.details == {"entity": "series", "id": "abc", "is_active": True}
        assert (error.entity, error.entity_id) == ("series", "abc")

    def test_details_default_empty(self) -> None:
        assert BadRequestError("x").details == {}
