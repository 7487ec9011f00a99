"""Tests for record formatting and update preparation."""

from datetime import datetime, timezone
from uuid import UUID, uuid4

import pytest

from app.catalog.formatting import format_output, normalize_id, prepare_update_data
from app.domain.exceptions import BadRequestError


class TestNormalizeId:
    """Tests for identifier normalization."""

    def test_uuid_instance(self) -> None:
        value = uuid4()
        assert normalize_id(value) == str(value)

    def test_uppercase_string_canonicalized(self) -> None:
        value = uuid4()
        assert normalize_id(str(value).upper()) == str(value)

    @pytest.mark.parametrize("value", ["not-an-id", "", None, 42])
    def test_malformed_rejected(self, value) -> None:
        with pytest.raises(BadRequestError) as exc_info:
            normalize_id(value, field="series_id")
        assert exc_info.value.details == {"field": "series_id"}


class TestFormatOutput:
    """Tests for format_output."""

    def test_none_passes_through(self) -> None:
        assert format_output(None) is None

    def test_language_accessors_removed(self) -> None:
        record = {"id": "x", "name": {"TW": "名稱", "EN": "Name"}, "TW": "名稱", "EN": "Name"}
        assert format_output(record) == {"id": "x", "name": {"TW": "名稱", "EN": "Name"}}

    def test_values_made_plain(self) -> None:
        created = datetime(2026, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
        ref = UUID("12345678-1234-5678-1234-567812345678")
        result = format_output({"created_at": created, "series_id": ref, "tags": [ref]})
        assert result == {
            "created_at": "2026-01-02T03:04:05+00:00",
            "series_id": str(ref),
            "tags": [str(ref)],
        }

    def test_input_not_mutated(self) -> None:
        record = {"name": {"TW": "a"}, "TW": "a"}
        format_output(record)
        assert "TW" in record


class TestPrepareUpdateData:
    """Tests for prepare_update_data."""

    def test_nested_maps_flattened(self) -> None:
        patch = prepare_update_data({"name": {"EN": "Pump"}, "is_active": False})
        assert patch == {"name.EN": "Pump", "is_active": False}

    def test_protected_fields_skipped(self) -> None:
        patch = prepare_update_data(
            {"id": "a", "_id": "b", "created_at": "c", "updated_at": "d", "code": "X"}
        )
        assert patch == {"code": "X"}

    def test_lists_kept_whole(self) -> None:
        assert prepare_update_data({"images": ["a.png"]}) == {"images": ["a.png"]}
