"""Boundary formatting for catalog records.

Records leave the core only through format_output, which turns store
values into plain JSON-friendly data. Update payloads enter through
prepare_update_data, which flattens nested multilingual maps into dotted
paths so that a partial update never replaces sibling languages.
"""

from collections.abc import Iterable, Mapping
from datetime import date, datetime
from typing import Any
from uuid import UUID

from app.domain.exceptions import BadRequestError

# Fields the core manages itself; never accepted from update payloads.
PROTECTED_FIELDS = frozenset({"id", "_id", "created_at", "updated_at"})


def normalize_id(value: Any, field: str = "id") -> str:
    """Return the canonical string form of an identifier.

    Args:
        value: UUID instance or UUID string.
        field: Field name used in the error message.

    Returns:
        Lowercase hyphenated UUID string.

    Raises:
        BadRequestError: If value is not a well-formed UUID.
    """
    if isinstance(value, UUID):
        return str(value)
    if isinstance(value, str):
        try:
            return str(UUID(value))
        except ValueError:
            pass
    raise BadRequestError(f"Malformed {field}: {value!r}", details={"field": field})


def _plain(value: Any) -> Any:
    if isinstance(value, UUID):
        return str(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, Mapping):
        return {k: _plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_plain(v) for v in value]
    return value


def format_output(
    record: Mapping[str, Any] | None,
    languages: Iterable[str] = ("TW", "EN"),
) -> dict[str, Any] | None:
    """Convert a stored record into plain output data.

    Top-level keys equal to a language code are language lookup accessors,
    not persisted data, and are dropped. Identifiers become strings and
    timestamps ISO 8601 strings.

    Args:
        record: Record as returned by a store, or None.
        languages: Language codes whose accessor keys are stripped.

    Returns:
        Formatted copy of the record, or None when record is None.
    """
    if record is None:
        return None
    stripped = set(languages)
    return {key: _plain(value) for key, value in record.items() if key not in stripped}


def prepare_update_data(data: Mapping[str, Any]) -> dict[str, Any]:
    """Build a flat patch from an update payload.

    Nested mappings are flattened one level into dotted paths:
    {"name": {"EN": "Pump"}} becomes {"name.EN": "Pump"}.

    Args:
        data: Raw update payload.

    Returns:
        Patch suitable for EntityStore.find_one_and_update.
    """
    patch: dict[str, Any] = {}
    for key, value in data.items():
        if key in PROTECTED_FIELDS:
            continue
        if isinstance(value, Mapping):
            for sub_key, sub_value in value.items():
                patch[f"{key}.{sub_key}"] = sub_value
        else:
            patch[key] = value
    return patch
