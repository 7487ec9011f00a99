"""Entity store adapters.

An EntityStore is the per-entity persistence seam the repositories sit on.
Records cross it as plain dicts. Filters are expressed as Criteria so the
same query can be evaluated in memory or translated to SQL.
"""

import copy
from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any
from uuid import uuid4

from app.domain.exceptions import BadRequestError


@dataclass
class Criteria:
    """Record filter.

    Attributes:
        equals: Field (or dotted path) to required value.
        keyword: Case-insensitive substring matched against keyword_fields.
        keyword_fields: Fields ORed together for keyword matching.
    """

    equals: dict[str, Any] = field(default_factory=dict)
    keyword: str | None = None
    keyword_fields: list[str] = field(default_factory=list)

    @property
    def has_keyword(self) -> bool:
        return bool(self.keyword) and bool(self.keyword_fields)


def get_path(record: Mapping[str, Any], path: str) -> Any:
    """Read a dotted path from a nested mapping, None if absent."""
    value: Any = record
    for part in path.split("."):
        if not isinstance(value, Mapping):
            return None
        value = value.get(part)
    return value


def apply_patch(record: dict[str, Any], patch: Mapping[str, Any]) -> dict[str, Any]:
    """Apply a flat patch with dotted keys to a record in place.

    "name.EN" sets record["name"]["EN"], creating the nested dict when
    missing, and leaves other keys of record["name"] untouched.
    """
    for key, value in patch.items():
        parts = key.split(".")
        target = record
        for part in parts[:-1]:
            child = target.get(part)
            if not isinstance(child, dict):
                child = {}
                target[part] = child
            target = child
        target[parts[-1]] = value
    return record


def _sort_key(record: Mapping[str, Any], path: str) -> tuple[bool, Any]:
    value = get_path(record, path)
    return (value is not None, value if value is not None else 0)


class EntityStore(ABC):
    """Persistence operations for one entity type."""

    name: str = "entity"

    @abstractmethod
    async def get_by_id(self, entity_id: str) -> dict[str, Any] | None:
        """Get a record by id."""

    @abstractmethod
    async def find(
        self,
        criteria: Criteria,
        sort_by: str | None = None,
        sort_order: str = "asc",
        skip: int = 0,
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        """Find records matching criteria."""

    @abstractmethod
    async def count(self, criteria: Criteria) -> int:
        """Count records matching criteria."""

    @abstractmethod
    async def insert(self, data: Mapping[str, Any]) -> dict[str, Any]:
        """Insert a record and return it with generated fields."""

    @abstractmethod
    async def find_one_and_update(
        self, entity_id: str, patch: Mapping[str, Any]
    ) -> dict[str, Any] | None:
        """Atomically apply a flat patch and return the updated record."""

    @abstractmethod
    async def find_one_and_delete(self, entity_id: str) -> dict[str, Any] | None:
        """Atomically delete a record and return it."""


class InMemoryEntityStore(EntityStore):
    """Dict-backed store.

    Every method runs without suspending, so each operation is atomic with
    respect to other coroutines on the same event loop. Records are deep
    copied on the way in and out.
    """

    def __init__(self, name: str = "entity", defaults: Mapping[str, Any] | None = None) -> None:
        """Initialize store.

        Args:
            name: Entity name used in logs.
            defaults: Field values applied to inserts that omit them.
        """
        self.name = name
        self._defaults = {"is_active": True, **(defaults or {})}
        self._records: dict[str, dict[str, Any]] = {}

    def __len__(self) -> int:
        return len(self._records)

    @staticmethod
    def _matches(record: Mapping[str, Any], criteria: Criteria) -> bool:
        for path, expected in criteria.equals.items():
            if get_path(record, path) != expected:
                return False
        if criteria.has_keyword:
            needle = criteria.keyword.lower()
            return any(
                isinstance(value, str) and needle in value.lower()
                for value in (get_path(record, f) for f in criteria.keyword_fields)
            )
        return True

    async def get_by_id(self, entity_id: str) -> dict[str, Any] | None:
        record = self._records.get(entity_id)
        return copy.deepcopy(record) if record is not None else None

    async def find(
        self,
        criteria: Criteria,
        sort_by: str | None = None,
        sort_order: str = "asc",
        skip: int = 0,
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        records = [r for r in self._records.values() if self._matches(r, criteria)]
        if sort_by:
            if any(isinstance(get_path(r, sort_by), (Mapping, list)) for r in records):
                raise BadRequestError(
                    f"Cannot sort {self.name} by non-scalar field: {sort_by}",
                    details={"entity": self.name, "sort_by": sort_by},
                )
            # None sorts first ascending; insertion order breaks ties
            records.sort(key=lambda r: _sort_key(r, sort_by), reverse=sort_order.lower() == "desc")
        end = None if limit is None else skip + limit
        return [copy.deepcopy(r) for r in records[skip:end]]

    async def count(self, criteria: Criteria) -> int:
        return sum(1 for r in self._records.values() if self._matches(r, criteria))

    async def insert(self, data: Mapping[str, Any]) -> dict[str, Any]:
        now = datetime.now(timezone.utc)
        record = copy.deepcopy({**self._defaults, **data})
        record["id"] = str(uuid4())
        record["created_at"] = now
        record["updated_at"] = now
        self._records[record["id"]] = record
        return copy.deepcopy(record)

    async def find_one_and_update(
        self, entity_id: str, patch: Mapping[str, Any]
    ) -> dict[str, Any] | None:
        record = self._records.get(entity_id)
        if record is None:
            return None
        apply_patch(record, copy.deepcopy(dict(patch)))
        record["updated_at"] = datetime.now(timezone.utc)
        return copy.deepcopy(record)

    async def find_one_and_delete(self, entity_id: str) -> dict[str, Any] | None:
        return self._records.pop(entity_id, None)
