"""Generic entity repository.

One EntityRepository exists per entity type. All instances behave the same
way; what differs is configuration: the field holding the parent reference,
the repository of the parent level, and the fields keyword search covers.

Example usage:
    series = EntityRepository(InMemoryEntityStore("series"), entity_name="series")
    categories = EntityRepository(
        InMemoryEntityStore("categories"),
        entity_name="categories",
        parent_field="series_id",
        parent_repository=series,
    )
    s = await series.create({"code": "AAA", "name": {"TW": "系列"}})
    c = await categories.create({"code": "C1", "series_id": s["id"]})
"""

from collections.abc import Iterable, Iterator, Mapping, Sequence
from contextlib import contextmanager
from dataclasses import asdict, dataclass, field
from typing import Any

import structlog

from app.catalog.formatting import format_output, normalize_id, prepare_update_data
from app.catalog.search import PageInfo, Pagination, SearchResult, perform_search
from app.catalog.store import EntityStore
from app.domain.exceptions import (
    BadRequestError,
    DomainError,
    InternalError,
    NotFoundError,
)
from app.infrastructure.config import settings

logger = structlog.get_logger()

# Entity types identified by id alone; every other type requires a code.
CODE_EXEMPT_ENTITIES = frozenset({"news", "faq"})


@dataclass
class BatchError:
    """One failed item of a batch."""

    operation: str
    index: int
    data: dict[str, Any]
    error: str
    error_code: str


@dataclass
class BatchResult:
    """Outcome of batch_process.

    Attributes:
        created: Formatted records that were created.
        updated: Formatted records that were updated.
        errors: Items that failed, in processing order.
    """

    created: list[dict[str, Any]] = field(default_factory=list)
    updated: list[dict[str, Any]] = field(default_factory=list)
    errors: list[BatchError] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "created": self.created,
            "updated": self.updated,
            "errors": [asdict(e) for e in self.errors],
        }


class EntityRepository:
    """Validated CRUD and search for one entity type.

    ensure_exists and ensure_parent_exists are the only places that decide
    whether an id refers to a real, visible record; every other operation
    goes through them.
    """

    def __init__(
        self,
        store: EntityStore,
        *,
        entity_name: str | None = None,
        parent_field: str | None = None,
        parent_repository: "EntityRepository | None" = None,
        searchable_fields: Sequence[str] = (),
        languages: Iterable[str] | None = None,
    ) -> None:
        """Initialize repository.

        Args:
            store: Persistence adapter for this entity type.
            entity_name: Name used in errors and logs (defaults to store.name).
            parent_field: Field holding the parent id, None for roots.
            parent_repository: Repository of the parent level.
            searchable_fields: Dotted paths matched by keyword search.
            languages: Language codes stripped by format_output.
        """
        self.store = store
        self.entity_name = entity_name or store.name
        self.parent_field = parent_field
        self.parent_repository = parent_repository
        self.searchable_fields = tuple(searchable_fields)
        self.languages = tuple(languages if languages is not None else settings.supported_languages)

    def __repr__(self) -> str:
        return f"<EntityRepository(entity={self.entity_name}, parent_field={self.parent_field})>"

    @property
    def requires_code(self) -> bool:
        return self.entity_name not in CODE_EXEMPT_ENTITIES

    @property
    def keyword_fields(self) -> list[str]:
        """Fields a search keyword is matched against, code first."""
        fields = ["code"] if self.requires_code else []
        fields.extend(f for f in self.searchable_fields if f not in fields)
        return fields

    @contextmanager
    def _store_errors(self, operation: str, entity_id: str | None = None) -> Iterator[None]:
        """Wrap unexpected store failures into InternalError."""
        try:
            yield
        except DomainError:
            raise
        except Exception as exc:
            logger.exception(
                "Store operation failed",
                entity=self.entity_name,
                operation=operation,
                id=entity_id,
            )
            raise InternalError(
                f"Failed to {operation} {self.entity_name}: {exc}",
                details={"entity": self.entity_name, "operation": operation, "id": entity_id},
            ) from exc

    def format_output(self, record: Mapping[str, Any] | None) -> dict[str, Any] | None:
        """Format a stored record for output."""
        return format_output(record, self.languages)

    async def ensure_exists(self, entity_id: Any, *, is_active: bool | None = None) -> dict[str, Any]:
        """Fetch a record that must exist.

        Args:
            entity_id: Record id.
            is_active: When set, the record's is_active flag must match.

        Returns:
            The stored record.

        Raises:
            BadRequestError: If the id is malformed.
            NotFoundError: If no matching record exists.
        """
        entity_id = normalize_id(entity_id)
        with self._store_errors("get", entity_id):
            record = await self.store.get_by_id(entity_id)
        if record is None:
            raise NotFoundError(self.entity_name, entity_id)
        if is_active is not None and bool(record.get("is_active")) != is_active:
            raise NotFoundError(self.entity_name, entity_id, details={"is_active": is_active})
        return record

    async def ensure_parent_exists(self, parent_id: Any) -> dict[str, Any]:
        """Fetch the active parent record a child would reference.

        Raises:
            BadRequestError: If this entity type has no parent level or the
                parent id is malformed.
            NotFoundError: If the parent does not exist or is inactive.
        """
        if self.parent_repository is None or self.parent_field is None:
            raise BadRequestError(
                f"{self.entity_name} has no parent level",
                details={"entity": self.entity_name},
            )
        parent_id = normalize_id(parent_id, field=self.parent_field)
        return await self.parent_repository.ensure_exists(parent_id, is_active=True)

    async def get(self, entity_id: Any, *, is_active: bool | None = None) -> dict[str, Any]:
        """Fetch and format a record that must exist."""
        return self.format_output(await self.ensure_exists(entity_id, is_active=is_active))

    async def check_dependencies(self, entity_id: str) -> None:
        """Hook run before delete; raise to block the deletion.

        Cascading children or removing stored files is left to callers.
        """
        return None

    async def create(self, data: Mapping[str, Any]) -> dict[str, Any]:
        """Create a record.

        Args:
            data: Record fields. Non-root levels must carry a reference to an
                active parent.

        Returns:
            The formatted record.
        """
        payload = dict(data)
        if self.requires_code:
            code = payload.get("code")
            if not isinstance(code, str) or not code.strip():
                raise BadRequestError(
                    f"{self.entity_name} code is required",
                    details={"entity": self.entity_name, "field": "code"},
                )
            payload["code"] = code.strip()

        if self.parent_field is not None:
            parent_id = payload.get(self.parent_field)
            if not parent_id:
                raise BadRequestError(
                    f"{self.entity_name} {self.parent_field} is required",
                    details={"entity": self.entity_name, "field": self.parent_field},
                )
            parent = await self.ensure_parent_exists(parent_id)
            payload[self.parent_field] = parent["id"]

        with self._store_errors("create"):
            record = await self.store.insert(payload)

        logger.info("Entity created", entity=self.entity_name, id=record["id"])
        return self.format_output(record)

    async def update(self, entity_id: Any, data: Mapping[str, Any]) -> dict[str, Any]:
        """Update a record.

        Nested maps in data are applied key by key, so {"name": {"EN": ...}}
        leaves name.TW untouched.

        Raises:
            BadRequestError: If a supplied parent reference is empty.
            NotFoundError: If the record is missing, or was deleted between
                the existence check and the write.
        """
        record = await self.ensure_exists(entity_id)
        entity_id = record["id"]
        payload = dict(data)

        if self.requires_code and "code" in payload:
            code = payload["code"]
            if not isinstance(code, str) or not code.strip():
                raise BadRequestError(
                    f"{self.entity_name} code cannot be empty",
                    details={"entity": self.entity_name, "field": "code"},
                )
            payload["code"] = code.strip()

        if self.parent_field is not None and self.parent_field in payload:
            parent_id = payload[self.parent_field]
            if parent_id is None or (isinstance(parent_id, str) and not parent_id.strip()):
                raise BadRequestError(
                    f"{self.entity_name} {self.parent_field} cannot be empty",
                    details={"entity": self.entity_name, "field": self.parent_field},
                )
            parent = await self.ensure_parent_exists(parent_id)
            payload[self.parent_field] = parent["id"]

        patch = prepare_update_data(payload)
        if not patch:
            return self.format_output(record)

        with self._store_errors("update", entity_id):
            updated = await self.store.find_one_and_update(entity_id, patch)
        if updated is None:
            raise NotFoundError(self.entity_name, entity_id, details={"operation": "update"})

        logger.info(
            "Entity updated",
            entity=self.entity_name,
            id=entity_id,
            fields=sorted(patch),
        )
        return self.format_output(updated)

    async def delete(self, entity_id: Any, *, check_dependencies: bool = True) -> bool:
        """Hard-delete a record.

        Returns:
            True if a record was removed.
        """
        record = await self.ensure_exists(entity_id)
        entity_id = record["id"]

        if check_dependencies:
            await self.check_dependencies(entity_id)

        with self._store_errors("delete", entity_id):
            removed = await self.store.find_one_and_delete(entity_id)

        logger.info("Entity deleted", entity=self.entity_name, id=entity_id, removed=removed is not None)
        return removed is not None

    async def search(
        self,
        filters: Mapping[str, Any] | None = None,
        *,
        keyword: str | None = None,
        pagination: Pagination | None = None,
        sort_by: str | None = None,
        sort_order: str = "asc",
    ) -> SearchResult:
        """Search records.

        Args:
            filters: Exact-match conditions.
            keyword: Optional substring ORed across code and searchable fields.
            pagination: Page to return; None returns every match and a
                None pagination envelope.
            sort_by: Sort field.
            sort_order: Sort order (asc/desc).

        Returns:
            SearchResult with formatted records.
        """
        with self._store_errors("search"):
            hits = await perform_search(
                self.store,
                keyword=keyword,
                filters=dict(filters or {}),
                search_fields=self.keyword_fields,
                sort_by=sort_by,
                sort_order=sort_order,
                skip=pagination.skip if pagination else 0,
                limit=pagination.limit if pagination else None,
            )

        page_info = None
        if pagination is not None:
            page_info = PageInfo(page=pagination.page, limit=pagination.limit, total=hits.total)

        return SearchResult(
            data=[self.format_output(item) for item in hits.items],
            pagination=page_info,
        )

    async def batch_process(
        self,
        to_create: Iterable[Mapping[str, Any]] = (),
        to_update: Iterable[Mapping[str, Any]] = (),
    ) -> BatchResult:
        """Create and update many records, item by item.

        A failing item is recorded in errors and does not stop the rest.
        Items in to_update must carry their "id".
        """
        result = BatchResult()

        for index, item in enumerate(to_create):
            try:
                result.created.append(await self.create(item))
            except DomainError as exc:
                result.errors.append(
                    BatchError("create", index, dict(item), exc.message, exc.error_code)
                )

        for index, item in enumerate(to_update):
            entity_id = item.get("id")
            if not entity_id:
                result.errors.append(
                    BatchError("update", index, dict(item), "Missing id", BadRequestError.error_code)
                )
                continue
            try:
                result.updated.append(await self.update(entity_id, item))
            except DomainError as exc:
                result.errors.append(
                    BatchError("update", index, dict(item), exc.message, exc.error_code)
                )

        if result.errors:
            logger.warning(
                "Batch completed with errors",
                entity=self.entity_name,
                created=len(result.created),
                updated=len(result.updated),
                errors=len(result.errors),
            )
        return result
