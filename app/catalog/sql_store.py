"""SQLAlchemy-backed entity store.

Each store call opens its own session and transaction, so create, update
and delete are single atomic operations. Updates lock the row with
SELECT ... FOR UPDATE and merge dotted patches into JSON columns.
"""

import copy
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import JSON, func, inspect, or_, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.catalog.store import Criteria, EntityStore, apply_patch
from app.domain.exceptions import BadRequestError

# Managed by the store; ignored when present in insert payloads.
GENERATED_FIELDS = frozenset({"id", "created_at", "updated_at"})


def _like_pattern(keyword: str) -> str:
    escaped = keyword.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


class SqlAlchemyEntityStore(EntityStore):
    """Entity store for one SQLAlchemy model.

    Example usage:
        store = SqlAlchemyEntityStore(Series, async_session_factory)
        record = await store.insert({"code": "AAA", "name": {"TW": "系列"}})
    """

    def __init__(
        self,
        model: type,
        session_factory: async_sessionmaker[AsyncSession],
        name: str | None = None,
    ) -> None:
        """Initialize store.

        Args:
            model: Declarative model class.
            session_factory: Factory producing async sessions.
            name: Entity name used in logs (defaults to the table name).
        """
        self.model = model
        self.name = name or model.__tablename__
        self._session_factory = session_factory
        self._columns = {attr.key for attr in inspect(model).column_attrs}

    def _to_dict(self, obj: Any) -> dict[str, Any]:
        return {key: copy.deepcopy(getattr(obj, key)) for key in self._columns}

    def _check_fields(self, keys: set[str]) -> None:
        unknown = sorted(k for k in keys if k not in self._columns)
        if unknown:
            raise BadRequestError(
                f"Unknown fields for {self.name}: {', '.join(unknown)}",
                details={"entity": self.name, "fields": unknown},
            )

    def _column(self, path: str) -> Any:
        """Resolve a field or dotted JSON path to a SQL expression."""
        top, _, rest = path.partition(".")
        self._check_fields({top})
        column = getattr(self.model, top)
        if not rest:
            return column
        parts = rest.split(".")
        element = column[parts[0]] if len(parts) == 1 else column[tuple(parts)]
        return element.as_string()

    def _conditions(self, criteria: Criteria) -> list[Any]:
        conditions = [self._column(path) == value for path, value in criteria.equals.items()]
        if criteria.has_keyword:
            pattern = _like_pattern(criteria.keyword)
            conditions.append(
                or_(
                    *(
                        self._column(f).ilike(pattern, escape="\\")
                        for f in criteria.keyword_fields
                    )
                )
            )
        return conditions

    async def get_by_id(self, entity_id: str) -> dict[str, Any] | None:
        async with self._session_factory() as session:
            obj = await session.get(self.model, entity_id)
            return self._to_dict(obj) if obj is not None else None

    async def find(
        self,
        criteria: Criteria,
        sort_by: str | None = None,
        sort_order: str = "asc",
        skip: int = 0,
        limit: int | None = None,
    ) -> list[dict[str, Any]]:
        query = select(self.model).where(*self._conditions(criteria))

        if sort_by:
            sort_column = self._column(sort_by)
            if "." not in sort_by and isinstance(sort_column.type, JSON):
                raise BadRequestError(
                    f"Cannot sort {self.name} by non-scalar field: {sort_by}",
                    details={"entity": self.name, "sort_by": sort_by},
                )
            if sort_order.lower() == "desc":
                query = query.order_by(sort_column.desc())
            else:
                query = query.order_by(sort_column.asc())
        query = query.order_by(self.model.created_at.asc(), self.model.id.asc())

        if skip:
            query = query.offset(skip)
        if limit is not None:
            query = query.limit(limit)

        async with self._session_factory() as session:
            result = await session.execute(query)
            return [self._to_dict(obj) for obj in result.scalars().all()]

    async def count(self, criteria: Criteria) -> int:
        query = select(func.count()).select_from(self.model).where(*self._conditions(criteria))
        async with self._session_factory() as session:
            result = await session.execute(query)
            return result.scalar_one()

    async def insert(self, data: Mapping[str, Any]) -> dict[str, Any]:
        values = {k: v for k, v in data.items() if k not in GENERATED_FIELDS}
        self._check_fields(set(values))
        async with self._session_factory() as session:
            async with session.begin():
                obj = self.model(**values)
                session.add(obj)
                await session.flush()
                return self._to_dict(obj)

    async def find_one_and_update(
        self, entity_id: str, patch: Mapping[str, Any]
    ) -> dict[str, Any] | None:
        self._check_fields({key.partition(".")[0] for key in patch})
        async with self._session_factory() as session:
            async with session.begin():
                query = select(self.model).where(self.model.id == entity_id).with_for_update()
                obj = (await session.execute(query)).scalar_one_or_none()
                if obj is None:
                    return None

                # JSON columns are replaced wholesale so the ORM sees the change
                merged: dict[str, Any] = {}
                for key, value in patch.items():
                    top, _, rest = key.partition(".")
                    if not rest:
                        merged[top] = value
                        continue
                    if top not in merged or not isinstance(merged[top], dict):
                        current = getattr(obj, top)
                        merged[top] = copy.deepcopy(current) if isinstance(current, dict) else {}
                    apply_patch(merged[top], {rest: value})

                merged["updated_at"] = datetime.now(timezone.utc)
                for key, value in merged.items():
                    setattr(obj, key, value)
                await session.flush()
                return self._to_dict(obj)

    async def find_one_and_delete(self, entity_id: str) -> dict[str, Any] | None:
        async with self._session_factory() as session:
            async with session.begin():
                query = select(self.model).where(self.model.id == entity_id).with_for_update()
                obj = (await session.execute(query)).scalar_one_or_none()
                if obj is None:
                    return None
                record = self._to_dict(obj)
                await session.delete(obj)
                return record
