"""Tests for the generic entity repository."""

from uuid import uuid4

import pytest

from app.catalog.repository import EntityRepository
from app.catalog.search import Pagination
from app.catalog.store import InMemoryEntityStore
from app.domain.exceptions import BadRequestError, InternalError, NotFoundError


@pytest.fixture
def series() -> EntityRepository:
    return EntityRepository(
        InMemoryEntityStore("series"),
        entity_name="series",
        searchable_fields=["name.TW", "name.EN"],
    )


@pytest.fixture
def categories(series: EntityRepository) -> EntityRepository:
    return EntityRepository(
        InMemoryEntityStore("categories"),
        entity_name="categories",
        parent_field="series_id",
        parent_repository=series,
        searchable_fields=["name.TW", "name.EN"],
    )


@pytest.fixture
def news() -> EntityRepository:
    return EntityRepository(
        InMemoryEntityStore("news", defaults={"is_active": False}),
        entity_name="news",
        searchable_fields=["title.EN"],
    )


class FailingStore(InMemoryEntityStore):
    """Store whose reads blow up."""

    async def get_by_id(self, entity_id):
        raise ConnectionError("database unreachable")


class TestEnsureExists:
    """Tests for existence checks."""

    @pytest.mark.asyncio
    async def test_returns_record(self, series: EntityRepository) -> None:
        created = await series.create({"code": "S1"})
        record = await series.ensure_exists(created["id"])
        assert record["code"] == "S1"

    @pytest.mark.asyncio
    async def test_missing_raises_not_found(self, series: EntityRepository) -> None:
        missing = str(uuid4())
        with pytest.raises(NotFoundError) as exc_info:
            await series.ensure_exists(missing)
        assert exc_info.value.entity == "series"
        assert exc_info.value.entity_id == missing

    @pytest.mark.asyncio
    async def test_malformed_id_raises_bad_request(self, series: EntityRepository) -> None:
        with pytest.raises(BadRequestError):
            await series.ensure_exists("nope")

    @pytest.mark.asyncio
    async def test_is_active_filter(self, series: EntityRepository) -> None:
        created = await series.create({"code": "S1", "is_active": False})
        await series.ensure_exists(created["id"], is_active=False)
        with pytest.raises(NotFoundError):
            await series.ensure_exists(created["id"], is_active=True)

    @pytest.mark.asyncio
    async def test_store_failure_wrapped(self) -> None:
        repository = EntityRepository(FailingStore("series"), entity_name="series")
        entity_id = str(uuid4())
        with pytest.raises(InternalError) as exc_info:
            await repository.ensure_exists(entity_id)
        assert exc_info.value.details == {"entity": "series", "operation": "get", "id": entity_id}
        assert isinstance(exc_info.value.__cause__, ConnectionError)


class TestEnsureParentExists:
    """Tests for parent validation."""

    @pytest.mark.asyncio
    async def test_root_has_no_parent(self, series: EntityRepository) -> None:
        with pytest.raises(BadRequestError):
            await series.ensure_parent_exists(str(uuid4()))

    @pytest.mark.asyncio
    async def test_inactive_parent_rejected(
        self, series: EntityRepository, categories: EntityRepository
    ) -> None:
        parent = await series.create({"code": "S1", "is_active": False})
        with pytest.raises(NotFoundError):
            await categories.ensure_parent_exists(parent["id"])

    @pytest.mark.asyncio
    async def test_malformed_parent_rejected(self, categories: EntityRepository) -> None:
        with pytest.raises(BadRequestError) as exc_info:
            await categories.ensure_parent_exists("bad")
        assert exc_info.value.details["field"] == "series_id"


class TestCreate:
    """Tests for create."""

    @pytest.mark.asyncio
    async def test_code_required(self, series: EntityRepository) -> None:
        with pytest.raises(BadRequestError):
            await series.create({"name": {"EN": "x"}})
        with pytest.raises(BadRequestError):
            await series.create({"code": "   "})

    @pytest.mark.asyncio
    async def test_code_trimmed(self, series: EntityRepository) -> None:
        created = await series.create({"code": "  S1  "})
        assert created["code"] == "S1"

    @pytest.mark.asyncio
    async def test_content_types_exempt_from_code(self, news: EntityRepository) -> None:
        created = await news.create({"title": {"EN": "Launch"}})
        assert "code" not in created
        assert created["is_active"] is False

    @pytest.mark.asyncio
    async def test_parent_reference_required(self, categories: EntityRepository) -> None:
        with pytest.raises(BadRequestError):
            await categories.create({"code": "C1"})

    @pytest.mark.asyncio
    async def test_parent_must_exist(self, categories: EntityRepository) -> None:
        with pytest.raises(NotFoundError):
            await categories.create({"code": "C1", "series_id": str(uuid4())})

    @pytest.mark.asyncio
    async def test_parent_reference_canonicalized(
        self, series: EntityRepository, categories: EntityRepository
    ) -> None:
        parent = await series.create({"code": "S1"})
        created = await categories.create({"code": "C1", "series_id": parent["id"].upper()})
        assert created["series_id"] == parent["id"]

    @pytest.mark.asyncio
    async def test_output_formatted(self, series: EntityRepository) -> None:
        created = await series.create({"code": "S1", "TW": "accessor"})
        assert "TW" not in created
        assert isinstance(created["created_at"], str)


class TestUpdate:
    """Tests for update."""

    @pytest.mark.asyncio
    async def test_partial_language_update(self, series: EntityRepository) -> None:
        created = await series.create({"code": "S1", "name": {"TW": "甲", "EN": "a"}})
        updated = await series.update(created["id"], {"name": {"EN": "b"}})
        assert updated["name"] == {"TW": "甲", "EN": "b"}

    @pytest.mark.asyncio
    async def test_protected_fields_ignored(self, series: EntityRepository) -> None:
        created = await series.create({"code": "S1"})
        updated = await series.update(created["id"], {"id": str(uuid4()), "created_at": "x"})
        assert updated["id"] == created["id"]
        assert updated["created_at"] == created["created_at"]

    @pytest.mark.asyncio
    async def test_empty_code_rejected(self, series: EntityRepository) -> None:
        created = await series.create({"code": "S1"})
        with pytest.raises(BadRequestError):
            await series.update(created["id"], {"code": ""})

    @pytest.mark.asyncio
    async def test_reparent_validated(
        self, series: EntityRepository, categories: EntityRepository
    ) -> None:
        first = await series.create({"code": "S1"})
        second = await series.create({"code": "S2"})
        category = await categories.create({"code": "C1", "series_id": first["id"]})

        moved = await categories.update(category["id"], {"series_id": second["id"]})
        assert moved["series_id"] == second["id"]

        with pytest.raises(NotFoundError):
            await categories.update(category["id"], {"series_id": str(uuid4())})

    @pytest.mark.asyncio
    async def test_missing_record(self, series: EntityRepository) -> None:
        with pytest.raises(NotFoundError):
            await series.update(str(uuid4()), {"code": "X"})

    @pytest.mark.asyncio
    @pytest.mark.parametrize("empty", [None, "", "  "])
    async def test_empty_parent_rejected(
        self, series: EntityRepository, categories: EntityRepository, empty: str | None
    ) -> None:
        parent = await series.create({"code": "S1"})
        category = await categories.create({"code": "C1", "series_id": parent["id"]})

        with pytest.raises(BadRequestError) as exc_info:
            await categories.update(category["id"], {"series_id": empty})
        assert exc_info.value.details["field"] == "series_id"
        assert (await categories.get(category["id"]))["series_id"] == parent["id"]

    @pytest.mark.asyncio
    async def test_record_deleted_before_write(self) -> None:
        class VanishingStore(InMemoryEntityStore):
            async def find_one_and_update(self, entity_id, patch):
                await self.find_one_and_delete(entity_id)
                return await super().find_one_and_update(entity_id, patch)

        repository = EntityRepository(VanishingStore("series"), entity_name="series")
        created = await repository.create({"code": "S1"})

        with pytest.raises(NotFoundError) as exc_info:
            await repository.update(created["id"], {"code": "S2"})
        assert exc_info.value.details["operation"] == "update"


class TestDelete:
    """Tests for delete."""

    @pytest.mark.asyncio
    async def test_delete(self, series: EntityRepository) -> None:
        created = await series.create({"code": "S1"})
        assert await series.delete(created["id"]) is True
        with pytest.raises(NotFoundError):
            await series.get(created["id"])

    @pytest.mark.asyncio
    async def test_delete_missing(self, series: EntityRepository) -> None:
        with pytest.raises(NotFoundError):
            await series.delete(str(uuid4()))

    @pytest.mark.asyncio
    async def test_children_left_in_place(
        self, series: EntityRepository, categories: EntityRepository
    ) -> None:
        parent = await series.create({"code": "S1"})
        child = await categories.create({"code": "C1", "series_id": parent["id"]})
        await series.delete(parent["id"])
        assert (await categories.get(child["id"]))["series_id"] == parent["id"]


class TestSearch:
    """Tests for search."""

    @pytest.mark.asyncio
    async def test_keyword_covers_code_and_names(self, series: EntityRepository) -> None:
        await series.create({"code": "PUMP", "name": {"EN": "Pumps"}})
        await series.create({"code": "V1", "name": {"TW": "泵浦閥", "EN": "Valves"}})
        await series.create({"code": "X1", "name": {"EN": "Other"}})

        by_code = await series.search(keyword="pump")
        assert [r["code"] for r in by_code.data] == ["PUMP"]

        by_name = await series.search(keyword="泵浦")
        assert [r["code"] for r in by_name.data] == ["V1"]

    @pytest.mark.asyncio
    async def test_without_pagination(self, series: EntityRepository) -> None:
        await series.create({"code": "S1"})
        result = await series.search()
        assert result.pagination is None
        assert len(result.data) == 1

    @pytest.mark.asyncio
    async def test_with_pagination(self, series: EntityRepository) -> None:
        for index in range(5):
            await series.create({"code": f"S{index}"})

        result = await series.search(
            pagination=Pagination(page=2, limit=2), sort_by="code", sort_order="asc"
        )
        assert [r["code"] for r in result.data] == ["S2", "S3"]
        assert result.pagination.to_dict() == {"page": 2, "limit": 2, "total": 5, "pages": 3}

    def test_keyword_fields(self, series: EntityRepository, news: EntityRepository) -> None:
        assert series.keyword_fields == ["code", "name.TW", "name.EN"]
        assert news.keyword_fields == ["title.EN"]


class TestBatchProcess:
    """Tests for batch_process."""

    @pytest.mark.asyncio
    async def test_failures_do_not_stop_batch(self, series: EntityRepository) -> None:
        existing = await series.create({"code": "S1"})

        result = await series.batch_process(
            to_create=[{"code": "S2"}, {"name": {"EN": "no code"}}, {"code": "S3"}],
            to_update=[
                {"id": existing["id"], "code": "S1-renamed"},
                {"code": "no id"},
                {"id": str(uuid4()), "code": "ghost"},
            ],
        )

        assert [r["code"] for r in result.created] == ["S2", "S3"]
        assert [r["code"] for r in result.updated] == ["S1-renamed"]
        assert [(e.operation, e.index, e.error_code) for e in result.errors] == [
            ("create", 1, "BAD_REQUEST"),
            ("update", 1, "BAD_REQUEST"),
            ("update", 2, "NOT_FOUND"),
        ]
        assert result.to_dict()["errors"][1]["error"] == "Missing id"
