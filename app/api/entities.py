"""Entity CRUD endpoints.

Every hierarchy level and content type exposes the same routes, built by
build_entity_router:
- GET /{entity} - active records in creation order, optionally filtered
  by the parent reference field (e.g. /categories?series_id=...)
- GET /{entity}/search - keyword search with pagination
- GET /{entity}/{id} - one record
- POST /{entity} - create
- PUT /{entity}/{id} - update
- DELETE /{entity}/{id} - delete
- POST /{entity}/batch - create and update many records
"""

from collections.abc import Callable
from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, Query, Request, status

from app.api.schemas import (
    BatchRequest,
    BatchResultResponse,
    DeleteResultResponse,
    ErrorResponse,
    ResultResponse,
    SearchResultResponse,
)
from app.catalog.formatting import normalize_id
from app.catalog.presentation import faq_meta, news_meta
from app.catalog.registry import get_registry
from app.catalog.repository import EntityRepository
from app.catalog.search import Pagination
from app.catalog.topology import ContentType, Level
from app.infrastructure.config import settings

Decorator = Callable[[dict[str, Any]], dict[str, Any]]

ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


def _plain(record: dict[str, Any]) -> dict[str, Any]:
    return record


def with_news_meta(record: dict[str, Any]) -> dict[str, Any]:
    """Attach meta_title and meta_description to a news record."""
    return {**record, **news_meta(record)}


def with_faq_meta(record: dict[str, Any]) -> dict[str, Any]:
    """Attach meta_title and meta_description to a FAQ record."""
    return {**record, **faq_meta(record)}


def build_entity_router(
    entity: str,
    resolve: Callable[[], EntityRepository],
    *,
    tag: str,
    decorate: Decorator | None = None,
) -> APIRouter:
    """Build the CRUD router of one entity type.

    Args:
        entity: Entity name, also the URL prefix.
        resolve: Returns the entity's repository; called per request so a
            replaced registry takes effect immediately.
        tag: OpenAPI tag.
        decorate: Applied to every record in responses.

    Returns:
        Router mounted at /{entity}.
    """
    router = APIRouter(prefix=f"/{entity}", tags=[tag])
    present = decorate or _plain

    def get_repository() -> EntityRepository:
        return resolve()

    Repository = Annotated[EntityRepository, Depends(get_repository)]

    @router.get(
        "",
        response_model=SearchResultResponse,
        responses=ERROR_RESPONSES,
        summary=f"List {entity}",
        description="Get active records in creation order.",
    )
    async def list_entities(request: Request, repository: Repository) -> SearchResultResponse:
        """List active records, filtered by the parent field when given.

        Args:
            request: Incoming request; the parent field is read from its query.
            repository: Entity repository.

        Returns:
            All matching records without pagination.
        """
        filters: dict[str, Any] = {"is_active": True}
        parent_field = repository.parent_field
        if parent_field and request.query_params.get(parent_field):
            filters[parent_field] = normalize_id(
                request.query_params[parent_field], field=parent_field
            )

        result = await repository.search(filters, sort_by="created_at", sort_order="asc")
        result.data = [present(item) for item in result.data]
        return SearchResultResponse(result=result.to_dict())

    @router.get(
        "/search",
        response_model=SearchResultResponse,
        responses=ERROR_RESPONSES,
        summary=f"Search {entity}",
        description="Keyword search over code and localized text fields.",
    )
    async def search_entities(
        repository: Repository,
        keyword: str | None = Query(default=None, description="Case-insensitive substring"),
        page: int = Query(default=1, description="Page number (1-based)"),
        limit: int = Query(default=settings.default_page_limit, description="Items per page"),
        sort_by: str = Query(default="created_at", description="Sort field"),
        sort_order: str = Query(default="desc", description="asc or desc"),
        is_active: bool | None = Query(default=None, description="Filter by active flag"),
    ) -> SearchResultResponse:
        filters = {} if is_active is None else {"is_active": is_active}
        result = await repository.search(
            filters,
            keyword=keyword,
            pagination=Pagination(page=page, limit=limit),
            sort_by=sort_by,
            sort_order=sort_order,
        )
        result.data = [present(item) for item in result.data]
        return SearchResultResponse(result=result.to_dict())

    @router.get(
        "/{entity_id}",
        response_model=ResultResponse,
        responses=ERROR_RESPONSES,
        summary=f"Get {entity} record",
    )
    async def get_entity(entity_id: str, repository: Repository) -> ResultResponse:
        return ResultResponse(result=present(await repository.get(entity_id)))

    @router.post(
        "",
        response_model=ResultResponse,
        status_code=status.HTTP_201_CREATED,
        responses=ERROR_RESPONSES,
        summary=f"Create {entity} record",
    )
    async def create_entity(
        repository: Repository,
        data: dict[str, Any] = Body(...),
    ) -> ResultResponse:
        return ResultResponse(result=present(await repository.create(data)))

    @router.put(
        "/{entity_id}",
        response_model=ResultResponse,
        responses=ERROR_RESPONSES,
        summary=f"Update {entity} record",
        description="Nested language maps are merged key by key.",
    )
    async def update_entity(
        entity_id: str,
        repository: Repository,
        data: dict[str, Any] = Body(...),
    ) -> ResultResponse:
        return ResultResponse(result=present(await repository.update(entity_id, data)))

    @router.delete(
        "/{entity_id}",
        response_model=DeleteResultResponse,
        responses=ERROR_RESPONSES,
        summary=f"Delete {entity} record",
    )
    async def delete_entity(entity_id: str, repository: Repository) -> DeleteResultResponse:
        deleted = await repository.delete(entity_id)
        return DeleteResultResponse(result={"id": normalize_id(entity_id), "deleted": deleted})

    @router.post(
        "/batch",
        response_model=BatchResultResponse,
        responses=ERROR_RESPONSES,
        summary=f"Batch create/update {entity}",
        description="Failed items are reported in errors without stopping the batch.",
    )
    async def batch_entities(request: BatchRequest, repository: Repository) -> BatchResultResponse:
        outcome = await repository.batch_process(request.create, request.update)
        outcome.created = [present(item) for item in outcome.created]
        outcome.updated = [present(item) for item in outcome.updated]
        return BatchResultResponse(result=outcome.to_dict())

    return router


def _level_resolver(level: Level) -> Callable[[], EntityRepository]:
    return lambda: get_registry().resolve(level)


def _content_resolver(kind: ContentType) -> Callable[[], EntityRepository]:
    return lambda: get_registry().content(kind)


level_routers = [
    build_entity_router(level.value, _level_resolver(level), tag="Catalog")
    for level in Level
]

news_router = build_entity_router(
    ContentType.NEWS.value,
    _content_resolver(ContentType.NEWS),
    tag="News",
    decorate=with_news_meta,
)

faq_router = build_entity_router(
    ContentType.FAQ.value,
    _content_resolver(ContentType.FAQ),
    tag="FAQ",
    decorate=with_faq_meta,
)
