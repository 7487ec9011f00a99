"""Hierarchy API endpoints.

Provides cross-level views of the catalog:
- GET /hierarchy - full tree from every active series
- GET /hierarchy/children/{parent_level}/{parent_id} - direct children
- GET /hierarchy/parents/{level}/{item_id} - ancestor chain, root first
- GET /hierarchy/subtree/{level}/{item_id} - tree below one node
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request

from app.api.schemas import (
    AncestorsResultResponse,
    ChildrenResultResponse,
    ErrorResponse,
    ResultResponse,
)
from app.catalog.hierarchy import HierarchyService, get_hierarchy_service
from app.infrastructure.config import settings

router = APIRouter(prefix="/hierarchy", tags=["Hierarchy"])


# ============================================================================
# Dependencies
# ============================================================================


def get_service(request: Request) -> HierarchyService:
    """Get hierarchy service with request ID."""
    request_id = getattr(request.state, "request_id", None)
    return get_hierarchy_service(request_id=request_id)


MaxDepth = Annotated[
    int,
    Query(description="Levels to descend below each node (negative for unlimited)"),
]


# ============================================================================
# Endpoints
# ============================================================================


@router.get(
    "",
    response_model=ResultResponse,
    summary="Full hierarchy",
    description="Get every active series with its active descendants.",
)
async def get_full_hierarchy(
    service: Annotated[HierarchyService, Depends(get_service)],
    max_depth: MaxDepth = settings.hierarchy_max_depth,
) -> ResultResponse:
    forest = await service.get_full_hierarchy_data(max_depth=max_depth)
    return ResultResponse(result=forest)


@router.get(
    "/children/{parent_level}/{parent_id}",
    response_model=ChildrenResultResponse,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
    },
    summary="List children",
    description="Get the active direct children of a node, in creation order.",
)
async def get_children(
    parent_level: str,
    parent_id: str,
    service: Annotated[HierarchyService, Depends(get_service)],
) -> ChildrenResultResponse:
    """List the direct children of a node.

    Args:
        parent_level: Level of the parent node.
        parent_id: Parent node id.
        service: Hierarchy service.

    Returns:
        Children, their level, and a reference to the parent.
    """
    data = await service.get_children_by_parent_id_data(parent_level, parent_id)
    return ChildrenResultResponse(result=data)


@router.get(
    "/parents/{level}/{item_id}",
    response_model=AncestorsResultResponse,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
    },
    summary="Ancestor chain",
    description="Get a node and its ancestors, root first.",
)
async def get_parents(
    level: str,
    item_id: str,
    service: Annotated[HierarchyService, Depends(get_service)],
) -> AncestorsResultResponse:
    chain = await service.get_parent_hierarchy_data(level, item_id)
    return AncestorsResultResponse(result=chain)


@router.get(
    "/subtree/{level}/{item_id}",
    response_model=ResultResponse,
    responses={
        400: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
    },
    summary="Subtree",
    description="Get an active node with its active descendants.",
)
async def get_subtree(
    level: str,
    item_id: str,
    service: Annotated[HierarchyService, Depends(get_service)],
    max_depth: MaxDepth = settings.hierarchy_max_depth,
) -> ResultResponse:
    tree = await service.get_sub_hierarchy_data(level, item_id, max_depth=max_depth)
    return ResultResponse(result=tree)
