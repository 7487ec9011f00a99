"""API schemas for the catalog API.

Pydantic models for request/response validation and serialization.
Catalog records are free-form multilingual documents, so item payloads
are passed through as dictionaries and only the envelopes are typed.
"""

from typing import Any

from pydantic import BaseModel, Field


# ============================================================================
# Common Schemas
# ============================================================================


class ErrorResponse(BaseModel):
    """Standard error response.

    All API errors follow this format for consistency.
    """

    error_code: str = Field(..., description="Machine-readable error code")
    message: str = Field(..., description="Human-readable error message")
    details: dict[str, Any] = Field(
        default_factory=dict, description="Additional error context"
    )
    request_id: str | None = Field(
        default=None, description="Request ID for correlation"
    )


class ResultResponse(BaseModel):
    """Envelope wrapping every successful response."""

    result: Any = Field(..., description="Operation result")


class PageInfoSchema(BaseModel):
    """Pagination envelope."""

    page: int = Field(..., description="Current page number")
    limit: int = Field(..., description="Items per page")
    total: int = Field(..., description="Total number of matches")
    pages: int = Field(..., description="Total number of pages")


class SearchResponse(BaseModel):
    """Search results with optional pagination."""

    data: list[dict[str, Any]] = Field(default_factory=list)
    pagination: PageInfoSchema | None = None


class SearchResultResponse(BaseModel):
    """Search results wrapped in the result envelope."""

    result: SearchResponse


# ============================================================================
# Batch Schemas
# ============================================================================


class BatchRequest(BaseModel):
    """Records to create and update in one call.

    Items in update must carry their id.
    """

    create: list[dict[str, Any]] = Field(default_factory=list, description="Records to create")
    update: list[dict[str, Any]] = Field(default_factory=list, description="Records to update")


class BatchErrorSchema(BaseModel):
    """One failed batch item."""

    operation: str
    index: int
    data: dict[str, Any]
    error: str
    error_code: str


class BatchResponse(BaseModel):
    """Outcome of a batch call."""

    created: list[dict[str, Any]] = Field(default_factory=list)
    updated: list[dict[str, Any]] = Field(default_factory=list)
    errors: list[BatchErrorSchema] = Field(default_factory=list)


class BatchResultResponse(BaseModel):
    """Batch outcome wrapped in the result envelope."""

    result: BatchResponse


# ============================================================================
# Hierarchy Schemas
# ============================================================================


class ParentRef(BaseModel):
    """Reference to the parent of a children listing."""

    type: str = Field(..., description="Parent level")
    id: str = Field(..., description="Parent id")


class ChildrenResponse(BaseModel):
    """Direct children of a node."""

    children: list[dict[str, Any]] = Field(default_factory=list)
    child_level: str = Field(..., description="Level of the children")
    parent: ParentRef


class ChildrenResultResponse(BaseModel):
    """Children listing wrapped in the result envelope."""

    result: ChildrenResponse


class AncestorEntry(BaseModel):
    """One step of an ancestor chain."""

    type: str = Field(..., description="Level of the node")
    item: dict[str, Any] = Field(..., description="Formatted node")


class AncestorsResultResponse(BaseModel):
    """Ancestor chain, root first, wrapped in the result envelope."""

    result: list[AncestorEntry]


class DeleteResponse(BaseModel):
    """Outcome of a delete."""

    id: str
    deleted: bool


class DeleteResultResponse(BaseModel):
    """Delete outcome wrapped in the result envelope."""

    result: DeleteResponse
