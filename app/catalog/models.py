"""SQLAlchemy models for the catalog.

One table per hierarchy level plus the news and faq content tables.
Multilingual fields are JSON objects keyed by language code. Parent
references are plain indexed columns rather than foreign keys: a dangling
reference is tolerated by the hierarchy engine and cleaned up by callers.
"""

from datetime import datetime, timezone
from typing import Any
from uuid import uuid4

from sqlalchemy import JSON, Boolean, DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from app.infrastructure.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return str(uuid4())


class CatalogNodeMixin:
    """Columns shared by every hierarchy level.

    Attributes:
        id: Unique identifier (UUID string).
        code: Human-readable key, expected unique within a level.
        name: Multilingual name, e.g. {"TW": "...", "EN": "..."}.
        is_active: Soft-visibility flag.
        created_at: Creation timestamp; defines sibling order.
        updated_at: Last update timestamp.
    """

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    code: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    name: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, index=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow, index=True
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow
    )

    def __repr__(self) -> str:
        """String representation."""
        return f"<{type(self).__name__}(id={self.id}, code={self.code})>"


class Series(CatalogNodeMixin, Base):
    """Top level of the catalog."""

    __tablename__ = "series"


class Category(CatalogNodeMixin, Base):
    """Category within a series."""

    __tablename__ = "categories"

    series_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)


class SubCategory(CatalogNodeMixin, Base):
    """Sub-category within a category."""

    __tablename__ = "sub_categories"

    category_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)


class Specification(CatalogNodeMixin, Base):
    """Specification within a sub-category."""

    __tablename__ = "specifications"

    sub_category_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)


class Product(CatalogNodeMixin, Base):
    """Product, the leaf level of the catalog.

    Attributes:
        specification_id: Owning specification.
        description: Multilingual description.
        features: List of {"feature_id", "TW", "EN"} entries.
        images: Stored image paths.
        documents: Stored document paths.
    """

    __tablename__ = "products"

    specification_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    description: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    features: Mapped[list[Any]] = mapped_column(JSON, nullable=False, default=list)
    images: Mapped[list[Any]] = mapped_column(JSON, nullable=False, default=list)
    documents: Mapped[list[Any]] = mapped_column(JSON, nullable=False, default=list)


class News(Base):
    """News article.

    Content is an ordered list of blocks (rich text, image, video embed).
    Articles are created inactive and published by toggling is_active.
    """

    __tablename__ = "news"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    title: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    summary: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    content: Mapped[list[Any]] = mapped_column(JSON, nullable=False, default=list)
    category: Mapped[str | None] = mapped_column(String(50), nullable=True, index=True)
    cover_image_url: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    author: Mapped[str | None] = mapped_column(String(100), nullable=True)
    publish_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow
    )
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, index=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow, index=True
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow
    )


class Faq(Base):
    """Frequently asked question."""

    __tablename__ = "faqs"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_new_id)
    question: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    answer: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)
    category: Mapped[str | None] = mapped_column(String(100), nullable=True, index=True)
    order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    author: Mapped[str | None] = mapped_column(String(100), nullable=True)
    publish_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow
    )
    product_model: Mapped[str | None] = mapped_column(String(100), nullable=True)
    video_url: Mapped[str | None] = mapped_column(String(1000), nullable=True)
    image_urls: Mapped[list[Any]] = mapped_column(JSON, nullable=False, default=list)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, index=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow, index=True
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_utcnow, onupdate=_utcnow
    )


MODELS_BY_ENTITY: dict[str, type] = {
    "series": Series,
    "categories": Category,
    "sub_categories": SubCategory,
    "specifications": Specification,
    "products": Product,
    "news": News,
    "faq": Faq,
}
