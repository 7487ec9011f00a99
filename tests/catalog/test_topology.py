"""Tests for the hierarchy topology table."""

import pytest

from app.catalog.topology import (
    HIERARCHY,
    ROOT_LEVEL,
    ContentType,
    Level,
    LevelDescriptor,
    descriptor_for,
    parent_level_of,
    parse_content_type,
    parse_level,
    validate_topology,
)
from app.domain.exceptions import BadRequestError


class TestHierarchyTable:
    """Tests for the built-in five-level chain."""

    def test_chain_order(self) -> None:
        """Following child_level from the root visits every level in order."""
        visited = []
        current = ROOT_LEVEL
        while current is not None:
            visited.append(current)
            current = descriptor_for(current).child_level
        assert visited == list(Level)

    def test_exactly_one_root_and_leaf(self) -> None:
        assert [d.name for d in HIERARCHY if d.is_root] == [Level.SERIES]
        assert [d.name for d in HIERARCHY if d.is_leaf] == [Level.PRODUCTS]

    def test_parent_fields(self) -> None:
        assert descriptor_for("categories").parent_field == "series_id"
        assert descriptor_for("sub_categories").parent_field == "category_id"
        assert descriptor_for("specifications").parent_field == "sub_category_id"
        assert descriptor_for("products").parent_field == "specification_id"
        assert descriptor_for("series").parent_field is None

    def test_parent_level_of(self) -> None:
        assert parent_level_of(Level.PRODUCTS) is Level.SPECIFICATIONS
        assert parent_level_of("categories") is Level.SERIES
        assert parent_level_of(Level.SERIES) is None

    def test_builtin_table_is_valid(self) -> None:
        validate_topology(HIERARCHY)


class TestParsing:
    """Tests for level and content type parsing."""

    def test_parse_level_accepts_strings(self) -> None:
        assert parse_level("sub_categories") is Level.SUB_CATEGORIES
        assert parse_level(Level.SERIES) is Level.SERIES

    def test_parse_level_rejects_unknown(self) -> None:
        with pytest.raises(BadRequestError) as exc_info:
            parse_level("news")
        assert "series" in exc_info.value.details["allowed"]

    def test_parse_content_type(self) -> None:
        assert parse_content_type("faq") is ContentType.FAQ
        with pytest.raises(BadRequestError):
            parse_content_type("products")


class TestValidateTopology:
    """Tests for structural validation of custom tables."""

    def test_two_roots_rejected(self) -> None:
        table = (
            LevelDescriptor(Level.SERIES, child_level=Level.CATEGORIES),
            LevelDescriptor(Level.CATEGORIES),
        )
        with pytest.raises(ValueError, match="one root"):
            validate_topology(table)

    def test_unreachable_level_rejected(self) -> None:
        table = (
            LevelDescriptor(Level.SERIES, child_level=Level.CATEGORIES),
            LevelDescriptor(Level.CATEGORIES, parent_field="series_id"),
            LevelDescriptor(
                Level.PRODUCTS, parent_field="specification_id", child_level=Level.PRODUCTS
            ),
        )
        with pytest.raises(ValueError):
            validate_topology(table)

    def test_shorter_chain_accepted(self) -> None:
        table = (
            LevelDescriptor(Level.SERIES, child_level=Level.CATEGORIES),
            LevelDescriptor(Level.CATEGORIES, parent_field="series_id"),
        )
        validate_topology(table)
