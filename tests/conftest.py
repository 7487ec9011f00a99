"""Shared fixtures for catalog tests."""

from typing import Any

import pytest
import pytest_asyncio

from app.catalog.registry import (
    RepositoryRegistry,
    memory_store_factory,
    reset_registry,
    set_registry,
)
from app.catalog.topology import Level
from app.infrastructure.config import settings


@pytest.fixture(autouse=True)
def memory_backend(monkeypatch: pytest.MonkeyPatch):
    """Run every test against in-memory stores and a fresh registry."""
    monkeypatch.setattr(settings, "storage_backend", "memory")
    reset_registry()
    yield
    reset_registry()


@pytest.fixture
def registry() -> RepositoryRegistry:
    """Fresh in-memory registry installed as the global one."""
    registry = RepositoryRegistry(memory_store_factory())
    set_registry(registry)
    return registry


def build_node_payload(level: Level, code: str, parent_id: str | None = None, **extra: Any) -> dict[str, Any]:
    """Build a create payload for a hierarchy level."""
    data: dict[str, Any] = {"code": code, "name": {"TW": f"{code} 名稱", "EN": f"{code} name"}}
    parent_field = {
        Level.CATEGORIES: "series_id",
        Level.SUB_CATEGORIES: "category_id",
        Level.SPECIFICATIONS: "sub_category_id",
        Level.PRODUCTS: "specification_id",
    }.get(level)
    if parent_field:
        data[parent_field] = parent_id
    data.update(extra)
    return data


@pytest_asyncio.fixture
async def chain(registry: RepositoryRegistry) -> dict[Level, dict[str, Any]]:
    """One active node per level, each the child of the previous one."""
    nodes: dict[Level, dict[str, Any]] = {}
    parent_id = None
    for level in Level:
        record = await registry.resolve(level).create(
            build_node_payload(level, f"{level.value.upper()}-1", parent_id)
        )
        nodes[level] = record
        parent_id = record["id"]
    return nodes


@pytest.fixture
def node_payload():
    """Factory for hierarchy create payloads."""
    return build_node_payload
