"""Catalog hierarchy service.

Generic per-level repositories for series > categories > sub_categories >
specifications > products, plus news and FAQ content, and a traversal
engine that builds trees and ancestor chains across the levels.
"""

from app.catalog.hierarchy import HierarchyService, get_hierarchy_service
from app.catalog.registry import (
    RepositoryRegistry,
    get_registry,
    memory_store_factory,
    reset_registry,
    set_registry,
    sql_store_factory,
)
from app.catalog.repository import BatchResult, EntityRepository
from app.catalog.search import Pagination, SearchResult, perform_search
from app.catalog.store import Criteria, EntityStore, InMemoryEntityStore
from app.catalog.topology import HIERARCHY, ContentType, Level, LevelDescriptor

__all__ = [
    # Topology
    "HIERARCHY",
    "ContentType",
    "Level",
    "LevelDescriptor",
    # Stores
    "Criteria",
    "EntityStore",
    "InMemoryEntityStore",
    # Repository
    "BatchResult",
    "EntityRepository",
    "Pagination",
    "SearchResult",
    "perform_search",
    # Registry
    "RepositoryRegistry",
    "get_registry",
    "memory_store_factory",
    "reset_registry",
    "set_registry",
    "sql_store_factory",
    # Traversal
    "HierarchyService",
    "get_hierarchy_service",
]
