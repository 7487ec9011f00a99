"""Repository registry.

Maps each hierarchy level and content type to its EntityRepository. A
repository is built on first use and cached for the registry's lifetime;
building a child level first builds (or reuses) its parent level so the
parent_repository wiring follows the topology table.
"""

import threading
from collections.abc import Callable

import structlog

from app.catalog.repository import EntityRepository
from app.catalog.store import EntityStore, InMemoryEntityStore
from app.catalog.topology import (
    HIERARCHY,
    ContentType,
    Level,
    LevelDescriptor,
    parse_content_type,
    parse_level,
    validate_topology,
)
from app.infrastructure.config import settings

logger = structlog.get_logger()

StoreFactory = Callable[[str], EntityStore]

# News and FAQ entries are drafted inactive and published explicitly.
STORE_DEFAULTS: dict[str, dict[str, bool]] = {
    ContentType.NEWS.value: {"is_active": False},
    ContentType.FAQ.value: {"is_active": False},
}


def _localized(field: str) -> tuple[str, ...]:
    return tuple(f"{field}.{lang}" for lang in settings.supported_languages)


def searchable_fields(entity: str) -> tuple[str, ...]:
    """Fields keyword search covers for an entity (code is added separately)."""
    if entity == Level.PRODUCTS.value:
        return _localized("name") + _localized("description")
    if entity == ContentType.NEWS.value:
        return _localized("title") + _localized("summary") + ("category", "author")
    if entity == ContentType.FAQ.value:
        return _localized("question") + _localized("answer") + ("category", "product_model")
    return _localized("name")


class RepositoryRegistry:
    """Lazily built, cached repositories keyed by entity name.

    Example usage:
        registry = RepositoryRegistry(memory_store_factory())
        series = registry.resolve(Level.SERIES)
        assert registry.resolve("series") is series
    """

    def __init__(
        self,
        store_factory: StoreFactory,
        topology: tuple[LevelDescriptor, ...] = HIERARCHY,
    ) -> None:
        """Initialize registry.

        Args:
            store_factory: Builds the store for an entity name.
            topology: Level chain used to wire parent repositories.

        Raises:
            ValueError: If the topology table is inconsistent.
        """
        validate_topology(topology)
        self._store_factory = store_factory
        self._topology = {d.name: d for d in topology}
        self._repositories: dict[str, EntityRepository] = {}
        # Reentrant: resolving a level resolves its parent under the same lock
        self._lock = threading.RLock()

    def is_resolved(self, entity: Level | ContentType | str) -> bool:
        key = entity.value if isinstance(entity, (Level, ContentType)) else entity
        return key in self._repositories

    @property
    def root_level(self) -> Level:
        """Level without a parent field."""
        return next(d.name for d in self._topology.values() if d.is_root)

    def descriptor(self, level: Level | str) -> LevelDescriptor:
        return self._topology[parse_level(level)]

    def parent_level(self, level: Level | str) -> Level | None:
        """Level whose child_level is the given level, None for the root."""
        level = parse_level(level)
        for descriptor in self._topology.values():
            if descriptor.child_level is level:
                return descriptor.name
        return None

    def resolve(self, level: Level | str) -> EntityRepository:
        """Get the repository of a hierarchy level.

        Raises:
            BadRequestError: If level is not a hierarchy level.
        """
        level = parse_level(level)
        repository = self._repositories.get(level.value)
        if repository is not None:
            return repository

        with self._lock:
            repository = self._repositories.get(level.value)
            if repository is not None:
                return repository

            parent_level = self.parent_level(level)
            parent_repository = self.resolve(parent_level) if parent_level else None
            repository = EntityRepository(
                self._store_factory(level.value),
                entity_name=level.value,
                parent_field=self._topology[level].parent_field,
                parent_repository=parent_repository,
                searchable_fields=searchable_fields(level.value),
            )
            self._repositories[level.value] = repository
            logger.debug("Repository constructed", entity=level.value)
            return repository

    def content(self, kind: ContentType | str) -> EntityRepository:
        """Get the repository of an auxiliary content type."""
        kind = parse_content_type(kind)
        repository = self._repositories.get(kind.value)
        if repository is not None:
            return repository

        with self._lock:
            repository = self._repositories.get(kind.value)
            if repository is None:
                repository = EntityRepository(
                    self._store_factory(kind.value),
                    entity_name=kind.value,
                    searchable_fields=searchable_fields(kind.value),
                )
                self._repositories[kind.value] = repository
                logger.debug("Repository constructed", entity=kind.value)
            return repository


def memory_store_factory() -> StoreFactory:
    """Store factory producing fresh in-memory stores."""

    def factory(entity: str) -> EntityStore:
        return InMemoryEntityStore(entity, defaults=STORE_DEFAULTS.get(entity))

    return factory


def sql_store_factory(session_factory=None) -> StoreFactory:
    """Store factory producing SQLAlchemy stores.

    Args:
        session_factory: Async session factory; defaults to the
            application's configured database.
    """
    from app.catalog.models import MODELS_BY_ENTITY
    from app.catalog.sql_store import SqlAlchemyEntityStore

    if session_factory is None:
        from app.infrastructure.database import async_session_factory

        session_factory = async_session_factory

    def factory(entity: str) -> EntityStore:
        return SqlAlchemyEntityStore(MODELS_BY_ENTITY[entity], session_factory, name=entity)

    return factory


def default_store_factory() -> StoreFactory:
    """Store factory selected by settings.storage_backend."""
    if settings.storage_backend == "memory":
        return memory_store_factory()
    return sql_store_factory()


# Global registry instance
_registry: RepositoryRegistry | None = None


def get_registry() -> RepositoryRegistry:
    """Get the repository registry singleton."""
    global _registry
    if _registry is None:
        _registry = RepositoryRegistry(default_store_factory())
    return _registry


def set_registry(registry: RepositoryRegistry) -> None:
    """Replace the registry singleton (for testing and startup wiring)."""
    global _registry
    _registry = registry


def reset_registry() -> None:
    """Drop the registry singleton so the next access rebuilds it."""
    global _registry
    _registry = None
