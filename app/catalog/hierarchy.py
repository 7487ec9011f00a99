"""Hierarchy traversal.

Builds cross-level views of the catalog from per-level repositories:
- full forest from every root
- one page of children under a parent
- the ancestor chain of a node, root first
- the subtree below a node

A NotFoundError on the node a caller asked for is fatal to the call. A
NotFoundError met while walking away from it (a missing or inactive
descendant, a dangling ancestor) only shortens the result.
"""

from typing import Any

import structlog

from app.catalog.formatting import normalize_id
from app.catalog.registry import RepositoryRegistry, get_registry
from app.catalog.topology import Level, parse_level
from app.domain.exceptions import BadRequestError, NotFoundError
from app.infrastructure.config import settings

logger = structlog.get_logger()


def _depth_reached(current_depth: int, max_depth: int) -> bool:
    # Negative max_depth means unlimited
    return max_depth >= 0 and current_depth >= max_depth


class HierarchyService:
    """Tree operations over the five-level catalog.

    Children are always listed in ascending creation order. Sibling
    subtrees are built one after another to keep store load bounded.

    Example usage:
        service = HierarchyService(registry)
        forest = await service.get_full_hierarchy_data(max_depth=2)
        chain = await service.get_parent_hierarchy_data("products", product_id)
    """

    def __init__(
        self,
        registry: RepositoryRegistry | None = None,
        request_id: str | None = None,
    ) -> None:
        """Initialize service.

        Args:
            registry: Repository registry.
            request_id: Request ID for correlation.
        """
        self.registry = registry or get_registry()
        self.request_id = request_id

    async def build_hierarchy_tree(
        self,
        level: Level | str,
        entity_id: Any,
        *,
        max_depth: int | None = None,
        current_depth: int = 0,
        active_only: bool = True,
    ) -> dict[str, Any] | None:
        """Build the tree rooted at one node.

        Args:
            level: Level of the node.
            entity_id: Node id.
            max_depth: Levels to descend below the node (negative for no
                limit); defaults to settings.hierarchy_max_depth.
            current_depth: Depth of this node within the overall traversal.
            active_only: Skip inactive nodes, including this one.

        Returns:
            The formatted node with its children under a key named after
            the child level, or None if the node is missing or inactive.
        """
        level = parse_level(level)
        if max_depth is None:
            max_depth = settings.hierarchy_max_depth

        repository = self.registry.resolve(level)
        try:
            record = await repository.ensure_exists(
                entity_id, is_active=True if active_only else None
            )
        except NotFoundError:
            logger.warning(
                "Pruned missing node from hierarchy",
                level=level.value,
                id=str(entity_id),
                depth=current_depth,
                request_id=self.request_id,
            )
            return None

        node = repository.format_output(record)
        child_level = self.registry.descriptor(level).child_level
        if child_level is None or _depth_reached(current_depth, max_depth):
            return node

        child_repository = self.registry.resolve(child_level)
        filters: dict[str, Any] = {child_repository.parent_field: record["id"]}
        if active_only:
            filters["is_active"] = True
        children = await child_repository.search(filters, sort_by="created_at", sort_order="asc")

        subtrees = []
        for child in children.data:
            subtree = await self.build_hierarchy_tree(
                child_level,
                child["id"],
                max_depth=max_depth,
                current_depth=current_depth + 1,
                active_only=active_only,
            )
            if subtree is not None:
                subtrees.append(subtree)

        node[child_level.value] = subtrees
        return node

    async def get_full_hierarchy_data(
        self,
        *,
        max_depth: int | None = None,
        active_only: bool = True,
    ) -> list[dict[str, Any]]:
        """Build the tree of every root node, in creation order."""
        if max_depth is None:
            max_depth = settings.hierarchy_max_depth
        root_level = self.registry.root_level
        repository = self.registry.resolve(root_level)
        roots = await repository.search(
            {"is_active": True} if active_only else {},
            sort_by="created_at",
            sort_order="asc",
        )

        forest = []
        for root in roots.data:
            tree = await self.build_hierarchy_tree(
                root_level,
                root["id"],
                max_depth=max_depth,
                active_only=active_only,
            )
            if tree is not None:
                forest.append(tree)

        logger.info(
            "Full hierarchy built",
            roots=len(forest),
            max_depth=max_depth,
            request_id=self.request_id,
        )
        return forest

    async def get_children_by_parent_id_data(
        self,
        parent_level: Level | str,
        parent_id: Any,
        *,
        active_only: bool = True,
    ) -> dict[str, Any]:
        """List the direct children of a node.

        The parent is resolved regardless of its own is_active flag.

        Returns:
            {"children": [...], "child_level": str,
             "parent": {"type": str, "id": str}}

        Raises:
            BadRequestError: If parent_level is unknown or is the leaf level.
            NotFoundError: If the parent does not exist.
        """
        parent_level = parse_level(parent_level)
        parent = await self.registry.resolve(parent_level).ensure_exists(parent_id)

        child_level = self.registry.descriptor(parent_level).child_level
        if child_level is None:
            raise BadRequestError(
                f"Level {parent_level.value} has no child level",
                details={"level": parent_level.value},
            )

        child_repository = self.registry.resolve(child_level)
        filters: dict[str, Any] = {child_repository.parent_field: parent["id"]}
        if active_only:
            filters["is_active"] = True
        children = await child_repository.search(filters, sort_by="created_at", sort_order="asc")

        return {
            "children": children.data,
            "child_level": child_level.value,
            "parent": {"type": parent_level.value, "id": parent["id"]},
        }

    async def get_parent_hierarchy_data(
        self,
        level: Level | str,
        entity_id: Any,
        *,
        active_only: bool = False,
    ) -> list[dict[str, Any]]:
        """Walk parent references up to the root.

        Climbing stops at the root, at an empty parent reference, or at a
        parent that cannot be resolved.

        Args:
            level: Level of the starting node.
            entity_id: Starting node id.
            active_only: Require the starting node and ancestors to be active.

        Returns:
            [{"type": level, "item": node}, ...] ordered root first, the
            starting node last.
        """
        level = parse_level(level)
        is_active = True if active_only else None
        repository = self.registry.resolve(level)
        current = await repository.ensure_exists(entity_id, is_active=is_active)

        chain = [{"type": level.value, "item": repository.format_output(current)}]
        current_level = level

        while True:
            parent_field = self.registry.descriptor(current_level).parent_field
            parent_level = self.registry.parent_level(current_level)
            if parent_field is None or parent_level is None:
                break

            parent_id = current.get(parent_field)
            if not parent_id:
                logger.warning(
                    "Parent reference is empty",
                    level=current_level.value,
                    id=current["id"],
                    field=parent_field,
                    request_id=self.request_id,
                )
                break

            parent_repository = self.registry.resolve(parent_level)
            try:
                parent = await parent_repository.ensure_exists(parent_id, is_active=is_active)
            except (NotFoundError, BadRequestError) as exc:
                logger.warning(
                    "Stopped climbing hierarchy",
                    level=parent_level.value,
                    id=str(parent_id),
                    reason=exc.message,
                    request_id=self.request_id,
                )
                break

            chain.insert(0, {"type": parent_level.value, "item": parent_repository.format_output(parent)})
            current_level, current = parent_level, parent

        return chain

    async def get_sub_hierarchy_data(
        self,
        level: Level | str,
        entity_id: Any,
        *,
        max_depth: int | None = None,
        active_only: bool = True,
    ) -> dict[str, Any]:
        """Build the subtree below a node that must exist.

        Raises:
            NotFoundError: If the node is missing, or the tree build yields
                nothing for a node that was just confirmed to exist.
        """
        level = parse_level(level)
        repository = self.registry.resolve(level)
        record = await repository.ensure_exists(entity_id, is_active=True if active_only else None)

        tree = await self.build_hierarchy_tree(
            level,
            record["id"],
            max_depth=max_depth,
            active_only=active_only,
        )
        if tree is None:
            raise NotFoundError(
                level.value,
                normalize_id(entity_id),
                details={"operation": "subtree"},
            )
        return tree


def get_hierarchy_service(request_id: str | None = None) -> HierarchyService:
    """Get a hierarchy service bound to the global registry."""
    return HierarchyService(get_registry(), request_id=request_id)
