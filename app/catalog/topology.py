"""Catalog hierarchy topology.

The catalog is a fixed five-level chain:

    series > categories > sub_categories > specifications > products

Each level is described by a LevelDescriptor naming the field on its
records that references the parent node, and the level directly beneath
it. The table below is the only place the chain is defined; traversal and
repository wiring are driven entirely by it.
"""

from dataclasses import dataclass
from enum import Enum

from app.domain.exceptions import BadRequestError


class Level(str, Enum):
    """Hierarchy levels, root first."""

    SERIES = "series"
    CATEGORIES = "categories"
    SUB_CATEGORIES = "sub_categories"
    SPECIFICATIONS = "specifications"
    PRODUCTS = "products"


class ContentType(str, Enum):
    """Auxiliary content types living outside the hierarchy."""

    NEWS = "news"
    FAQ = "faq"


@dataclass(frozen=True)
class LevelDescriptor:
    """Position of one level in the hierarchy.

    Attributes:
        name: Level this descriptor belongs to.
        parent_field: Field on this level's records holding the parent id
            (None for the root).
        child_level: Level directly beneath this one (None for the leaf).
    """

    name: Level
    parent_field: str | None = None
    child_level: Level | None = None

    @property
    def is_root(self) -> bool:
        return self.parent_field is None

    @property
    def is_leaf(self) -> bool:
        return self.child_level is None


HIERARCHY: tuple[LevelDescriptor, ...] = (
    LevelDescriptor(Level.SERIES, parent_field=None, child_level=Level.CATEGORIES),
    LevelDescriptor(Level.CATEGORIES, parent_field="series_id", child_level=Level.SUB_CATEGORIES),
    LevelDescriptor(
        Level.SUB_CATEGORIES, parent_field="category_id", child_level=Level.SPECIFICATIONS
    ),
    LevelDescriptor(
        Level.SPECIFICATIONS, parent_field="sub_category_id", child_level=Level.PRODUCTS
    ),
    LevelDescriptor(Level.PRODUCTS, parent_field="specification_id", child_level=None),
)

HIERARCHY_BY_LEVEL: dict[Level, LevelDescriptor] = {d.name: d for d in HIERARCHY}

ROOT_LEVEL = Level.SERIES


def parse_level(value: "Level | str") -> Level:
    """Convert a level name into a Level.

    Args:
        value: Level or its string value.

    Returns:
        The matching Level.

    Raises:
        BadRequestError: If the name is not a hierarchy level.
    """
    if isinstance(value, Level):
        return value
    try:
        return Level(value)
    except ValueError:
        raise BadRequestError(
            f"Invalid level: {value}",
            details={"level": value, "allowed": [lvl.value for lvl in Level]},
        ) from None


def parse_content_type(value: "ContentType | str") -> ContentType:
    """Convert a content type name into a ContentType."""
    if isinstance(value, ContentType):
        return value
    try:
        return ContentType(value)
    except ValueError:
        raise BadRequestError(
            f"Invalid content type: {value}",
            details={"content_type": value, "allowed": [c.value for c in ContentType]},
        ) from None


def descriptor_for(level: "Level | str") -> LevelDescriptor:
    """Get the descriptor of a level."""
    return HIERARCHY_BY_LEVEL[parse_level(level)]


def parent_level_of(level: "Level | str") -> Level | None:
    """Get the level whose child_level is the given level.

    Returns:
        Parent level, or None for the root.
    """
    level = parse_level(level)
    for descriptor in HIERARCHY:
        if descriptor.child_level is level:
            return descriptor.name
    return None


def validate_topology(table: tuple[LevelDescriptor, ...] = HIERARCHY) -> None:
    """Check the structural invariants of a topology table.

    Exactly one root and one leaf must exist, and following child_level
    from the root must visit every level exactly once. Every non-root
    level must be the child of exactly one other level.

    Raises:
        ValueError: If any invariant is violated.
    """
    roots = [d for d in table if d.is_root]
    leaves = [d for d in table if d.is_leaf]
    if len(roots) != 1:
        raise ValueError(f"Topology must have exactly one root, found {len(roots)}")
    if len(leaves) != 1:
        raise ValueError(f"Topology must have exactly one leaf, found {len(leaves)}")

    by_name = {d.name: d for d in table}
    if len(by_name) != len(table):
        raise ValueError("Topology contains duplicate levels")

    visited: list[Level] = []
    current: LevelDescriptor | None = roots[0]
    while current is not None:
        if current.name in visited:
            raise ValueError(f"Topology cycles through {current.name.value}")
        visited.append(current.name)
        if current.child_level is None:
            break
        current = by_name.get(current.child_level)
        if current is None:
            raise ValueError("Topology references an undefined child level")
        if current.is_root:
            raise ValueError(f"Child level {current.name.value} has no parent field")

    if len(visited) != len(table):
        missing = [d.name.value for d in table if d.name not in visited]
        raise ValueError(f"Levels unreachable from the root: {missing}")
