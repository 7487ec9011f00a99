#!/usr/bin/env python3
"""Seed catalog script.

Seeds a demo five-level hierarchy (series > categories > sub_categories >
specifications > products) plus sample news and FAQ entries through the
repositories, so parent validation applies exactly as it does for the API.

Usage:
    python scripts/seed_catalog.py
    python scripts/seed_catalog.py --series 3 --fanout 2
    python scripts/seed_catalog.py --no-content
"""

import argparse
import asyncio
import sys
from pathlib import Path

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from app.catalog.registry import RepositoryRegistry, get_registry
from app.catalog.topology import ContentType, Level
from app.infrastructure.config import settings


async def create_tables() -> None:
    """Create database tables if they don't exist."""
    from app.catalog import models  # noqa: F401
    from app.infrastructure.database import create_tables as create_all

    await create_all()


def _name(label: str, path: str) -> dict[str, str]:
    return {"TW": f"{label} {path}", "EN": f"{label} {path}"}


async def seed_hierarchy(registry: RepositoryRegistry, series_count: int, fanout: int) -> dict[str, int]:
    """Create series_count series, each with fanout children per level.

    Returns:
        Number of records created per level.
    """
    created = {level.value: 0 for level in Level}

    async def seed_level(level: Level, parent_id: str | None, path: str, count: int) -> None:
        repository = registry.resolve(level)
        descriptor = registry.descriptor(level)
        for index in range(1, count + 1):
            code = f"{path}-{index}" if path else f"S{index}"
            data = {"code": code, "name": _name(level.value, code)}
            if descriptor.parent_field:
                data[descriptor.parent_field] = parent_id
            if level is Level.PRODUCTS:
                data["description"] = _name("Description of", code)
            record = await repository.create(data)
            created[level.value] += 1
            if descriptor.child_level is not None:
                await seed_level(descriptor.child_level, record["id"], code, fanout)

    await seed_level(Level.SERIES, None, "", series_count)
    return created


async def seed_content(registry: RepositoryRegistry) -> dict[str, int]:
    """Create published sample news and FAQ entries."""
    news = registry.content(ContentType.NEWS)
    faq = registry.content(ContentType.FAQ)

    await news.create({
        "title": {"TW": "新產品發表", "EN": "New product launch"},
        "summary": {"TW": "最新系列正式上市", "EN": "The latest series is now available"},
        "category": "announcements",
        "author": "seed",
        "is_active": True,
    })
    await faq.create({
        "question": {"TW": "如何選擇規格？", "EN": "How do I choose a specification?"},
        "answer": {"TW": "請參考產品頁面", "EN": "See the product page"},
        "category": "general",
        "is_active": True,
    })
    return {"news": 1, "faq": 1}


async def main() -> None:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Seed a demo catalog hierarchy",
    )
    parser.add_argument(
        "--series",
        type=int,
        default=2,
        help="Number of series to create (default: 2)",
    )
    parser.add_argument(
        "--fanout",
        type=int,
        default=2,
        help="Children created under each node (default: 2)",
    )
    parser.add_argument(
        "--no-content",
        action="store_true",
        help="Skip sample news and FAQ entries",
    )

    args = parser.parse_args()

    print("=" * 60)
    print("Catalog Seeder")
    print("=" * 60)
    print(f"Storage: {settings.storage_backend}")
    print(f"Series: {args.series}, fanout: {args.fanout}")
    print()

    if settings.storage_backend == "sql":
        print("Creating database tables...")
        await create_tables()
        print("Tables ready.")
        print()

    registry = get_registry()

    try:
        created = await seed_hierarchy(registry, args.series, args.fanout)
        if not args.no_content:
            created.update(await seed_content(registry))
    except Exception as e:
        print(f"  ✗ Error: {e}")
        sys.exit(1)

    for entity, count in created.items():
        print(f"  ✓ {entity}: {count}")

    print()
    print("=" * 60)
    print("Seeding complete!")
    print("=" * 60)


if __name__ == "__main__":
    asyncio.run(main())
