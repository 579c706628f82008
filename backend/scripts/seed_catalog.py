"""
Dev seed script — put a sample project into the configured catalog.

Usage:
    python -m scripts.seed_catalog

Uses the same Settings as the app (CATALOG_BACKEND, DATA_DIR,
DATABASE_URL, ...), so run it from the directory the server runs in.
"""

import asyncio

from catalog.core.config import settings
from catalog.main import build_store
from catalog.services.validation import normalize_project


async def main() -> None:
    store = build_store(settings)
    settings.DATA_DIR.mkdir(parents=True, exist_ok=True)
    store.assets.ensure_root()
    await store.backend.initialize()

    try:
        project = await store.create(
            normalize_project(
                {
                    "title": "Portfolio A",
                    "category": "Web",
                    "description": "Sample project seeded for local development.",
                    "tech": "Python, FastAPI",
                    "url": "",
                }
            )
        )
        total = len(await store.list())
    finally:
        await store.backend.close()

    # ── Print results ───────────────────────────────────────
    print()
    print("=" * 60)
    print("  Catalog Seed Complete")
    print("=" * 60)
    print()
    print(f"  Backend:    {store.backend.name}")
    print(f"  Project:    {project.title}")
    print(f"  Project ID: {project.id}")
    print(f"  Total:      {total} project(s)")
    print("=" * 60)
    print()


if __name__ == "__main__":
    asyncio.run(main())
