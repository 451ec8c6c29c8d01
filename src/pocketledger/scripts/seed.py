"""Seed script for PocketLedger demo data."""

import asyncio
import sys

from pocketledger.core.category_store import CategoryStore
from pocketledger.main import lifespan
from pocketledger.models.category import CategoryData

DEMO_USER_ID = "demo-user"

DEMO_CATEGORIES = [
    CategoryData(name="Kira", icon="🏠", color="#FFD93D"),
    CategoryData(name="Oyun", icon="🎮", color="#6BCB77"),
    CategoryData(name="Seyahat", icon="✈️", color="#4D96FF"),
]

# Built-in appearance changes for the demo user
DEMO_OVERRIDES = {
    "food": CategoryData(name="Yemek"),
}


async def seed_categories(store: CategoryStore, user_id: str) -> None:
    """Create the demo user's custom categories and overrides if they have none."""
    effective = await store.get_effective_categories(user_id)
    if effective.custom:
        print(f"ℹ️  {user_id} already has {len(effective.custom)} categories, skipping...")
        return

    for data in DEMO_CATEGORIES:
        await store.add_category(user_id, data)
    print(f"✅ Created {len(DEMO_CATEGORIES)} custom categories")

    for category_id, data in DEMO_OVERRIDES.items():
        await store.update_category(category_id, data, user_id)
    print(f"✅ Customized {len(DEMO_OVERRIDES)} built-in categories")


async def run(user_id: str) -> None:
    async with lifespan() as app:
        await seed_categories(app.categories, user_id)


def main() -> None:
    """CLI entrypoint: pocketledger-seed [user_id]."""
    user_id = sys.argv[1] if len(sys.argv) > 1 else DEMO_USER_ID
    print("🌱 Seeding PocketLedger demo data...")
    asyncio.run(run(user_id))
    print("🎉 Done")


if __name__ == "__main__":
    main()
