"""Database configuration and session management for the on-device store."""

import os

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import declarative_base

DATABASE_URL = os.getenv("DATABASE_URL", "")

# Plain sqlite:// URLs need the async driver
if DATABASE_URL.startswith("sqlite:///"):
    DATABASE_URL = DATABASE_URL.replace("sqlite:///", "sqlite+aiosqlite:///", 1)
elif not DATABASE_URL:
    DATABASE_URL = "sqlite+aiosqlite:///./pocketledger.db"

engine = create_async_engine(DATABASE_URL)

# Session factory
AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)

# Declarative base
Base = declarative_base()


async def init_db(bind: AsyncEngine | None = None) -> None:
    """Create the key-value table if it doesn't exist yet."""
    # Register models on Base.metadata
    from pocketledger.models import kv_entry  # noqa: F401

    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
