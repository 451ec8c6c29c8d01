# File: tests/conftest.py
"""Pytest configuration and fixtures."""

import json
from typing import Optional

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from pocketledger.core.category_store import CategoryStore
from pocketledger.core.db import init_db
from pocketledger.core.ip_guardian import IpGuardian
from pocketledger.core.ip_provider import FixedIpProvider
from pocketledger.core.persistence import (
    CATEGORIES_KEY,
    KeyLocks,
    MemoryPersistence,
    SqlPersistence,
)

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


class FlakyPersistence(MemoryPersistence):
    """Memory store whose reads and writes can be switched off per test."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        super().__init__(initial)
        self.fail_reads = False
        self.fail_writes = False
        self.writes = 0

    async def get(self, key: str) -> Optional[str]:
        if self.fail_reads:
            raise OSError("storage unavailable")
        return await super().get(key)

    async def set(self, key: str, value: str) -> bool:
        if self.fail_writes:
            return False
        self.writes += 1
        return await super().set(key, value)


@pytest.fixture
def persistence() -> FlakyPersistence:
    """Fresh in-memory store per test."""
    return FlakyPersistence()


@pytest.fixture
def locks() -> KeyLocks:
    """Per-test locks, so no lock outlives its event loop."""
    return KeyLocks()


@pytest.fixture
def store(persistence: FlakyPersistence, locks: KeyLocks) -> CategoryStore:
    return CategoryStore(persistence, locks=locks)


@pytest.fixture
def ip_provider() -> FixedIpProvider:
    return FixedIpProvider("10.0.0.1")


@pytest.fixture
def guardian(
    persistence: FlakyPersistence,
    ip_provider: FixedIpProvider,
    locks: KeyLocks,
) -> IpGuardian:
    return IpGuardian(persistence, ip_provider=ip_provider, locks=locks)


@pytest.fixture
def stored_categories(persistence: FlakyPersistence):
    """Read the raw categories collection back out of the store."""

    def _read() -> list[dict]:
        raw = persistence._data.get(CATEGORIES_KEY)
        return json.loads(raw) if raw else []

    return _read


@pytest_asyncio.fixture
async def session_factory():
    """Async session factory over a fresh in-memory SQLite database."""
    # StaticPool keeps one connection, so every session sees the same :memory: DB
    engine = create_async_engine(TEST_DATABASE_URL, poolclass=StaticPool)
    await init_db(engine)

    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


@pytest.fixture
def sql_persistence(session_factory) -> SqlPersistence:
    return SqlPersistence(session_factory)
