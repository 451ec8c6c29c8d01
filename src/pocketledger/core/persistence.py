"""Key-value persistence backends and per-key write serialization."""

import asyncio
from typing import Optional, Protocol

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from pocketledger.core.logging import get_logger
from pocketledger.models.kv_entry import KeyValueEntry

logger = get_logger(__name__)

CATEGORIES_KEY = "categories"
IP_SECURITY_KEY_PREFIX = "ipSecurity"
CURRENT_IP_KEY = "currentIP"


def ip_security_key(user_id: str) -> str:
    """Storage key for one user's IP-security record."""
    return f"{IP_SECURITY_KEY_PREFIX}_{user_id}"


class KeyValuePersistence(Protocol):
    """
    String blob storage keyed by name.

    ``get`` may raise when the backend can't be read.
    ``set`` reports failure through its return value.
    """

    async def get(self, key: str) -> Optional[str]: ...

    async def set(self, key: str, value: str) -> bool: ...


class MemoryPersistence:
    """In-process store, used by tests and throwaway sessions."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._data: dict[str, str] = dict(initial or {})

    async def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    async def set(self, key: str, value: str) -> bool:
        self._data[key] = value
        return True

    def keys(self) -> list[str]:
        return list(self._data)


class SqlPersistence:
    """Store backed by the ``kv_store`` table, one short session per call."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession] | None = None):
        if session_factory is None:
            from pocketledger.core.db import AsyncSessionLocal

            session_factory = AsyncSessionLocal
        self._session_factory = session_factory

    async def get(self, key: str) -> Optional[str]:
        async with self._session_factory() as session:
            entry = await session.get(KeyValueEntry, key)
            return entry.value if entry else None

    async def set(self, key: str, value: str) -> bool:
        try:
            async with self._session_factory() as session:
                entry = await session.get(KeyValueEntry, key)
                if entry is None:
                    session.add(KeyValueEntry(key=key, value=value))
                else:
                    entry.value = value
                await session.commit()
        except SQLAlchemyError as exc:
            logger.error("persistence.write_failed", key=key, error=str(exc))
            return False
        return True


class KeyLocks:
    """
    One asyncio.Lock per logical key.

    Every read-modify-write cycle on a key runs under its lock, so two
    writers in the same process can't lose each other's update.
    """

    def __init__(self) -> None:
        self._locks: dict[str, asyncio.Lock] = {}

    def for_key(self, key: str) -> asyncio.Lock:
        lock = self._locks.get(key)
        if lock is None:
            lock = self._locks[key] = asyncio.Lock()
        return lock


# Shared by every service in the process unless one is injected
default_locks = KeyLocks()
