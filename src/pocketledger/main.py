# File: src/pocketledger/main.py
"""Application factory: wires persistence, services, logging and error tracking."""

from contextlib import asynccontextmanager
from datetime import datetime
from typing import AsyncIterator, Optional

from pocketledger.core.category_store import CategoryStore
from pocketledger.core.ip_guardian import IpGuardian
from pocketledger.core.ip_provider import IpProvider
from pocketledger.core.logging import configure_logging, get_logger
from pocketledger.core.persistence import KeyValuePersistence, SqlPersistence
from pocketledger.core.sentry import init_sentry

configure_logging()
logger = get_logger(__name__)


class PocketLedger:
    """The two services the screens talk to, sharing one store."""

    def __init__(
        self,
        persistence: KeyValuePersistence,
        ip_provider: Optional[IpProvider] = None,
    ):
        self.persistence = persistence
        self.categories = CategoryStore(persistence)
        self.ip_guardian = IpGuardian(persistence, ip_provider=ip_provider)


def create_app(
    persistence: Optional[KeyValuePersistence] = None,
    ip_provider: Optional[IpProvider] = None,
) -> PocketLedger:
    """Application factory. Defaults to the SQLite-backed device store."""
    init_sentry()
    app = PocketLedger(persistence or SqlPersistence(), ip_provider=ip_provider)
    logger.info("app.configured", message="PocketLedger services created", backend=type(app.persistence).__name__)
    return app


@asynccontextmanager
async def lifespan() -> AsyncIterator[PocketLedger]:
    """Create the schema, yield the app, dispose of the engine on the way out."""
    from pocketledger.core.db import engine, init_db

    start_time = datetime.now()
    logger.info("app.startup", message="PocketLedger starting up", timestamp=start_time.isoformat())
    await init_db()

    try:
        yield create_app()
    finally:
        await engine.dispose()
        logger.info("app.shutdown", message="PocketLedger shutting down gracefully")
