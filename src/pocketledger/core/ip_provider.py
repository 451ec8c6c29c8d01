"""Sources of the device's current IP fingerprint."""

import random
from typing import Optional, Protocol

from pocketledger.core.logging import get_logger
from pocketledger.core.persistence import CURRENT_IP_KEY, KeyValuePersistence

logger = get_logger(__name__)

FALLBACK_IP = "0.0.0.0"


class IpProvider(Protocol):
    """Returns a fingerprint that stays stable across calls within a session."""

    async def get_current_ip(self) -> str: ...


class FixedIpProvider:
    """Always reports ``ip``. Reassign ``ip`` to simulate moving networks."""

    def __init__(self, ip: str):
        self.ip = ip

    async def get_current_ip(self) -> str:
        return self.ip


class StoredIpProvider:
    """
    Device-cached fingerprint.

    Returns the value under ``currentIP``; on first use it simulates a
    dotted-quad address and caches it so later checks agree. Storage
    failures degrade to 0.0.0.0.
    """

    def __init__(self, persistence: KeyValuePersistence, rng: Optional[random.Random] = None):
        self._persistence = persistence
        self._rng = rng or random.Random()

    async def get_current_ip(self) -> str:
        try:
            stored = await self._persistence.get(CURRENT_IP_KEY)
            if stored:
                return stored

            simulated = ".".join(str(self._rng.randrange(255)) for _ in range(4))
            if not await self._persistence.set(CURRENT_IP_KEY, simulated):
                logger.warning("ip.cache_failed", ip=simulated)
            return simulated
        except Exception as exc:
            logger.warning("ip.lookup_failed", fallback=FALLBACK_IP, error=str(exc))
            return FALLBACK_IP
