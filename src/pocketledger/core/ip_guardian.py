"""Login IP-change detection."""

import json
from typing import Optional

from pydantic import ValidationError as PydanticValidationError

from pocketledger.core.errors import (
    AppError,
    NotFoundError,
    PersistenceReadError,
    SaveFailedError,
)
from pocketledger.core.ip_provider import IpProvider, StoredIpProvider
from pocketledger.core.logging import get_logger
from pocketledger.core.persistence import (
    KeyLocks,
    KeyValuePersistence,
    default_locks,
    ip_security_key,
)
from pocketledger.core.sentry import report_exception
from pocketledger.models.ip_security import (
    IP_CHANGE_MESSAGE,
    IpCheckResult,
    IpSecurityRecord,
    IpWarning,
)
from pocketledger.utils.datetime import now_utc

logger = get_logger(__name__)


class IpGuardian:
    """
    Tracks each user's registered and last-seen IP.

    A user is unregistered until their first ``check_ip``, which stores the
    current IP as both registered and last-seen. Later checks flag an IP
    that matches neither.

    Unlike category reads, failures here are never hidden: ``check_ip``
    returns ``success=False`` and the other operations raise.
    """

    def __init__(
        self,
        persistence: KeyValuePersistence,
        ip_provider: Optional[IpProvider] = None,
        locks: Optional[KeyLocks] = None,
    ):
        self._persistence = persistence
        self._ip_provider = ip_provider or StoredIpProvider(persistence)
        self._locks = locks or default_locks

    async def _load(self, user_id: str) -> Optional[IpSecurityRecord]:
        key = ip_security_key(user_id)
        try:
            raw = await self._persistence.get(key)
        except Exception as exc:
            raise PersistenceReadError(key, str(exc)) from exc

        if not raw:
            return None

        try:
            return IpSecurityRecord.model_validate(json.loads(raw))
        except (json.JSONDecodeError, PydanticValidationError) as exc:
            raise PersistenceReadError(key, "corrupt record") from exc

    async def _save(self, user_id: str, record: IpSecurityRecord) -> None:
        payload = record.model_dump_json(by_alias=True)
        if not await self._persistence.set(ip_security_key(user_id), payload):
            raise SaveFailedError(
                "Could not save IP security data",
                details={"user_id": user_id},
            )

    async def check_ip(self, user_id: str) -> IpCheckResult:
        """Compare the current IP with what's on record and remember this login."""
        try:
            current_ip = await self._ip_provider.get_current_ip()

            async with self._locks.for_key(ip_security_key(user_id)):
                record = await self._load(user_id)
                now = now_utc()

                if record is None:
                    await self._save(
                        user_id,
                        IpSecurityRecord(
                            registered_ip=current_ip,
                            last_login_ip=current_ip,
                            last_login_at=now,
                        ),
                    )
                    logger.info("ip.registered", user_id=user_id)
                    return IpCheckResult()

                if not record.knows(current_ip):
                    previous_ip = record.last_login_ip
                    await self._save(user_id, record.with_change(current_ip, now))
                    logger.warning(
                        "ip.changed",
                        user_id=user_id,
                        old_ip=previous_ip,
                        new_ip=current_ip,
                    )
                    return IpCheckResult(
                        ip_changed=True,
                        warning=IpWarning(
                            message=IP_CHANGE_MESSAGE,
                            old_ip=previous_ip,
                            new_ip=current_ip,
                        ),
                    )

                await self._save(user_id, record.model_copy(update={"last_login_at": now}))
                return IpCheckResult()
        except AppError as exc:
            logger.error("ip.check_failed", user_id=user_id, code=exc.code, error=exc.message)
            report_exception(exc, user_id=user_id, operation="check_ip")
            return IpCheckResult(success=False, error=exc.message)

    async def get_history(self, user_id: str) -> Optional[IpSecurityRecord]:
        """The user's record, or None if they've never been checked."""
        return await self._load(user_id)

    async def confirm_ip(self, user_id: str, new_ip: str) -> None:
        """Trust ``new_ip``: it becomes both the registered and last-seen IP."""
        async with self._locks.for_key(ip_security_key(user_id)):
            record = await self._load(user_id)
            if record is None:
                raise NotFoundError("IP security record", user_id)

            await self._save(
                user_id,
                record.model_copy(update={"registered_ip": new_ip, "last_login_ip": new_ip}),
            )

        logger.info("ip.confirmed", user_id=user_id, ip=new_ip)
