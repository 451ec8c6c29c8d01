"""Category resolution and CRUD over the shared categories collection."""

import json
import time
import uuid
from typing import Any, Iterable, Optional, Union

from pydantic import ValidationError as PydanticValidationError

from pocketledger.core.errors import (
    ForbiddenError,
    NotFoundError,
    NoUserIdError,
    SaveFailedError,
)
from pocketledger.core.logging import get_logger
from pocketledger.core.persistence import (
    CATEGORIES_KEY,
    KeyLocks,
    KeyValuePersistence,
    default_locks,
)
from pocketledger.models.category import (
    BUILTIN_BY_ID,
    BUILTIN_CATEGORIES,
    DEFAULT_ICON,
    OTHER_CATEGORY_ID,
    BuiltInCategory,
    Category,
    CategoryData,
    CustomCategory,
    EffectiveCategories,
    OverrideCategory,
    apply_override,
    default_color,
    merge_appearance,
    override_storage_id,
    storage_patch,
    stored_category_adapter,
    to_storage,
)
from pocketledger.utils.datetime import now_utc

logger = get_logger(__name__)

StoredRecord = Union[CustomCategory, OverrideCategory]


class CollectionDecodeError(Exception):
    """The stored categories blob isn't a JSON array."""


def is_builtin_category(category_id: str) -> bool:
    """True for the 8 fixed ids. Callers check this before deleting."""
    return category_id in BUILTIN_BY_ID


def resolve_category_or_default(category_id: Optional[str], categories: Iterable[Category]) -> Category:
    """Find ``category_id`` in ``categories``; unknown ids resolve to the built-in "other"."""
    for category in categories:
        if category.id == category_id:
            return category
    return BUILTIN_BY_ID[OTHER_CATEGORY_ID]


def parse_record(raw: dict[str, Any]) -> Optional[StoredRecord]:
    """Parse one stored entry, or None if it doesn't fit either stored variant."""
    try:
        return stored_category_adapter.validate_python(raw)
    except PydanticValidationError:
        logger.debug("category.record_skipped", record_id=raw.get("id"))
        return None


def record_id(raw: Any) -> Optional[str]:
    return raw.get("id") if isinstance(raw, dict) else None


def new_category_id(taken: set[str]) -> str:
    """Millisecond timestamp plus a random suffix, retried on the off chance of a clash."""
    while True:
        candidate = f"{time.time_ns() // 1_000_000}{uuid.uuid4().hex[:9]}"
        if candidate not in taken:
            return candidate


class CategoryStore:
    """
    A user's categories: the fixed built-ins, their per-user overrides,
    and custom categories.

    Every user's custom and override records share one JSON array under
    the "categories" key and are filtered by ``userId`` on read.
    """

    def __init__(self, persistence: KeyValuePersistence, locks: Optional[KeyLocks] = None):
        self._persistence = persistence
        self._locks = locks or default_locks

    # ------------------------------------------------------------------
    # Storage
    # ------------------------------------------------------------------

    async def _read_collection(self) -> list[Any]:
        raw = await self._persistence.get(CATEGORIES_KEY)
        if not raw:
            return []

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise CollectionDecodeError(str(exc)) from exc

        if not isinstance(data, list):
            raise CollectionDecodeError(f"expected a list, got {type(data).__name__}")

        # Entries are returned untouched; writes put back what they didn't change
        return data

    async def _read_for_write(self, action: str) -> list[Any]:
        # A failed read must abort the write, or the rewrite would wipe the collection
        try:
            return await self._read_collection()
        except Exception as exc:
            logger.error("category.read_failed", action=action, error=str(exc))
            raise SaveFailedError(
                f"Could not {action} category",
                details={"reason": "read_failed"},
            ) from exc

    async def _write_collection(self, records: list[Any], action: str) -> None:
        payload = json.dumps(records, ensure_ascii=False)
        if not await self._persistence.set(CATEGORIES_KEY, payload):
            logger.error("category.save_failed", action=action)
            raise SaveFailedError(f"Could not {action} category")

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get_effective_categories(self, user_id: str) -> EffectiveCategories:
        """
        Resolve what ``user_id`` sees.

        Built-ins always come back, all 8, in canonical order, with the
        user's overrides applied. Storage problems never propagate: the
        result degrades to the plain built-ins and no custom categories.
        """
        try:
            raw_records = await self._read_collection()
        except Exception as exc:
            logger.warning("category.read_failed", user_id=user_id, fallback="builtins", error=str(exc))
            return EffectiveCategories(builtins=list(BUILTIN_CATEGORIES), custom=[])

        overrides: dict[str, OverrideCategory] = {}
        custom: list[CustomCategory] = []
        for raw in raw_records:
            if not isinstance(raw, dict) or raw.get("userId") != user_id:
                continue
            record = parse_record(raw)
            if isinstance(record, OverrideCategory):
                overrides.setdefault(record.original_id, record)
            elif isinstance(record, CustomCategory) and record.name:
                custom.append(record)

        builtins = [
            apply_override(builtin, overrides[builtin.id]) if builtin.id in overrides else builtin
            for builtin in BUILTIN_CATEGORIES
        ]
        return EffectiveCategories(builtins=builtins, custom=custom)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def add_category(self, user_id: str, data: CategoryData) -> str:
        """Create a custom category owned by ``user_id`` and return its new id."""
        if not user_id:
            raise NoUserIdError("add a category")

        async with self._locks.for_key(CATEGORIES_KEY):
            records = await self._read_for_write("add")
            category = CustomCategory(
                id=new_category_id({record_id(r) for r in records}),
                name=data.name,
                icon=data.icon or DEFAULT_ICON,
                color=data.color or default_color(),
                user_id=user_id,
                created_at=now_utc(),
            )
            records.append(to_storage(category))
            await self._write_collection(records, "add")

        logger.info("category.created", category_id=category.id, user_id=user_id)
        return category.id

    async def update_category(
        self,
        category_id: str,
        data: CategoryData,
        user_id: Optional[str] = None,
    ) -> None:
        """
        Apply ``data`` to a category.

        Built-ins are never edited in place: the user gets (or updates)
        their own override. Anything else is edited directly, subject to
        an ownership check when ``user_id`` is given.
        """
        builtin = BUILTIN_BY_ID.get(category_id)
        if builtin is not None:
            await self._override_builtin(builtin, data, user_id)
        else:
            await self._update_stored(category_id, data, user_id)

    async def _override_builtin(
        self,
        builtin: BuiltInCategory,
        data: CategoryData,
        user_id: Optional[str],
    ) -> None:
        if not user_id:
            raise NoUserIdError("customize a built-in category")

        async with self._locks.for_key(CATEGORIES_KEY):
            records = await self._read_for_write("update")
            index = self._find_override(records, builtin.id, user_id)
            now = now_utc()

            if index is not None and isinstance(parse_record(records[index]), OverrideCategory):
                records[index] = {**records[index], **storage_patch(data, now)}
            else:
                override = to_storage(
                    merge_appearance(
                        OverrideCategory(
                            id=override_storage_id(builtin.id, user_id),
                            original_id=builtin.id,
                            user_id=user_id,
                            created_at=now,
                        ),
                        data,
                    )
                )
                if index is None:
                    records.append(override)
                else:
                    # One record per (user, built-in): an unreadable one is rebuilt in place
                    logger.warning(
                        "category.override_rebuilt",
                        category_id=builtin.id,
                        user_id=user_id,
                    )
                    records[index] = override

            await self._write_collection(records, "update")

        logger.info(
            "category.override_saved",
            category_id=builtin.id,
            user_id=user_id,
            created=index is None,
        )

    @staticmethod
    def _find_override(records: list[Any], original_id: str, user_id: str) -> Optional[int]:
        storage_id = override_storage_id(original_id, user_id)
        for index, raw in enumerate(records):
            if not isinstance(raw, dict):
                continue
            if raw.get("id") == storage_id or (
                raw.get("isOverride") is True
                and raw.get("originalId") == original_id
                and raw.get("userId") == user_id
            ):
                return index
        return None

    async def _update_stored(
        self,
        category_id: str,
        data: CategoryData,
        user_id: Optional[str],
    ) -> None:
        async with self._locks.for_key(CATEGORIES_KEY):
            records = await self._read_for_write("update")

            index = next((i for i, raw in enumerate(records) if record_id(raw) == category_id), None)
            if index is None:
                raise NotFoundError("Category", category_id)

            record = parse_record(records[index])
            if record is None:
                logger.error("category.record_invalid", category_id=category_id)
                raise SaveFailedError(
                    "Could not update category",
                    details={"reason": "invalid_record", "category_id": category_id},
                )

            if not user_id:
                logger.warning("category.update_unscoped", category_id=category_id)
            elif record.user_id != user_id:
                logger.warning(
                    "category.update_forbidden",
                    category_id=category_id,
                    user_id=user_id,
                )
                raise ForbiddenError("You don't have permission to edit this category")

            records[index] = {**records[index], **storage_patch(data, now_utc())}
            await self._write_collection(records, "update")

        logger.info("category.updated", category_id=category_id, user_id=user_id)

    async def delete_category(self, category_id: str) -> None:
        """
        Remove the stored record with ``category_id``. Missing ids are a no-op.

        Built-in ids are never stored, so they can't be deleted here; the
        caller refuses them before getting this far.
        """
        async with self._locks.for_key(CATEGORIES_KEY):
            records = await self._read_for_write("delete")
            remaining = [raw for raw in records if record_id(raw) != category_id]
            await self._write_collection(remaining, "delete")

        logger.info(
            "category.deleted",
            category_id=category_id,
            removed=len(records) - len(remaining),
        )
