"""Domain models package."""

from pocketledger.models.category import (
    BUILTIN_BY_ID,
    BUILTIN_CATEGORIES,
    BuiltInCategory,
    Category,
    CategoryData,
    CustomCategory,
    EffectiveCategories,
    OverrideCategory,
)
from pocketledger.models.ip_security import (
    IpChange,
    IpCheckResult,
    IpSecurityRecord,
    IpWarning,
)
from pocketledger.models.kv_entry import KeyValueEntry

__all__ = [
    "BUILTIN_BY_ID",
    "BUILTIN_CATEGORIES",
    "BuiltInCategory",
    "Category",
    "CategoryData",
    "CustomCategory",
    "EffectiveCategories",
    "IpChange",
    "IpCheckResult",
    "IpSecurityRecord",
    "IpWarning",
    "KeyValueEntry",
    "OverrideCategory",
]
