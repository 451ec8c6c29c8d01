"""Category models: built-in reference data, custom categories and overrides."""

import os
from datetime import datetime
from typing import Annotated, Any, Literal, Optional, TypeVar, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Discriminator,
    Field,
    Tag,
    TypeAdapter,
)
from pydantic.alias_generators import to_camel

DEFAULT_ICON = "📦"
OTHER_CATEGORY_ID = "other"

# Patchable fields; identity and ownership never change through an update
APPEARANCE_FIELDS = ("name", "icon", "color")


def default_color() -> str:
    """Theme primary color, used when a new category has no color."""
    return os.getenv("POCKETLEDGER_PRIMARY_COLOR", "#6C5CE7")


class Category(BaseModel):
    """
    A category as the UI sees it.

    Stored JSON uses camelCase keys (userId, isOverride, originalId,
    createdAt, updatedAt).
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    name: Optional[str] = None
    icon: Optional[str] = None
    color: Optional[str] = None
    user_id: Optional[str] = None
    is_override: bool = False
    original_id: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class BuiltInCategory(Category):
    """Compiled-in category shared by every user. Never stored."""

    model_config = ConfigDict(frozen=True)

    name: str
    icon: str
    color: str


class CustomCategory(Category):
    """A category created by one user."""

    user_id: str
    is_override: Literal[False] = False


class OverrideCategory(Category):
    """One user's appearance override of a built-in category."""

    user_id: str
    is_override: Literal[True] = True
    original_id: str


class CategoryData(BaseModel):
    """Payload for creating or updating a category. Unset fields are left alone."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    name: Optional[str] = None
    icon: Optional[str] = None
    color: Optional[str] = None


class EffectiveCategories(BaseModel):
    """A user's resolved view: the 8 built-ins (overrides applied) plus custom ones."""

    builtins: list[Category] = Field(default_factory=list)
    custom: list[CustomCategory] = Field(default_factory=list)

    def all(self) -> list[Category]:
        return [*self.builtins, *self.custom]


BUILTIN_CATEGORIES: tuple[BuiltInCategory, ...] = (
    BuiltInCategory(id="food", name="Gıda", icon="🍔", color="#FF6B6B"),
    BuiltInCategory(id="transport", name="Ulaşım", icon="🚗", color="#4ECDC4"),
    BuiltInCategory(id="entertainment", name="Eğlence", icon="🎬", color="#95E1D3"),
    BuiltInCategory(id="bills", name="Faturalar", icon="💡", color="#F38181"),
    BuiltInCategory(id="shopping", name="Alışveriş", icon="🛍️", color="#AA96DA"),
    BuiltInCategory(id="health", name="Sağlık", icon="🏥", color="#FCBAD3"),
    BuiltInCategory(id="education", name="Eğitim", icon="📚", color="#A8E6CF"),
    BuiltInCategory(id=OTHER_CATEGORY_ID, name="Diğer", icon="📦", color="#D3D3D3"),
)

BUILTIN_BY_ID: dict[str, BuiltInCategory] = {c.id: c for c in BUILTIN_CATEGORIES}


def _stored_kind(value: Any) -> str:
    if isinstance(value, dict):
        flag = value.get("isOverride", value.get("is_override"))
    else:
        flag = getattr(value, "is_override", False)
    return "override" if flag is True else "custom"


# What can live in the "categories" collection
StoredCategory = Annotated[
    Union[
        Annotated[CustomCategory, Tag("custom")],
        Annotated[OverrideCategory, Tag("override")],
    ],
    Discriminator(_stored_kind),
]

stored_category_adapter = TypeAdapter(StoredCategory)

CategoryT = TypeVar("CategoryT", bound=Category)


def override_storage_id(original_id: str, user_id: str) -> str:
    """Internal storage id of a user's override; callers only ever see ``original_id``."""
    return f"{original_id}_override_{user_id}"


def merge_appearance(base: CategoryT, patch: Union[CategoryData, Category]) -> CategoryT:
    """Return a copy of ``base`` with every appearance field ``patch`` sets overwritten."""
    updates = {
        field: getattr(patch, field)
        for field in APPEARANCE_FIELDS
        if getattr(patch, field) is not None
    }
    return base.model_copy(update=updates)


def apply_override(builtin: BuiltInCategory, override: OverrideCategory) -> Category:
    """
    Resolve a built-in against a user's override.

    The override's appearance and metadata win; the identity stays the
    built-in's, so the result's ``id`` is always ``builtin.id``.
    """
    resolved = Category(
        id=builtin.id,
        name=builtin.name,
        icon=builtin.icon,
        color=builtin.color,
        user_id=override.user_id,
        is_override=True,
        original_id=override.original_id,
        created_at=override.created_at,
        updated_at=override.updated_at,
    )
    return merge_appearance(resolved, override)


def to_storage(category: Category) -> dict[str, Any]:
    """Serialize a record the way it's kept in the categories collection."""
    return category.model_dump(mode="json", by_alias=True, exclude_none=True)


def storage_patch(data: CategoryData, updated_at: datetime) -> dict[str, Any]:
    """
    Stored keys an update writes: the appearance fields ``data`` sets,
    plus ``updatedAt``. Merged over the existing record so any other keys
    it carries survive.
    """
    patched = merge_appearance(Category(id="", updated_at=updated_at), data)
    return patched.model_dump(
        mode="json",
        by_alias=True,
        exclude_none=True,
        include={*APPEARANCE_FIELDS, "updated_at"},
    )
