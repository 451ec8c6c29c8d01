"""Category screen actions: load, save and delete with user-facing messages."""

from typing import Optional

from pydantic import BaseModel

from pocketledger.core.category_store import CategoryStore, is_builtin_category
from pocketledger.core.errors import AppError, ErrorDetail, ValidationError
from pocketledger.core.logging import get_logger
from pocketledger.core.validators import validate_category_name
from pocketledger.models.category import (
    DEFAULT_ICON,
    Category,
    CategoryData,
    EffectiveCategories,
    default_color,
)

logger = get_logger(__name__)

BUILTIN_DELETE_REFUSED = "Built-in categories cannot be deleted."
NO_USER_MESSAGE = "User information not found. Please sign in again."

# Picker options offered by the category form
ICON_CHOICES = ("📦", "🍔", "🚗", "🎬", "💡", "🛍️", "🏥", "📚", "✈️", "🏠", "🎮", "💻")
COLOR_CHOICES = (
    "#FF6B6B",
    "#4ECDC4",
    "#95E1D3",
    "#F38181",
    "#AA96DA",
    "#FCBAD3",
    "#A8E6CF",
    "#FFD93D",
    "#6BCB77",
    "#4D96FF",
)


class ActionResult(BaseModel):
    """What the screen shows after an action."""

    success: bool
    message: str
    category_id: Optional[str] = None
    error: Optional[ErrorDetail] = None


def _renderable(categories: list) -> list:
    """Drop entries the screen can't show and fill in a missing icon or color."""
    return [
        c.model_copy(update={"icon": c.icon or DEFAULT_ICON, "color": c.color or default_color()})
        for c in categories
        if c is not None and c.id and c.name
    ]


async def load_categories(store: CategoryStore, user_id: Optional[str]) -> EffectiveCategories:
    """Categories for the management screen. No signed-in user means nothing to show."""
    if not user_id:
        return EffectiveCategories()

    effective = await store.get_effective_categories(user_id)
    return EffectiveCategories(
        builtins=_renderable(effective.builtins),
        custom=_renderable(effective.custom),
    )


async def save_category(
    store: CategoryStore,
    user_id: Optional[str],
    form: CategoryData,
    editing_id: Optional[str] = None,
) -> ActionResult:
    """Add a new category, or update ``editing_id`` when the form is editing one."""
    if not user_id:
        return ActionResult(success=False, message=NO_USER_MESSAGE)

    try:
        name = validate_category_name(form.name)
    except ValueError as exc:
        error = ValidationError(str(exc), details={"field": "name"})
        return ActionResult(success=False, message=error.message, error=error.to_response())

    data = form.model_copy(update={"name": name})

    try:
        if editing_id:
            await store.update_category(editing_id, data, user_id)
            return ActionResult(success=True, message="Category updated", category_id=editing_id)

        new_id = await store.add_category(user_id, data)
        return ActionResult(success=True, message="Category added", category_id=new_id)
    except AppError as exc:
        action = "update" if editing_id else "add"
        logger.warning("category.action_failed", action=action, code=exc.code)
        return ActionResult(success=False, message=exc.message, error=exc.to_response())


async def remove_category(store: CategoryStore, category: Category) -> ActionResult:
    """Delete a custom category. Built-ins are refused without touching the store."""
    if is_builtin_category(category.id):
        return ActionResult(success=False, message=BUILTIN_DELETE_REFUSED, category_id=category.id)

    try:
        await store.delete_category(category.id)
    except AppError as exc:
        logger.warning("category.action_failed", action="delete", code=exc.code)
        return ActionResult(success=False, message=exc.message, error=exc.to_response())

    return ActionResult(success=True, message="Category deleted", category_id=category.id)
