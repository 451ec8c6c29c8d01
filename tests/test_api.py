"""Tests for the screen-facing category and login actions."""

from pocketledger.api.auth import IP_CHECK_FAILED_MESSAGE, check_login, trust_current_ip
from pocketledger.api.categories import (
    BUILTIN_DELETE_REFUSED,
    COLOR_CHOICES,
    ICON_CHOICES,
    NO_USER_MESSAGE,
    load_categories,
    remove_category,
    save_category,
)
from pocketledger.models.category import BUILTIN_BY_ID, DEFAULT_ICON, CategoryData
from tests.factories import CategoryFactory


class TestLoadCategories:
    """Test the category screen's load action."""

    async def test_no_user_shows_nothing(self, store):
        result = await load_categories(store, None)

        assert result.builtins == []
        assert result.custom == []

    async def test_signed_in_user_sees_builtins_and_own(self, store, persistence):
        CategoryFactory.store(
            persistence,
            CategoryFactory.custom("user-1", "Kira"),
            CategoryFactory.custom("user-2", "Oyun"),
        )

        result = await load_categories(store, "user-1")

        assert len(result.builtins) == 8
        assert [c.name for c in result.custom] == ["Kira"]

    async def test_missing_icon_and_color_filled_for_display(self, store, persistence, monkeypatch):
        monkeypatch.setenv("POCKETLEDGER_PRIMARY_COLOR", "#123456")
        CategoryFactory.store(
            persistence,
            {"id": "c1", "name": "Kira", "userId": "user-1", "createdAt": "2024-01-01T00:00:00Z"},
        )

        custom = (await load_categories(store, "user-1")).custom

        assert (custom[0].icon, custom[0].color) == (DEFAULT_ICON, "#123456")

    def test_picker_choices_cover_builtins(self):
        assert ICON_CHOICES[0] == DEFAULT_ICON
        assert BUILTIN_BY_ID["food"].icon in ICON_CHOICES
        assert BUILTIN_BY_ID["food"].color in COLOR_CHOICES
        assert len(COLOR_CHOICES) == 10


class TestSaveCategory:
    """Test add and edit from the category form."""

    async def test_add(self, store):
        result = await save_category(store, "user-1", CategoryData(name="  Kira ", icon="🏠"))

        assert result.success is True
        assert result.error is None
        assert result.message == "Category added"
        custom = (await store.get_effective_categories("user-1")).custom
        assert [(c.id, c.name) for c in custom] == [(result.category_id, "Kira")]

    async def test_edit_builtin_creates_override(self, store):
        result = await save_category(store, "user-1", CategoryData(name="Yemek"), editing_id="food")

        assert result.success is True
        assert result.message == "Category updated"
        food = (await store.get_effective_categories("user-1")).builtins[0]
        assert (food.id, food.name) == ("food", "Yemek")

    async def test_blank_name_refused(self, store, persistence):
        result = await save_category(store, "user-1", CategoryData(name="   "))

        assert result.success is False
        assert result.message == "Please enter a category name"
        assert result.error.code == "VALIDATION_ERROR"
        assert result.error.details == {"field": "name"}
        assert persistence.writes == 0

    async def test_no_user_refused(self, store):
        result = await save_category(store, None, CategoryData(name="Kira"))

        assert result.success is False
        assert result.message == NO_USER_MESSAGE

    async def test_editing_someone_elses_category_refused(self, store):
        added = await save_category(store, "user-1", CategoryData(name="Kira"))

        result = await save_category(store, "user-2", CategoryData(name="Ev"), editing_id=added.category_id)

        assert result.success is False
        assert "permission" in result.message
        assert result.error.code == "FORBIDDEN"

    async def test_save_failure_reported(self, store, persistence):
        persistence.fail_writes = True

        result = await save_category(store, "user-1", CategoryData(name="Kira"))

        assert result.success is False
        assert result.message == "Could not add category"


class TestRemoveCategory:
    """Test the delete action and its built-in guard."""

    async def test_builtin_refused_without_store_call(self, store, persistence):
        result = await remove_category(store, BUILTIN_BY_ID["food"])

        assert result.success is False
        assert result.message == BUILTIN_DELETE_REFUSED
        assert persistence.writes == 0

    async def test_overridden_builtin_still_refused(self, store):
        await store.update_category("food", CategoryData(name="Yemek"), "user-1")
        food = (await store.get_effective_categories("user-1")).builtins[0]

        result = await remove_category(store, food)

        assert result.success is False
        assert (await store.get_effective_categories("user-1")).builtins[0].name == "Yemek"

    async def test_custom_deleted(self, store):
        added = await save_category(store, "user-1", CategoryData(name="Kira"))
        category = (await store.get_effective_categories("user-1")).custom[0]

        result = await remove_category(store, category)

        assert result.success is True
        assert result.category_id == added.category_id
        assert (await store.get_effective_categories("user-1")).custom == []

    async def test_delete_failure_reported(self, store, persistence):
        await save_category(store, "user-1", CategoryData(name="Kira"))
        category = (await store.get_effective_categories("user-1")).custom[0]
        persistence.fail_writes = True

        result = await remove_category(store, category)

        assert result.success is False
        assert result.message == "Could not delete category"


class TestCheckLogin:
    """Test the login screen's IP check."""

    async def test_invalid_email_blocks_before_ip_check(self, guardian):
        result = await check_login(guardian, "not-an-email", "user-1")

        assert result.allowed is False
        assert "@" in result.message
        assert result.error.code == "VALIDATION_ERROR"
        assert result.error.details == {"field": "email"}
        assert await guardian.get_history("user-1") is None

    async def test_first_login_allowed_quietly(self, guardian):
        result = await check_login(guardian, "ayse@example.com", "user-1", session_id="s-1")

        assert result.allowed is True
        assert result.warning is None

    async def test_changed_ip_warns_but_allows(self, guardian, ip_provider):
        await check_login(guardian, "ayse@example.com", "user-1")
        ip_provider.ip = "192.168.1.5"

        result = await check_login(guardian, "ayse@example.com", "user-1")

        assert result.allowed is True
        assert result.warning.new_ip == "192.168.1.5"
        assert result.message == result.warning.message

    async def test_failed_check_blocks(self, guardian, persistence):
        persistence.fail_writes = True

        result = await check_login(guardian, "ayse@example.com", "user-1")

        assert result.allowed is False
        assert result.message == IP_CHECK_FAILED_MESSAGE


class TestTrustCurrentIp:
    """Test confirming a flagged IP."""

    async def test_trust_after_change(self, guardian, ip_provider):
        await check_login(guardian, "ayse@example.com", "user-1")
        ip_provider.ip = "192.168.1.5"
        await check_login(guardian, "ayse@example.com", "user-1")

        result = await trust_current_ip(guardian, "user-1", "192.168.1.5")

        assert result.allowed is True
        assert (await guardian.get_history("user-1")).registered_ip == "192.168.1.5"

    async def test_trust_unknown_user(self, guardian):
        result = await trust_current_ip(guardian, "nobody", "192.168.1.5")

        assert result.allowed is False
        assert "not found" in result.message
        assert result.error.code == "NOT_FOUND"
