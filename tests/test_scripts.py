"""Tests for the seed and IP history scripts."""

from pocketledger.scripts.ip_history import format_history, show_history
from pocketledger.scripts.seed import DEMO_CATEGORIES, seed_categories
from tests.factories import IpRecordFactory


class TestSeedCategories:
    """Test demo data seeding."""

    async def test_seeds_custom_and_overrides(self, store, capsys):
        await seed_categories(store, "demo-user")

        result = await store.get_effective_categories("demo-user")
        assert len(result.custom) == len(DEMO_CATEGORIES)
        assert result.builtins[0].name == "Yemek"
        assert "✅" in capsys.readouterr().out

    async def test_second_run_skips(self, store, stored_categories):
        await seed_categories(store, "demo-user")
        count = len(stored_categories())

        await seed_categories(store, "demo-user")

        assert len(stored_categories()) == count


class TestIpHistory:
    """Test IP history output."""

    def test_no_record(self):
        assert format_history("user-1", None) == ["ℹ️  No IP history for user-1"]

    def test_newest_change_first(self):
        lines = format_history("user-1", IpRecordFactory.create(changes=2))

        assert "Registered IP: 10.0.0.1" in lines[1]
        assert "10.1.0.1 → 10.1.0.2" in lines[4]
        assert "10.1.0.0 → 10.1.0.1" in lines[5]

    async def test_show_history_read_failure(self, guardian, persistence, capsys):
        persistence.fail_reads = True

        exit_code = await show_history(guardian, "user-1")

        assert exit_code == 1
        assert "❌" in capsys.readouterr().out

    async def test_show_history_prints_record(self, guardian, persistence, capsys):
        IpRecordFactory.store(persistence, "user-1", IpRecordFactory.create())

        exit_code = await show_history(guardian, "user-1")

        assert exit_code == 0
        assert "No IP changes recorded" in capsys.readouterr().out
