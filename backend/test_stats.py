"""Tests for the dashboard summary tiles"""

from pharmadash.services.stats import StatsAggregator


class TestStatsAggregator:
    """Four independent counts"""

    def test_counts_all_tiles(self, seeded_backend):
        stats = StatsAggregator(seeded_backend.factory("https://x.test", "key123"), low_stock_threshold=25)

        snapshot = stats.refresh()

        assert snapshot.total_drugs == 4
        assert snapshot.low_stock_items == 2
        assert snapshot.total_employees == 2
        assert snapshot.restocking_items == 1
        assert snapshot.errors == {}

    def test_no_low_stock_is_zero_not_missing(self, backend):
        backend.add_rows("inventory", {"drug_name": "Ibuprofen", "company": "HealthCure", "current_quantity": 200})
        stats = StatsAggregator(backend.factory("https://x.test", "key123"), low_stock_threshold=25)

        snapshot = stats.refresh()

        assert snapshot.low_stock_items == 0
        assert "low_stock_items" not in snapshot.errors

    def test_one_failing_tile_keeps_last_value(self, seeded_backend):
        stats = StatsAggregator(seeded_backend.factory("https://x.test", "key123"))
        stats.refresh()
        seeded_backend.add_rows("inventory", {"drug_name": "Zinc", "company": "MinerWell", "current_quantity": 5})
        seeded_backend.fail("count", "employees", code="PGRST301", message="JWT expired")

        snapshot = stats.refresh()

        assert snapshot.total_employees == 2
        assert snapshot.errors == {"total_employees": "JWT expired"}
        assert snapshot.total_drugs == 5
        assert snapshot.low_stock_items == 3
        assert snapshot.restocking_items == 1

    def test_missing_table_only_affects_its_tile(self, seeded_backend):
        del seeded_backend.tables["restocking"]
        stats = StatsAggregator(seeded_backend.factory("https://x.test", "key123"))

        snapshot = stats.refresh()

        assert snapshot.restocking_items is None
        assert "restocking_items" in snapshot.errors
        assert snapshot.total_drugs == 4

    def test_threshold_comes_from_settings(self, monkeypatch, seeded_backend):
        from pharmadash.core.config import settings
        monkeypatch.setattr(settings, "LOW_STOCK_THRESHOLD", 10)

        stats = StatsAggregator(seeded_backend.factory("https://x.test", "key123"))

        assert stats.refresh().low_stock_items == 1
        assert stats.snapshot().low_stock_threshold == 10

    def test_without_gateway_every_tile_reports_error(self):
        stats = StatsAggregator()

        snapshot = stats.refresh()

        assert snapshot.total_drugs is None
        assert set(snapshot.errors) == {"total_drugs", "low_stock_items", "total_employees", "restocking_items"}

    def test_bind_resets_values(self, seeded_backend):
        stats = StatsAggregator(seeded_backend.factory("https://x.test", "key123"))
        stats.refresh()

        stats.bind(None)

        assert stats.snapshot().total_drugs is None
        assert stats.snapshot().errors == {}
