"""
HotelOps - Configuration Tests
"""

import pytest

from hotelops.config import HotelOpsConfig, get_all_config, get_config, set_config


@pytest.fixture(autouse=True)
def fresh_config():
    HotelOpsConfig.reset_cache(clear_overrides=True)
    yield
    HotelOpsConfig.reset_cache(clear_overrides=True)


class TestConfig:

    def test_defaults(self):
        assert get_config("debounce_ms") == 800
        assert get_config("saving_hold_ms") == 500
        assert get_config("trend_baseline") == 94
        assert get_config("seed_empty_collections") is True
        assert get_config("missing_key", "fallback") == "fallback"

    def test_environment_values_are_cast(self, monkeypatch):
        monkeypatch.setenv("HOTELOPS_DEBOUNCE_MS", "250")
        monkeypatch.setenv("HOTELOPS_SEED_EMPTY_COLLECTIONS", "no")
        monkeypatch.setenv("HOTELOPS_DEFAULT_HOTELS", '["Lakeside Inn"]')
        assert get_config("debounce_ms") == 250
        assert get_config("seed_empty_collections") is False
        assert get_config("default_hotels") == ["Lakeside Inn"]

    def test_bad_int_falls_back_to_default(self, monkeypatch):
        monkeypatch.setenv("HOTELOPS_HEATMAP_LIMIT", "ten")
        assert get_config("heatmap_limit") == 10

    def test_override_survives_cache_reset(self):
        set_config("trend_baseline", 90)
        HotelOpsConfig.reset_cache()
        assert get_config("trend_baseline") == 90

    def test_category_filter(self):
        analytics = HotelOpsConfig.get_all("analytics")
        assert analytics == {"trend_baseline": 94, "heatmap_limit": 10, "top_failures_limit": 5}
        assert "db_path" in get_all_config()
