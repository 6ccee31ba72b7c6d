"""
Tests for environment-driven configuration.
"""
from storefront_core import config


class TestIntEnv:
    def test_missing_uses_default(self, monkeypatch):
        monkeypatch.delenv("SOME_SETTING", raising=False)
        assert config._int_env("SOME_SETTING", 30) == 30

    def test_valid_value(self, monkeypatch):
        monkeypatch.setenv("SOME_SETTING", "15")
        assert config._int_env("SOME_SETTING", 30) == 15

    def test_malformed_or_non_positive_uses_default(self, monkeypatch):
        for raw in ("abc", "", "0", "-5"):
            monkeypatch.setenv("SOME_SETTING", raw)
            assert config._int_env("SOME_SETTING", 30) == 30


class TestSchedulingSettings:
    def test_defaults(self):
        settings = config.SchedulingSettings()
        assert settings.slot_interval_minutes == 30
        assert settings.same_day_lead_minutes == 60
        assert settings.days_ahead == 7

    def test_picks_up_module_constants(self, monkeypatch):
        monkeypatch.setattr(config, "SLOT_INTERVAL_MINUTES", 15)
        monkeypatch.setattr(config, "SAME_DAY_LEAD_MINUTES", 45)
        monkeypatch.setattr(config, "DEFAULT_DAYS_AHEAD", 3)

        assert config.get_scheduling_settings() == config.SchedulingSettings(15, 45, 3)
