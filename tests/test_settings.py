"""Tests for environment-driven settings."""

from decimal import Decimal

import pytest

from courtly.infra.settings import Settings, load_settings


class TestLoadSettings:
    def test_defaults(self):
        assert load_settings({}) == Settings()

    def test_values_from_environment(self):
        settings = load_settings(
            {
                "COURTLY_SLOT_MINUTES": "30",
                "COURTLY_PLATFORM_FEE_PERCENT": "7.5",
                "COURTLY_DEFAULT_TIMEZONE": "Europe/Lisbon",
                "LOG_LEVEL": "debug",
            }
        )
        assert settings.slot_minutes == 30
        assert settings.platform_fee_percent == Decimal("7.5")
        assert settings.default_timezone == "Europe/Lisbon"
        assert settings.log_level == "DEBUG"

    def test_blank_values_use_defaults(self):
        settings = load_settings({"COURTLY_SLOT_MINUTES": " ", "COURTLY_PLATFORM_FEE_PERCENT": ""})
        assert settings.slot_minutes == 60
        assert settings.platform_fee_percent == Decimal("5")

    @pytest.mark.parametrize(
        "env",
        [
            {"COURTLY_SLOT_MINUTES": "abc"},
            {"COURTLY_SLOT_MINUTES": "0"},
            {"COURTLY_SLOT_MINUTES": "1441"},
            {"COURTLY_PLATFORM_FEE_PERCENT": "-1"},
            {"COURTLY_PLATFORM_FEE_PERCENT": "five"},
            {"COURTLY_DEFAULT_TIMEZONE": "Nowhere/City"},
            {"LOG_LEVEL": "LOUD"},
        ],
    )
    def test_invalid_values(self, env):
        with pytest.raises(ValueError):
            load_settings(env)
