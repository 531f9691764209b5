import pytest
from pydantic import ValidationError

from fare_engine.core.exceptions import ConfigurationError
from fare_engine.settings import (
    LoggingSettings,
    PeakWindow,
    PricingConfig,
    RedisSettings,
    Settings,
    get_settings,
    load_pricing_config,
)


@pytest.mark.unit
class TestPricingConfig:
    def test_defaults(self):
        config = PricingConfig()
        assert config.base_fare == 35.0
        assert config.minimum_fare == 40
        assert config.rate_per_km == 11.5
        assert config.detour_rate_per_km == 15.0
        assert config.detour_creator_share == 0.7
        assert config.peak_hour_multiplier == 1.3
        assert config.tax_percent == 0.05
        assert config.peak_hours == (PeakWindow(start=7, end=10), PeakWindow(start=17, end=21))

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("FARE_RATE_PER_KM", "14")
        monkeypatch.setenv("FARE_CURRENCY_SYMBOL", "$")
        config = PricingConfig()
        assert config.rate_per_km == 14.0
        assert config.currency_symbol == "$"

    def test_peak_hours_from_env_json(self, monkeypatch):
        monkeypatch.setenv("FARE_PEAK_HOURS", '[{"start": 6, "end": 9}]')
        config = PricingConfig()
        assert config.peak_hours == (PeakWindow(start=6, end=9),)
        assert config.is_peak_hour(6)
        assert not config.is_peak_hour(9)

    def test_immutable(self):
        config = PricingConfig()
        with pytest.raises(ValidationError):
            config.base_fare = 0.0  # type: ignore[misc]

    def test_windows_sorted(self):
        config = PricingConfig(
            peak_hours=(PeakWindow(start=17, end=21), PeakWindow(start=7, end=10))
        )
        assert [w.start for w in config.peak_hours] == [7, 17]

    def test_adjacent_windows_allowed(self):
        config = PricingConfig(
            peak_hours=(PeakWindow(start=7, end=10), PeakWindow(start=10, end=12))
        )
        assert config.is_peak_hour(10)

    def test_overlapping_windows_rejected(self):
        with pytest.raises(ValidationError, match="overlap"):
            PricingConfig(peak_hours=(PeakWindow(start=7, end=10), PeakWindow(start=9, end=12)))

    @pytest.mark.parametrize("start,end", [(10, 7), (8, 8), (-1, 5), (20, 25)])
    def test_malformed_window_rejected(self, start, end):
        with pytest.raises(ValidationError):
            PeakWindow(start=start, end=end)

    @pytest.mark.parametrize(
        "field,value",
        [
            ("rate_per_km", -1.0),
            ("minimum_fare", 0),
            ("detour_creator_share", 0.0),
            ("detour_creator_share", 1.5),
            ("peak_hour_multiplier", 0.9),
            ("tax_percent", 1.2),
        ],
    )
    def test_out_of_range_rejected(self, field, value):
        with pytest.raises(ValidationError):
            PricingConfig(**{field: value})


@pytest.mark.unit
class TestLoadPricingConfig:
    def test_overrides(self):
        assert load_pricing_config(base_fare=50).base_fare == 50.0

    def test_invalid_value_raises_configuration_error(self):
        with pytest.raises(ConfigurationError) as exc_info:
            load_pricing_config(rate_per_km=-1)

        errors = exc_info.value.details["errors"]
        assert errors[0]["field"] == "rate_per_km"
        assert "rate_per_km" in exc_info.value.message

    def test_invalid_env_raises_configuration_error(self, monkeypatch):
        monkeypatch.setenv("FARE_MINIMUM_FARE", "not-a-number")
        with pytest.raises(ConfigurationError):
            load_pricing_config()

    def test_overlapping_windows(self):
        with pytest.raises(ConfigurationError):
            load_pricing_config(
                peak_hours=[{"start": 7, "end": 10}, {"start": 8, "end": 9}]
            )


@pytest.mark.unit
class TestOtherSettings:
    def test_logging_defaults(self):
        settings = LoggingSettings()
        assert settings.log_level == "INFO"
        assert settings.log_format == "text"

    def test_logging_env(self, monkeypatch):
        monkeypatch.setenv("FARE_LOG_FORMAT", "json")
        assert LoggingSettings().log_format == "json"

    def test_invalid_log_level(self, monkeypatch):
        monkeypatch.setenv("FARE_LOG_LEVEL", "LOUD")
        with pytest.raises(ValidationError):
            LoggingSettings()

    def test_redis_config_dict(self, monkeypatch):
        for key in ("REDIS_HOST", "REDIS_PORT", "REDIS_DB", "REDIS_PASSWORD"):
            monkeypatch.delenv(key, raising=False)
        assert RedisSettings().to_config() == {
            "host": "localhost",
            "port": 6379,
            "db": 0,
            "password": None,
        }

    def test_get_settings(self):
        settings = get_settings()
        assert isinstance(settings, Settings)
        assert settings.pricing == PricingConfig()
