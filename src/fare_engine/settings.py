from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from fare_engine.core.exceptions import ConfigurationError


class PeakWindow(BaseModel):
    """Half-open hour interval [start, end) during which surge applies."""

    model_config = ConfigDict(frozen=True)

    start: int = Field(ge=0, le=23)
    end: int = Field(ge=1, le=24)

    @model_validator(mode="after")
    def validate_order(self) -> "PeakWindow":
        if self.start >= self.end:
            raise ValueError(
                f"Peak window start ({self.start}) must be before end ({self.end})"
            )
        return self

    def contains(self, hour: int) -> bool:
        return self.start <= hour < self.end


class PricingConfig(BaseSettings):
    """Rate table for shared-ride pricing.

    Defaults follow the INR market table: ₹11.50/km covers fuel, upkeep and
    a 35% driver margin; detours cost more per km because they are driven
    for one rider's benefit.
    """

    base_fare: float = Field(default=35.0, ge=0.0)
    minimum_fare: int = Field(default=40, gt=0)

    rate_per_km: float = Field(default=11.5, ge=0.0)
    detour_rate_per_km: float = Field(default=15.0, ge=0.0)
    detour_creator_share: float = Field(
        default=0.7,
        gt=0.0,
        le=1.0,
        description="Fraction of a detour's cost paid by the rider who caused it",
    )

    # Driver repositioning to the first pickup
    free_pickup_distance_km: float = Field(default=2.0, ge=0.0)
    pickup_distance_rate: float = Field(default=5.0, ge=0.0)

    # Waiting at pickup
    wait_time_free_minutes: float = Field(default=5.0, ge=0.0)
    wait_time_per_minute: float = Field(default=2.0, ge=0.0)

    peak_hour_multiplier: float = Field(default=1.3, ge=1.0)
    peak_hours: tuple[PeakWindow, ...] = Field(
        default=(PeakWindow(start=7, end=10), PeakWindow(start=17, end=21)),
    )

    tax_percent: float = Field(default=0.05, ge=0.0, le=1.0)
    tax_label: str = "GST"
    platform_fee_percent: float = Field(default=0.15, ge=0.0, le=1.0)
    currency_symbol: str = "₹"

    model_config = SettingsConfigDict(env_prefix="FARE_", frozen=True)

    @field_validator("peak_hours")
    @classmethod
    def validate_no_overlap(cls, v: tuple[PeakWindow, ...]) -> tuple[PeakWindow, ...]:
        ordered = sorted(v, key=lambda w: w.start)
        for prev, nxt in zip(ordered, ordered[1:], strict=False):
            if nxt.start < prev.end:
                raise ValueError(
                    f"Peak windows [{prev.start}, {prev.end}) and "
                    f"[{nxt.start}, {nxt.end}) overlap"
                )
        return tuple(ordered)

    def is_peak_hour(self, hour: int) -> bool:
        return any(window.contains(hour) for window in self.peak_hours)


class LoggingSettings(BaseSettings):
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["text", "json"] = "text"
    environment: str = "development"

    model_config = SettingsConfigDict(env_prefix="FARE_")


class RedisSettings(BaseSettings):
    host: str = "localhost"
    port: int = 6379
    db: int = 0
    password: str = ""

    model_config = SettingsConfigDict(env_prefix="REDIS_")

    def to_config(self) -> dict[str, Any]:
        return {
            "host": self.host,
            "port": self.port,
            "db": self.db,
            "password": self.password or None,
        }


class Settings(BaseSettings):
    pricing: PricingConfig = Field(default_factory=PricingConfig)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    redis: RedisSettings = Field(default_factory=RedisSettings)

    model_config = SettingsConfigDict(
        env_nested_delimiter="__",
        case_sensitive=False,
    )


def get_settings() -> Settings:
    """Load and validate settings from environment variables."""
    return Settings()


def load_pricing_config(**overrides: Any) -> PricingConfig:
    """Build a PricingConfig from the environment plus explicit overrides.

    Raises:
        ConfigurationError: if any value fails validation. Values are never
            clamped into range.
    """
    try:
        return PricingConfig(**overrides)
    except PydanticValidationError as e:
        errors = [
            {"field": ".".join(str(p) for p in err["loc"]), "error": err["msg"]}
            for err in e.errors()
        ]
        fields = ", ".join(err["field"] for err in errors)
        raise ConfigurationError(
            f"Invalid pricing configuration: {fields}",
            details={"errors": errors},
        ) from e
