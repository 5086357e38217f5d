"""Pydantic v2 configuration schema with strict validation."""

from enum import StrEnum

from pydantic import BaseModel, Field, model_validator

ACCUWEATHER_FORECAST_DAYS = (1, 5, 10, 15)


class ProviderName(StrEnum):
    ACCUWEATHER = "accuweather"
    OPENWEATHERMAP = "openweathermap"


class ProviderConfig(BaseModel):
    model_config = {"extra": "forbid"}

    name: ProviderName = ProviderName.ACCUWEATHER
    api_key: str = ""
    base_url: str | None = None
    timeout_seconds: float = Field(default=30.0, gt=0.0)
    forecast_days: int = Field(default=5, ge=1, le=16)
    metric: bool = False

    @model_validator(mode="after")
    def check_forecast_length(self) -> "ProviderConfig":
        if (
            self.name == ProviderName.ACCUWEATHER
            and self.forecast_days not in ACCUWEATHER_FORECAST_DAYS
        ):
            raise ValueError(
                f"accuweather forecast_days must be one of {ACCUWEATHER_FORECAST_DAYS}"
            )
        return self


class LocationConfig(BaseModel):
    model_config = {"extra": "forbid"}

    query: str = Field(default="94043", min_length=1)


class NotificationConfig(BaseModel):
    model_config = {"extra": "forbid"}

    enabled: bool = True
    webhook_url: str = ""


class OpsConfig(BaseModel):
    model_config = {"extra": "forbid"}

    sync_interval_minutes: int = Field(default=180, ge=1)


class SunshineConfig(BaseModel):
    model_config = {"extra": "forbid"}

    provider: ProviderConfig = ProviderConfig()
    location: LocationConfig = LocationConfig()
    notifications: NotificationConfig = NotificationConfig()
    ops: OpsConfig = OpsConfig()
