"""Provider bundles: transport client, location resolver and normalizer per provider."""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol

from sunshine.config.schema import ProviderConfig, ProviderName
from sunshine.ingest import location_resolver
from sunshine.ingest.accuweather_client import AccuWeatherClient
from sunshine.ingest.json_normalizer import NORMALIZERS, ForecastNormalizer
from sunshine.ingest.openweather_client import OpenWeatherClient
from sunshine.models.forecast import LocationKey


class WeatherClient(Protocol):
    def get_location_json(self, query: str) -> str: ...

    def get_forecast_json(self, location: LocationKey) -> str: ...


@dataclass(frozen=True)
class Provider:
    name: str
    client: WeatherClient
    resolve: Callable[[str | None], LocationKey | None]
    normalizer: ForecastNormalizer


def build_provider(config: ProviderConfig) -> Provider:
    """Build the provider selected by configuration."""
    kwargs = {
        "api_key": config.api_key or None,
        "timeout": config.timeout_seconds,
        "forecast_days": config.forecast_days,
        "metric": config.metric,
    }
    if config.base_url:
        kwargs["base_url"] = config.base_url

    if config.name == ProviderName.OPENWEATHERMAP:
        return Provider(
            name=config.name.value,
            client=OpenWeatherClient(**kwargs),
            resolve=location_resolver.resolve_openweather,
            normalizer=NORMALIZERS[config.name.value],
        )
    return Provider(
        name=config.name.value,
        client=AccuWeatherClient(**kwargs),
        resolve=location_resolver.resolve,
        normalizer=NORMALIZERS[config.name.value],
    )
