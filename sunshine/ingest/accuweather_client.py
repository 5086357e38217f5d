"""AccuWeather API client: location search and daily forecast as raw text."""

import logging
import os

import httpx

from sunshine.config.schema import ACCUWEATHER_FORECAST_DAYS
from sunshine.models.errors import TransportError
from sunshine.models.forecast import LocationKey

logger = logging.getLogger(__name__)

ACCUWEATHER_BASE_URL = "https://dataservice.accuweather.com"
DEFAULT_USER_AGENT = "sunshine-sync/0.1.0"
FORECAST_DAY_OPTIONS = ACCUWEATHER_FORECAST_DAYS


class AccuWeatherClient:
    def __init__(
        self,
        api_key: str | None = None,
        base_url: str = ACCUWEATHER_BASE_URL,
        timeout: float = 30.0,
        forecast_days: int = 5,
        metric: bool = False,
        user_agent: str = DEFAULT_USER_AGENT,
    ):
        if forecast_days not in FORECAST_DAY_OPTIONS:
            raise ValueError(
                f"AccuWeather forecast_days must be one of {FORECAST_DAY_OPTIONS}"
            )
        self.api_key = api_key or os.environ.get("SUNSHINE_API_KEY", "")
        self.base_url = base_url
        self.timeout = timeout
        self.forecast_days = forecast_days
        self.metric = metric
        self.user_agent = user_agent

    def get_location_json(self, query: str) -> str:
        """Search locations by free text (city name or postal code)."""
        return self._get("/locations/v1/search", {"q": query})

    def get_forecast_json(self, location: LocationKey) -> str:
        """Fetch the daily forecast for a resolved location key."""
        return self._get(
            f"/forecasts/v1/daily/{self.forecast_days}day/{location.key}",
            {"details": "true", "metric": str(self.metric).lower()},
        )

    def _get(self, path: str, params: dict[str, str]) -> str:
        url = f"{self.base_url}{path}"
        try:
            resp = httpx.get(
                url,
                params={"apikey": self.api_key, **params},
                headers={"User-Agent": self.user_agent, "Accept": "application/json"},
                timeout=self.timeout,
            )
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error("AccuWeather %s returned %d", path, e.response.status_code)
            raise TransportError(
                f"AccuWeather {path} returned {e.response.status_code}",
                status_code=e.response.status_code,
            ) from e
        except httpx.RequestError as e:
            logger.error("AccuWeather request to %s failed: %s", path, e)
            raise TransportError(f"AccuWeather request failed: {e}") from e
        logger.debug("AccuWeather %s -> %d bytes", path, len(resp.text))
        return resp.text
