"""OpenWeatherMap API client: geocoding and 16-day daily forecast as raw text."""

import logging
import os

import httpx

from sunshine.models.errors import TransportError
from sunshine.models.forecast import LocationKey

logger = logging.getLogger(__name__)

OPENWEATHER_BASE_URL = "https://api.openweathermap.org"


class OpenWeatherClient:
    def __init__(
        self,
        api_key: str | None = None,
        base_url: str = OPENWEATHER_BASE_URL,
        timeout: float = 30.0,
        forecast_days: int = 14,
        metric: bool = False,
    ):
        if not 1 <= forecast_days <= 16:
            raise ValueError("OpenWeatherMap forecast_days must be within 1..16")
        self.api_key = api_key or os.environ.get("SUNSHINE_API_KEY", "")
        self.base_url = base_url
        self.timeout = timeout
        self.forecast_days = forecast_days
        self.metric = metric

    def get_location_json(self, query: str) -> str:
        return self._get("/geo/1.0/direct", {"q": query, "limit": "1"})

    def get_forecast_json(self, location: LocationKey) -> str:
        lat, _, lon = location.key.partition(",")
        return self._get(
            "/data/2.5/forecast/daily",
            {
                "lat": lat,
                "lon": lon,
                "cnt": str(self.forecast_days),
                "units": "metric" if self.metric else "imperial",
            },
        )

    def _get(self, path: str, params: dict[str, str]) -> str:
        url = f"{self.base_url}{path}"
        try:
            resp = httpx.get(
                url, params={"appid": self.api_key, **params}, timeout=self.timeout
            )
            # 404 carries a {"cod": "404"} body the normalizer reports as no data
            if resp.status_code != 404:
                resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error("OpenWeatherMap %s returned %d", path, e.response.status_code)
            raise TransportError(
                f"OpenWeatherMap {path} returned {e.response.status_code}",
                status_code=e.response.status_code,
            ) from e
        except httpx.RequestError as e:
            logger.error("OpenWeatherMap request to %s failed: %s", path, e)
            raise TransportError(f"OpenWeatherMap request failed: {e}") from e
        return resp.text
