"""JSON normalizers: provider daily-forecast JSON to ForecastRecord batches.

Each provider variant implements ``normalize(raw_json, today_utc_midnight)``
and returns either ``None`` (no data to apply) or a fully populated list of
records. A single bad day raises MalformedForecast for the whole batch.

Provider day ordering is trusted: record ``i`` is dated
``today_utc_midnight + i`` days and any date embedded in the response is
ignored.
"""

import json
import logging
import math
from typing import Any, Protocol

from sunshine.models.common import DAY_IN_MILLIS
from sunshine.models.errors import MalformedForecast
from sunshine.models.forecast import ForecastRecord

logger = logging.getLogger(__name__)

# AccuWeather daily forecast keys
AW_FORECASTS_DAILY = "DailyForecasts"
AW_TEMPERATURE = "Temperature"
AW_MINIMUM = "Minimum"
AW_MAXIMUM = "Maximum"
AW_VALUE = "Value"
AW_DAYTIME = "Day"
AW_NIGHTTIME = "Night"
AW_ICON_NUM = "Icon"
AW_ICON_PHRASE = "IconPhrase"
AW_WIND = "Wind"
AW_WIND_SPEED = "Speed"
AW_WIND_DIRECTION = "Direction"
AW_WIND_DIR_DEGREES = "Degrees"
AW_LOCALIZED = "Localized"
AW_PRECIP_PROB = "PrecipitationProbability"
AW_PRECIP_HOURS = "HoursOfPrecipitation"

# OpenWeatherMap daily forecast keys
OWM_LIST = "list"
OWM_MESSAGE_CODE = "cod"
OWM_TEMPERATURE = "temp"
OWM_MAX = "max"
OWM_MIN = "min"
OWM_WEATHER = "weather"
OWM_WEATHER_ID = "id"
OWM_DESCRIPTION = "description"
OWM_WINDSPEED = "speed"
OWM_WIND_DIRECTION = "deg"
OWM_PRECIP_PROB = "pop"

COMPASS_POINTS = (
    "N", "NNE", "NE", "ENE", "E", "ESE", "SE", "SSE",
    "S", "SSW", "SW", "WSW", "W", "WNW", "NW", "NNW",
)


class ForecastNormalizer(Protocol):
    name: str

    def normalize(
        self, raw_json: str | None, today_utc_midnight: int
    ) -> list[ForecastRecord] | None:
        ...


class AccuWeatherNormalizer:
    """AccuWeather ``forecasts/v1/daily`` responses."""

    name = "accuweather"

    def normalize(
        self, raw_json: str | None, today_utc_midnight: int
    ) -> list[ForecastRecord] | None:
        data = _load_object(raw_json)
        if data is None:
            return None

        days = data.get(AW_FORECASTS_DAILY)
        if not isinstance(days, list):
            raise MalformedForecast(f"Response has no {AW_FORECASTS_DAILY!r} array")

        records = []
        for i, day in enumerate(days):
            f = _Fields(day, i)
            # Night is required even though only the day segment feeds the record
            f.obj(AW_NIGHTTIME)
            wind_speed = f.number(AW_DAYTIME, AW_WIND, AW_WIND_SPEED, AW_VALUE)
            if wind_speed < 0:
                raise MalformedForecast(f"Day {i}: negative wind speed {wind_speed}")

            records.append(ForecastRecord(
                date=today_utc_midnight + DAY_IN_MILLIS * i,
                wind_speed=wind_speed,
                wind_direction_degrees=_bearing(f.number(
                    AW_DAYTIME, AW_WIND, AW_WIND_DIRECTION, AW_WIND_DIR_DEGREES
                )),
                wind_direction_description=f.string(
                    AW_DAYTIME, AW_WIND, AW_WIND_DIRECTION, AW_LOCALIZED
                ),
                high_temp=f.number(AW_TEMPERATURE, AW_MAXIMUM, AW_VALUE),
                low_temp=f.number(AW_TEMPERATURE, AW_MINIMUM, AW_VALUE),
                weather_icon_id=f.integer(AW_DAYTIME, AW_ICON_NUM),
                weather_description=f.string(AW_DAYTIME, AW_ICON_PHRASE),
                precipitation_probability=f.number(AW_DAYTIME, AW_PRECIP_PROB),
                precipitation_hours=f.number(AW_DAYTIME, AW_PRECIP_HOURS),
            ))

        logger.debug("Normalized %d AccuWeather forecast days", len(records))
        return records


class OpenWeatherNormalizer:
    """OpenWeatherMap ``forecast/daily`` responses."""

    name = "openweathermap"

    def normalize(
        self, raw_json: str | None, today_utc_midnight: int
    ) -> list[ForecastRecord] | None:
        data = _load_object(raw_json)
        if data is None:
            return None

        code = data.get(OWM_MESSAGE_CODE)
        if code is not None and str(code) != "200":
            logger.warning(
                "OpenWeatherMap returned cod=%s: %s", code, data.get("message", "")
            )
            return None

        days = data.get(OWM_LIST)
        if not isinstance(days, list):
            raise MalformedForecast(f"Response has no {OWM_LIST!r} array")

        records = []
        for i, day in enumerate(days):
            f = _Fields(day, i)
            weather = day.get(OWM_WEATHER)
            if not isinstance(weather, list) or not weather:
                raise MalformedForecast(f"Day {i}: missing {OWM_WEATHER!r} entry")
            w = _Fields(weather[0], i, prefix=f"{OWM_WEATHER}[0]")

            wind_speed = f.number(OWM_WINDSPEED)
            if wind_speed < 0:
                raise MalformedForecast(f"Day {i}: negative wind speed {wind_speed}")
            degrees = _bearing(f.number(OWM_WIND_DIRECTION))

            records.append(ForecastRecord(
                date=today_utc_midnight + DAY_IN_MILLIS * i,
                wind_speed=wind_speed,
                wind_direction_degrees=degrees,
                wind_direction_description=compass_label(degrees),
                high_temp=f.number(OWM_TEMPERATURE, OWM_MAX),
                low_temp=f.number(OWM_TEMPERATURE, OWM_MIN),
                weather_icon_id=w.integer(OWM_WEATHER_ID),
                weather_description=w.string(OWM_DESCRIPTION),
                precipitation_probability=f.number(OWM_PRECIP_PROB) * 100.0,
                # Not reported by this API
                precipitation_hours=0.0,
            ))

        logger.debug("Normalized %d OpenWeatherMap forecast days", len(records))
        return records


NORMALIZERS: dict[str, ForecastNormalizer] = {
    AccuWeatherNormalizer.name: AccuWeatherNormalizer(),
    OpenWeatherNormalizer.name: OpenWeatherNormalizer(),
}


def normalize(
    raw_json: str | None, today_utc_midnight: int
) -> list[ForecastRecord] | None:
    """Normalize an AccuWeather daily forecast response."""
    return NORMALIZERS[AccuWeatherNormalizer.name].normalize(raw_json, today_utc_midnight)


def compass_label(degrees: float) -> str:
    """16-point compass label for a wind direction in degrees."""
    index = int(_bearing(degrees) / 22.5 + 0.5) % 16
    return COMPASS_POINTS[index]


def _bearing(degrees: float) -> float:
    """Reduce to [0, 360). Tiny negatives round up to 360.0 under %."""
    reduced = degrees % 360.0
    return 0.0 if reduced >= 360.0 else reduced


def _load_object(raw_json: str | None) -> dict[str, Any] | None:
    if raw_json is None or not raw_json.strip():
        return None
    try:
        data = json.loads(raw_json)
    except json.JSONDecodeError as e:
        raise MalformedForecast(f"Forecast response is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise MalformedForecast(
            f"Expected a JSON object, got {type(data).__name__}"
        )
    return data


class _Fields:
    """Typed lookups into one day's nested JSON, failing with the field path."""

    def __init__(self, obj: Any, index: int, prefix: str = ""):
        if not isinstance(obj, dict):
            raise MalformedForecast(f"Day {index}: forecast entry is not an object")
        self.root = obj
        self.index = index
        self.prefix = prefix

    def _walk(self, path: tuple[str, ...]) -> Any:
        node: Any = self.root
        for depth, key in enumerate(path):
            if not isinstance(node, dict) or key not in node:
                raise MalformedForecast(
                    f"Day {self.index}: missing {self._path(path[: depth + 1])}"
                )
            node = node[key]
        return node

    def _path(self, path: tuple[str, ...]) -> str:
        return ".".join((self.prefix, *path) if self.prefix else path)

    def _mismatch(self, path: tuple[str, ...], expected: str, value: Any) -> MalformedForecast:
        return MalformedForecast(
            f"Day {self.index}: {self._path(path)} expected {expected}, "
            f"got {type(value).__name__}"
        )

    def obj(self, *path: str) -> dict[str, Any]:
        value = self._walk(path)
        if not isinstance(value, dict):
            raise self._mismatch(path, "object", value)
        return value

    def number(self, *path: str) -> float:
        value = self._walk(path)
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            raise self._mismatch(path, "number", value)
        try:
            number = float(value)
        except OverflowError:
            number = math.inf
        if not math.isfinite(number):
            raise MalformedForecast(
                f"Day {self.index}: {self._path(path)} is not a finite number"
            )
        return number

    def integer(self, *path: str) -> int:
        value = self._walk(path)
        if isinstance(value, bool) or not isinstance(value, int):
            raise self._mismatch(path, "integer", value)
        return value

    def string(self, *path: str) -> str:
        value = self._walk(path)
        if not isinstance(value, str):
            raise self._mismatch(path, "string", value)
        return value
