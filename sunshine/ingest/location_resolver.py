"""Location resolver: turns a provider location lookup into a LocationKey."""

import json
import logging
from typing import Any

from sunshine.models.errors import MalformedLocation
from sunshine.models.forecast import LocationKey

logger = logging.getLogger(__name__)

# AccuWeather location search keys
AW_LOCATION_KEY = "Key"
AW_LOCATION_KEY_TYPE = "Type"
AW_ENGLISH_NAME = "EnglishName"
AW_DATASETS = "DataSets"


def resolve(raw_json: str | None) -> LocationKey | None:
    """Resolve an AccuWeather location search response.

    AccuWeather answers with a bare JSON array of candidates. Only the first
    candidate is used. Returns None when there is nothing to resolve (no
    text, ``null`` or an empty array).
    """
    first = _first_candidate(raw_json)
    if first is None:
        return None

    datasets = first.get(AW_DATASETS, [])
    location = LocationKey(
        key=_require_str(first, AW_LOCATION_KEY),
        key_type=_require_str(first, AW_LOCATION_KEY_TYPE),
        display_name=_require_str(first, AW_ENGLISH_NAME),
        datasets=tuple(str(d) for d in datasets) if isinstance(datasets, list) else (),
    )
    logger.debug(
        "Resolved location %s (%s) key=%s",
        location.display_name, location.key_type, location.key,
    )
    return location


def resolve_openweather(raw_json: str | None) -> LocationKey | None:
    """Resolve an OpenWeatherMap geocoding response into a "lat,lon" key."""
    first = _first_candidate(raw_json)
    if first is None:
        return None

    name = _require_str(first, "name")
    lat = first.get("lat")
    lon = first.get("lon")
    if not _is_number(lat) or not _is_number(lon):
        raise MalformedLocation("Location candidate missing numeric lat/lon")

    country = first.get("country")
    display = f"{name}, {country}" if isinstance(country, str) and country else name
    return LocationKey(key=f"{lat},{lon}", key_type="Coordinates", display_name=display)


def _first_candidate(raw_json: str | None) -> dict[str, Any] | None:
    if raw_json is None or not raw_json.strip():
        return None

    try:
        data = json.loads(raw_json)
    except json.JSONDecodeError as e:
        raise MalformedLocation(f"Location response is not valid JSON: {e}") from e

    if data is None:
        return None
    if not isinstance(data, list):
        raise MalformedLocation(
            f"Expected a JSON array of locations, got {type(data).__name__}"
        )
    if not data:
        return None

    first = data[0]
    if not isinstance(first, dict):
        raise MalformedLocation("First location candidate is not an object")
    if len(data) > 1:
        logger.debug("Ignoring %d additional location candidates", len(data) - 1)
    return first


def _require_str(obj: dict[str, Any], key: str) -> str:
    value = obj.get(key)
    if not isinstance(value, str) or not value:
        raise MalformedLocation(f"Location candidate missing required field {key!r}")
    return value


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)
