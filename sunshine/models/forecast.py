"""Normalized forecast data models."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class ForecastRecord:
    date: int  # UTC midnight, epoch millis
    wind_speed: float
    wind_direction_degrees: float
    wind_direction_description: str
    high_temp: float
    low_temp: float
    weather_icon_id: int
    weather_description: str
    precipitation_probability: float
    precipitation_hours: float


@dataclass(frozen=True)
class LocationKey:
    key: str
    key_type: str
    display_name: str
    datasets: tuple[str, ...] = field(default_factory=tuple)
