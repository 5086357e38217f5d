"""Output formatters for sync results and the cached forecast."""

import json

from sunshine.models.common import millis_to_date_iso
from sunshine.models.forecast import ForecastRecord
from sunshine.models.sync import SyncResult


def format_sync_text(r: SyncResult) -> str:
    """Plain text summary for logging and the terminal."""
    lines = [f"=== Sync {r.state.value.upper()} | Run {r.run_id[:8]} ==="]
    if r.location is not None:
        lines.append(f"Location: {r.location.display_name} ({r.location.key})")
    if r.ok:
        lines.append(f"Forecast days committed: {r.records_committed}")
        lines.append(f"Notified: {'yes' if r.notified else 'no'}")
    else:
        lines.append(f"Failure: {r.failure_reason} - {r.error}")
        lines.append("Stale data retained")
    for w in r.warnings:
        lines.append(f"Warning: {w}")
    lines.append(f"Duration: {r.duration_seconds:.1f}s")
    return "\n".join(lines)


def format_sync_json(r: SyncResult) -> str:
    """JSON summary for programmatic consumption."""
    data = {
        "run_id": r.run_id,
        "state": r.state.value,
        "states": [s.value for s in r.states],
        "failure_reason": r.failure_reason.value if r.failure_reason else None,
        "error": r.error,
        "location_key": r.location.key if r.location else None,
        "location_name": r.location.display_name if r.location else None,
        "records_committed": r.records_committed,
        "notified": r.notified,
        "warnings": r.warnings,
        "duration_seconds": round(r.duration_seconds, 3),
    }
    return json.dumps(data, indent=2)


def format_forecast_table(records: list[ForecastRecord], unit: str = "F") -> str:
    if not records:
        return "No cached forecast"
    header = (
        f"{'Date':<10}  {'High':>6}  {'Low':>6}  {'Wind':>11}  "
        f"{'Precip':>11}  Conditions"
    )
    lines = [header, "-" * len(header)]
    for rec in records:
        lines.append(
            f"{millis_to_date_iso(rec.date):<10}  "
            f"{rec.high_temp:>5.0f}{unit}  {rec.low_temp:>5.0f}{unit}  "
            f"{rec.wind_speed:>5.1f} {rec.wind_direction_description:<5}  "
            f"{rec.precipitation_probability:>3.0f}% {rec.precipitation_hours:>4.1f}h  "
            f"{rec.weather_description} [{rec.weather_icon_id}]"
        )
    return "\n".join(lines)


def format_notification(record: ForecastRecord | None, location_name: str = "", unit: str = "F") -> str:
    """One-line "today's weather" message for a notification."""
    where = f" in {location_name}" if location_name else ""
    if record is None:
        return f"Fresh weather forecast available{where}"
    return (
        f"Today{where}: {record.weather_description}, "
        f"high {record.high_temp:.0f}°{unit}, low {record.low_temp:.0f}°{unit}"
    )
