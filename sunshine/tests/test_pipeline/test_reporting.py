"""Tests for reporting formatters."""

import json

from sunshine.models.forecast import ForecastRecord, LocationKey
from sunshine.models.sync import FailureReason, SyncResult, SyncState
from sunshine.reporting.formatters import (
    format_forecast_table,
    format_notification,
    format_sync_json,
    format_sync_text,
)

# 2026-10-19T00:00:00Z
TODAY = 1792368000000


def _record(**overrides) -> ForecastRecord:
    values = dict(
        date=TODAY,
        wind_speed=8.1,
        wind_direction_degrees=292.0,
        wind_direction_description="WNW",
        high_temp=72.0,
        low_temp=54.0,
        weather_icon_id=1,
        weather_description="Sunny",
        precipitation_probability=0.0,
        precipitation_hours=0.0,
    )
    values.update(overrides)
    return ForecastRecord(**values)


def _done() -> SyncResult:
    return SyncResult(
        run_id="abcdef12-0000",
        state=SyncState.DONE,
        states=[SyncState.RESOLVING_LOCATION, SyncState.DONE],
        location=LocationKey("337169", "PostalCode", "Mountain View"),
        records_committed=5,
        notified=True,
    )


def _failed() -> SyncResult:
    return SyncResult(
        run_id="abcdef12-0000",
        state=SyncState.FAILED,
        states=[SyncState.RESOLVING_LOCATION, SyncState.FAILED],
        failure_reason=FailureReason.NO_LOCATION_FOUND,
        error="No location found",
    )


class TestSyncFormatters:
    def test_text_success(self):
        text = format_sync_text(_done())
        assert "DONE" in text
        assert "abcdef12" in text
        assert "Mountain View (337169)" in text
        assert "Forecast days committed: 5" in text
        assert "Notified: yes" in text

    def test_text_failure(self):
        text = format_sync_text(_failed())
        assert "FAILED" in text
        assert "NO_LOCATION_FOUND - No location found" in text
        assert "Stale data retained" in text

    def test_text_warnings(self):
        r = _done()
        r.warnings.append("Notification failed: 500")
        assert "Warning: Notification failed: 500" in format_sync_text(r)

    def test_json(self):
        data = json.loads(format_sync_json(_failed()))
        assert data["state"] == "failed"
        assert data["states"] == ["resolving_location", "failed"]
        assert data["failure_reason"] == "NO_LOCATION_FOUND"
        assert data["location_key"] is None
        assert data["records_committed"] == 0


class TestForecastFormatters:
    def test_empty_table(self):
        assert format_forecast_table([]) == "No cached forecast"

    def test_table_rows(self):
        table = format_forecast_table([
            _record(),
            _record(date=TODAY + 86_400_000, weather_description="Showers",
                    weather_icon_id=12, precipitation_probability=80.0),
        ])
        lines = table.splitlines()
        assert len(lines) == 4
        assert lines[2].startswith("2026-10-19")
        assert lines[3].startswith("2026-10-20")
        assert "Showers [12]" in lines[3]
        assert "80%" in lines[3]

    def test_table_unit(self):
        assert "72C" in format_forecast_table([_record()], unit="C")

    def test_notification_with_record(self):
        msg = format_notification(_record(), "94043")
        assert msg == "Today in 94043: Sunny, high 72°F, low 54°F"

    def test_notification_without_record(self):
        assert format_notification(None) == "Fresh weather forecast available"
