"""End-to-end sync job tests against mocked provider HTTP."""

from datetime import UTC, datetime, timedelta
from pathlib import Path

import httpx
import pytest
import respx

from sunshine.config.schema import SunshineConfig
from sunshine.models.sync import FailureReason
from sunshine.pipeline.sync_job import SyncJob
from sunshine.storage import state_repo, weather_repo
from sunshine.storage.database import open_database

FIXTURE_DIR = Path(__file__).parent.parent / "fixtures"
BASE = "https://aw.example.com"
HOOK = "https://hooks.example.com/sunshine"


def _load(name: str) -> str:
    return (FIXTURE_DIR / name).read_text()


def _config(**notifications) -> SunshineConfig:
    return SunshineConfig(
        provider={"api_key": "k", "base_url": BASE},
        notifications=notifications or {"enabled": True},
    )


@pytest.fixture
def db_path(tmp_path: Path) -> str:
    return str(tmp_path / "sunshine.db")


def _mock_provider(*forecasts: httpx.Response) -> None:
    respx.get(f"{BASE}/locations/v1/search").mock(
        return_value=httpx.Response(200, text=_load("accuweather_location.json"))
    )
    respx.get(f"{BASE}/forecasts/v1/daily/5day/337169").mock(
        side_effect=list(forecasts)
        or [
            httpx.Response(200, text=_load("accuweather_forecast_5day.json"))
            for _ in range(2)
        ]
    )


class TestSyncJob:
    @respx.mock
    def test_sync_commits_and_records_run(self, db_path: str):
        _mock_provider()
        result = SyncJob(_config(), db_path).run()

        assert result.ok
        assert result.records_committed == 5
        conn = open_database(db_path)
        assert weather_repo.count_weather(conn) == 5
        run = state_repo.get_latest_run(conn)
        assert run is not None
        assert run["status"] == "done"
        assert run["location_key"] == "337169"
        assert run["provider"] == "accuweather"
        conn.close()

    @respx.mock
    def test_first_sync_notifies_and_records_time(self, db_path: str):
        _mock_provider()
        hook = respx.post(HOOK).mock(return_value=httpx.Response(200))
        result = SyncJob(_config(enabled=True, webhook_url=HOOK), db_path).run()

        assert result.notified
        assert hook.call_count == 1
        conn = open_database(db_path)
        assert state_repo.get_last_notification_at(conn) is not None
        conn.close()

    @respx.mock
    def test_second_sync_same_day_does_not_notify(self, db_path: str):
        _mock_provider()
        hook = respx.post(HOOK).mock(return_value=httpx.Response(200))
        job = SyncJob(_config(enabled=True, webhook_url=HOOK), db_path)
        job.run()
        second = job.run()

        assert second.ok
        assert not second.notified
        assert hook.call_count == 1

    @respx.mock
    def test_notifies_again_after_a_day(self, db_path: str):
        _mock_provider()
        hook = respx.post(HOOK).mock(return_value=httpx.Response(200))
        conn = open_database(db_path)
        state_repo.set_last_notification_at(
            conn, datetime.now(UTC) - timedelta(hours=30)
        )
        conn.close()

        result = SyncJob(_config(enabled=True, webhook_url=HOOK), db_path).run()
        assert result.notified
        assert hook.call_count == 1

    @respx.mock
    def test_notification_rechecked_at_commit_time(self, db_path: str, monkeypatch):
        _mock_provider()
        hook = respx.post(HOOK).mock(return_value=httpx.Response(200))
        # Another process notifies after this run read the elapsed time
        monkeypatch.setattr(
            state_repo, "elapsed_since_last_notification", lambda conn: None
        )
        conn = open_database(db_path)
        state_repo.set_last_notification_at(conn)
        conn.close()

        result = SyncJob(_config(enabled=True, webhook_url=HOOK), db_path).run()

        assert result.ok
        assert not result.notified
        assert hook.call_count == 0

    @respx.mock
    def test_transport_failure_keeps_dataset(self, db_path: str):
        _mock_provider(
            httpx.Response(200, text=_load("accuweather_forecast_5day.json")),
            httpx.Response(503),
        )
        job = SyncJob(_config(), db_path)
        assert job.run().ok

        result = job.run()
        assert result.failure_reason == FailureReason.TRANSPORT_ERROR

        conn = open_database(db_path)
        assert weather_repo.count_weather(conn) == 5
        assert state_repo.get_latest_run(conn)["failure_reason"] == "TRANSPORT_ERROR"
        conn.close()

    @respx.mock
    def test_webhook_failure_is_a_warning(self, db_path: str):
        _mock_provider()
        respx.post(HOOK).mock(return_value=httpx.Response(500))
        result = SyncJob(_config(enabled=True, webhook_url=HOOK), db_path).run()

        assert result.ok
        assert not result.notified
        assert result.warnings
        conn = open_database(db_path)
        assert state_repo.get_last_notification_at(conn) is None
        conn.close()
