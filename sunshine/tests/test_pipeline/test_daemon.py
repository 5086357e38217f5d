"""Tests for the sync daemon."""

import json
import os
from unittest.mock import patch

import pytest

from sunshine.config.schema import SunshineConfig
from sunshine.daemon import SyncDaemon, daemon_status, stop_daemon
from sunshine.models.sync import FailureReason, SyncResult, SyncState


@pytest.fixture
def tmp_data(tmp_path, monkeypatch):
    """Redirect PID/state/log files to temp directory."""
    pid_file = tmp_path / "daemon.pid"
    state_file = tmp_path / "daemon_state.json"
    monkeypatch.setattr("sunshine.daemon.PID_FILE", pid_file)
    monkeypatch.setattr("sunshine.daemon.PID_DIR", tmp_path)
    monkeypatch.setattr("sunshine.daemon.STATE_FILE", state_file)
    monkeypatch.setattr("sunshine.daemon.LOG_DIR", tmp_path / "logs")
    return {"pid": pid_file, "state": state_file, "dir": tmp_path}


@pytest.fixture
def config():
    return SunshineConfig(provider={"api_key": "k"})


@pytest.fixture
def daemon(tmp_data, tmp_path, config):
    return SyncDaemon(config, str(tmp_path / "sunshine.db"), interval=1)


def _result(state: SyncState, reason: FailureReason | None = None) -> SyncResult:
    return SyncResult(
        run_id="run-1", state=state, failure_reason=reason, records_committed=5
    )


class TestSyncDaemon:
    def test_start_writes_state_and_removes_pid(self, tmp_data, daemon):
        with patch.object(daemon, "_loop"), patch.object(daemon, "_setup_signals"):
            daemon.start()

        assert tmp_data["state"].exists()
        assert not tmp_data["pid"].exists()

    def test_prevents_duplicate_start(self, tmp_data, daemon):
        tmp_data["pid"].write_text(str(os.getpid()))

        with pytest.raises(SystemExit):
            daemon._check_not_already_running()

    def test_cleans_stale_pid(self, tmp_data, daemon):
        tmp_data["pid"].write_text("999999999")

        daemon._check_not_already_running()
        assert not tmp_data["pid"].exists()

    def test_saves_state(self, tmp_data, daemon):
        daemon._started_at = "2026-10-19T00:00:00+00:00"
        daemon._total_syncs = 5
        daemon._total_successes = 4
        daemon._total_failures = 1
        daemon._last_failure_reason = "TRANSPORT_ERROR"

        daemon._save_state()

        state = json.loads(tmp_data["state"].read_text())
        assert state["total_syncs"] == 5
        assert state["total_successes"] == 4
        assert state["total_failures"] == 1
        assert state["interval"] == 1
        assert state["provider"] == "accuweather"
        assert state["last_failure_reason"] == "TRANSPORT_ERROR"

    def test_run_one_sync_success(self, tmp_data, daemon):
        with patch.object(daemon.job, "run", return_value=_result(SyncState.DONE)):
            assert daemon._run_one_sync() is True

        assert daemon._total_successes == 1
        assert daemon._total_failures == 0
        assert list((tmp_data["dir"] / "logs").glob("sync_*.log"))

    def test_run_one_sync_failure_records_reason(self, daemon):
        failed = _result(SyncState.FAILED, FailureReason.NO_LOCATION_FOUND)
        with patch.object(daemon.job, "run", return_value=failed):
            assert daemon._run_one_sync() is False

        assert daemon._total_failures == 1
        assert daemon._last_failure_reason == "NO_LOCATION_FOUND"

    def test_success_clears_last_failure(self, daemon):
        daemon._last_failure_reason = "STORE_ERROR"
        with patch.object(daemon.job, "run", return_value=_result(SyncState.DONE)):
            daemon._run_one_sync()

        assert daemon._last_failure_reason is None

    def test_run_one_sync_crash(self, daemon):
        with patch.object(daemon.job, "run", side_effect=RuntimeError("boom")):
            assert daemon._run_one_sync() is False

        assert daemon._total_failures == 1
        assert daemon._last_failure_reason == "crashed"

    def test_loop_runs_until_stopped(self, daemon):
        calls = []

        def one_sync():
            calls.append(1)
            daemon._running = False
            return True

        daemon._running = True
        with patch.object(daemon, "_run_one_sync", side_effect=one_sync):
            daemon._loop()

        assert len(calls) == 1

    def test_log_rotation(self, tmp_data, daemon):
        log_dir = tmp_data["dir"] / "logs"
        log_dir.mkdir()
        for i in range(60):
            (log_dir / f"sync_{i:04d}.log").write_text(f"log {i}")

        daemon._rotate_logs()

        remaining = sorted(log_dir.glob("sync_*.log"))
        assert len(remaining) == 50
        assert remaining[0].name == "sync_0010.log"

    def test_cleanup_removes_pid(self, tmp_data, daemon):
        daemon._write_pid()
        assert tmp_data["pid"].exists()

        daemon._cleanup()
        assert not tmp_data["pid"].exists()


class TestDaemonControl:
    def test_stop_no_daemon(self, tmp_data):
        assert stop_daemon() == 1

    def test_stop_stale_pid(self, tmp_data):
        tmp_data["pid"].write_text("999999999")
        assert stop_daemon() == 0
        assert not tmp_data["pid"].exists()

    def test_stop_corrupt_pid(self, tmp_data):
        tmp_data["pid"].write_text("not-a-pid")
        assert stop_daemon() == 1
        assert not tmp_data["pid"].exists()

    def test_status_no_state(self, tmp_data):
        assert daemon_status() == 1

    def test_status_with_state(self, tmp_data, capsys):
        state = {
            "pid": 999999999,
            "started_at": "2026-10-19T00:00:00+00:00",
            "interval": 10800,
            "provider": "accuweather",
            "total_syncs": 12,
            "total_successes": 11,
            "total_failures": 1,
            "last_failure_reason": "TRANSPORT_ERROR",
            "last_update": "2026-10-19T12:00:00+00:00",
        }
        tmp_data["state"].write_text(json.dumps(state))

        assert daemon_status() == 0
        out = capsys.readouterr().out

        assert "Daemon stopped" in out
        assert "10800s" in out
        assert "Total syncs: 12" in out
        assert "Last failure: TRANSPORT_ERROR" in out
