"""Sync daemon: runs the forecast sync on a fixed interval.

A PID file keeps a second daemon from syncing the same database, and each
cycle waits for the previous one, so syncs never overlap.

Usage:
    python -m sunshine daemon                 # every ops.sync_interval_minutes
    python -m sunshine daemon --interval 600  # every 10 minutes
    python -m sunshine daemon --stop          # stop running daemon
"""

import json
import logging
import os
import signal
import sys
import time
from datetime import UTC, datetime
from pathlib import Path

from sunshine.config.schema import SunshineConfig
from sunshine.pipeline.sync_job import SyncJob

logger = logging.getLogger(__name__)

PID_DIR = Path("data")
PID_FILE = PID_DIR / "daemon.pid"
STATE_FILE = PID_DIR / "daemon_state.json"
LOG_DIR = Path("logs")
MAX_LOG_FILES = 50


class SyncDaemon:
    """Runs SyncJob in a loop with signal handling and persisted stats."""

    def __init__(
        self,
        config: SunshineConfig,
        db_path: str = "data/sunshine.db",
        interval: int = 3 * 60 * 60,
    ):
        self.config = config
        self.db_path = db_path
        self.interval = interval
        self.job = SyncJob(config, db_path)
        self._running = False
        self._total_syncs = 0
        self._total_successes = 0
        self._total_failures = 0
        self._last_failure_reason: str | None = None
        self._started_at: str | None = None

    def start(self) -> None:
        """Start the daemon loop."""
        self._check_not_already_running()
        self._write_pid()
        self._setup_signals()
        self._running = True
        self._started_at = datetime.now(UTC).isoformat()

        logger.info(
            "Daemon started: provider=%s interval=%ds pid=%d",
            self.config.provider.name, self.interval, os.getpid(),
        )
        print(f"Sync daemon started (pid {os.getpid()}, every {self.interval}s)")
        print("   Stop: python -m sunshine daemon --stop")

        try:
            self._loop()
        except KeyboardInterrupt:
            logger.info("Daemon interrupted by keyboard")
        finally:
            self._cleanup()

    def _loop(self) -> None:
        while self._running:
            cycle_start = time.monotonic()
            self._run_one_sync()
            self._save_state()

            # Sleep in 1-second increments so we can respond to signals
            sleep_until = cycle_start + self.interval
            while self._running and time.monotonic() < sleep_until:
                time.sleep(1)

    def _run_one_sync(self) -> bool:
        """Execute a single sync. Returns True on success."""
        self._total_syncs += 1
        timestamp = datetime.now(UTC).strftime("%Y%m%dT%H%M%SZ")

        LOG_DIR.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(LOG_DIR / f"sync_{timestamp}.log")
        file_handler.setLevel(logging.INFO)
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
        root_logger = logging.getLogger()
        root_logger.addHandler(file_handler)

        try:
            logger.info("=== Sync #%d starting ===", self._total_syncs)
            result = self.job.run()
            if result.ok:
                self._total_successes += 1
                self._last_failure_reason = None
                logger.info(
                    "Sync #%d OK: %d days, notified=%s",
                    self._total_syncs, result.records_committed, result.notified,
                )
                return True
            self._total_failures += 1
            self._last_failure_reason = str(result.failure_reason)
            logger.error(
                "Sync #%d failed: %s (stale data retained)",
                self._total_syncs, result.failure_reason,
            )
            return False
        except Exception:
            self._total_failures += 1
            self._last_failure_reason = "crashed"
            logger.exception("Sync #%d crashed", self._total_syncs)
            return False
        finally:
            root_logger.removeHandler(file_handler)
            file_handler.close()
            self._rotate_logs()

    def _rotate_logs(self) -> None:
        """Keep only the most recent log files."""
        logs = sorted(LOG_DIR.glob("sync_*.log"))
        for old in logs[: max(0, len(logs) - MAX_LOG_FILES)]:
            old.unlink(missing_ok=True)

    def _setup_signals(self) -> None:
        """Handle SIGTERM and SIGINT for graceful shutdown."""
        def _stop(signum: int, frame: object) -> None:
            logger.info("Received %s, shutting down", signal.Signals(signum).name)
            self._running = False

        signal.signal(signal.SIGTERM, _stop)
        signal.signal(signal.SIGINT, _stop)

    def _check_not_already_running(self) -> None:
        """Prevent duplicate daemons."""
        if not PID_FILE.exists():
            return
        try:
            pid = int(PID_FILE.read_text().strip())
            os.kill(pid, 0)
        except (ProcessLookupError, ValueError):
            # Stale PID file
            PID_FILE.unlink(missing_ok=True)
            return
        except PermissionError:
            print("Daemon may be running, can't verify.")
            sys.exit(1)
        print(f"Daemon already running (pid {pid}). Stop it first:")
        print("   python -m sunshine daemon --stop")
        sys.exit(1)

    def _write_pid(self) -> None:
        PID_DIR.mkdir(parents=True, exist_ok=True)
        PID_FILE.write_text(str(os.getpid()))

    def _save_state(self) -> None:
        """Persist daemon stats for status reporting."""
        state = {
            "pid": os.getpid(),
            "started_at": self._started_at,
            "interval": self.interval,
            "provider": self.config.provider.name.value,
            "total_syncs": self._total_syncs,
            "total_successes": self._total_successes,
            "total_failures": self._total_failures,
            "last_failure_reason": self._last_failure_reason,
            "last_update": datetime.now(UTC).isoformat(),
        }
        STATE_FILE.parent.mkdir(parents=True, exist_ok=True)
        STATE_FILE.write_text(json.dumps(state, indent=2))

    def _cleanup(self) -> None:
        PID_FILE.unlink(missing_ok=True)
        self._save_state()
        logger.info(
            "Daemon stopped: %d syncs (%d ok, %d failed)",
            self._total_syncs, self._total_successes, self._total_failures,
        )


def stop_daemon() -> int:
    """Stop a running daemon by sending SIGTERM."""
    if not PID_FILE.exists():
        print("No daemon running (no PID file found)")
        return 1

    try:
        pid = int(PID_FILE.read_text().strip())
    except ValueError:
        print("Corrupt PID file, removing")
        PID_FILE.unlink(missing_ok=True)
        return 1

    try:
        os.kill(pid, 0)
    except ProcessLookupError:
        print(f"Daemon not running (stale pid {pid}), cleaning up")
        PID_FILE.unlink(missing_ok=True)
        return 0

    print(f"Stopping daemon (pid {pid})...")
    os.kill(pid, signal.SIGTERM)
    for _ in range(60):
        time.sleep(1)
        try:
            os.kill(pid, 0)
        except ProcessLookupError:
            print("Daemon stopped")
            PID_FILE.unlink(missing_ok=True)
            return 0

    print("Daemon didn't stop in 60s")
    return 1


def daemon_status() -> int:
    """Print daemon status from the state file."""
    if not STATE_FILE.exists():
        print("No daemon state found")
        return 1

    state = json.loads(STATE_FILE.read_text())
    pid = state.get("pid", "?")
    running = False
    try:
        os.kill(int(pid), 0)
        running = True
    except (ProcessLookupError, ValueError, TypeError):
        pass

    print(f"Daemon {'running' if running else 'stopped'}")
    print(f"  PID: {pid}")
    print(f"  Provider: {state.get('provider', '?')}")
    print(f"  Interval: {state.get('interval', '?')}s")
    print(f"  Started: {state.get('started_at', '?')}")
    print(f"  Total syncs: {state.get('total_syncs', 0)}")
    print(f"  Successes: {state.get('total_successes', 0)}")
    print(f"  Failures: {state.get('total_failures', 0)}")
    print(f"  Last failure: {state.get('last_failure_reason') or '-'}")
    print(f"  Last update: {state.get('last_update', '?')}")
    return 0
