"""Sync pipeline: resolve location, fetch forecast, normalize, replace dataset, notify."""

import logging
import threading
import time
import uuid
from collections.abc import Callable, Sequence
from datetime import timedelta
from typing import Protocol

from sunshine.ingest import location_resolver
from sunshine.ingest.json_normalizer import AccuWeatherNormalizer, ForecastNormalizer
from sunshine.models.common import normalized_utc_today
from sunshine.models.errors import MalformedForecast, MalformedLocation
from sunshine.models.forecast import ForecastRecord, LocationKey
from sunshine.models.sync import FailureReason, SyncResult, SyncState
from sunshine.notify.notifier import Notifier
from sunshine.notify.policy import should_notify

logger = logging.getLogger(__name__)

NotificationPolicy = Callable[[bool, timedelta | None], bool]


class DatasetSink(Protocol):
    def replace_all(self, records: Sequence[ForecastRecord]) -> None: ...


class _SyncFailed(Exception):
    def __init__(self, reason: FailureReason, message: str):
        super().__init__(message)
        self.reason = reason


class SyncPipeline:
    """Runs one sync at a time against a single logical location.

    With ``blocking=True`` an overlapping ``run`` waits for the in-flight one
    to finish. With ``blocking=False`` it is rejected as SYNC_IN_PROGRESS.
    """

    def __init__(
        self,
        resolve: Callable[[str | None], LocationKey | None] = location_resolver.resolve,
        normalizer: ForecastNormalizer | None = None,
        blocking: bool = True,
    ):
        self.resolve = resolve
        self.normalizer = normalizer or AccuWeatherNormalizer()
        self.blocking = blocking
        self.state = SyncState.IDLE
        self._lock = threading.Lock()

    def run(
        self,
        fetch_location_json: Callable[[], str | None],
        fetch_forecast_json_for: Callable[[LocationKey], str | None],
        sink: DatasetSink,
        notifier: Notifier,
        notifications_enabled: bool,
        elapsed_since_last_notification: timedelta | None,
        policy: NotificationPolicy = should_notify,
        today_utc_midnight: int | None = None,
        run_id: str | None = None,
    ) -> SyncResult:
        """Execute a full sync. Always returns a SyncResult, never raises."""
        result = SyncResult(run_id=run_id or str(uuid.uuid4()))

        if not self._lock.acquire(blocking=self.blocking):
            logger.warning("Sync already in progress, rejecting run %s", result.run_id[:8])
            result.state = SyncState.FAILED
            result.states.append(SyncState.FAILED)
            result.failure_reason = FailureReason.SYNC_IN_PROGRESS
            result.error = "Another sync is in progress"
            return result

        start_time = time.monotonic()
        try:
            self._run_locked(
                result,
                fetch_location_json,
                fetch_forecast_json_for,
                sink,
                notifier,
                notifications_enabled,
                elapsed_since_last_notification,
                policy,
                today_utc_midnight,
            )
        except _SyncFailed as e:
            logger.warning(
                "Sync %s failed in %s: %s (%s)",
                result.run_id[:8], self.state.value, e.reason.value, e,
            )
            result.failure_reason = e.reason
            result.error = str(e)
            self._enter(result, SyncState.FAILED)
        except Exception as e:
            logger.exception("Sync %s crashed in %s", result.run_id[:8], self.state.value)
            result.failure_reason = FailureReason.UNEXPECTED_ERROR
            result.error = str(e)
            self._enter(result, SyncState.FAILED)
        finally:
            result.duration_seconds = time.monotonic() - start_time
            self.state = SyncState.IDLE
            self._lock.release()

        return result

    def _run_locked(
        self,
        result: SyncResult,
        fetch_location_json: Callable[[], str | None],
        fetch_forecast_json_for: Callable[[LocationKey], str | None],
        sink: DatasetSink,
        notifier: Notifier,
        notifications_enabled: bool,
        elapsed_since_last_notification: timedelta | None,
        policy: NotificationPolicy,
        today_utc_midnight: int | None,
    ) -> None:
        # 1. RESOLVE LOCATION
        self._enter(result, SyncState.RESOLVING_LOCATION)
        location_json = self._fetch(fetch_location_json)
        try:
            location = self.resolve(location_json)
        except MalformedLocation as e:
            raise _SyncFailed(FailureReason.MALFORMED_LOCATION, str(e)) from e
        if location is None:
            raise _SyncFailed(FailureReason.NO_LOCATION_FOUND, "No location found")
        result.location = location
        logger.info("Resolved location %s (key=%s)", location.display_name, location.key)

        # 2. FETCH FORECAST
        self._enter(result, SyncState.FETCHING_FORECAST)
        forecast_json = self._fetch(fetch_forecast_json_for, location)

        # 3. NORMALIZE
        self._enter(result, SyncState.NORMALIZING)
        if today_utc_midnight is None:
            today_utc_midnight = normalized_utc_today()
        try:
            records = self.normalizer.normalize(forecast_json, today_utc_midnight)
        except MalformedForecast as e:
            raise _SyncFailed(FailureReason.MALFORMED_FORECAST, str(e)) from e
        if records is None:
            raise _SyncFailed(FailureReason.NO_FORECAST_DATA, "Provider returned no forecast data")
        if not records:
            raise _SyncFailed(FailureReason.EMPTY_FORECAST, "Provider returned zero forecast days")

        # 4. COMMIT DATASET
        self._enter(result, SyncState.COMMITTING_DATASET)
        try:
            sink.replace_all(records)
        except Exception as e:
            raise _SyncFailed(FailureReason.STORE_ERROR, f"Dataset replace failed: {e}") from e
        result.records_committed = len(records)
        logger.info("Committed %d forecast days", len(records))

        # 5. NOTIFICATION (best effort)
        self._enter(result, SyncState.EVALUATING_NOTIFICATION)
        try:
            if policy(notifications_enabled, elapsed_since_last_notification):
                notifier.notify()
                result.notified = True
            else:
                logger.debug(
                    "Notification skipped (enabled=%s, elapsed=%s)",
                    notifications_enabled, elapsed_since_last_notification,
                )
        except Exception as e:
            logger.warning("Notification failed, continuing: %s", e)
            result.warnings.append(f"Notification failed: {e}")

        self._enter(result, SyncState.DONE)

    def _fetch(self, fetch: Callable[..., str | None], *args: LocationKey) -> str | None:
        try:
            return fetch(*args)
        except Exception as e:
            raise _SyncFailed(FailureReason.TRANSPORT_ERROR, f"Fetch failed: {e}") from e

    def _enter(self, result: SyncResult, state: SyncState) -> None:
        logger.debug("Sync %s: %s -> %s", result.run_id[:8], self.state.value, state.value)
        self.state = state
        result.state = state
        result.states.append(state)
