"""Sync run state and result models."""

from dataclasses import dataclass, field
from enum import StrEnum

from sunshine.models.forecast import LocationKey


class SyncState(StrEnum):
    IDLE = "idle"
    RESOLVING_LOCATION = "resolving_location"
    FETCHING_FORECAST = "fetching_forecast"
    NORMALIZING = "normalizing"
    COMMITTING_DATASET = "committing_dataset"
    EVALUATING_NOTIFICATION = "evaluating_notification"
    DONE = "done"
    FAILED = "failed"


class FailureReason(StrEnum):
    NO_LOCATION_FOUND = "NO_LOCATION_FOUND"
    MALFORMED_LOCATION = "MALFORMED_LOCATION"
    TRANSPORT_ERROR = "TRANSPORT_ERROR"
    NO_FORECAST_DATA = "NO_FORECAST_DATA"
    EMPTY_FORECAST = "EMPTY_FORECAST"
    MALFORMED_FORECAST = "MALFORMED_FORECAST"
    STORE_ERROR = "STORE_ERROR"
    SYNC_IN_PROGRESS = "SYNC_IN_PROGRESS"
    UNEXPECTED_ERROR = "UNEXPECTED_ERROR"


@dataclass
class SyncResult:
    run_id: str
    state: SyncState = SyncState.IDLE
    states: list[SyncState] = field(default_factory=list)
    failure_reason: FailureReason | None = None
    error: str = ""
    location: LocationKey | None = None
    records_committed: int = 0
    notified: bool = False
    warnings: list[str] = field(default_factory=list)
    duration_seconds: float = 0.0

    @property
    def ok(self) -> bool:
        return self.state == SyncState.DONE
