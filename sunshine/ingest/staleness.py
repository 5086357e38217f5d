"""Staleness checks for the cached forecast dataset."""

from datetime import UTC, datetime


def is_dataset_stale(
    synced_at_iso: str | None, max_age_minutes: int, now: datetime | None = None
) -> bool:
    """Check if the cached dataset is older than the allowed age."""
    return dataset_age_hours(synced_at_iso, now) * 60 > max_age_minutes


def dataset_age_hours(synced_at_iso: str | None, now: datetime | None = None) -> float:
    """Hours since the last successful sync. inf if never synced."""
    if now is None:
        now = datetime.now(UTC)
    synced = parse_timestamp(synced_at_iso)
    if synced is None:
        return float("inf")
    return (now - synced).total_seconds() / 3600


def parse_timestamp(iso_str: str | None) -> datetime | None:
    """Parse an ISO timestamp, treating naive values as UTC.

    Accepts SQLite's ``CURRENT_TIMESTAMP`` format as well.
    """
    try:
        dt = datetime.fromisoformat(iso_str)  # type: ignore[arg-type]
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=UTC)
        return dt
    except (ValueError, TypeError):
        return None
