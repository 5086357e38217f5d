"""Clock helpers and day-length constants."""

from datetime import UTC, datetime, timedelta

DAY_IN_MILLIS = 24 * 60 * 60 * 1000
ONE_DAY = timedelta(days=1)


def utc_now() -> datetime:
    return datetime.now(UTC)


def normalized_utc_today(now: datetime | None = None) -> int:
    """Epoch millis of the most recent UTC midnight."""
    if now is None:
        now = utc_now()
    if now.tzinfo is None:
        now = now.replace(tzinfo=UTC)
    midnight = now.astimezone(UTC).replace(hour=0, minute=0, second=0, microsecond=0)
    return int(midnight.timestamp()) * 1000


def millis_to_date_iso(millis: int) -> str:
    return datetime.fromtimestamp(millis / 1000, UTC).date().isoformat()
