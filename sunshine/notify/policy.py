"""Notification policy: at most one "new weather" notification per day."""

from datetime import timedelta

from sunshine.models.common import ONE_DAY


def should_notify(enabled: bool, elapsed_since_last: timedelta | None) -> bool:
    """Notify only if the user wants it and a full day has passed.

    ``elapsed_since_last`` is None when no notification was ever sent.
    """
    if not enabled:
        return False
    return elapsed_since_last is None or elapsed_since_last >= ONE_DAY
