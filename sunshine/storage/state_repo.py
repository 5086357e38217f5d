"""Repository for system state and sync run tracking."""

import sqlite3
from collections.abc import Callable
from datetime import datetime, timedelta

from sunshine.ingest.staleness import parse_timestamp
from sunshine.models.common import utc_now
from sunshine.models.sync import SyncResult

LAST_NOTIFICATION_KEY = "last_notification_at"

# --- System state ---

def get_system_state(conn: sqlite3.Connection, key: str) -> str | None:
    """Get a system state value."""
    row = conn.execute(
        "SELECT value FROM system_state WHERE key = ?", (key,)
    ).fetchone()
    if row is None:
        return None
    return row[0]


def set_system_state(conn: sqlite3.Connection, key: str, value: str) -> None:
    """Set a system state value."""
    conn.execute(
        "INSERT INTO system_state (key, value, updated_at) VALUES (?, ?, CURRENT_TIMESTAMP) "
        "ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = CURRENT_TIMESTAMP",
        (key, value),
    )
    conn.commit()


def get_last_notification_at(conn: sqlite3.Connection) -> datetime | None:
    value = get_system_state(conn, LAST_NOTIFICATION_KEY)
    if value is None:
        return None
    return parse_timestamp(value)


def set_last_notification_at(conn: sqlite3.Connection, when: datetime | None = None) -> None:
    set_system_state(conn, LAST_NOTIFICATION_KEY, (when or utc_now()).isoformat())


def elapsed_since_last_notification(
    conn: sqlite3.Connection, now: datetime | None = None
) -> timedelta | None:
    """None when no notification was ever recorded."""
    last = get_last_notification_at(conn)
    if last is None:
        return None
    return (now or utc_now()) - last


def claim_notification(
    conn: sqlite3.Connection,
    allow: Callable[[timedelta | None], bool],
    now: datetime | None = None,
) -> tuple[bool, str | None]:
    """Record a notification at ``now`` if ``allow(elapsed)`` holds.

    The read and the write share one ``BEGIN IMMEDIATE`` transaction, so a
    daemon and a manual sync on the same database cannot both claim the
    same day. Returns whether the claim was made and the previous stored
    value, for ``release_notification``.
    """
    now = now or utc_now()
    if conn.in_transaction:
        conn.commit()
    conn.execute("BEGIN IMMEDIATE")
    try:
        previous = get_system_state(conn, LAST_NOTIFICATION_KEY)
        last = parse_timestamp(previous) if previous is not None else None
        if not allow(None if last is None else now - last):
            conn.rollback()
            return False, previous
        set_system_state(conn, LAST_NOTIFICATION_KEY, now.isoformat())
    except Exception:
        conn.rollback()
        raise
    return True, previous


def release_notification(conn: sqlite3.Connection, previous: str | None) -> None:
    """Undo a claim whose notification was never delivered."""
    if previous is None:
        conn.execute("DELETE FROM system_state WHERE key = ?", (LAST_NOTIFICATION_KEY,))
        conn.commit()
    else:
        set_system_state(conn, LAST_NOTIFICATION_KEY, previous)


# --- Sync runs ---

def create_run(
    conn: sqlite3.Connection, run_id: str, provider: str, config_hash: str | None = None
) -> None:
    """Record the start of a sync run."""
    conn.execute(
        "INSERT INTO sync_runs (run_id, provider, config_hash) VALUES (?, ?, ?)",
        (run_id, provider, config_hash),
    )
    conn.commit()


def complete_run(conn: sqlite3.Connection, run_id: str, result: SyncResult) -> None:
    """Record run completion from a SyncResult."""
    conn.execute(
        "UPDATE sync_runs SET completed_at = CURRENT_TIMESTAMP, status = ?, "
        "failure_reason = ?, location_key = ?, location_name = ?, "
        "records_committed = ?, notified = ?, error_message = ? WHERE run_id = ?",
        (
            result.state.value,
            result.failure_reason.value if result.failure_reason else None,
            result.location.key if result.location else None,
            result.location.display_name if result.location else None,
            result.records_committed,
            int(result.notified),
            result.error or None,
            run_id,
        ),
    )
    conn.commit()


def get_latest_run(conn: sqlite3.Connection) -> dict | None:
    """Get the most recent run."""
    row = conn.execute(
        "SELECT * FROM sync_runs ORDER BY started_at DESC, id DESC LIMIT 1"
    ).fetchone()
    if row is None:
        return None
    return dict(row)


def get_latest_successful_run(conn: sqlite3.Connection) -> dict | None:
    row = conn.execute(
        "SELECT * FROM sync_runs WHERE status = 'done' "
        "ORDER BY started_at DESC, id DESC LIMIT 1"
    ).fetchone()
    if row is None:
        return None
    return dict(row)
