"""Initial schema: cached weather dataset, system state, sync run log."""

import sqlite3

DDL = [
    # Cached daily forecast, replaced wholesale on every successful sync
    """
    CREATE TABLE IF NOT EXISTS weather (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        date INTEGER NOT NULL UNIQUE,
        wind_speed REAL NOT NULL,
        wind_direction_degrees REAL NOT NULL,
        wind_direction_description TEXT NOT NULL,
        high_temp REAL NOT NULL,
        low_temp REAL NOT NULL,
        weather_icon_id INTEGER NOT NULL,
        weather_description TEXT NOT NULL,
        precipitation_probability REAL NOT NULL,
        precipitation_hours REAL NOT NULL
    )
    """,

    # Key/value preferences and bookkeeping
    """
    CREATE TABLE IF NOT EXISTS system_state (
        key TEXT PRIMARY KEY,
        value TEXT NOT NULL,
        updated_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
    )
    """,

    # Sync run log
    """
    CREATE TABLE IF NOT EXISTS sync_runs (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        run_id TEXT UNIQUE NOT NULL,
        provider TEXT NOT NULL,
        config_hash TEXT,
        started_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP,
        completed_at TEXT,
        status TEXT NOT NULL DEFAULT 'running',
        failure_reason TEXT,
        location_key TEXT,
        location_name TEXT,
        records_committed INTEGER NOT NULL DEFAULT 0,
        notified INTEGER NOT NULL DEFAULT 0,
        error_message TEXT
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_sync_runs_started ON sync_runs(started_at)",
]


def up(conn: sqlite3.Connection) -> None:
    for stmt in DDL:
        conn.execute(stmt)
    conn.commit()
