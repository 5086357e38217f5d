"""Repository for the cached weather dataset."""

import logging
import sqlite3
from collections.abc import Sequence
from dataclasses import astuple, fields

from sunshine.models.errors import StoreError
from sunshine.models.forecast import ForecastRecord

logger = logging.getLogger(__name__)

COLUMNS = [f.name for f in fields(ForecastRecord)]


def replace_weather(conn: sqlite3.Connection, records: Sequence[ForecastRecord]) -> int:
    """Delete every cached day and insert ``records`` in one transaction.

    On any error the transaction rolls back and the previous dataset stays.
    Returns the number of rows inserted.
    """
    placeholders = ", ".join("?" for _ in COLUMNS)
    with conn:
        conn.execute("DELETE FROM weather")
        conn.executemany(
            f"INSERT INTO weather ({', '.join(COLUMNS)}) VALUES ({placeholders})",
            [astuple(r) for r in records],
        )
    return len(records)


def get_weather(conn: sqlite3.Connection, from_date: int | None = None) -> list[ForecastRecord]:
    """Cached forecast days ordered by date, optionally from a UTC midnight on."""
    sql = f"SELECT {', '.join(COLUMNS)} FROM weather"
    params: tuple = ()
    if from_date is not None:
        sql += " WHERE date >= ?"
        params = (from_date,)
    rows = conn.execute(sql + " ORDER BY date", params).fetchall()
    return [ForecastRecord(**dict(row)) for row in rows]


def get_weather_for_date(conn: sqlite3.Connection, date: int) -> ForecastRecord | None:
    row = conn.execute(
        f"SELECT {', '.join(COLUMNS)} FROM weather WHERE date = ?", (date,)
    ).fetchone()
    if row is None:
        return None
    return ForecastRecord(**dict(row))


def count_weather(conn: sqlite3.Connection) -> int:
    return conn.execute("SELECT COUNT(*) FROM weather").fetchone()[0]


class SqliteDatasetSink:
    """DatasetSink backed by the ``weather`` table."""

    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn

    def replace_all(self, records: Sequence[ForecastRecord]) -> None:
        try:
            inserted = replace_weather(self.conn, records)
        except sqlite3.Error as e:
            logger.error("Weather dataset replace rolled back: %s", e)
            raise StoreError(str(e)) from e
        logger.debug("Replaced weather dataset with %d rows", inserted)
