"""CLI entry point for the forecast sync."""

import argparse
import logging
import sqlite3

import yaml
from pydantic import ValidationError

from sunshine.config.loader import get_config_value, load_config, set_config_value
from sunshine.daemon import SyncDaemon, daemon_status, stop_daemon
from sunshine.ingest.staleness import dataset_age_hours, is_dataset_stale
from sunshine.models.common import normalized_utc_today
from sunshine.models.errors import SunshineError
from sunshine.pipeline.sync_job import SyncJob
from sunshine.reporting.formatters import (
    format_forecast_table,
    format_sync_json,
    format_sync_text,
)
from sunshine.storage import state_repo, weather_repo
from sunshine.storage.database import open_database

DEFAULT_CONFIG = "config/sunshine.yaml"
DEFAULT_DB = "data/sunshine.db"

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="sunshine",
        description="Daily weather forecast sync",
    )
    parser.add_argument(
        "--config", default=DEFAULT_CONFIG, help="Config YAML path"
    )
    parser.add_argument("--db", default=DEFAULT_DB, help="SQLite DB path")

    sub = parser.add_subparsers(dest="command")

    # sync
    sync_p = sub.add_parser("sync", help="Run one forecast sync")
    sync_p.add_argument("--json", action="store_true", help="Print result as JSON")

    # forecast
    forecast_p = sub.add_parser("forecast", help="Show the cached forecast")
    forecast_p.add_argument(
        "--all", action="store_true", help="Include days before today"
    )

    # status
    sub.add_parser("status", help="Show last sync and notification")

    # config show / config set
    config_p = sub.add_parser("config", help="Config operations")
    config_sub = config_p.add_subparsers(dest="config_command")
    config_sub.add_parser("show", help="Display current config")
    set_p = config_sub.add_parser("set", help="Validate a config value")
    set_p.add_argument("keyvalue", help="key=value to set")

    # daemon
    daemon_p = sub.add_parser("daemon", help="Sync on a fixed interval")
    daemon_p.add_argument("--interval", type=int, help="Seconds between syncs")
    daemon_p.add_argument("--stop", action="store_true", help="Stop a running daemon")
    daemon_p.add_argument("--status", action="store_true", help="Show daemon status")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = load_config(args.config)
    except (ValidationError, yaml.YAMLError) as e:
        print(f"Config error in {args.config}: {e}")
        return 1

    if args.command == "sync":
        return _cmd_sync(config, args)
    elif args.command == "forecast":
        return _cmd_forecast(config, args)
    elif args.command == "status":
        return _cmd_status(config, args)
    elif args.command == "config":
        return _cmd_config(config, args)
    elif args.command == "daemon":
        return _cmd_daemon(config, args)
    else:
        parser.print_help()
        return 1


def _cmd_sync(config, args) -> int:
    try:
        result = SyncJob(config, args.db).run()
    except (SunshineError, sqlite3.Error, OSError, ValueError) as e:
        logger.error("Sync could not run: %s", e)
        print(f"Sync failed before it started: {e}")
        print("Stale data retained")
        return 1
    print(format_sync_json(result) if args.json else format_sync_text(result))
    return 0 if result.ok else 1


def _cmd_forecast(config, args) -> int:
    conn = open_database(args.db)
    from_date = None if args.all else normalized_utc_today()
    records = weather_repo.get_weather(conn, from_date)
    conn.close()
    unit = "C" if config.provider.metric else "F"
    print(format_forecast_table(records, unit))
    return 0


def _cmd_status(config, args) -> int:
    conn = open_database(args.db)
    latest = state_repo.get_latest_run(conn)
    success = state_repo.get_latest_successful_run(conn)
    last_notified = state_repo.get_last_notification_at(conn)
    cached = weather_repo.count_weather(conn)
    conn.close()

    print(f"Provider: {config.provider.name} | Location: {config.location.query}")
    print(f"Cached forecast days: {cached}")
    if latest is None:
        print("Last sync: never")
    else:
        outcome = latest["status"]
        if latest["failure_reason"]:
            outcome += f" ({latest['failure_reason']})"
        print(f"Last sync: {latest['started_at']} {outcome}")
    if success is not None:
        age = dataset_age_hours(success["completed_at"])
        stale = is_dataset_stale(
            success["completed_at"], config.ops.sync_interval_minutes * 2
        )
        print(f"Dataset age: {age:.1f}h{' (stale)' if stale else ''}")
    print(
        "Last notification: "
        f"{last_notified.isoformat() if last_notified else 'never'}"
    )
    print(f"Notifications enabled: {config.notifications.enabled}")
    return 0


def _cmd_config(config, args) -> int:
    if args.config_command == "show":
        print(config.model_dump_json(indent=2, exclude={"provider": {"api_key"}}))
        return 0
    elif args.config_command == "set":
        kv = args.keyvalue
        if "=" not in kv:
            print("Error: use key=value format")
            return 1
        key, value = kv.split("=", 1)
        try:
            new_config = set_config_value(config, key.strip(), value.strip())
            print(f"Set {key} = {get_config_value(new_config, key.strip())}")
            return 0
        except Exception as e:
            print(f"Error: {e}")
            return 1
    else:
        print("Use: config show | config set key=value")
        return 1


def _cmd_daemon(config, args) -> int:
    if args.stop:
        return stop_daemon()
    if args.status:
        return daemon_status()
    interval = args.interval or config.ops.sync_interval_minutes * 60
    SyncDaemon(config, args.db, interval=interval).start()
    return 0
