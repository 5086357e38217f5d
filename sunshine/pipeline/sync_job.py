"""Sync job: wires config, provider, SQLite store and notifier into one sync run."""

import logging
import uuid
from datetime import timedelta

from sunshine.config.loader import config_hash
from sunshine.config.schema import SunshineConfig
from sunshine.ingest.providers import Provider, build_provider
from sunshine.models.common import normalized_utc_today
from sunshine.models.sync import SyncResult
from sunshine.notify.notifier import LogNotifier, Notifier, WebhookNotifier
from sunshine.notify.policy import should_notify
from sunshine.pipeline.sync_pipeline import SyncPipeline
from sunshine.reporting.formatters import format_notification, format_sync_text
from sunshine.storage import state_repo, weather_repo
from sunshine.storage.database import open_database

logger = logging.getLogger(__name__)


class SyncJob:
    def __init__(
        self,
        config: SunshineConfig,
        db_path: str = "data/sunshine.db",
        provider: Provider | None = None,
        pipeline: SyncPipeline | None = None,
    ):
        self.config = config
        self.db_path = db_path
        self.provider = provider or build_provider(config.provider)
        self.pipeline = pipeline or SyncPipeline(
            resolve=self.provider.resolve, normalizer=self.provider.normalizer
        )

    def run(self) -> SyncResult:
        """Execute one sync and record it in the run log."""
        run_id = str(uuid.uuid4())
        conn = open_database(self.db_path)
        try:
            state_repo.create_run(conn, run_id, self.provider.name, config_hash(self.config))
            sink = weather_repo.SqliteDatasetSink(conn)
            unit = "C" if self.config.provider.metric else "F"
            query = self.config.location.query

            def message() -> str:
                today = weather_repo.get_weather_for_date(conn, normalized_utc_today())
                return format_notification(today, query, unit)

            notifier: Notifier
            if self.config.notifications.webhook_url:
                notifier = WebhookNotifier(self.config.notifications.webhook_url, message)
            else:
                notifier = LogNotifier(message)

            claimed: list[str | None] = []

            def claim(enabled: bool, elapsed: timedelta | None) -> bool:
                # Re-checked under the write lock; another process may have
                # notified since ``elapsed`` was read.
                ok, previous = state_repo.claim_notification(
                    conn, lambda since: should_notify(enabled, since)
                )
                if ok:
                    claimed.append(previous)
                return ok

            result = self.pipeline.run(
                fetch_location_json=lambda: self.provider.client.get_location_json(query),
                fetch_forecast_json_for=self.provider.client.get_forecast_json,
                sink=sink,
                notifier=notifier,
                notifications_enabled=self.config.notifications.enabled,
                elapsed_since_last_notification=state_repo.elapsed_since_last_notification(conn),
                policy=claim,
                run_id=run_id,
            )

            if claimed and not result.notified:
                state_repo.release_notification(conn, claimed[0])
            state_repo.complete_run(conn, run_id, result)
            logger.info("\n%s", format_sync_text(result))
            return result
        finally:
            conn.close()
