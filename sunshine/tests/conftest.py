"""Shared test fixtures."""

import sqlite3
from datetime import UTC, datetime
from pathlib import Path

import pytest
import yaml

from sunshine.config.schema import SunshineConfig
from sunshine.models.common import normalized_utc_today
from sunshine.storage.database import open_database

FIXTURE_DIR = Path(__file__).parent / "fixtures"

# 2026-10-19T00:00:00Z
TODAY = normalized_utc_today(datetime(2026, 10, 19, 15, 30, tzinfo=UTC))


@pytest.fixture
def today() -> int:
    return TODAY


@pytest.fixture
def db(tmp_path: Path) -> sqlite3.Connection:
    """A migrated temporary database."""
    conn = open_database(tmp_path / "test.db")
    yield conn
    conn.close()


@pytest.fixture
def default_config() -> SunshineConfig:
    return SunshineConfig()


@pytest.fixture
def config_yaml_path(tmp_path: Path) -> Path:
    """Write a minimal valid config YAML and return its path."""
    data = {
        "provider": {"name": "accuweather", "api_key": "test-key", "forecast_days": 5},
        "location": {"query": "94043"},
        "notifications": {"enabled": True},
    }
    path = tmp_path / "test_config.yaml"
    with open(path, "w") as f:
        yaml.dump(data, f)
    return path


@pytest.fixture
def fixtures_dir() -> Path:
    """Return the path to the test fixtures directory."""
    return FIXTURE_DIR
