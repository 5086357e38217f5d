"""YAML config loader with env overrides and runtime get/set."""

import hashlib
import json
import os
from pathlib import Path
from typing import Any

import yaml

from sunshine.config.defaults import API_KEY_ENV_VAR, DEFAULT_BASE_URLS
from sunshine.config.schema import SunshineConfig


def load_config(path: str | Path) -> SunshineConfig:
    """Load and validate config from a YAML file.

    A missing or empty file yields the defaults. An empty provider api_key is
    filled from SUNSHINE_API_KEY, and an unset base_url from the provider's
    public endpoint.
    """
    path = Path(path)
    raw: dict[str, Any] = {}
    if path.exists():
        with open(path) as f:
            raw = yaml.safe_load(f) or {}

    config = SunshineConfig(**raw)

    provider_updates: dict[str, Any] = {}
    if not config.provider.api_key and os.environ.get(API_KEY_ENV_VAR):
        provider_updates["api_key"] = os.environ[API_KEY_ENV_VAR]
    if config.provider.base_url is None:
        provider_updates["base_url"] = DEFAULT_BASE_URLS[config.provider.name]
    if provider_updates:
        config = config.model_copy(
            update={"provider": config.provider.model_copy(update=provider_updates)}
        )
    return config


def config_hash(config: SunshineConfig) -> str:
    """Compute a deterministic SHA256 hash of the config, excluding secrets."""
    data = config.model_dump(mode="json")
    data["provider"].pop("api_key", None)
    encoded = json.dumps(data, sort_keys=True, separators=(",", ":"))
    return hashlib.sha256(encoded.encode()).hexdigest()[:16]


def get_config_value(config: SunshineConfig, dotted_key: str) -> Any:
    """Get a config value by dotted key path. E.g. 'provider.forecast_days'."""
    parts = dotted_key.split(".")
    obj: Any = config
    for part in parts:
        if hasattr(obj, part):
            obj = getattr(obj, part)
        elif isinstance(obj, dict):
            obj = obj[part]
        else:
            raise KeyError(f"Config key not found: {dotted_key}")
    return obj


def set_config_value(config: SunshineConfig, dotted_key: str, value: Any) -> SunshineConfig:
    """Set a config value by dotted key path and re-validate.

    Returns a new SunshineConfig instance.
    """
    data = json.loads(config.model_dump_json())
    parts = dotted_key.split(".")
    target = data
    for part in parts[:-1]:
        target = target[part]
    if parts[-1] not in target:
        raise KeyError(f"Config key not found: {dotted_key}")
    old_value = target[parts[-1]]
    if isinstance(value, str):
        if isinstance(old_value, bool):
            value = value.lower() in ("1", "true", "yes", "on")
        elif isinstance(old_value, int):
            value = int(value)
        elif isinstance(old_value, float):
            value = float(value)
    target[parts[-1]] = value
    return SunshineConfig(**data)
