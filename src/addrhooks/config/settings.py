"""Application settings loaded from environment variables and config files.

Configuration is loaded from (highest priority first):
1. Environment variables (prefix: ``ADDRHOOKS_``, nested via ``__``)
2. YAML config file (``ADDRHOOKS_CONFIG_PATH`` env var or ``AppConfig.from_yaml``)
3. Defaults defined here
"""

from __future__ import annotations

import enum
from pathlib import Path
from typing import Any, Self

import yaml
from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# ---------------------------------------------------------------------------
# Enums for validated choices
# ---------------------------------------------------------------------------


class StoreEngine(enum.StrEnum):
    """Supported key/value store backends."""

    MEMORY = "memory"
    REDIS = "redis"
    SQL = "sql"


class QueueFullPolicy(enum.StrEnum):
    """What the listener does when its inbound queue is full."""

    BLOCK = "block"
    DROP = "drop"


# ---------------------------------------------------------------------------
# Sub-config models
# ---------------------------------------------------------------------------


class ServerConfig(BaseSettings):
    """HTTP server settings."""

    model_config = SettingsConfigDict(
        env_prefix="ADDRHOOKS_SERVER__",
        case_sensitive=False,
    )

    host: str = "0.0.0.0"  # noqa: S104
    port: int = 3003
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])


class StoreConfig(BaseSettings):
    """Key/value store settings shared by the callback and seen-tx namespaces."""

    model_config = SettingsConfigDict(
        env_prefix="ADDRHOOKS_STORE__",
        case_sensitive=False,
    )

    engine: StoreEngine = Field(
        default=StoreEngine.SQL,
        description="Store backend: memory, redis or sql",
    )
    url: str = "redis://localhost:6379/0"
    dsn: str = Field(
        default="sqlite+aiosqlite:///./addrhooks.db",
        description="Async database connection string for the sql engine",
    )
    max_connections: int = 10
    debug_sql: bool = False


class ListenerConfig(BaseSettings):
    """Transaction listener settings."""

    model_config = SettingsConfigDict(
        env_prefix="ADDRHOOKS_LISTENER__",
        case_sensitive=False,
    )

    queue_size: int = Field(default=10_000, gt=0)
    full_policy: QueueFullPolicy = QueueFullPolicy.BLOCK


class ReaperConfig(BaseSettings):
    """Seen-transaction reaper settings."""

    model_config = SettingsConfigDict(
        env_prefix="ADDRHOOKS_REAPER__",
        case_sensitive=False,
    )

    enabled: bool = True
    period: float = Field(default=3600.0, gt=0)
    ttl_seconds: int = 48 * 60 * 60


class DispatcherConfig(BaseSettings):
    """Outbound callback delivery settings."""

    model_config = SettingsConfigDict(
        env_prefix="ADDRHOOKS_DISPATCHER__",
        case_sensitive=False,
    )

    timeout: float = 30.0
    verify_tls: bool = True
    referer: str = "addrhooks node"
    workers: int = Field(default=16, gt=0)
    queue_size: int = Field(default=10_000, gt=0)
    max_retries: int = Field(default=2, ge=0)
    retry_delay: float = 1.0
    suspend_seconds: float = 3600.0
    outcome_log_size: int = 1000


class MetricsConfig(BaseSettings):
    """Prometheus metrics settings."""

    model_config = SettingsConfigDict(
        env_prefix="ADDRHOOKS_METRICS__",
        case_sensitive=False,
    )

    enabled: bool = True


# ---------------------------------------------------------------------------
# Top-level config
# ---------------------------------------------------------------------------


def _load_yaml(path: str | Path) -> dict[str, Any]:
    """Load a YAML configuration file and return its contents as a dict.

    Returns an empty dict if the file doesn't exist or is empty.
    """
    p = Path(path)
    if not p.exists():
        return {}
    text = p.read_text(encoding="utf-8")
    data = yaml.safe_load(text)
    return data if isinstance(data, dict) else {}


class AppConfig(BaseSettings):
    """Top-level application configuration.

    Loads settings from environment variables (``ADDRHOOKS_`` prefix),
    an optional YAML file, and built-in defaults.
    """

    model_config = SettingsConfigDict(
        env_prefix="ADDRHOOKS_",
        env_nested_delimiter="__",
        case_sensitive=False,
    )

    log_level: str = "info"
    config_path: str = ""

    server: ServerConfig = Field(default_factory=ServerConfig)
    store: StoreConfig = Field(default_factory=StoreConfig)
    listener: ListenerConfig = Field(default_factory=ListenerConfig)
    reaper: ReaperConfig = Field(default_factory=ReaperConfig)
    dispatcher: DispatcherConfig = Field(default_factory=DispatcherConfig)
    metrics: MetricsConfig = Field(default_factory=MetricsConfig)

    @model_validator(mode="before")
    @classmethod
    def _merge_yaml(cls, values: dict[str, Any]) -> dict[str, Any]:
        """Merge YAML config file contents under the env var overrides."""
        config_path = values.get("config_path", "")
        if not config_path:
            return values
        yaml_data = _load_yaml(config_path)
        # YAML values serve as defaults; env vars (already in *values*) win.
        for key, val in yaml_data.items():
            if key not in values or values[key] is None:
                values[key] = val
            elif isinstance(val, dict) and isinstance(values.get(key), dict):
                merged = {**val, **values[key]}
                values[key] = merged
        return values

    @classmethod
    def from_yaml(cls, path: str | Path) -> Self:
        """Construct ``AppConfig`` loading defaults from a YAML file.

        Environment variables still override YAML values.
        """
        return cls(config_path=str(path))
