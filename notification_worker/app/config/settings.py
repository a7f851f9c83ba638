from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from notification_worker.app.domain.errors import ConfigError


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore", populate_by_name=True)

    rabbitmq_host: str = Field("localhost", validation_alias="RABBITMQ_HOST")
    rabbitmq_port: int = Field(5672, validation_alias="RABBITMQ_PORT")
    rabbitmq_user: str = Field("guest", validation_alias="RABBITMQ_USER")
    rabbitmq_password: str = Field("guest", validation_alias="RABBITMQ_PASSWORD")
    rabbitmq_queue: str = Field(..., validation_alias="RABBITMQ_QUEUE")
    rabbitmq_prefetch_count: int = Field(1, validation_alias="RABBITMQ_PREFETCH_COUNT")

    # Fixed wait before the single reconnect attempt that follows a stream closure.
    reconnect_delay_seconds: float = Field(5.0, validation_alias="RECONNECT_DELAY_SECONDS")

    api_url: str = Field(..., validation_alias="API_URL")
    api_service_id: str = Field("", validation_alias="API_SERVICE_ID")
    api_pass: str = Field("", validation_alias="API_PASS")
    api_source: str = Field("", validation_alias="API_SOURCE")
    api_timeout_seconds: float = Field(30.0, validation_alias="API_TIMEOUT_SECONDS")
    api_user_agent: str = Field("Notification-Worker/1.0", validation_alias="API_USER_AGENT")

    notifier_backend: str = Field("api", validation_alias="NOTIFIER_BACKEND")
    consumer_backend: str = Field("rabbitmq", validation_alias="CONSUMER_BACKEND")

    server_port: int = Field(8080, validation_alias="SERVER_PORT")
    server_metrics_path: str = Field("/metrics", validation_alias="SERVER_METRICS_PATH")

    logging_level: str = Field("info", validation_alias="LOGGING_LEVEL")
    logging_format: str = Field("json", validation_alias="LOGGING_FORMAT")

    @property
    def rabbitmq_url(self) -> str:
        return (
            f"amqp://{self.rabbitmq_user}:{self.rabbitmq_password}"
            f"@{self.rabbitmq_host}:{self.rabbitmq_port}/"
        )


def _flatten_sections(data: dict[str, Any]) -> dict[str, Any]:
    """Turn ``{"rabbitmq": {"host": "x"}}`` into ``{"rabbitmq_host": "x"}``."""
    flat: dict[str, Any] = {}
    for key, value in data.items():
        if isinstance(value, dict):
            for sub_key, sub_value in value.items():
                flat[f"{key}_{sub_key}"] = sub_value
        else:
            flat[key] = value
    return flat


def load_settings(config_path: str | Path | None = None) -> Settings:
    """Build Settings from the environment, overridden by an optional YAML file."""
    if not config_path:
        return _build({})

    path = Path(config_path)
    try:
        raw = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError(f"failed to read config file {path}: {exc}") from exc

    try:
        data = yaml.safe_load(raw) or {}
    except yaml.YAMLError as exc:
        raise ConfigError(f"failed to parse config file {path}: {exc}") from exc

    if not isinstance(data, dict):
        raise ConfigError(f"config file {path} must contain a mapping")

    return _build(_flatten_sections(data))


def _by_alias(overrides: dict[str, Any]) -> dict[str, Any]:
    """Key overrides by their environment alias so they replace, not sit beside, env values."""
    aliased: dict[str, Any] = {}
    for key, value in overrides.items():
        field = Settings.model_fields.get(key)
        alias = field.validation_alias if field is not None else None
        aliased[alias if isinstance(alias, str) else key] = value
    return aliased


def _build(overrides: dict[str, Any]) -> Settings:
    try:
        return Settings(**_by_alias(overrides))
    except ValidationError as exc:
        raise ConfigError(f"invalid configuration: {exc}") from exc
