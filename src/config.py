"""Probe configuration — loaded once from environment / .env file.

Setting names match the app settings of the deployed health check
(``EndPointUrl``, ``PostPath`` ...). The resulting object is frozen and is
handed to the prober explicitly; nothing reads configuration globally.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from src.probe.errors import ConfigurationError

# Fixed identity used for the synthetic session-start event
TEST_USER_ID = "5c0f7d3e-9b1a-4e8f-a2d4-7c6b1e0f9a31"
SESSION_EVENT_PATH = "/track/v1/WithRegard/Test/event"


class ProbeSettings(BaseSettings):
    """Everything the probe needs for one run."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
        populate_by_name=True,
    )

    # Required; a missing or empty value fails startup
    endpoint_url: str = Field(alias="EndPointUrl", min_length=1)
    storage_table_name: str = Field(alias="StorageTableName", min_length=1)
    post_path: str = Field(alias="PostPath", min_length=1)
    partition_key: str = Field(alias="PartitionKey", min_length=1)
    storage_connection_string: str = Field(alias="StorageConnectionString", min_length=1)
    health_check_shared_secret: str = Field(alias="HealthCheckSharedSecret", min_length=1)

    # Polling (0 disables a bound: "run until healthy")
    poll_interval_seconds: float = Field(default=1.0, alias="PollIntervalSeconds", gt=0)
    max_poll_attempts: int = Field(default=300, alias="MaxPollAttempts", ge=0)
    poll_timeout_seconds: float = Field(default=300.0, alias="PollTimeoutSeconds", ge=0)

    # Network
    http_timeout_seconds: float = Field(default=30.0, alias="HttpTimeoutSeconds", gt=0)

    # Session-start event sent after the probe lands
    send_session_event: bool = Field(default=True, alias="SendSessionEvent")
    session_event_path: str = Field(default=SESSION_EVENT_PATH, alias="SessionEventPath")
    test_user_id: str = Field(default=TEST_USER_ID, alias="TestUserId")

    # Logging
    log_level: str = Field(default="INFO", alias="LogLevel")

    @property
    def post_url(self) -> str:
        return join_url(self.endpoint_url, self.post_path)

    @property
    def session_event_url(self) -> str:
        return join_url(self.endpoint_url, self.session_event_path)


def join_url(base: str, path: str) -> str:
    """Join the endpoint base URL and a path without doubling the slash."""
    if not path:
        return base
    return f"{base.rstrip('/')}/{path.lstrip('/')}"


def load_settings(env_file: str | Path | None = None, **overrides: Any) -> ProbeSettings:
    """Build the settings for this process.

    ``overrides`` take precedence over the environment and are keyed by
    field name (``max_poll_attempts=10``). They are passed on under the
    setting alias, the same key the environment and .env use. Raises
    ConfigurationError naming every missing or invalid setting.
    """
    kwargs: dict[str, Any] = {}
    for name, value in overrides.items():
        if value is None:
            continue
        field = ProbeSettings.model_fields.get(name)
        kwargs[field.alias if field is not None and field.alias else name] = value
    if env_file is not None:
        kwargs["_env_file"] = env_file
    try:
        return ProbeSettings(**kwargs)
    except ValidationError as exc:
        problems = []
        for err in exc.errors():
            name = ".".join(str(part) for part in err["loc"]) or "<root>"
            if err["type"] == "missing":
                problems.append(f"{name} is required")
            else:
                problems.append(f"{name}: {err['msg']}")
        raise ConfigurationError("Invalid configuration: " + "; ".join(problems)) from exc
