from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional
from urllib.parse import urlparse

import pendulum
from pydantic import BaseModel, Field, field_validator

from connectors.errors import ConfigError

STREAM_NAMES = ["rooms", "participants", "quality_metrics", "events", "usage"]
REQUIRED_CONFIG_FIELDS = ["api_key", "api_secret", "endpoint_url", "start_date"]

DEFAULT_CONFIG: Dict[str, Any] = {
    "endpoint_url": "https://api.livekit.io",
    "streams": list(STREAM_NAMES),
}


class SourceConfig(BaseModel):
    """Connector configuration after defaults have been merged in.

    Required fields are optional at the type level so that a partially filled
    config can be merged first and rejected by ``validate_config`` with a
    message naming the missing field.
    """

    api_key: Optional[str] = Field(default=None, json_schema_extra={"airbyte_secret": True})
    api_secret: Optional[str] = Field(default=None, json_schema_extra={"airbyte_secret": True})
    endpoint_url: str = Field(default=DEFAULT_CONFIG["endpoint_url"])
    start_date: Optional[str] = Field(default=None, description="UTC date (YYYY-MM-DD) to start syncing from")
    streams: List[str] = Field(default_factory=lambda: list(STREAM_NAMES))

    @field_validator("endpoint_url")
    @classmethod
    def strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")


def merge_with_defaults(config: Optional[Mapping[str, Any]]) -> SourceConfig:
    merged: Dict[str, Any] = dict(DEFAULT_CONFIG)
    for key, value in (config or {}).items():
        if key in SourceConfig.model_fields:
            merged[key] = value
    return SourceConfig(**merged)


def validate_config(config: Optional[SourceConfig]) -> SourceConfig:
    if config is None:
        raise ConfigError("Config is required")
    for field in REQUIRED_CONFIG_FIELDS:
        if not getattr(config, field):
            raise ConfigError(f'Required configuration field "{field}" is missing')
    try:
        pendulum.parse(config.start_date)
    except (ValueError, TypeError) as exc:
        raise ConfigError(f"Invalid start_date: {exc}") from exc
    parsed = urlparse(config.endpoint_url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ConfigError(f"Invalid endpoint_url: {config.endpoint_url}")
    unknown = [name for name in config.streams if name not in STREAM_NAMES]
    if unknown:
        raise ConfigError(f"Unknown streams requested: {', '.join(unknown)}")
    return config
