import pytest

from connectors.config import DEFAULT_CONFIG, STREAM_NAMES, merge_with_defaults, validate_config
from connectors.errors import ConfigError

VALID = {
    "api_key": "APIkey",
    "api_secret": "secret",
    "start_date": "2025-01-01",
}


def test_merge_applies_defaults():
    config = merge_with_defaults(VALID)
    assert config.endpoint_url == DEFAULT_CONFIG["endpoint_url"]
    assert config.streams == STREAM_NAMES
    assert config.api_key == "APIkey"


def test_merge_user_fields_override_defaults_and_unknown_fields_are_dropped():
    config = merge_with_defaults({**VALID, "endpoint_url": "https://rtc.example.com/", "streams": ["rooms"], "extra": 1})
    assert config.endpoint_url == "https://rtc.example.com"
    assert config.streams == ["rooms"]
    assert not hasattr(config, "extra")


def test_validate_accepts_complete_config():
    config = merge_with_defaults(VALID)
    assert validate_config(config) is config


@pytest.mark.parametrize("missing", ["api_key", "api_secret", "start_date"])
def test_validate_rejects_missing_required_field(missing):
    raw = {key: value for key, value in VALID.items() if key != missing}
    with pytest.raises(ConfigError, match=missing):
        validate_config(merge_with_defaults(raw))


def test_validate_rejects_none():
    with pytest.raises(ConfigError):
        validate_config(None)


def test_validate_rejects_bad_start_date():
    with pytest.raises(ConfigError, match="start_date"):
        validate_config(merge_with_defaults({**VALID, "start_date": "not-a-date"}))


def test_validate_rejects_bad_endpoint():
    with pytest.raises(ConfigError, match="endpoint_url"):
        validate_config(merge_with_defaults({**VALID, "endpoint_url": "api.livekit.io"}))


def test_validate_rejects_unknown_stream():
    with pytest.raises(ConfigError, match="webhooks"):
        validate_config(merge_with_defaults({**VALID, "streams": ["rooms", "webhooks"]}))


def test_config_error_is_a_value_error():
    assert issubclass(ConfigError, ValueError)
