"""
Tests for configuration management in `riskdash/config.py`.

Covers:
- Environment parsing and debug defaults
- Logging level coercion to the expected Literal
- Endpoint overrides and URL validation
- Optional request timeout parsing
- Narrative backend selection and API key requirement
- get_config cache behavior
- AppConfig validation (debug only allowed in development)
"""

from __future__ import annotations

from collections.abc import Iterator
from pathlib import Path

import pytest
from pydantic import ValidationError

from riskdash.config import (
    AppConfig,
    EndpointsConfig,
    LoggingConfig,
    NarrativeConfig,
    StorageConfig,
    get_config,
    load_config_from_env,
)

_ENV_VARS = (
    "ENVIRONMENT",
    "LOG_LEVEL",
    "FINANCE_PREDICT_URL",
    "HEALTH_PREDICT_URL",
    "ANALYSIS_URL",
    "ASK_URL",
    "REQUEST_TIMEOUT_SECONDS",
    "NARRATIVE_BACKEND",
    "NARRATIVE_MODEL",
    "GOOGLE_API_KEY",
    "RISKDASH_DATA_DIR",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Start every test from an empty riskdash environment and a cold cache."""
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    get_config.cache_clear()
    yield
    get_config.cache_clear()


def test_load_config_dev_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ENVIRONMENT", "development")

    config = load_config_from_env()

    assert config.environment == "development"
    assert config.debug is True
    assert config.logging.format == "console"
    assert config.logging.level == "INFO"
    assert config.narrative.backend == "http"
    assert config.endpoints.request_timeout_seconds is None
    assert config.storage.dashboard_slot == "dashboardData"
    assert config.storage.chat_history_slot == "chatHistory"


def test_production_uses_json_logs_without_debug(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ENVIRONMENT", "prod")

    config = load_config_from_env()

    assert config.environment == "production"
    assert config.debug is False
    assert config.logging.format == "json"


def test_logging_level_literal_coercion(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ENVIRONMENT", "staging")

    # Unknown level should coerce to INFO
    monkeypatch.setenv("LOG_LEVEL", "unknown")
    config = load_config_from_env()
    assert config.logging.level == "INFO"

    # Known level should pass through
    monkeypatch.setenv("LOG_LEVEL", "error")
    config = load_config_from_env()
    assert config.logging.level == "ERROR"


def test_endpoint_and_storage_overrides(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("FINANCE_PREDICT_URL", "https://risk.example/finance")
    monkeypatch.setenv("ASK_URL", "https://advisor.example/ask")
    monkeypatch.setenv("REQUEST_TIMEOUT_SECONDS", "12.5")
    monkeypatch.setenv("RISKDASH_DATA_DIR", str(tmp_path))

    config = load_config_from_env()

    assert config.endpoints.finance_predict_url == "https://risk.example/finance"
    assert config.endpoints.ask_url == "https://advisor.example/ask"
    assert config.endpoints.request_timeout_seconds == 12.5
    assert config.storage.data_dir == tmp_path


def test_blank_timeout_keeps_transport_default(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("REQUEST_TIMEOUT_SECONDS", "  ")

    config = load_config_from_env()

    assert config.endpoints.request_timeout_seconds is None


def test_endpoints_must_be_http_urls() -> None:
    with pytest.raises(ValidationError, match="http"):
        EndpointsConfig(ask_url="ftp://advisor.example/ask")


def test_agent_backend_requires_google_key(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("NARRATIVE_BACKEND", "agent")

    with pytest.raises(ValidationError, match="GOOGLE_API_KEY"):
        load_config_from_env()

    monkeypatch.setenv("GOOGLE_API_KEY", "test-google-key")
    config = load_config_from_env()
    assert config.narrative.backend == "agent"
    assert config.narrative.google_api_key == "test-google-key"


def test_agent_backend_with_non_google_model_needs_no_google_key() -> None:
    config = NarrativeConfig(backend="agent", model_name="test")

    assert config.google_api_key is None


def test_get_config_cache(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("ENVIRONMENT", "development")

    c1 = get_config()
    c2 = get_config()
    assert c1 is c2  # same object due to lru_cache


def test_app_config_debug_only_in_dev_validation() -> None:
    with pytest.raises(ValueError, match="debug mode is only allowed"):
        AppConfig(
            environment="production",
            debug=True,
            endpoints=EndpointsConfig(),
            narrative=NarrativeConfig(),
            storage=StorageConfig(),
            logging=LoggingConfig(),
        )
