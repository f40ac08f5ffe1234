"""
Configuration management with environment variable support and validation.

Design principles:
- Environment-specific configs (dev, staging, prod)
- Validation at startup (fail fast)
- Type safety with Pydantic
- Secure defaults (no API keys in code)
"""

import os
from functools import lru_cache
from pathlib import Path
from typing import Literal, cast

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator, model_validator

# Load environment variables from .env file
load_dotenv()


class EndpointsConfig(BaseModel):
    """External prediction, narrative and assistant service endpoints."""

    finance_predict_url: str = Field(
        default="http://localhost:8000/finance/predict", description="Finance prediction endpoint"
    )
    health_predict_url: str = Field(
        default="http://127.0.0.1:8000/health/predict", description="Health prediction endpoint"
    )
    analysis_url: str = Field(
        default="http://localhost:3000/api/gemini-analysis",
        description="Narrative generation endpoint",
    )
    ask_url: str = Field(default="http://127.0.0.1:8080/ask", description="Q&A assistant endpoint")

    # None keeps the HTTP transport's own default
    request_timeout_seconds: float | None = Field(
        default=None, gt=0.0, description="Per-request timeout override"
    )

    @field_validator("finance_predict_url", "health_predict_url", "analysis_url", "ask_url")
    def validate_http_url(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            raise ValueError("service endpoints must be http(s) URLs")
        return v


class NarrativeConfig(BaseModel):
    """How the per-score narratives are generated."""

    backend: Literal["http", "agent"] = Field(
        default="http", description="POST to the analysis endpoint or run a pydantic-ai agent"
    )
    model_name: str = Field(
        default="google-gla:gemini-2.5-flash", description="Model used by the agent backend"
    )
    temperature: float = Field(default=0.3, ge=0.0, le=1.0)
    max_tokens: int = Field(default=120, gt=0)
    google_api_key: str | None = Field(None, description="Gemini API key (agent backend only)")

    @model_validator(mode="after")
    def agent_requires_api_key(self) -> "NarrativeConfig":
        """The agent backend talks to the model provider directly and needs a key."""
        if self.backend == "agent" and self.model_name.startswith("google"):
            if not self.google_api_key or self.google_api_key == "your-google-api-key-here":
                raise ValueError("GOOGLE_API_KEY must be set for the agent narrative backend")
        return self


class StorageConfig(BaseModel):
    """Client-local document storage."""

    data_dir: Path = Field(default=Path("./.riskdash"), description="Directory for JSON documents")
    dashboard_slot: str = Field(default="dashboardData", min_length=1)
    chat_history_slot: str = Field(default="chatHistory", min_length=1)


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Logging level"
    )
    format: Literal["json", "console"] = Field(default="json", description="Logging format")


class AppConfig(BaseModel):
    """Main application configuration combining all subsystems."""

    # Environment
    environment: Literal["development", "staging", "production"] = Field(
        default="development", description="Environment"
    )
    debug: bool = Field(default=False, description="Enable debug mode")

    # Component configs
    endpoints: EndpointsConfig
    narrative: NarrativeConfig
    storage: StorageConfig
    logging: LoggingConfig

    @model_validator(mode="after")
    def debug_only_in_dev(self) -> "AppConfig":
        """Ensure debug mode is only allowed in development environment."""
        if self.debug and self.environment != "development":
            raise ValueError("debug mode is only allowed in development environment")
        return self


def load_config_from_env() -> AppConfig:
    """Load configuration from environment variables with validation."""

    def _env_to_literal(val: str) -> Literal["development", "staging", "production"]:
        v = val.strip().lower()
        if v in {"dev", "development"}:
            return "development"
        if v in {"stage", "staging"}:
            return "staging"
        return "production"

    def _level_to_literal(val: str) -> Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]:
        v = val.strip().upper()
        return cast(
            Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
            v if v in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"} else "INFO",
        )

    def _backend_to_literal(val: str) -> Literal["http", "agent"]:
        return "agent" if val.strip().lower() == "agent" else "http"

    def _optional_float(val: str | None) -> float | None:
        if val is None or not val.strip():
            return None
        return float(val)

    # Detect environment
    environment = _env_to_literal(os.getenv("ENVIRONMENT", "development"))
    debug = environment == "development"

    endpoints_config = EndpointsConfig(
        finance_predict_url=os.getenv(
            "FINANCE_PREDICT_URL", "http://localhost:8000/finance/predict"
        ),
        health_predict_url=os.getenv("HEALTH_PREDICT_URL", "http://127.0.0.1:8000/health/predict"),
        analysis_url=os.getenv("ANALYSIS_URL", "http://localhost:3000/api/gemini-analysis"),
        ask_url=os.getenv("ASK_URL", "http://127.0.0.1:8080/ask"),
        request_timeout_seconds=_optional_float(os.getenv("REQUEST_TIMEOUT_SECONDS")),
    )

    narrative_config = NarrativeConfig(
        backend=_backend_to_literal(os.getenv("NARRATIVE_BACKEND", "http")),
        model_name=os.getenv("NARRATIVE_MODEL", "google-gla:gemini-2.5-flash"),
        google_api_key=os.getenv("GOOGLE_API_KEY") or None,
    )

    storage_config = StorageConfig(
        data_dir=Path(os.getenv("RISKDASH_DATA_DIR", "./.riskdash")),
    )

    logging_config = LoggingConfig(
        level=_level_to_literal(os.getenv("LOG_LEVEL", "INFO")),
        format="console" if debug else "json",
    )

    return AppConfig(
        environment=environment,
        debug=debug,
        endpoints=endpoints_config,
        narrative=narrative_config,
        storage=storage_config,
        logging=logging_config,
    )


@lru_cache
def get_config() -> AppConfig:
    """Get cached application configuration."""
    return load_config_from_env()


def validate_config() -> None:
    """Validate configuration at startup."""
    try:
        config = get_config()
        print(f"✅ Configuration loaded for {config.environment} environment")

        if config.narrative.backend == "agent":
            print(f"✅ Narrative agent model: {config.narrative.model_name}")

    except Exception as e:
        print(f"❌ Configuration validation failed: {e}")
        raise


def print_config_summary() -> None:
    """Print configuration summary for debugging."""
    config = get_config()

    print("\n🔧 CONFIGURATION SUMMARY")
    print(f"Environment: {config.environment}")
    print(f"Debug Mode: {config.debug}")
    print(f"Log Level: {config.logging.level}")

    print("\n🌐 SERVICE ENDPOINTS")
    print(f"Finance Prediction: {config.endpoints.finance_predict_url}")
    print(f"Health Prediction: {config.endpoints.health_predict_url}")
    print(f"Narrative: {config.endpoints.analysis_url}")
    print(f"Assistant: {config.endpoints.ask_url}")

    print("\n🤖 NARRATIVE")
    print(f"Backend: {config.narrative.backend}")
    if config.narrative.backend == "agent":
        print(f"Model: {config.narrative.model_name}")

    print("\n💾 STORAGE")
    print(f"Data Directory: {config.storage.data_dir}")


if __name__ == "__main__":
    # Test configuration loading
    validate_config()
    print_config_summary()
