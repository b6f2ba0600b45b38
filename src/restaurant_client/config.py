"""Typed settings loader for the restaurant order client."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

from pydantic import AnyUrl, Field, ValidationError, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigError


class Settings(BaseSettings):
    """Application settings loaded from environment variables and `.env`."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app_env: Literal["dev", "staging", "prod"] = Field(default="dev", alias="APP_ENV")
    restaurant_api_base_url: AnyUrl = Field(
        default="http://localhost:8081",
        alias="RESTAURANT_API_BASE_URL",
    )
    restaurant_menu_endpoint: str = Field(default="/menu", alias="RESTAURANT_MENU_ENDPOINT")
    restaurant_order_endpoint: str = Field(default="/order", alias="RESTAURANT_ORDER_ENDPOINT")
    restaurant_feedback_endpoint: str = Field(
        default="/feedback",
        alias="RESTAURANT_FEEDBACK_ENDPOINT",
    )
    restaurant_timeout_seconds: float = Field(default=10.0, alias="RESTAURANT_TIMEOUT_SECONDS")
    restaurant_max_retries: int = Field(default=1, alias="RESTAURANT_MAX_RETRIES")
    restaurant_retry_delay_seconds: float = Field(
        default=0.5,
        alias="RESTAURANT_RETRY_DELAY_SECONDS",
    )

    # One real minute is shown as this many ticks in the demo countdown.
    demo_compression_factor: int = Field(default=3, alias="DEMO_COMPRESSION_FACTOR")
    tick_interval_seconds: float = Field(default=1.0, alias="TICK_INTERVAL_SECONDS")

    journal_dir: Path = Field(default=Path("./data/journal"), alias="JOURNAL_DIR")
    journal_enabled: bool = Field(default=True, alias="JOURNAL_ENABLED")

    @model_validator(mode="after")
    def validate_ranges(self) -> Settings:
        """Validate endpoint shapes and numeric ranges."""
        for env_name, endpoint in (
            ("RESTAURANT_MENU_ENDPOINT", self.restaurant_menu_endpoint),
            ("RESTAURANT_ORDER_ENDPOINT", self.restaurant_order_endpoint),
            ("RESTAURANT_FEEDBACK_ENDPOINT", self.restaurant_feedback_endpoint),
        ):
            if not endpoint.startswith("/"):
                raise ValueError(f"{env_name} must start with '/'.")
        if self.restaurant_timeout_seconds <= 0:
            raise ValueError("RESTAURANT_TIMEOUT_SECONDS must be > 0.")
        if self.restaurant_max_retries < 0:
            raise ValueError("RESTAURANT_MAX_RETRIES must be >= 0.")
        if self.restaurant_retry_delay_seconds < 0:
            raise ValueError("RESTAURANT_RETRY_DELAY_SECONDS must be >= 0.")
        if self.demo_compression_factor <= 0:
            raise ValueError("DEMO_COMPRESSION_FACTOR must be > 0.")
        if self.tick_interval_seconds <= 0:
            raise ValueError("TICK_INTERVAL_SECONDS must be > 0.")
        return self

    def safe_summary(self) -> dict[str, Any]:
        """Return config summary safe for journaling."""
        return {
            "app_env": self.app_env,
            "base_url": str(self.restaurant_api_base_url),
            "menu_endpoint": self.restaurant_menu_endpoint,
            "order_endpoint": self.restaurant_order_endpoint,
            "feedback_endpoint": self.restaurant_feedback_endpoint,
            "timeout_seconds": self.restaurant_timeout_seconds,
            "max_retries": self.restaurant_max_retries,
            "demo_compression_factor": self.demo_compression_factor,
            "tick_interval_seconds": self.tick_interval_seconds,
            "journal_enabled": self.journal_enabled,
        }


def load_settings() -> Settings:
    """Load and validate settings, raising ConfigError on failure."""
    try:
        settings = Settings()
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration: {exc}") from exc
    except OSError as exc:
        raise ConfigError(f"Failed reading environment/.env: {exc}") from exc

    if settings.journal_enabled:
        try:
            settings.journal_dir.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise ConfigError(
                f"JOURNAL_DIR {settings.journal_dir} is not usable: {exc}"
            ) from exc
    return settings
