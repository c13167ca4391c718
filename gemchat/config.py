"""
Application Configuration

Pydantic-based settings management using environment variables.
Supports nested configuration, validation, and caching.

Usage:
    from gemchat.config import get_settings

    settings = get_settings()
    print(settings.llm.google_model)
    print(settings.session.ttl_days)
"""

import logging
import os
from functools import lru_cache
from pathlib import Path
from typing import Literal

from dotenv import load_dotenv
from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class LLMSettings(BaseSettings):
    """LLM provider configuration (server side)."""

    default_provider: Literal["google", "local"] = Field(
        default="google", description="Provider used by the chat route"
    )
    allow_missing_key: bool = Field(
        default=True,
        description=(
            "Start without a provider API key. The chat route then answers with "
            "'API key is not configured' instead of failing at startup."
        ),
    )

    # Google configuration
    google_api_key: str | None = Field(None, description="Google AI API key")
    google_model: str = Field(default="gemini-1.5-flash", description="Gemini model name")

    # Local model configuration
    local_base_url: str = Field(
        default="http://localhost:11434",
        description="Base URL for local model server (Ollama, vLLM, etc.)",
    )
    local_model: str = Field(default="llama3.1:8b", description="Local model name")

    # Common settings
    temperature: float = Field(
        default=0.7,
        ge=0.0,
        le=2.0,
        description="Temperature for LLM responses",
    )
    max_tokens: int = Field(
        default=2048,
        gt=0,
        le=16000,
        description="Maximum tokens per LLM response",
    )
    timeout: int = Field(
        default=30,
        gt=0,
        description="Request timeout in seconds",
    )

    model_config = SettingsConfigDict(
        env_prefix="LLM_",
        env_file=".env",
        extra="ignore",
    )

    @field_validator("google_api_key", mode="before")
    @classmethod
    def normalize_key(cls, v: str | None) -> str | None:
        """Treat empty strings as missing."""
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @model_validator(mode="after")
    def validate_provider_keys(self) -> "LLMSettings":
        """Ensure an API key is set for the selected provider when required."""
        if self.allow_missing_key:
            return self
        if self.default_provider == "google" and not self.google_api_key:
            raise ValueError(
                "API key required for google provider. Set LLM_GOOGLE_API_KEY"
            )
        return self


class SessionSettings(BaseSettings):
    """Client session, history and persistence timing."""

    ttl_days: float = Field(
        default=5.0,
        gt=0,
        description="Sliding session lifetime; idle conversations older than this are purged",
    )
    history_window: int = Field(
        default=10,
        ge=0,
        le=100,
        description="Number of trailing history entries sent as request context",
    )
    persist_debounce_ms: int = Field(
        default=300,
        ge=0,
        description="Trailing debounce applied to conversation writes",
    )
    load_suppression_ms: int = Field(
        default=100,
        ge=0,
        description="Persist requests this soon after a load are ignored",
    )

    model_config = SettingsConfigDict(
        env_prefix="SESSION_",
        env_file=".env",
        extra="ignore",
    )

    @property
    def ttl_seconds(self) -> float:
        return self.ttl_days * 24 * 60 * 60


class TypingSettings(BaseSettings):
    """Typing animation pacing. Delays are in milliseconds."""

    initial_reveal: int = Field(
        default=10,
        ge=0,
        description="Characters shown immediately for responses longer than this",
    )
    burst_min_revealed: int = Field(
        default=5,
        ge=0,
        description="Burst mode can only start once more than this many characters are visible",
    )
    burst_activation_probability: float = Field(default=0.4, ge=0.0, le=1.0)
    burst_deactivation_probability: float = Field(default=0.3, ge=0.0, le=1.0)
    burst_sizes: list[int] = Field(
        default_factory=lambda: [2, 3, 4],
        min_length=1,
        description="Chunk sizes drawn once per burst",
    )

    normal_min_ms: float = Field(default=1.0, ge=0.0)
    normal_max_ms: float = Field(default=5.0, ge=0.0)
    burst_min_ms: float = Field(default=1.0, ge=0.0)
    burst_max_ms: float = Field(default=3.0, ge=0.0)
    pause_min_ms: float = Field(default=10.0, ge=0.0)
    pause_max_ms: float = Field(default=30.0, ge=0.0)
    medium_pause_min_ms: float = Field(default=5.0, ge=0.0)
    medium_pause_max_ms: float = Field(default=15.0, ge=0.0)

    model_config = SettingsConfigDict(
        env_prefix="TYPING_",
        env_file=".env",
        extra="ignore",
    )

    @field_validator("burst_sizes")
    @classmethod
    def validate_burst_sizes(cls, v: list[int]) -> list[int]:
        if any(size < 1 for size in v):
            raise ValueError("burst_sizes must contain positive integers")
        return v

    @model_validator(mode="after")
    def validate_delay_ranges(self) -> "TypingSettings":
        """Ensure each delay range is ordered."""
        for name in ("normal", "burst", "pause", "medium_pause"):
            low = getattr(self, f"{name}_min_ms")
            high = getattr(self, f"{name}_max_ms")
            if low > high:
                raise ValueError(
                    f"{name}_min_ms ({low}) must be less than or equal to "
                    f"{name}_max_ms ({high})"
                )
        return self


class StorageSettings(BaseSettings):
    """Client-side key/value storage."""

    backend: Literal["file", "memory"] = Field(
        default="file",
        description="'file' persists to a local JSON file, 'memory' keeps nothing across runs",
    )
    path: Path = Field(
        default=Path.home() / ".gemchat" / "local_storage.json",
        description="Location of the JSON storage file",
    )
    key_prefix: str = Field(
        default="gemchat",
        min_length=1,
        description="Namespace prefix for every storage key",
    )

    model_config = SettingsConfigDict(
        env_prefix="STORAGE_",
        env_file=".env",
        extra="ignore",
    )

    @field_validator("key_prefix")
    @classmethod
    def validate_prefix(cls, v: str) -> str:
        if "_" in v:
            raise ValueError("key_prefix must not contain underscores")
        return v


class ClientSettings(BaseSettings):
    """Chat client transport settings."""

    api_url: str = Field(
        default="http://localhost:8000",
        description="Base URL of the GemChat API server",
    )
    request_timeout: float = Field(
        default=60.0,
        gt=0,
        description="Timeout for one chat request in seconds",
    )

    model_config = SettingsConfigDict(
        env_prefix="CLIENT_",
        env_file=".env",
        extra="ignore",
    )


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Application log level",
    )
    format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log message format",
    )
    date_format: str = Field(
        default="%Y-%m-%d %H:%M:%S",
        description="Log timestamp format",
    )
    file: Path | None = Field(
        default=None,
        description="Optional log file path (None = stdout only)",
    )

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        env_file=".env",
        extra="ignore",
    )

    def configure(self) -> None:
        """Configure Python logging with these settings."""
        handlers: list[logging.Handler] = [logging.StreamHandler()]

        if self.file:
            self.file.parent.mkdir(parents=True, exist_ok=True)
            handlers.append(logging.FileHandler(self.file))

        logging.basicConfig(
            level=getattr(logging, self.level),
            format=self.format,
            datefmt=self.date_format,
            handlers=handlers,
            force=True,  # Override any existing configuration
        )


class Settings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    Settings are nested by domain (llm, session, typing, storage, client, logging).

    Environment Variables:
        ENVIRONMENT: Deployment environment (development, staging, production)
        APP_NAME: Application name for logging
        DEBUG: Enable debug mode
        API_HOST: API server host
        API_PORT: API server port
        CORS_ORIGINS: Comma-separated origins allowed by the API server
        LLM_*: LLM provider configuration (see LLMSettings)
        SESSION_*: Session and persistence timing (see SessionSettings)
        TYPING_*: Typing animation pacing (see TypingSettings)
        STORAGE_*: Client storage (see StorageSettings)
        CLIENT_*: Chat client transport (see ClientSettings)
        LOG_*: Logging configuration (see LoggingSettings)

    Example:
        >>> settings = get_settings()
        >>> settings.llm.default_provider
        'google'
        >>> settings.session.history_window
        10
    """

    environment: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Deployment environment",
    )
    app_name: str = Field(
        default="GemChat",
        description="Application name",
    )
    debug: bool = Field(
        default=False,
        description="Enable debug mode",
    )
    api_host: str = Field(
        default="127.0.0.1",
        description="API server host",
    )
    api_port: int = Field(
        default=8000,
        gt=0,
        le=65535,
        description="API server port",
    )
    cors_origins: str = Field(
        default="http://localhost:3000,http://localhost:3001",
        description="Comma-separated list of allowed CORS origins",
    )

    # Nested settings
    llm: LLMSettings = Field(default_factory=LLMSettings)
    session: SessionSettings = Field(default_factory=SessionSettings)
    typing: TypingSettings = Field(default_factory=TypingSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)
    client: ClientSettings = Field(default_factory=ClientSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"

    @property
    def cors_origin_list(self) -> list[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @model_validator(mode="after")
    def configure_logging(self) -> "Settings":
        """Configure logging when settings are loaded."""
        self.logging.configure()
        return self

    def model_post_init(self, __context) -> None:
        """Log configuration on initialization."""
        logger = logging.getLogger(__name__)
        logger.info(
            f"Settings loaded for {self.app_name} ({self.environment})",
            extra={
                "environment": self.environment,
                "debug": self.debug,
                "llm_provider": self.llm.default_provider,
                "storage_backend": self.storage.backend,
            },
        )


_DOTENV_PATH = Path(__file__).resolve().parents[1] / ".env"


def _apply_dotenv_precedence() -> None:
    env_source = os.getenv("GEMCHAT_ENV_SOURCE", "dotenv").lower()
    if env_source not in {"dotenv", "envfile", "file"}:
        return
    if _DOTENV_PATH.exists():
        load_dotenv(_DOTENV_PATH, override=True)


@lru_cache
def get_settings() -> Settings:
    """
    Get cached application settings.

    Uses functools.lru_cache to ensure settings are loaded only once.

    Returns:
        Settings: Singleton settings instance
    """
    _apply_dotenv_precedence()
    return Settings()


def clear_settings_cache() -> None:
    """
    Clear the settings cache.

    Useful for testing when you need to reload settings with different
    environment variables.

    Example:
        >>> import os
        >>> os.environ["SESSION_TTL_DAYS"] = "1"
        >>> clear_settings_cache()
        >>> settings = get_settings()  # Reloads with new env vars
    """
    get_settings.cache_clear()
