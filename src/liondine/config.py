"""Configuration management for the LionDine menu service.

Loads settings from environment variables (and an optional .env file) using
Pydantic. Nothing is required at import time: the structurer API key is only
checked when a structurer is built.

Usage:
    from liondine.config import settings

    print(settings.cache_lifetime_minutes)
    print(settings.structurer_provider)
"""

from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36"
)


class Settings(BaseSettings):
    """LionDine menu service configuration from environment variables.

    Attributes:
        log_level: Logging verbosity (DEBUG, INFO, WARNING, ERROR)
        menu_base_url: Site serving one page per meal category
        user_agent: User-Agent header sent with page requests
        min_content_length: Shortest page text accepted as a real menu
        fetch_timeout: Upper bound for one page download (seconds)
        structure_timeout: Upper bound for one structuring call (seconds)
        cache_backend: 'memory' (process lifetime) or 'parquet' (on disk)
        cache_dir: Directory for the Parquet cache file
        cache_lifetime_minutes: Maximum age of a cache entry
        cache_timezone: Zone whose calendar date scopes cache keys
        sweep_interval_minutes: Period of the background expiry sweep
        single_flight: Share one upstream fetch between concurrent misses
        structurer_provider: 'openai', 'anthropic', or 'ollama'
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    log_level: str = Field(default="INFO", description="Logging level")

    # Menu source
    menu_base_url: str = Field(
        default="https://liondine.com",
        description="Base URL; pages live at {menu_base_url}/{meal}",
    )
    user_agent: str = Field(default=DEFAULT_USER_AGENT, description="User-Agent for page requests")
    min_content_length: int = Field(
        default=100,
        ge=1,
        description="Minimum characters of page text before structuring",
    )
    fetch_timeout: float = Field(default=30.0, gt=0, description="Page download timeout (seconds)")
    structure_timeout: float = Field(
        default=120.0,
        gt=0,
        description="Structuring call timeout (seconds)",
    )

    # Cache
    cache_backend: str = Field(default="memory", description="'memory' or 'parquet'")
    cache_dir: str = Field(default=".cache", description="Parquet cache directory")
    cache_lifetime_minutes: int = Field(default=1440, ge=1, description="Cache entry lifetime")
    cache_timezone: str = Field(default="UTC", description="Time zone for cache key dates")
    sweep_interval_minutes: int = Field(default=60, ge=1, description="Expiry sweep period")
    single_flight: bool = Field(
        default=True,
        description="Collapse concurrent cache misses for one key into one fetch",
    )

    # Structurer (LLM)
    structurer_provider: str = Field(
        default="openai",
        description="Structuring provider: 'openai', 'anthropic', or 'ollama'",
    )
    openai_api_key: str | None = Field(default=None, description="OpenAI API key")
    anthropic_api_key: str | None = Field(default=None, description="Anthropic API key")
    ollama_base_url: str = Field(
        default="http://localhost:11434",
        description="Ollama base URL for local structuring",
    )
    structurer_model: str | None = Field(
        default=None,
        description="Model override (default per provider)",
    )
    structurer_temperature: float = Field(default=0.1, ge=0.0, le=2.0)
    structurer_max_tokens: int = Field(default=4096, ge=256, le=16384)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensure log level is valid."""
        valid = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper()
        if v_upper not in valid:
            raise ValueError(f"log_level must be one of {valid}, got {v}")
        return v_upper

    @field_validator("cache_backend")
    @classmethod
    def validate_cache_backend(cls, v: str) -> str:
        """Ensure cache backend is known."""
        v_lower = v.lower()
        if v_lower not in {"memory", "parquet"}:
            raise ValueError(f"cache_backend must be 'memory' or 'parquet', got '{v}'")
        return v_lower

    @field_validator("cache_timezone")
    @classmethod
    def validate_cache_timezone(cls, v: str) -> str:
        """Ensure the zone name resolves."""
        try:
            ZoneInfo(v)
        except (ZoneInfoNotFoundError, ValueError):
            raise ValueError(f"cache_timezone must be an IANA zone name, got '{v}'")
        return v

    @field_validator("structurer_provider")
    @classmethod
    def validate_structurer_provider(cls, v: str) -> str:
        """Ensure structurer provider is valid."""
        v_lower = v.lower()
        if v_lower not in {"openai", "anthropic", "ollama"}:
            raise ValueError(
                f"structurer_provider must be 'openai', 'anthropic', or 'ollama', got '{v}'"
            )
        return v_lower

    @field_validator("menu_base_url", "ollama_base_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @property
    def tzinfo(self) -> ZoneInfo:
        return ZoneInfo(self.cache_timezone)

    @property
    def cache_lifetime_seconds(self) -> float:
        return self.cache_lifetime_minutes * 60.0

    @property
    def sweep_interval_seconds(self) -> float:
        return self.sweep_interval_minutes * 60.0


# Global settings instance, loaded once at import
settings = Settings()
