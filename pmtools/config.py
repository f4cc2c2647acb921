"""Typed settings configuration - single source of truth."""

from functools import lru_cache
from pathlib import Path

from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Storage
    data_dir: Path = Path("local_data")

    # Upstream LLM (Anthropic Messages API)
    anthropic_api_key: SecretStr | None = None
    anthropic_model: str = "claude-sonnet-4-20250514"
    anthropic_max_tokens: int = 4096
    anthropic_base_url: str = "https://api.anthropic.com"
    anthropic_version: str = "2023-06-01"
    upstream_timeout_s: float = 60.0

    # Client gateways
    api_base_url: str = "http://localhost:3001"

    # Editor auto-save debounce (milliseconds)
    autosave_debounce_ms: int = 1500


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
