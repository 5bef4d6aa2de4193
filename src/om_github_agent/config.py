"""Configuration management for OM GitHub Agent."""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Application
    app_name: str = Field(
        default="om-bot",
        description="Name the bot is mentioned by, e.g. @om-bot create-pr",
    )
    debug: bool = False
    log_level: str = Field(
        default="info",
        description="Logging level name",
    )

    # GitHub App
    app_id: Optional[str] = Field(
        default=None,
        description="GitHub App ID",
    )
    private_key: Optional[SecretStr] = Field(
        default=None,
        description="GitHub App private key (PEM contents)",
    )
    private_key_path: Optional[Path] = Field(
        default=None,
        description="Path to the GitHub App private key file",
    )

    # Fallback when no GitHub App is configured
    github_token: Optional[SecretStr] = Field(
        default=None,
        description="GitHub token used when no App credentials are set",
    )

    # Web server
    host: str = "0.0.0.0"
    port: int = 3000

    def load_private_key(self) -> Optional[str]:
        """Return the App private key, reading it from disk if configured by path."""
        if self.private_key:
            return self.private_key.get_secret_value()
        if self.private_key_path:
            return self.private_key_path.read_text(encoding="utf-8")
        return None

    @property
    def github_app_configured(self) -> bool:
        return bool(self.app_id and (self.private_key or self.private_key_path))


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
