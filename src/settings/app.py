"""Application settings powered by Pydantic BaseSettings."""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AppSettings(BaseSettings):
    """Centralized environment configuration.

    Every field can be set through an ``OPENAM_FETCH_``-prefixed environment
    variable or a ``.env`` file; CLI options take precedence.
    """

    model_config = SettingsConfigDict(
        env_prefix="OPENAM_FETCH_",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    sources_path: Path = Path("sources.yaml")
    state_path: Path = Path("state/header_cache.sqlite")
    download_dir: Path = Path("downloads")
    credentials_dir: Path | None = Field(
        default=None,
        description="Directory of secret files; environment variables otherwise",
    )
    max_workers: int = Field(default=4, ge=1, le=32)
    log_level: str = "INFO"
    json_logs: bool = True


def get_settings() -> AppSettings:
    """Get a settings instance."""
    return AppSettings()
