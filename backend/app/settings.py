############################################################
#
# inkwell - Versioned Content Management Backend
#
# settings.py: Application configuration and environment settings
#
# Luke Sheneman
# Research Computing and Data Services (RCDS)
# Institute for Interdisciplinary Data Sciences (IIDS)
# University of Idaho
# sheneman@uidaho.edu
#
############################################################

"""Application settings using Pydantic Settings."""

import tomllib
from functools import lru_cache
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path
from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _get_version() -> str:
    """Read version from the installed distribution, else pyproject.toml."""
    try:
        return version("inkwell")
    except PackageNotFoundError:
        pass
    # Fallback: read pyproject.toml directly (works in dev without pip install)
    toml_path = Path(__file__).resolve().parents[2] / "pyproject.toml"
    try:
        with open(toml_path, "rb") as f:
            data = tomllib.load(f)
    except OSError:
        return "0.0.0"
    return data.get("project", {}).get("version", "0.0.0")


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=(".env", ".env.prod"),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "Inkwell"
    app_version: str = Field(default_factory=_get_version)
    debug: bool = False
    reload: bool = False

    # Database
    database_url: str = Field(default="sqlite+aiosqlite:///./inkwell.db")
    database_echo: bool = False

    # Content
    root_url_path: str = "root"
    version_batch_size: int = Field(default=20, ge=1)
    blog_stream_max_entries: int = Field(default=10, ge=1)

    # Logging
    log_level: str = "INFO"
    log_format: str = "json"
    log_file: Optional[str] = None

    # CORS
    cors_origins: List[str] = ["http://localhost:3000", "http://localhost:8000"]

    @field_validator("cors_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, v):
        """Parse CORS origins from string or list."""
        if isinstance(v, str):
            import json
            try:
                return json.loads(v)
            except json.JSONDecodeError:
                return [origin.strip() for origin in v.split(",")]
        return v


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
