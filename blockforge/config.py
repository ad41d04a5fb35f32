"""
Application configuration using pydantic-settings.
Loads from environment variables with .env file support.
"""

import shutil
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Database
    database_url: str = "sqlite+aiosqlite:///./blockforge.db"

    # Application
    debug: bool = False
    environment: str = "development"
    log_level: str = "INFO"  # DEBUG, INFO, WARNING, ERROR

    # API Settings
    api_v1_prefix: str = "/api/v1"
    project_name: str = "Blockforge"
    version: str = "0.1.0"

    # Generated block packages
    blocks_dir: str = "./blocks"
    symbols_dir_name: str = "symbols"
    block_namespace: str = "blockforge"
    textdomain: str = "blockforge"

    # PHP toolchain (lint + symbol rendering)
    php_binary: Optional[str] = None  # resolved from PATH when unset
    php_lint_enabled: bool = True
    php_lint_timeout_seconds: float = 10.0
    php_parser_fallback_enabled: bool = True
    php_render_timeout_seconds: float = 10.0

    # Partial dependency lookups
    json_membership_query_enabled: bool = True

    @property
    def blocks_path(self) -> Path:
        return Path(self.blocks_dir)

    @property
    def symbols_path(self) -> Path:
        return self.blocks_path / self.symbols_dir_name

    def resolve_php_binary(self) -> Optional[str]:
        """Configured PHP binary, or the first `php` found on PATH."""
        if self.php_binary:
            return self.php_binary
        return shutil.which("php")


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
