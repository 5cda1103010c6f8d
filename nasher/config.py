"""Runtime settings for nasher.

Uses pydantic-settings for config parsing from environment variables
and defaults. These settings are distinct from the cascaded project
configuration (see nasher.project), which lives in nasher.cfg files.
Configuration precedence: CLI flags > env vars > defaults.
"""

import sys
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def default_install_dir() -> Path:
    """Return the platform's conventional Neverwinter Nights user directory."""
    if sys.platform.startswith("linux"):
        return Path.home() / ".local" / "share" / "Neverwinter Nights"
    return Path.home() / "Documents" / "Neverwinter Nights"


def _default_global_config() -> Path:
    """Return the default location of the user-scoped config file."""
    return Path.home() / ".config" / "nasher" / "nasher.cfg"


class Settings(BaseSettings):
    """Application settings.

    Settings are loaded from environment variables with the NASHER_ prefix.
    CLI flags can override these at runtime.
    """

    model_config = SettingsConfigDict(
        env_prefix="NASHER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Paths
    global_config: Path = Field(
        default_factory=_default_global_config,
        description="User-scoped config file applied before the package config",
    )
    install_dir: Path = Field(
        default_factory=default_install_dir,
        description="Default installation root when no config sets one",
    )

    # External tools
    compiler_binary: str = Field(
        default="nwnsc",
        description="Default script compiler when no config sets one",
    )
    erf_binary: str = Field(
        default="nwn_erf",
        description="Archive tool used to pack and unpack erf/hak/mod files",
    )
    gff_binary: str = Field(
        default="nwn_gff",
        description="Converter between GFF and its JSON representation",
    )
    tool_timeout: int | None = Field(
        default=None,
        ge=1,
        description="Timeout in seconds for archive and converter runs",
    )

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )


def get_settings() -> Settings:
    """Get the application settings.

    Returns:
        Settings instance loaded from environment.
    """
    return Settings()


def print_settings_json(settings: Settings | None = None) -> str:
    """Render effective settings as JSON.

    Args:
        settings: Optional settings instance; uses default if not provided.

    Returns:
        JSON string of effective settings.
    """
    if settings is None:
        settings = get_settings()
    return settings.model_dump_json(indent=2)


__all__ = ["Settings", "default_install_dir", "get_settings", "print_settings_json"]
