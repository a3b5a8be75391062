"""
settings.py

This module provides application configuration management for macroeval.

Features:
- Centralized application configuration using Pydantic settings
- Delimiter profile construction from configured markers
- Location of the default key/value store file

Usage:
Import appsettings for application configuration values.
"""

from pathlib import Path
from typing import Final
from appdirs import user_config_dir
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict
from rich.console import Console
from macroeval.lib.delimiters import (
    DEFAULT_CLOSE,
    DEFAULT_OPEN,
    DEFAULT_SEPARATOR,
    DelimiterProfile,
)

# Console instance for rich output
console: Final[Console] = Console()

# Set up the configuration directory and store file using appdirs
CONFIG_DIR: Final[Path] = Path(user_config_dir("macroeval", ""))
STORE_FILE: Final[Path] = CONFIG_DIR / "values.json"

# Passes beyond this are treated as a runaway evaluation
PASS_LIMIT: Final[int] = 1000


class App(BaseSettings):
    """
    Application settings model.

    Settings can be overridden through environment variables with MACRO_ prefix.

    Attributes:
        beQuiet: Suppress detailed logging output
        pass_limit: Upper bound on evaluation passes before a runaway error
        open_delimiter: Marker opening a construct
        close_delimiter: Marker closing a construct
        separator: Marker separating a construct's arguments
        store_file: JSON key/value source used by the command line
    """

    beQuiet: bool = False

    pass_limit: int = Field(default=PASS_LIMIT, ge=1)

    open_delimiter: str = DEFAULT_OPEN
    close_delimiter: str = DEFAULT_CLOSE
    separator: str = DEFAULT_SEPARATOR

    store_file: Path | None = None

    model_config = SettingsConfigDict(
        env_prefix="MACRO_",  # Environment variables with this prefix override settings
        case_sensitive=False,  # Allow case-insensitive environment variables
        extra="allow",  # Allow additional attributes not defined in the model
    )


def profile_fromSettings(settings: App | None = None) -> DelimiterProfile:
    """
    Build the delimiter profile described by the settings.

    Args:
        settings: Settings to read, the module `appsettings` when omitted

    Returns:
        DelimiterProfile: Validated profile

    Raises:
        MacroConfigError: If the configured markers are invalid
    """
    settings = settings or appsettings
    return DelimiterProfile(
        settings.open_delimiter, settings.close_delimiter, settings.separator
    )


def storeFile_resolve(settings: App | None = None) -> Path:
    """
    Return the store file named in the settings, or the per-user default.
    """
    settings = settings or appsettings
    return settings.store_file or STORE_FILE


# Create the application settings instance
appsettings: Final[App] = App()
