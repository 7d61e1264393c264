"""
Core module for simply-playlists.

This module provides the foundational components used throughout the application:
    - exceptions: Custom exception classes for error handling
    - config: Configuration loading and validation
    - logger: Logging system with console and file outputs

Usage:
    from simply_playlists.core import (
        Config, load_config,
        setup_logging, get_logger,
        SimplyPlaylistsError, ConfigError, SpotifyError
    )
"""

from simply_playlists.core.config import (
    Config,
    FilesConfig,
    PlaylistConfig,
    SpotifyConfig,
    load_config,
)
from simply_playlists.core.exceptions import (
    AuthError,
    ConfigError,
    InputError,
    ReportError,
    SimplyPlaylistsError,
    SpotifyError,
)
from simply_playlists.core.logger import (
    get_logger,
    log_entry_miss,
    setup_logging,
    shutdown_logging,
)

__all__ = [
    # Config
    "Config",
    "SpotifyConfig",
    "FilesConfig",
    "PlaylistConfig",
    "load_config",
    # Exceptions
    "SimplyPlaylistsError",
    "ConfigError",
    "InputError",
    "AuthError",
    "SpotifyError",
    "ReportError",
    # Logger
    "setup_logging",
    "get_logger",
    "log_entry_miss",
    "shutdown_logging",
]
