"""
Configuration management for simply-playlists.

This module loads, validates and provides access to the application
configuration. Values are layered, lowest precedence first:

    1. Built-in defaults
    2. config.yaml (current working directory, or an explicit path)
    3. Environment variables (a .env file is loaded first if present)
    4. Command-line options (applied by the CLI, not here)

Environment Variables:
    SPOTIFY_CLIENT_ID       Spotify application client ID (required)
    SPOTIFY_REDIRECT_URI    Redirect URI registered for the application

Example config.yaml:
    spotify:
      client_id: "your_client_id_here"
      redirect_uri: "http://127.0.0.1:5173/callback"
      requests_timeout: 10
      auth_timeout: 300
      open_browser: true

    files:
      overrides: "overrides.json"
      report: "misses.json"
      log_directory: null

    playlist:
      name: "Simply Created Playlist"
      public: false
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any
from urllib.parse import urlparse

import yaml
from dotenv import find_dotenv, load_dotenv

from simply_playlists.core.exceptions import ConfigError


# Default configuration file name (looked up in current working directory)
CONFIG_FILENAME = "config.yaml"

DEFAULT_REDIRECT_URI = "http://127.0.0.1:5173/callback"
DEFAULT_REQUESTS_TIMEOUT = 10
DEFAULT_AUTH_TIMEOUT = 300
DEFAULT_OVERRIDES_FILENAME = "overrides.json"
DEFAULT_REPORT_FILENAME = "misses.json"
DEFAULT_PLAYLIST_NAME = "Simply Created Playlist"


@dataclass(frozen=True)
class SpotifyConfig:
    """
    Spotify application settings.

    Attributes:
        client_id: The Spotify application client ID. PKCE is used,
                   so no client secret is needed.
        redirect_uri: Redirect URI registered in the Developer Dashboard.
                      Must be http://127.0.0.1:<port>/... or
                      http://localhost:<port>/... for the local callback.
        requests_timeout: Seconds before a Web API request times out.
        auth_timeout: Seconds to wait for the browser callback.
        open_browser: Whether to open the authorization page automatically.
    """
    client_id: str
    redirect_uri: str = DEFAULT_REDIRECT_URI
    requests_timeout: int = DEFAULT_REQUESTS_TIMEOUT
    auth_timeout: int = DEFAULT_AUTH_TIMEOUT
    open_browser: bool = True

    @property
    def callback_port(self) -> int:
        """Port the local callback server listens on, taken from redirect_uri."""
        parsed = urlparse(self.redirect_uri)
        return parsed.port or (443 if parsed.scheme == "https" else 80)


@dataclass(frozen=True)
class FilesConfig:
    """
    File locations.

    Attributes:
        overrides: JSON file pinning "Artist - Album" keys to album IDs.
        report: JSON miss report, overwritten on each run.
        log_directory: Directory for log files, or None for console only.
    """
    overrides: Path = Path(DEFAULT_OVERRIDES_FILENAME)
    report: Path = Path(DEFAULT_REPORT_FILENAME)
    log_directory: Path | None = None


@dataclass(frozen=True)
class PlaylistConfig:
    """
    Defaults for the playlist created by a run.

    Attributes:
        name: Playlist name.
        public: Whether the playlist is public.
    """
    name: str = DEFAULT_PLAYLIST_NAME
    public: bool = False


@dataclass(frozen=True)
class Config:
    """
    Complete application configuration.

    Created by load_config() and treated as immutable.

    Example:
        config = load_config()
        print(f"Redirect URI: {config.spotify.redirect_uri}")
        print(f"Report goes to: {config.files.report}")
    """
    spotify: SpotifyConfig
    files: FilesConfig
    playlist: PlaylistConfig


def load_config(config_path: Path | None = None) -> Config:
    """
    Load and validate configuration.

    Args:
        config_path: Optional explicit path to a YAML config file.
                     If None, config.yaml in the current working directory
                     is used when it exists; otherwise defaults apply.

    Returns:
        Config: A frozen dataclass containing all configuration values.

    Raises:
        ConfigError: If an explicit config file is missing, the YAML is
                     invalid, a value has the wrong type, or the client ID
                     or redirect URI is missing after all sources are applied.
    """
    dotenv_path = find_dotenv(usecwd=True)
    if dotenv_path:
        load_dotenv(dotenv_path)

    if config_path is None:
        default_path = Path.cwd() / CONFIG_FILENAME
        raw_config = _read_yaml(default_path) if default_path.exists() else {}
    else:
        if not config_path.exists():
            raise ConfigError(
                f"Configuration file not found: {config_path}",
                details={"file_path": str(config_path)}
            )
        raw_config = _read_yaml(config_path)

    spotify_section = _section(raw_config, "spotify")
    files_section = _section(raw_config, "files")
    playlist_section = _section(raw_config, "playlist")

    return Config(
        spotify=_parse_spotify_config(spotify_section),
        files=_parse_files_config(files_section),
        playlist=_parse_playlist_config(playlist_section)
    )


def _read_yaml(path: Path) -> dict[str, Any]:
    """
    Read a YAML file into a dictionary.

    An empty file is treated as an empty dictionary.
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            content = f.read()
    except OSError as e:
        raise ConfigError(
            f"Failed to read configuration file: {e}",
            details={"file_path": str(path), "original_error": str(e)}
        ) from e

    try:
        raw_config = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ConfigError(
            f"Invalid YAML syntax in configuration file: {e}",
            details={"file_path": str(path), "original_error": str(e)}
        ) from e

    if raw_config is None:
        return {}

    if not isinstance(raw_config, dict):
        raise ConfigError(
            "Configuration file must contain a YAML dictionary",
            details={"file_path": str(path)}
        )

    return raw_config


def _section(raw_config: dict[str, Any], name: str) -> dict[str, Any]:
    section = raw_config.get(name)
    if section is None:
        return {}
    if not isinstance(section, dict):
        raise ConfigError(
            f"Section '{name}' must be a dictionary",
            details={"section": name}
        )
    return section


def _parse_spotify_config(spotify_section: dict[str, Any]) -> SpotifyConfig:
    """
    Parse the Spotify section, letting environment variables win.

    Raises:
        ConfigError: If the client ID or redirect URI is empty, the redirect
                     URI is not an http URL with a host, or a timeout is not
                     a positive integer.
    """
    client_id = os.getenv("SPOTIFY_CLIENT_ID") or spotify_section.get("client_id", "")
    redirect_uri = (
        os.getenv("SPOTIFY_REDIRECT_URI")
        or spotify_section.get("redirect_uri")
        or DEFAULT_REDIRECT_URI
    )

    if not isinstance(client_id, str) or not client_id.strip():
        raise ConfigError(
            "Missing Spotify client ID: set SPOTIFY_CLIENT_ID in the environment, "
            ".env or 'spotify.client_id' in config.yaml",
            details={"field": "spotify.client_id"}
        )

    if not isinstance(redirect_uri, str) or not redirect_uri.strip():
        raise ConfigError(
            "'spotify.redirect_uri' must be a non-empty string",
            details={"field": "spotify.redirect_uri"}
        )

    parsed = urlparse(redirect_uri.strip())
    if parsed.scheme not in ("http", "https") or not parsed.hostname:
        raise ConfigError(
            f"Invalid redirect URI: {redirect_uri}",
            details={"field": "spotify.redirect_uri", "value": redirect_uri}
        )

    try:
        parsed.port
    except ValueError as e:
        raise ConfigError(
            f"Invalid port in redirect URI: {redirect_uri}",
            details={"field": "spotify.redirect_uri", "value": redirect_uri, "original_error": str(e)}
        ) from e

    open_browser = spotify_section.get("open_browser", True)
    if not isinstance(open_browser, bool):
        raise ConfigError(
            "'spotify.open_browser' must be true or false",
            details={"field": "spotify.open_browser", "value": open_browser}
        )

    return SpotifyConfig(
        client_id=client_id.strip(),
        redirect_uri=redirect_uri.strip(),
        requests_timeout=_positive_int(
            spotify_section, "requests_timeout", DEFAULT_REQUESTS_TIMEOUT, "spotify"
        ),
        auth_timeout=_positive_int(
            spotify_section, "auth_timeout", DEFAULT_AUTH_TIMEOUT, "spotify"
        ),
        open_browser=open_browser
    )


def _parse_files_config(files_section: dict[str, Any]) -> FilesConfig:
    overrides = _path_value(files_section, "overrides", DEFAULT_OVERRIDES_FILENAME)
    report = _path_value(files_section, "report", DEFAULT_REPORT_FILENAME)

    log_directory = None
    raw_log_dir = files_section.get("log_directory")
    if raw_log_dir is not None:
        if not isinstance(raw_log_dir, str) or not raw_log_dir.strip():
            raise ConfigError(
                "'files.log_directory' must be a non-empty string or null",
                details={"field": "files.log_directory"}
            )
        log_directory = Path(raw_log_dir.strip()).expanduser()

    return FilesConfig(overrides=overrides, report=report, log_directory=log_directory)


def _parse_playlist_config(playlist_section: dict[str, Any]) -> PlaylistConfig:
    name = playlist_section.get("name", DEFAULT_PLAYLIST_NAME)
    if not isinstance(name, str) or not name.strip():
        raise ConfigError(
            "'playlist.name' must be a non-empty string",
            details={"field": "playlist.name"}
        )

    public = playlist_section.get("public", False)
    if not isinstance(public, bool):
        raise ConfigError(
            "'playlist.public' must be true or false",
            details={"field": "playlist.public", "value": public}
        )

    return PlaylistConfig(name=name.strip(), public=public)


def _positive_int(section: dict[str, Any], key: str, default: int, section_name: str) -> int:
    value = section.get(key)
    if value is None:
        return default
    # bool is a subclass of int
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ConfigError(
            f"'{section_name}.{key}' must be a positive integer",
            details={"field": f"{section_name}.{key}", "value": value}
        )
    return value


def _path_value(section: dict[str, Any], key: str, default: str) -> Path:
    value = section.get(key)
    if value is None:
        return Path(default)
    if not isinstance(value, str) or not value.strip():
        raise ConfigError(
            f"'files.{key}' must be a non-empty string",
            details={"field": f"files.{key}"}
        )
    return Path(value.strip()).expanduser()
