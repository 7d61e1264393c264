"""
Command-line interface for simply-playlists.

This module implements the CLI using Click; rich-click is used for the
help formatting and colors.

Usage:
    simply-playlists [LIST_PATH] [OPTIONS]

    # Build "Simply Created Playlist" from ./playlist.txt
    simply-playlists

    # Name the playlist and make it public
    simply-playlists albums.txt --name "Road trip" --public

    # Resolve everything, change nothing on Spotify
    simply-playlists albums.txt --dry-run

Configuration:
    SPOTIFY_CLIENT_ID must be set in the environment, in a .env file or as
    spotify.client_id in config.yaml. SPOTIFY_REDIRECT_URI defaults to
    http://127.0.0.1:5173/callback and must be registered in the Spotify
    Developer Dashboard. Command-line options win over config.yaml.

Exit Codes:
    0    Success (misses do not count as failure)
    1    Configuration error
    2    Album list error
    3    Authorization error
    4    Spotify API error
    5    Other error (e.g. the report could not be written)
    130  Interrupted
"""

import dataclasses
import sys
from pathlib import Path
from typing import Optional

import rich_click as click

# Configure rich-click for better help formatting
click.rich_click.USE_RICH_MARKUP = True
click.rich_click.SHOW_ARGUMENTS = True
click.rich_click.GROUP_ARGUMENTS_OPTIONS = True
click.rich_click.STYLE_ERRORS_SUGGESTION = "magenta italic"
click.rich_click.ERRORS_SUGGESTION = ""
click.rich_click.MAX_WIDTH = 100
click.rich_click.OPTION_GROUPS = {
    "cli": [
        {
            "name": "Playlist",
            "options": ["--name", "--public", "--dry-run"],
        },
        {
            "name": "Files",
            "options": ["--overrides", "--report", "--config", "--log-dir"],
        },
        {
            "name": "Advanced Options",
            "options": ["--port", "--verbose"],
        },
        {
            "name": "Info",
            "options": ["--version", "--help"],
        },
    ],
}

from simply_playlists import __version__
from simply_playlists.core import (
    AuthError,
    Config,
    ConfigError,
    InputError,
    SimplyPlaylistsError,
    SpotifyError,
    get_logger,
    load_config,
    setup_logging,
    shutdown_logging,
)
from simply_playlists.playlist import RunOptions, build_playlist, load_overrides, parse_list
from simply_playlists.spotify import SpotifyClient, authorize
from simply_playlists.spotify.auth import with_port

logger = get_logger(__name__)

DEFAULT_LIST_PATH = "playlist.txt"


@click.command()
@click.argument(
    "list_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=DEFAULT_LIST_PATH,
    required=False
)
@click.option(
    "--name", "-n",
    type=str,
    default=None,
    metavar="<name>",
    help="Playlist name [default: Simply Created Playlist]"
)
@click.option(
    "--public",
    is_flag=True,
    help="Create a public playlist"
)
@click.option(
    "--dry-run",
    is_flag=True,
    help="Do not create a playlist or add tracks, only print actions"
)
@click.option(
    "--overrides",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    metavar="<overrides.json>",
    help="Override file [default: overrides.json]"
)
@click.option(
    "--report",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    metavar="<misses.json>",
    help="Miss report file [default: misses.json]"
)
@click.option(
    "--config", "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    metavar="<config.yaml>",
    help="Configuration file [default: ./config.yaml if present]"
)
@click.option(
    "--log-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    metavar="<dir>",
    help="Also write full, error and miss logs to this directory"
)
@click.option(
    "--port",
    type=click.IntRange(1, 65535),
    default=None,
    metavar="<port>",
    help="Callback port, replacing the one in the redirect URI"
)
@click.option(
    "--verbose", "-v",
    is_flag=True,
    help="Show resolver decisions and API requests"
)
@click.option(
    "--version",
    is_flag=True,
    help="Show version and exit."
)
@click.pass_context
def cli(
    ctx: click.Context,
    list_path: Path,
    name: Optional[str],
    public: bool,
    dry_run: bool,
    overrides: Optional[Path],
    report: Optional[Path],
    config_path: Optional[Path],
    log_dir: Optional[Path],
    port: Optional[int],
    verbose: bool,
    version: bool
) -> None:
    """
    simply-playlists: Create a Spotify playlist from an Artist - Album list.

    Every line of LIST_PATH ("Artist - Album") is matched to a Spotify album
    and all of its tracks are added, in list order, to a new playlist.
    Entries that could not be matched are written to the miss report.

    \b
    LIST FORMAT:
        # comments and blank lines are ignored
        Ryan Adams - Heartbreaker
        Godspeed You! Black Emperor - F# A# Infinity

    \b
    OVERRIDES:
        Pin an entry to an album in overrides.json:
        {"Ryan Adams - Heartbreaker": "spotify:album:1lXY618HWkwYKJWBRYR4MK"}
    """
    if version:
        click.echo(f"simply-playlists {__version__}")
        ctx.exit(0)

    _run({
        "list_path": list_path,
        "name": name,
        "public": public,
        "dry_run": dry_run,
        "overrides": overrides,
        "report": report,
        "config_path": config_path,
        "log_dir": log_dir,
        "port": port,
        "verbose": verbose,
    })


def _run(options: dict) -> None:
    """
    Execute a run based on CLI options.

    Steps:
        1. Load configuration and set up logging
        2. Parse the list and load overrides (before any network activity)
        3. Authorize with Spotify
        4. Build the playlist and write the report

    Raises:
        SystemExit: On fatal errors (with the exit code for its category).
    """
    try:
        config = _load_configuration(options)

        setup_logging(options["log_dir"] or config.files.log_directory, options["verbose"])

        list_path: Path = options["list_path"]
        entries = parse_list(list_path)
        overrides = load_overrides(options["overrides"] or config.files.overrides)
        logger.info(f"Loaded {len(entries)} entries from {list_path}")

        client = _initialize_spotify(config)

        run_options = RunOptions(
            list_path=str(list_path),
            playlist_name=options["name"] or config.playlist.name,
            public=options["public"] or config.playlist.public,
            dry_run=options["dry_run"],
            report_path=options["report"] or config.files.report
        )
        build_playlist(client, entries, overrides, run_options)

    except ConfigError as e:
        click.echo(f"Configuration error: {e.message}", err=True)
        sys.exit(1)

    except InputError as e:
        click.echo(f"Input error: {e.message}", err=True)
        logger.debug(f"Input error: {e.message}", exc_info=True)
        sys.exit(2)

    except AuthError as e:
        click.echo(f"Authorization error: {e.message}", err=True)
        logger.debug(f"Authorization error: {e.message}", exc_info=True)
        sys.exit(3)

    except SpotifyError as e:
        click.echo(f"Spotify error: {e.message}", err=True)
        if e.is_auth_error:
            click.echo("The access token was rejected; run again to re-authorize", err=True)
        elif e.is_rate_limit:
            click.echo("Spotify is rate limiting requests; wait a few minutes and run again", err=True)
        logger.debug(f"Spotify error: {e.message}", exc_info=True)
        sys.exit(4)

    except SimplyPlaylistsError as e:
        click.echo(f"Error: {e.message}", err=True)
        logger.debug(f"Error: {e.message}", exc_info=True)
        sys.exit(5)

    except KeyboardInterrupt:
        click.echo("\nInterrupted by user", err=True)
        logger.debug("Interrupted by user")
        sys.exit(130)

    finally:
        shutdown_logging()


def _load_configuration(options: dict) -> Config:
    """
    Load configuration and apply the --port override.

    Raises:
        ConfigError: If configuration is invalid or missing.
    """
    config = load_config(options["config_path"])
    if options["port"] is not None:
        spotify = dataclasses.replace(
            config.spotify,
            redirect_uri=with_port(config.spotify.redirect_uri, options["port"])
        )
        config = dataclasses.replace(config, spotify=spotify)
    return config


def _initialize_spotify(config: Config) -> SpotifyClient:
    """
    Authorize and build the API client.

    Raises:
        AuthError: If the authorization handshake fails.
    """
    access_token = authorize(config.spotify)
    return SpotifyClient.from_token(access_token, requests_timeout=config.spotify.requests_timeout)


def main() -> None:
    """
    Entry point for the CLI.

    This function is called when running `simply-playlists` from the
    command line.
    """
    cli()


if __name__ == "__main__":
    main()
