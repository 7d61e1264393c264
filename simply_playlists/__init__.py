"""
simply-playlists: Turn an "Artist - Album" list into a Spotify playlist.

Each line of a plain-text list is resolved to a Spotify album, expanded
into its tracks and appended to a newly created playlist. Entries that
cannot be resolved are collected in a JSON miss report so they can be
pinned in the override file and retried.

Architecture:
    1. Parse the list (playlist/entries.py)
    2. Load the override file (playlist/overrides.py)
    3. Authorize with Spotify via PKCE (spotify/auth.py)
    4. For each entry, in order:
        - Use the override if there is one, else search (playlist/resolver.py)
        - Fetch every track of the album (playlist/tracks.py)
        - Append them in batches of 100, unless this is a dry run
    5. Write the miss report (playlist/report.py)

Modules:
    core/       - Configuration, logging, exceptions
    spotify/    - Authorization, API client and models
    playlist/   - The pipeline
    utils/      - Text normalization and small helpers
    cli.py      - Command-line interface

Usage:
    Command Line:
        simply-playlists albums.txt --name "Road trip"
        simply-playlists albums.txt --dry-run

    Python API:
        from simply_playlists.core import load_config
        from simply_playlists.playlist import RunOptions, build_playlist, parse_list
        from simply_playlists.spotify import SpotifyClient, authorize
"""

__version__ = "0.1.0"
__author__ = "simply-playlists contributors"
