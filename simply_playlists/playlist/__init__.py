"""
Album list to playlist pipeline.

    - entries: Parse the "Artist - Album" list
    - overrides: Pinned album IDs for ambiguous entries
    - resolver: Two-stage album search (strict, then loose)
    - tracks: Track pagination and batched insertion
    - report: The JSON miss report
    - builder: Per-entry orchestration, dry run and live
"""

from simply_playlists.playlist.builder import (
    EntryOutcome,
    EntryStatus,
    PlaylistBuilder,
    RunContext,
    RunOptions,
    build_playlist,
)
from simply_playlists.playlist.entries import Entry, parse_lines, parse_list
from simply_playlists.playlist.overrides import load_overrides, lookup_override
from simply_playlists.playlist.report import MissRecord, RunReport, write_report
from simply_playlists.playlist.resolver import AlbumResolver, select_loose, select_strict
from simply_playlists.playlist.tracks import TrackExpander, TrackInserter

__all__ = [
    # Entries
    "Entry",
    "parse_lines",
    "parse_list",
    # Overrides
    "load_overrides",
    "lookup_override",
    # Resolution
    "AlbumResolver",
    "select_strict",
    "select_loose",
    # Tracks
    "TrackExpander",
    "TrackInserter",
    # Report
    "MissRecord",
    "RunReport",
    "write_report",
    # Orchestration
    "EntryStatus",
    "EntryOutcome",
    "RunOptions",
    "RunContext",
    "PlaylistBuilder",
    "build_playlist",
]
