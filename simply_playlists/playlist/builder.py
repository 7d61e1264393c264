"""
Playlist build pipeline.

Drives every entry of the album list through the same sequence, one at a
time, in list order:

    malformed? ------------------------------> MALFORMED (miss)
    override? --yes--> album ID
        |no
    resolver --none--------------------------> UNRESOLVED (miss)
        |candidate
    expand tracks
    dry run? --yes---------------------------> WOULD_ADD
    playlist? --no---------------------------> NO_PLAYLIST (miss)
    insert batches --------------------------> OK

In a live run the playlist is created once, before the first entry. A dry
run resolves and expands exactly like a live run but never creates or
modifies a playlist.

Each entry prints one progress line:

    [3/12] Ryan Adams - Heartbreaker ... OVERRIDE OK (15 tracks)

Per-entry problems are result values (EntryOutcome). Any SimplyPlaylistsError
stops the run: the misses collected so far are written to the report with
"aborted": true, then the error is re-raised.

Usage:
    from simply_playlists.playlist.builder import RunOptions, build_playlist

    options = RunOptions(list_path="albums.txt", playlist_name="Road trip")
    report = build_playlist(client, entries, overrides, options)
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Mapping, Sequence

from simply_playlists.core.exceptions import ReportError, SimplyPlaylistsError
from simply_playlists.core.logger import Colors, format_outcome, get_logger, log_entry_miss
from simply_playlists.playlist.entries import Entry
from simply_playlists.playlist.overrides import lookup_override
from simply_playlists.playlist.report import MissRecord, RunReport, write_report
from simply_playlists.playlist.resolver import AlbumResolver
from simply_playlists.playlist.tracks import TrackExpander, TrackInserter
from simply_playlists.spotify.client import SpotifyClient
from simply_playlists.spotify.models import CreatedPlaylist


logger = get_logger(__name__)

SOURCE_OVERRIDE = "override"
SOURCE_SEARCH = "search"


class EntryStatus(Enum):
    OK = "ok"
    WOULD_ADD = "would_add"
    MALFORMED = "malformed"
    UNRESOLVED = "unresolved"
    NO_PLAYLIST = "no_playlist"


MISS_STATUSES = frozenset({EntryStatus.MALFORMED, EntryStatus.UNRESOLVED, EntryStatus.NO_PLAYLIST})


@dataclass(frozen=True)
class ResolvedAlbum:
    """
    Album chosen for an entry.

    Attributes:
        entry_index: 0-based position of the entry in the list.
        key: The entry's "Artist - Album" key.
        album_id: Bare album ID, or None when unresolved.
        source: "override" or "search".
    """
    entry_index: int
    key: str
    album_id: str | None
    source: str


@dataclass(frozen=True)
class EntryOutcome:
    """
    Result of processing one entry.

    Attributes:
        index: 0-based position of the entry in the list.
        entry: The parsed entry.
        status: What happened to it.
        album_id: Album used, when one was resolved.
        source: "override" or "search", when an album was resolved.
        track_count: Tracks added (OK) or that would be added (WOULD_ADD).
    """
    index: int
    entry: Entry
    status: EntryStatus
    album_id: str | None = None
    source: str | None = None
    track_count: int | None = None

    @property
    def is_miss(self) -> bool:
        return self.status in MISS_STATUSES


@dataclass(frozen=True)
class RunOptions:
    """
    Settings for one run.

    Attributes:
        list_path: Album list path as given by the user (shown in the
                   playlist description and the report).
        playlist_name: Name of the playlist to create.
        public: Create a public playlist.
        dry_run: Resolve and expand only.
        report_path: Where the miss report is written.
    """
    list_path: str
    playlist_name: str
    public: bool = False
    dry_run: bool = False
    report_path: Path = Path("misses.json")

    @property
    def description(self) -> str:
        return f"Built from {self.list_path} (album list → playlist)"


@dataclass
class RunContext:
    """
    Mutable state of one run, owned by PlaylistBuilder.

    Attributes:
        client: Spotify client for every request of the run.
        overrides: Read-only override mapping.
        options: Run settings.
        playlist: Playlist created by this run (None in a dry run).
        misses: Missed entries in list order.
        outcomes: One outcome per processed entry.
    """
    client: SpotifyClient
    overrides: Mapping[str, str]
    options: RunOptions
    playlist: CreatedPlaylist | None = None
    misses: list[MissRecord] = field(default_factory=list)
    outcomes: list[EntryOutcome] = field(default_factory=list)

    def to_report(self) -> RunReport:
        return RunReport(
            playlist_name=self.options.playlist_name,
            list_path=self.options.list_path,
            dry_run=self.options.dry_run,
            misses=tuple(self.misses)
        )


class PlaylistBuilder:
    """
    Runs the pipeline for a list of entries.

    Collaborators default to the standard resolver, expander and inserter
    over the same client; they can be replaced in tests.
    """

    def __init__(
        self,
        client: SpotifyClient,
        overrides: Mapping[str, str],
        options: RunOptions,
        resolver: AlbumResolver | None = None,
        expander: TrackExpander | None = None,
        inserter: TrackInserter | None = None
    ) -> None:
        self.context = RunContext(client=client, overrides=overrides, options=options)
        self.resolver = resolver or AlbumResolver(client)
        self.expander = expander or TrackExpander(client)
        self.inserter = inserter or TrackInserter(client)

    def run(self, entries: Sequence[Entry]) -> RunReport:
        """
        Process every entry and write the report.

        Returns:
            The report that was written.

        Raises:
            SimplyPlaylistsError: Any fatal error, after the partial report
                                  has been written.
        """
        ctx = self.context
        try:
            self._prepare_playlist(ctx)
            total = len(entries)
            for index, entry in enumerate(entries):
                try:
                    outcome = self._process_entry(ctx, index, entry)
                except SimplyPlaylistsError:
                    self._log_failure(index, total, entry)
                    raise
                ctx.outcomes.append(outcome)
                self._log_progress(index, total, outcome)
        except SimplyPlaylistsError as e:
            self._write_partial_report(ctx, e.message)
            raise
        except KeyboardInterrupt:
            self._write_partial_report(ctx, "Interrupted by user")
            raise

        report = ctx.to_report()
        write_report(ctx.options.report_path, report)
        self._log_summary(ctx)
        return report

    # =========================================================================
    # Steps
    # =========================================================================

    def _prepare_playlist(self, ctx: RunContext) -> None:
        if ctx.options.dry_run:
            logger.info(
                f"{Colors.YELLOW}DRY RUN enabled: will not create playlist or add tracks.{Colors.RESET}"
            )
            return

        user_id = ctx.client.current_user_id()
        ctx.playlist = ctx.client.create_playlist(
            user_id,
            ctx.options.playlist_name,
            ctx.options.public,
            ctx.options.description
        )
        logger.info(f"Created playlist: {ctx.playlist.url}")

    def _process_entry(self, ctx: RunContext, index: int, entry: Entry) -> EntryOutcome:
        if entry.is_malformed:
            return self._miss(ctx, index, entry, EntryStatus.MALFORMED, f"malformed line {entry.line_number}")

        resolved = self._resolve_album(ctx, index, entry)
        if resolved.album_id is None:
            return self._miss(ctx, index, entry, EntryStatus.UNRESOLVED, "no matching album")

        uris = self.expander.expand(resolved.album_id)

        if ctx.options.dry_run:
            return EntryOutcome(
                index, entry, EntryStatus.WOULD_ADD,
                album_id=resolved.album_id, source=resolved.source, track_count=len(uris)
            )

        if ctx.playlist is None:
            return self._miss(
                ctx, index, entry, EntryStatus.NO_PLAYLIST, "no playlist to add to",
                album_id=resolved.album_id, source=resolved.source
            )

        self.inserter.add(ctx.playlist.id, uris)
        return EntryOutcome(
            index, entry, EntryStatus.OK,
            album_id=resolved.album_id, source=resolved.source, track_count=len(uris)
        )

    def _resolve_album(self, ctx: RunContext, index: int, entry: Entry) -> ResolvedAlbum:
        """Override first; the resolver is only consulted without one."""
        override_id = lookup_override(ctx.overrides, entry.artist, entry.album)
        if override_id:
            logger.debug(f"Override for '{entry.key}': {override_id}")
            return ResolvedAlbum(index, entry.key, override_id, SOURCE_OVERRIDE)

        candidate = self.resolver.resolve(entry.artist, entry.album)
        return ResolvedAlbum(index, entry.key, candidate.id if candidate else None, SOURCE_SEARCH)

    def _miss(
        self,
        ctx: RunContext,
        index: int,
        entry: Entry,
        status: EntryStatus,
        reason: str,
        album_id: str | None = None,
        source: str | None = None
    ) -> EntryOutcome:
        ctx.misses.append(MissRecord(artist=entry.artist, album=entry.album))
        log_entry_miss(logger, entry.artist, entry.album, reason)
        return EntryOutcome(index, entry, status, album_id=album_id, source=source)

    # =========================================================================
    # Output
    # =========================================================================

    def _log_progress(self, index: int, total: int, outcome: EntryOutcome) -> None:
        via_override = outcome.source == SOURCE_OVERRIDE
        if outcome.status == EntryStatus.MALFORMED:
            tail = f"{Colors.YELLOW}SKIP{Colors.RESET} (malformed)"
        elif outcome.status == EntryStatus.UNRESOLVED:
            tail = format_outcome("MISS")
        elif outcome.status == EntryStatus.NO_PLAYLIST:
            tail = format_outcome("ERROR", via_override=via_override) + " (no playlist)"
        elif outcome.status == EntryStatus.WOULD_ADD:
            tail = format_outcome("WOULD ADD", outcome.track_count, via_override)
        else:
            tail = format_outcome("OK", outcome.track_count, via_override)
        logger.info(f"[{index + 1}/{total}] {outcome.entry.key} ... {tail}")

    def _log_failure(self, index: int, total: int, entry: Entry) -> None:
        tail = format_outcome("ERROR")
        logger.info(f"[{index + 1}/{total}] {entry.key} ... {tail}")

    def _log_summary(self, ctx: RunContext) -> None:
        added = sum(1 for o in ctx.outcomes if not o.is_miss)
        verb = "would be added" if ctx.options.dry_run else "added"
        logger.info(
            f"\nDone. {added}/{len(ctx.outcomes)} album(s) {verb}, "
            f"{len(ctx.misses)} miss(es) written to {ctx.options.report_path}"
        )

    def _write_partial_report(self, ctx: RunContext, error: str) -> None:
        try:
            write_report(ctx.options.report_path, ctx.to_report(), aborted_error=error)
        except ReportError as e:
            logger.error(f"Could not write partial report: {e}")
            return
        logger.warning(
            f"Run aborted; {len(ctx.misses)} miss(es) so far written to {ctx.options.report_path}"
        )


def build_playlist(
    client: SpotifyClient,
    entries: Sequence[Entry],
    overrides: Mapping[str, str],
    options: RunOptions
) -> RunReport:
    """
    Run the pipeline with default collaborators.

    See PlaylistBuilder.run().
    """
    return PlaylistBuilder(client, overrides, options).run(entries)
