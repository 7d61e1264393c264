"""
Album resolution for simply-playlists.

Turns a loosely formatted (artist, album) pair into a catalog album with
two progressively looser searches.

Matching Algorithm:
    Stage 1, strict query "album:<album> artist:<artist>" (top 10):
        a. First candidate whose name AND primary artist both equal the
           target after normalization
        b. Else first candidate whose name equals the target album
        c. Else go to stage 2
    Stage 2, loose query "<artist> <album>" (top 10):
        Pool = candidates whose primary artist equals the target artist,
        or every candidate when none does. Within the pool:
        a. First candidate whose name contains the target album
        b. Else first candidate whose name is contained in the target album
        c. Else the first candidate
        d. Else nothing (a miss)

Candidates are never re-ranked: ties go to catalog order. Comparison uses
utils.normalize() on both sides; the queries themselves carry the raw text.

Usage:
    from simply_playlists.playlist.resolver import AlbumResolver

    resolver = AlbumResolver(client)
    candidate = resolver.resolve("Ryan Adams", "Heartbreaker")
    if candidate is None:
        ...  # miss
"""

from typing import Sequence

from simply_playlists.core.logger import get_logger
from simply_playlists.spotify.client import SpotifyClient
from simply_playlists.spotify.models import SearchCandidate
from simply_playlists.utils import normalize


logger = get_logger(__name__)

SEARCH_LIMIT = 10


def strict_query(artist: str, album: str) -> str:
    return f"album:{album} artist:{artist}"


def loose_query(artist: str, album: str) -> str:
    return f"{artist} {album}"


# =============================================================================
# SELECTION RULES (pure)
# =============================================================================

def select_strict(
    candidates: Sequence[SearchCandidate],
    artist: str,
    album: str
) -> tuple[SearchCandidate | None, str]:
    """
    Apply the stage 1 rules to strict search results.

    Returns:
        (candidate, rule) where rule is "exact" (name and artist match),
        "name" (name match only) or "" when nothing matched.
    """
    target_artist = normalize(artist)
    target_album = normalize(album)

    for candidate in candidates:
        if (normalize(candidate.name) == target_album
                and normalize(candidate.artist_name) == target_artist):
            return candidate, "exact"

    for candidate in candidates:
        if normalize(candidate.name) == target_album:
            return candidate, "name"

    return None, ""


def select_loose(
    candidates: Sequence[SearchCandidate],
    artist: str,
    album: str
) -> tuple[SearchCandidate | None, str]:
    """
    Apply the stage 2 rules to loose search results.

    Returns:
        (candidate, rule) where rule is "contains", "contained", "first"
        or "" when there were no candidates at all.
    """
    target_artist = normalize(artist)
    target_album = normalize(album)

    same_artist = [c for c in candidates if normalize(c.artist_name) == target_artist]
    pool = same_artist or list(candidates)

    for candidate in pool:
        if target_album in normalize(candidate.name):
            return candidate, "contains"

    for candidate in pool:
        if normalize(candidate.name) in target_album:
            return candidate, "contained"

    if pool:
        return pool[0], "first"

    return None, ""


# =============================================================================
# RESOLVER
# =============================================================================

class AlbumResolver:
    """
    Resolves (artist, album) pairs to catalog albums.

    Attributes:
        client: Spotify client used for searches.
        limit: Candidates requested per search.

    Raises (from resolve):
        SpotifyError: Search failures are not caught here.
    """

    def __init__(self, client: SpotifyClient, limit: int = SEARCH_LIMIT) -> None:
        self.client = client
        self.limit = limit

    def resolve(self, artist: str, album: str) -> SearchCandidate | None:
        """
        Find the best catalog album for an entry.

        Returns:
            The chosen candidate, or None when both stages found nothing.
        """
        strict_results = self.client.search_albums(strict_query(artist, album), limit=self.limit)
        candidate, rule = select_strict(strict_results, artist, album)
        if candidate is not None:
            logger.debug(
                f"Resolved '{artist} - {album}' by strict search ({rule}): "
                f"{candidate.artist_name} - {candidate.name} [{candidate.id}]"
            )
            return candidate

        loose_results = self.client.search_albums(loose_query(artist, album), limit=self.limit)
        candidate, rule = select_loose(loose_results, artist, album)
        if candidate is not None:
            logger.debug(
                f"Resolved '{artist} - {album}' by loose search ({rule}): "
                f"{candidate.artist_name} - {candidate.name} [{candidate.id}]"
            )
            return candidate

        logger.debug(
            f"No album found for '{artist} - {album}' "
            f"({len(strict_results)} strict, {len(loose_results)} loose results)"
        )
        return None
