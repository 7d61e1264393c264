"""
Data models for Spotify entities.

This module defines immutable dataclasses for the few Spotify objects the
pipeline needs. They are transient: nothing here is persisted.

Design Decisions:
    - All dataclasses are frozen (immutable) to prevent accidental modification
    - Each model has a from_spotify_api() factory that tolerates missing keys
    - Only the fields the pipeline reads are kept
"""

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class SearchCandidate:
    """
    One album returned by a catalog search.

    Attributes:
        id: Spotify album ID (22-character base62 string).
            Example: "1lXY618HWkwYKJWBRYR4MK"
        name: Album title as it appears on Spotify.
              Example: "Heartbreaker (Deluxe Edition)"
        artist_name: Name of the first (primary) listed artist,
                     or "" when Spotify lists none.
        uri: Spotify URI. Example: "spotify:album:1lXY618HWkwYKJWBRYR4MK"
    """
    id: str
    name: str
    artist_name: str
    uri: str

    @classmethod
    def from_spotify_api(cls, album_data: dict[str, Any]) -> "SearchCandidate":
        """
        Create a SearchCandidate from an item of a search response.

        Args:
            album_data: One element of response['albums']['items'].
        """
        artists = album_data.get("artists") or []
        artist_name = (artists[0] or {}).get("name") or "" if artists else ""
        return cls(
            id=album_data.get("id", ""),
            name=album_data.get("name") or "",
            artist_name=artist_name,
            uri=album_data.get("uri", "")
        )


@dataclass(frozen=True)
class AlbumTracksPage:
    """
    One page of an album's track listing.

    Attributes:
        track_uris: Track URIs in album order.
                    Example: ("spotify:track:4cOdK2wGLETKBW3PvgPWqT", ...)
        next_url: Full URL of the next page, or None on the last page.
    """
    track_uris: tuple[str, ...]
    next_url: str | None = None

    @classmethod
    def from_spotify_api(cls, page_data: dict[str, Any]) -> "AlbumTracksPage":
        """
        Create an AlbumTracksPage from an album-tracks paging object.

        Items without a URI (unavailable tracks) are skipped.
        """
        items = page_data.get("items") or []
        return cls(
            track_uris=tuple(item["uri"] for item in items if item and item.get("uri")),
            next_url=page_data.get("next")
        )


@dataclass(frozen=True)
class CreatedPlaylist:
    """
    A playlist created by this run.

    Attributes:
        id: Spotify playlist ID.
        url: Public web URL. Example: "https://open.spotify.com/playlist/..."
    """
    id: str
    url: str

    @classmethod
    def from_spotify_api(cls, playlist_data: dict[str, Any]) -> "CreatedPlaylist":
        return cls(
            id=playlist_data["id"],
            url=(playlist_data.get("external_urls") or {}).get("spotify", "")
        )
