"""
Spotify Web API client for simply-playlists.

This module wraps a spotipy.Spotify instance and exposes only the calls
the pipeline makes. Every transport failure is converted to SpotifyError
so callers handle a single exception type.

Usage:
    from simply_playlists.spotify.client import SpotifyClient

    client = SpotifyClient.from_token(access_token, requests_timeout=10)
    user_id = client.current_user_id()
    candidates = client.search_albums("album:Heartbreaker artist:Ryan Adams", limit=10)

Design:
    The client is an ordinary object owned by the run that created it.
    There is no module-level instance: tests pass a fake object with the
    same methods.
"""

from typing import Any, Callable, TypeVar

import requests
import spotipy

from simply_playlists.core.exceptions import SpotifyError
from simply_playlists.core.logger import get_logger
from simply_playlists.spotify.models import AlbumTracksPage, CreatedPlaylist, SearchCandidate


logger = get_logger(__name__)

T = TypeVar("T")


class SpotifyClient:
    """
    Thin Spotify API client.

    Attributes:
        _spotify: The underlying spotipy.Spotify instance.

    Rate Limiting:
        spotipy retries 429 and 5xx responses on its own (urllib3 Retry).
        Whatever still fails reaches the caller as SpotifyError with
        is_rate_limit or http_status set. Nothing is retried here.
    """

    def __init__(self, spotify_instance: spotipy.Spotify) -> None:
        self._spotify = spotify_instance

    @classmethod
    def from_token(cls, access_token: str, requests_timeout: int = 10) -> "SpotifyClient":
        """
        Build a client authenticated with a bearer token.

        Args:
            access_token: User access token from the authorization flow.
            requests_timeout: Seconds before each HTTP request times out.
        """
        return cls(spotipy.Spotify(auth=access_token, requests_timeout=requests_timeout))

    # =========================================================================
    # User Operations
    # =========================================================================

    def current_user_id(self) -> str:
        """
        Get the ID of the authorized user (GET /me).

        Raises:
            SpotifyError: If the request fails or the response has no ID.
        """
        result = self._call("fetch current user", {}, self._spotify.current_user)
        user_id = (result or {}).get("id")
        if not user_id:
            raise SpotifyError(
                "Spotify returned no user ID for the current user",
                is_auth_error=True
            )
        return user_id

    # =========================================================================
    # Album Operations
    # =========================================================================

    def search_albums(self, query: str, limit: int = 10) -> list[SearchCandidate]:
        """
        Search the catalog for albums.

        Args:
            query: Search expression, e.g. "album:Heartbreaker artist:Ryan Adams".
            limit: Maximum number of candidates.

        Returns:
            Candidates in catalog order. Empty if nothing matched.

        Raises:
            SpotifyError: If the request fails.
        """
        result = self._call(
            "search albums",
            {"query": query},
            self._spotify.search,
            q=query,
            limit=limit,
            type="album"
        )
        items = ((result or {}).get("albums") or {}).get("items") or []
        return [SearchCandidate.from_spotify_api(item) for item in items if item]

    def album_tracks(self, album_id: str, limit: int = 50) -> AlbumTracksPage:
        """
        Fetch the first page of an album's tracks.

        Args:
            album_id: Bare Spotify album ID.
            limit: Page size (Spotify allows at most 50).

        Raises:
            SpotifyError: If the album does not exist or the request fails.
        """
        result = self._call(
            "fetch album tracks",
            {"album_id": album_id},
            self._spotify.album_tracks,
            album_id,
            limit=limit
        )
        if result is None:
            raise SpotifyError(
                f"Album not found: {album_id}",
                details={"album_id": album_id}
            )
        return AlbumTracksPage.from_spotify_api(result)

    def next_tracks(self, page: AlbumTracksPage) -> AlbumTracksPage | None:
        """
        Fetch the page after `page`, or return None on the last page.

        Raises:
            SpotifyError: If the request fails.
        """
        if not page.next_url:
            return None
        result = self._call(
            "fetch next album tracks page",
            {"url": page.next_url},
            self._spotify.next,
            {"next": page.next_url}
        )
        if result is None:
            return None
        return AlbumTracksPage.from_spotify_api(result)

    # =========================================================================
    # Playlist Operations
    # =========================================================================

    def create_playlist(
        self,
        user_id: str,
        name: str,
        public: bool,
        description: str
    ) -> CreatedPlaylist:
        """
        Create a new, empty playlist owned by `user_id`.

        Raises:
            SpotifyError: If the request fails.
        """
        result = self._call(
            "create playlist",
            {"user_id": user_id, "name": name},
            self._spotify.user_playlist_create,
            user_id,
            name,
            public=public,
            description=description
        )
        if not result or not result.get("id"):
            raise SpotifyError(
                "Spotify returned no playlist ID after creating the playlist",
                details={"name": name}
            )
        return CreatedPlaylist.from_spotify_api(result)

    def add_tracks(self, playlist_id: str, uris: list[str]) -> None:
        """
        Append tracks to a playlist in one request.

        Args:
            playlist_id: Target playlist ID.
            uris: Track URIs (Spotify accepts at most 100 per request).

        Raises:
            SpotifyError: If the request fails.
        """
        self._call(
            "add tracks to playlist",
            {"playlist_id": playlist_id, "count": len(uris)},
            self._spotify.playlist_add_items,
            playlist_id,
            uris
        )

    # =========================================================================
    # Helpers
    # =========================================================================

    def _call(
        self,
        action: str,
        details: dict[str, Any],
        func: Callable[..., T],
        *args: Any,
        **kwargs: Any
    ) -> T:
        """
        Invoke a spotipy method, converting failures to SpotifyError.

        429 responses set is_rate_limit; 401 and 403 set is_auth_error.
        """
        logger.debug(f"Spotify request: {action} {details}")
        try:
            return func(*args, **kwargs)
        except spotipy.SpotifyException as e:
            status = e.http_status
            if status == 429:
                raise SpotifyError(
                    f"Rate limited while trying to {action}",
                    details={**details, "http_status": 429},
                    http_status=429,
                    is_rate_limit=True
                ) from e
            raise SpotifyError(
                f"Failed to {action}: {e.msg or e}",
                details={**details, "http_status": status, "original_error": str(e)},
                http_status=status,
                is_auth_error=status in (401, 403)
            ) from e
        except requests.RequestException as e:
            raise SpotifyError(
                f"Network error while trying to {action}: {e}",
                details={**details, "original_error": str(e)}
            ) from e
