"""
Track expansion and playlist insertion.

    - TrackExpander: album ID -> every track URI, following pagination
    - TrackInserter: track URIs -> sequential insertion batches

Both are strictly sequential: one request in flight at a time.
"""

from simply_playlists.core.logger import get_logger
from simply_playlists.spotify.client import SpotifyClient
from simply_playlists.utils import chunked


logger = get_logger(__name__)

# Spotify API maximums
TRACKS_PAGE_SIZE = 50
INSERT_BATCH_SIZE = 100


class TrackExpander:
    """
    Expands an album into its ordered track URIs.

    Example:
        expander = TrackExpander(client)
        uris = expander.expand("1lXY618HWkwYKJWBRYR4MK")
        # A 130-track album takes 3 requests (50 + 50 + 30)
    """

    def __init__(self, client: SpotifyClient, page_size: int = TRACKS_PAGE_SIZE) -> None:
        self.client = client
        self.page_size = page_size

    def expand(self, album_id: str) -> list[str]:
        """
        Return every track URI of the album in album order.

        An album with no tracks yields an empty list.

        Raises:
            SpotifyError: If any page request fails.
        """
        page = self.client.album_tracks(album_id, limit=self.page_size)
        uris = list(page.track_uris)
        pages = 1

        while page.next_url:
            next_page = self.client.next_tracks(page)
            if next_page is None:
                break
            page = next_page
            uris.extend(page.track_uris)
            pages += 1

        logger.debug(f"Album {album_id}: {len(uris)} tracks in {pages} page(s)")
        return uris


class TrackInserter:
    """
    Appends tracks to a playlist in fixed-size batches.

    Batches are sent in order and never retried. If one fails the error
    propagates immediately: later batches are not sent and earlier ones
    stay in the playlist.
    """

    def __init__(self, client: SpotifyClient, batch_size: int = INSERT_BATCH_SIZE) -> None:
        self.client = client
        self.batch_size = batch_size

    def add(self, playlist_id: str, uris: list[str]) -> int:
        """
        Insert `uris` into the playlist.

        Returns:
            Number of insertion requests made (0 for an empty list).

        Raises:
            SpotifyError: If a batch fails.
        """
        calls = 0
        for batch in chunked(uris, self.batch_size):
            self.client.add_tracks(playlist_id, batch)
            calls += 1
        logger.debug(f"Added {len(uris)} tracks to {playlist_id} in {calls} request(s)")
        return calls
