"""Test configuration and fixtures"""

import tempfile
from pathlib import Path
from urllib.parse import parse_qs, urlparse

import pytest

from simply_playlists.spotify.models import AlbumTracksPage, CreatedPlaylist, SearchCandidate


def candidate(name, artist, album_id=None):
    """Build a SearchCandidate with a derived ID"""
    album_id = album_id or name.lower().replace(" ", "_")
    return SearchCandidate(
        id=album_id,
        name=name,
        artist_name=artist,
        uri=f"spotify:album:{album_id}"
    )


def track_uris(album_id, count):
    return [f"spotify:track:{album_id}_{n:03d}" for n in range(count)]


class FakeSpotifyClient:
    """
    In-memory stand-in for SpotifyClient.

    search_results maps a query string to its candidates; albums maps an
    album ID to its track URIs. Every call is recorded in `calls`.
    Exceptions in `fail_on` are raised by the named method.
    """

    def __init__(self, search_results=None, albums=None, fail_on=None):
        self.search_results = search_results or {}
        self.albums = albums or {}
        self.fail_on = fail_on or {}
        self.calls = []
        self.added = []
        self.created = []

    def _record(self, method, *args):
        self.calls.append((method, args))
        if method in self.fail_on:
            raise self.fail_on[method]

    def calls_to(self, method):
        return [args for name, args in self.calls if name == method]

    def current_user_id(self):
        self._record("current_user_id")
        return "user_1"

    def search_albums(self, query, limit=10):
        self._record("search_albums", query, limit)
        return list(self.search_results.get(query, []))[:limit]

    def album_tracks(self, album_id, limit=50):
        self._record("album_tracks", album_id, limit)
        return self._page(album_id, 0, limit)

    def next_tracks(self, page):
        self._record("next_tracks", page.next_url)
        if not page.next_url:
            return None
        parsed = urlparse(page.next_url)
        query = parse_qs(parsed.query)
        album_id = parsed.path.split("/")[-2]
        return self._page(album_id, int(query["offset"][0]), int(query["limit"][0]))

    def create_playlist(self, user_id, name, public, description):
        self._record("create_playlist", user_id, name, public, description)
        playlist = CreatedPlaylist(id="pl_1", url="https://open.spotify.com/playlist/pl_1")
        self.created.append(playlist)
        return playlist

    def add_tracks(self, playlist_id, uris):
        self._record("add_tracks", playlist_id, list(uris))
        self.added.append((playlist_id, list(uris)))

    def _page(self, album_id, offset, limit):
        uris = self.albums.get(album_id, [])
        end = offset + limit
        next_url = None
        if end < len(uris):
            next_url = (
                f"https://api.spotify.com/v1/albums/{album_id}/tracks"
                f"?offset={end}&limit={limit}"
            )
        return AlbumTracksPage(track_uris=tuple(uris[offset:end]), next_url=next_url)


@pytest.fixture
def temp_dir():
    """Create temporary directory for tests"""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield Path(temp_dir)


@pytest.fixture
def fake_client():
    """Empty fake client; tests fill search_results and albums"""
    return FakeSpotifyClient()


@pytest.fixture
def clean_env(monkeypatch):
    """Remove Spotify variables and keep .env files out of the way"""
    monkeypatch.delenv("SPOTIFY_CLIENT_ID", raising=False)
    monkeypatch.delenv("SPOTIFY_REDIRECT_URI", raising=False)
    monkeypatch.setattr("simply_playlists.core.config.find_dotenv", lambda **kwargs: "")
    return monkeypatch


@pytest.fixture
def sample_search_item():
    """Album item as returned by the search endpoint"""
    return {
        "id": "1lXY618HWkwYKJWBRYR4MK",
        "name": "Heartbreaker",
        "uri": "spotify:album:1lXY618HWkwYKJWBRYR4MK",
        "album_type": "album",
        "total_tracks": 15,
        "release_date": "2000-09-05",
        "artists": [
            {"id": "2qc41rNTtdLK0tV3mJn2Pm", "name": "Ryan Adams"},
            {"id": "0000000000000000000000", "name": "Guest"}
        ]
    }
