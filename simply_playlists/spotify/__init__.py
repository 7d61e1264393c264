"""
Spotify integration for simply-playlists.

    - auth: PKCE authorization with a one-shot local callback server
    - client: SpotifyClient wrapping spotipy with SpotifyError mapping
    - models: SearchCandidate, AlbumTracksPage, CreatedPlaylist
"""

from simply_playlists.spotify.auth import authorize
from simply_playlists.spotify.client import SpotifyClient
from simply_playlists.spotify.models import AlbumTracksPage, CreatedPlaylist, SearchCandidate

__all__ = [
    "authorize",
    "SpotifyClient",
    "SearchCandidate",
    "AlbumTracksPage",
    "CreatedPlaylist",
]
