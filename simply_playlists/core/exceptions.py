"""
Exception classes for simply-playlists.

This module defines all custom exceptions used throughout the application.
Only fatal conditions are exceptions: an entry that cannot be resolved is
a miss and is reported as a result value, never raised.

Exception Hierarchy:
    SimplyPlaylistsError (base)
        ConfigError - Configuration file or environment issues
        InputError - Album list file issues
        AuthError - Authorization handshake issues
        SpotifyError - Spotify API issues
        ReportError - Report file issues
"""


class SimplyPlaylistsError(Exception):
    """
    Base exception for all simply-playlists errors.

    Attributes:
        message: Human-readable error description.
        details: Optional dictionary with additional context (e.g., paths, HTTP status).

    Example:
        try:
            # some operation
        except SimplyPlaylistsError as e:
            logger.error(f"Operation failed: {e.message}")
            if e.details:
                logger.debug(f"Details: {e.details}")
    """

    def __init__(self, message: str, details: dict | None = None) -> None:
        """
        Initialize the base exception.

        Args:
            message: Human-readable error description that will be shown to the user.
            details: Optional dictionary containing additional context about the error.
                     Common keys include:
                     - 'file_path': File involved in the error
                     - 'http_status': HTTP status returned by Spotify
                     - 'original_error': The underlying exception if wrapping another error
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        """Return the error message for display."""
        return self.message


class ConfigError(SimplyPlaylistsError):
    """
    Raised when the configuration is missing or invalid.

    This is a CRITICAL error raised before any network activity.

    Common causes:
        - SPOTIFY_CLIENT_ID not set in the environment, .env or config.yaml
        - An explicit --config file that does not exist
        - config.yaml has invalid YAML syntax
        - Invalid field values (e.g., non-numeric timeout)
    """
    pass


class InputError(SimplyPlaylistsError):
    """
    Raised when the album list file cannot be read.

    This is a CRITICAL error raised before any network activity.
    Malformed lines inside the list are NOT input errors: they are
    recorded as misses and the run continues.
    """
    pass


class AuthError(SimplyPlaylistsError):
    """
    Raised when the Spotify authorization handshake fails.

    This is a CRITICAL error that aborts the run before any playlist
    is created.

    Common causes:
        - State parameter mismatch on the callback (possible CSRF)
        - Callback received without an authorization code
        - User denied access (error parameter on the callback)
        - Timed out waiting for the callback
        - Token exchange rejected by the accounts service
    """
    pass


class SpotifyError(SimplyPlaylistsError):
    """
    Raised when a Spotify Web API call fails.

    Every Spotify error is fatal to the run: the remaining entries are
    not processed. Nothing is retried beyond what spotipy applies itself.

    Attributes:
        http_status: HTTP status code if the API answered, else None.
        is_auth_error: True for 401/403 responses (expired or missing scope).
        is_rate_limit: True for 429 responses.

    Example:
        raise SpotifyError(
            "Failed to search albums: 503 Service Unavailable",
            details={'query': 'album:Heartbreaker artist:Ryan Adams'},
            http_status=503
        )
    """

    def __init__(
        self,
        message: str,
        details: dict | None = None,
        http_status: int | None = None,
        is_auth_error: bool = False,
        is_rate_limit: bool = False
    ) -> None:
        super().__init__(message, details)
        self.http_status = http_status
        self.is_auth_error = is_auth_error
        self.is_rate_limit = is_rate_limit


class ReportError(SimplyPlaylistsError):
    """
    Raised when the miss report cannot be written.

    Common causes:
        - Report directory does not exist
        - Permission denied
        - Disk full
    """
    pass
