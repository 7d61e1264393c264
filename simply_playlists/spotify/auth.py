"""
Spotify authorization for simply-playlists.

Implements the OAuth2 authorization-code flow with PKCE against the
Spotify accounts service. No client secret is involved, so the only
credential the user configures is the application client ID.

Flow:
    1. Generate a code verifier, its S256 challenge and a random state
    2. Start a one-shot HTTP server on the redirect URI's host and port
    3. Open the authorization page in the browser (the URL is also logged)
    4. The callback handler checks the state and resolves a Future with
       the authorization code, or with an AuthError
    5. Stop the server and exchange the code for an access token

The token lives only in memory for the duration of the run.

Usage:
    from simply_playlists.spotify.auth import authorize

    access_token = authorize(config.spotify)
"""

import base64
import hashlib
import os
import secrets
import threading
import webbrowser
from concurrent.futures import Future, TimeoutError as FutureTimeoutError
from http.server import BaseHTTPRequestHandler, HTTPServer
from urllib.parse import parse_qs, urlencode, urlparse, urlunparse

import requests

from simply_playlists.core.config import SpotifyConfig
from simply_playlists.core.exceptions import AuthError
from simply_playlists.core.logger import get_logger


logger = get_logger(__name__)

AUTHORIZE_URL = "https://accounts.spotify.com/authorize"
TOKEN_URL = "https://accounts.spotify.com/api/token"

# Creating playlists and adding items needs both; which one applies
# depends on the playlist's visibility.
SCOPES = "playlist-modify-private playlist-modify-public"

TOKEN_REQUEST_TIMEOUT = 30

SUCCESS_HTML = """
<html>
<head><title>Authorization Success</title></head>
<body style="font-family: Arial, sans-serif; text-align: center; margin-top: 50px;">
    <h1 style="color: #1DB954;">&#9989; Authorized.</h1>
    <p>You can close this tab and return to the terminal.</p>
</body>
</html>
"""

ERROR_HTML = """
<html>
<head><title>Authorization Error</title></head>
<body style="font-family: Arial, sans-serif; text-align: center; margin-top: 50px;">
    <h1 style="color: #E22134;">Authorization Failed</h1>
    <p>{message}</p>
    <p>Return to the terminal for details.</p>
</body>
</html>
"""


# =============================================================================
# PKCE helpers
# =============================================================================

def _b64url_no_pad(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")


def generate_code_verifier() -> str:
    """
    Generate a PKCE code verifier.

    64 random bytes encode to 86 URL-safe characters, inside the
    43-128 range the PKCE standard requires.
    """
    return _b64url_no_pad(os.urandom(64))


def code_challenge(verifier: str) -> str:
    """Return the S256 code challenge for a verifier."""
    return _b64url_no_pad(hashlib.sha256(verifier.encode("ascii")).digest())


def generate_state() -> str:
    """Return a random value for the OAuth state parameter."""
    return secrets.token_urlsafe(16)


def build_authorize_url(client_id: str, redirect_uri: str, challenge: str, state: str) -> str:
    """
    Build the URL of the Spotify consent page.

    Example:
        build_authorize_url("abc", "http://127.0.0.1:5173/callback", challenge, state)
        # "https://accounts.spotify.com/authorize?client_id=abc&response_type=code&..."
    """
    params = {
        "client_id": client_id,
        "response_type": "code",
        "redirect_uri": redirect_uri,
        "code_challenge_method": "S256",
        "code_challenge": challenge,
        "state": state,
        "scope": SCOPES,
    }
    return f"{AUTHORIZE_URL}?{urlencode(params)}"


def with_port(redirect_uri: str, port: int) -> str:
    """
    Return redirect_uri with its port replaced.

    Example:
        with_port("http://127.0.0.1:5173/callback", 8888)
        # "http://127.0.0.1:8888/callback"
        with_port("http://[::1]:5173/callback", 8888)
        # "http://[::1]:8888/callback"
    """
    parsed = urlparse(redirect_uri)
    host = parsed.hostname or ""
    if ":" in host:
        host = f"[{host}]"
    netloc = f"{host}:{port}"
    return urlunparse(parsed._replace(netloc=netloc))


def parse_callback_params(params: dict[str, list[str]], expected_state: str) -> str:
    """
    Validate the query parameters of a callback and return the code.

    Args:
        params: Parsed query string (as returned by urllib.parse.parse_qs).
        expected_state: The state value sent with the authorization request.

    Raises:
        AuthError: If Spotify returned an error, the state does not match,
                   or the code is missing.
    """
    error = (params.get("error") or [None])[0]
    if error:
        raise AuthError(
            f"Spotify authorization was refused: {error}",
            details={"error": error}
        )

    state = (params.get("state") or [None])[0]
    if state != expected_state:
        raise AuthError(
            "OAuth state mismatch on the authorization callback",
            details={"expected_state": expected_state, "received_state": state}
        )

    code = (params.get("code") or [None])[0]
    if not code:
        raise AuthError("Authorization callback did not include a code")

    return code


# =============================================================================
# One-shot callback server
# =============================================================================

class CallbackHandler(BaseHTTPRequestHandler):
    """
    HTTP request handler for the OAuth2 callback.

    Requests to any path other than the redirect path get a 404 and leave
    the pending result untouched (browsers also ask for /favicon.ico).
    The first callback on the redirect path resolves server.result.
    """

    server: "CallbackServer"

    def do_GET(self):
        parsed_url = urlparse(self.path)
        if parsed_url.path != self.server.callback_path:
            self.send_response(404)
            self.end_headers()
            return

        query_params = parse_qs(parsed_url.query)
        try:
            code = parse_callback_params(query_params, self.server.expected_state)
        except AuthError as e:
            self._respond(400, ERROR_HTML.format(message=e.message))
            if not self.server.result.done():
                self.server.result.set_exception(e)
            return

        self._respond(200, SUCCESS_HTML)
        if not self.server.result.done():
            self.server.result.set_result(code)

    def _respond(self, status: int, html: str) -> None:
        self.send_response(status)
        self.send_header("Content-type", "text/html; charset=utf-8")
        self.end_headers()
        self.wfile.write(html.encode("utf-8"))

    def log_message(self, format, *args):
        """Route request logs to DEBUG instead of stderr."""
        logger.debug(f"Callback server: {format % args}")


class CallbackServer(HTTPServer):
    """
    Local HTTP server that waits for exactly one authorization callback.

    Attributes:
        callback_path: Path component of the redirect URI.
        expected_state: State value the callback must echo back.
        result: Future resolved with the code or an AuthError.

    Example:
        server = CallbackServer("127.0.0.1", 5173, "/callback", state)
        server.start()
        try:
            code = server.wait(timeout=300)
        finally:
            server.stop()
    """

    def __init__(self, host: str, port: int, callback_path: str, expected_state: str) -> None:
        try:
            super().__init__((host, port), CallbackHandler)
        except OSError as e:
            raise AuthError(
                f"Could not start the callback server on {host}:{port}: {e}",
                details={"host": host, "port": port, "original_error": str(e)}
            ) from e
        self.callback_path = callback_path or "/"
        self.expected_state = expected_state
        self.result: Future[str] = Future()
        self._thread: threading.Thread | None = None

    @property
    def port(self) -> int:
        return self.server_address[1]

    def start(self) -> None:
        """Serve requests on a daemon thread."""
        self._thread = threading.Thread(target=self.serve_forever, daemon=True)
        self._thread.start()

    def wait(self, timeout: float) -> str:
        """
        Block until the callback arrives.

        Raises:
            AuthError: On timeout or when the callback was rejected.
        """
        try:
            return self.result.result(timeout=timeout)
        except FutureTimeoutError as e:
            raise AuthError(
                f"Timed out after {timeout} seconds waiting for the authorization callback",
                details={"timeout": timeout}
            ) from e

    def stop(self) -> None:
        """Stop serving and release the socket. Safe to call multiple times."""
        if self._thread is not None:
            self.shutdown()
            self._thread.join()
            self._thread = None
        self.server_close()


# =============================================================================
# Token exchange and full flow
# =============================================================================

def exchange_code(client_id: str, code: str, redirect_uri: str, verifier: str) -> str:
    """
    Exchange an authorization code for an access token.

    Returns:
        The access token.

    Raises:
        AuthError: If the request fails or the response has no access token.
    """
    data = {
        "client_id": client_id,
        "grant_type": "authorization_code",
        "code": code,
        "redirect_uri": redirect_uri,
        "code_verifier": verifier,
    }
    headers = {"Content-Type": "application/x-www-form-urlencoded"}

    try:
        response = requests.post(TOKEN_URL, headers=headers, data=data, timeout=TOKEN_REQUEST_TIMEOUT)
    except requests.RequestException as e:
        raise AuthError(
            f"Token exchange failed: {e}",
            details={"original_error": str(e)}
        ) from e

    if response.status_code != 200:
        raise AuthError(
            f"Token exchange failed: HTTP {response.status_code} {response.text}",
            details={"http_status": response.status_code}
        )

    try:
        token_info = response.json()
    except ValueError as e:
        raise AuthError("Token exchange returned invalid JSON") from e

    access_token = token_info.get("access_token") if isinstance(token_info, dict) else None
    if not access_token:
        raise AuthError("Token exchange response did not include an access token")

    return access_token


def authorize(config: SpotifyConfig) -> str:
    """
    Run the interactive authorization flow and return an access token.

    Args:
        config: Spotify settings (client ID, redirect URI, auth timeout,
                whether to open the browser).

    Raises:
        AuthError: If any step of the handshake fails.
    """
    verifier = generate_code_verifier()
    state = generate_state()
    redirect = urlparse(config.redirect_uri)

    server = CallbackServer(
        redirect.hostname or "127.0.0.1",
        config.callback_port,
        redirect.path,
        state
    )
    server.start()
    try:
        authorize_url = build_authorize_url(
            config.client_id, config.redirect_uri, code_challenge(verifier), state
        )
        logger.info(f"Authorize this app in your browser:\n{authorize_url}")
        if config.open_browser:
            webbrowser.open(authorize_url)
        code = server.wait(timeout=config.auth_timeout)
    finally:
        server.stop()

    access_token = exchange_code(config.client_id, code, config.redirect_uri, verifier)
    logger.info("Authorized with Spotify")
    return access_token
