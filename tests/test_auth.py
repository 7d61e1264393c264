"""Test PKCE helpers and the authorization callback"""

import base64
import hashlib
from unittest.mock import Mock
from urllib.parse import parse_qs, urlparse

import pytest
import requests

from simply_playlists.core.config import SpotifyConfig
from simply_playlists.core.exceptions import AuthError
from simply_playlists.spotify import auth
from simply_playlists.spotify.auth import (
    CallbackServer,
    build_authorize_url,
    code_challenge,
    exchange_code,
    generate_code_verifier,
    generate_state,
    parse_callback_params,
    with_port,
)


class TestPkceHelpers:

    def test_verifier_length_and_alphabet(self):
        verifier = generate_code_verifier()
        assert 43 <= len(verifier) <= 128
        assert "=" not in verifier and "+" not in verifier and "/" not in verifier

    def test_verifiers_are_random(self):
        assert generate_code_verifier() != generate_code_verifier()
        assert generate_state() != generate_state()

    def test_challenge_is_s256(self):
        verifier = "dBjftJeZ4CVP-mB92K27uhbUJU1p1r_wW1gFWFOEjXk"
        expected = base64.urlsafe_b64encode(
            hashlib.sha256(verifier.encode("ascii")).digest()
        ).decode("ascii").rstrip("=")
        assert code_challenge(verifier) == expected
        # Known vector from RFC 7636, appendix B
        assert code_challenge(verifier) == "E9Melhoa2OwvFrEMTJguCHaoeK1t8URWbuGJSstw-cM"

    def test_authorize_url(self):
        url = build_authorize_url("client", "http://127.0.0.1:5173/callback", "challenge", "state")
        parsed = urlparse(url)
        params = {k: v[0] for k, v in parse_qs(parsed.query).items()}

        assert f"{parsed.scheme}://{parsed.netloc}{parsed.path}" == auth.AUTHORIZE_URL
        assert params == {
            "client_id": "client",
            "response_type": "code",
            "redirect_uri": "http://127.0.0.1:5173/callback",
            "code_challenge_method": "S256",
            "code_challenge": "challenge",
            "state": "state",
            "scope": "playlist-modify-private playlist-modify-public",
        }

    def test_with_port(self):
        assert with_port("http://127.0.0.1:5173/callback", 8888) == "http://127.0.0.1:8888/callback"
        assert with_port("http://localhost/cb", 9000) == "http://localhost:9000/cb"
        assert with_port("http://[::1]:5173/callback", 8888) == "http://[::1]:8888/callback"


class TestParseCallbackParams:

    def test_valid(self):
        assert parse_callback_params({"code": ["abc"], "state": ["s"]}, "s") == "abc"

    def test_state_mismatch(self):
        with pytest.raises(AuthError, match="state mismatch"):
            parse_callback_params({"code": ["abc"], "state": ["other"]}, "s")

    def test_missing_state(self):
        with pytest.raises(AuthError):
            parse_callback_params({"code": ["abc"]}, "s")

    def test_missing_code(self):
        with pytest.raises(AuthError, match="code"):
            parse_callback_params({"state": ["s"]}, "s")

    def test_error_from_spotify(self):
        with pytest.raises(AuthError, match="access_denied"):
            parse_callback_params({"error": ["access_denied"], "state": ["s"]}, "s")


@pytest.fixture
def callback_server():
    server = CallbackServer("127.0.0.1", 0, "/callback", "expected")
    server.start()
    yield server
    server.stop()


class TestCallbackServer:
    """Test the one-shot rendezvous over a real local socket"""

    def url(self, server, query):
        return f"http://127.0.0.1:{server.port}/callback?{query}"

    def test_resolves_with_code(self, callback_server):
        response = requests.get(self.url(callback_server, "code=abc&state=expected"), timeout=5)

        assert response.status_code == 200
        assert "Authorized" in response.text
        assert callback_server.wait(timeout=5) == "abc"

    def test_rejects_wrong_state(self, callback_server):
        response = requests.get(self.url(callback_server, "code=abc&state=forged"), timeout=5)

        assert response.status_code == 400
        with pytest.raises(AuthError, match="state mismatch"):
            callback_server.wait(timeout=5)

    def test_other_paths_do_not_resolve(self, callback_server):
        response = requests.get(f"http://127.0.0.1:{callback_server.port}/favicon.ico", timeout=5)

        assert response.status_code == 404
        assert not callback_server.result.done()

    def test_first_callback_wins(self, callback_server):
        requests.get(self.url(callback_server, "code=first&state=expected"), timeout=5)
        requests.get(self.url(callback_server, "code=second&state=expected"), timeout=5)

        assert callback_server.wait(timeout=5) == "first"

    def test_timeout(self, callback_server):
        with pytest.raises(AuthError, match="Timed out"):
            callback_server.wait(timeout=0.05)

    def test_port_in_use(self, callback_server):
        with pytest.raises(AuthError, match="callback server"):
            CallbackServer("127.0.0.1", callback_server.port, "/callback", "s")


class TestExchangeCode:

    def test_success(self, monkeypatch):
        post = Mock(return_value=Mock(status_code=200, json=Mock(return_value={"access_token": "tok"})))
        monkeypatch.setattr(auth.requests, "post", post)

        token = exchange_code("client", "code", "http://127.0.0.1:5173/callback", "verifier")

        assert token == "tok"
        _, kwargs = post.call_args
        assert kwargs["data"] == {
            "client_id": "client",
            "grant_type": "authorization_code",
            "code": "code",
            "redirect_uri": "http://127.0.0.1:5173/callback",
            "code_verifier": "verifier",
        }

    def test_http_error(self, monkeypatch):
        post = Mock(return_value=Mock(status_code=400, text='{"error":"invalid_grant"}'))
        monkeypatch.setattr(auth.requests, "post", post)

        with pytest.raises(AuthError, match="invalid_grant"):
            exchange_code("client", "code", "http://127.0.0.1:5173/callback", "verifier")

    def test_network_error(self, monkeypatch):
        monkeypatch.setattr(auth.requests, "post", Mock(side_effect=requests.ConnectionError("offline")))

        with pytest.raises(AuthError):
            exchange_code("client", "code", "http://127.0.0.1:5173/callback", "verifier")

    def test_missing_token(self, monkeypatch):
        post = Mock(return_value=Mock(status_code=200, json=Mock(return_value={})))
        monkeypatch.setattr(auth.requests, "post", post)

        with pytest.raises(AuthError):
            exchange_code("client", "code", "http://127.0.0.1:5173/callback", "verifier")


class TestAuthorize:
    """Test the full flow with the browser replaced by a direct request"""

    def test_full_flow(self, monkeypatch):
        def fake_browser(url):
            params = {k: v[0] for k, v in parse_qs(urlparse(url).query).items()}
            redirect = params["redirect_uri"]
            requests.get(f"{redirect}?code=the_code&state={params['state']}", timeout=5)
            return True

        post = Mock(return_value=Mock(status_code=200, json=Mock(return_value={"access_token": "tok"})))
        monkeypatch.setattr(auth.webbrowser, "open", fake_browser)
        monkeypatch.setattr(auth.requests, "post", post)

        server = CallbackServer("127.0.0.1", 0, "/", "unused")
        free_port = server.port
        server.stop()

        config = SpotifyConfig(
            client_id="client",
            redirect_uri=f"http://127.0.0.1:{free_port}/callback",
            auth_timeout=5
        )

        assert auth.authorize(config) == "tok"
        assert post.call_args.kwargs["data"]["code"] == "the_code"
