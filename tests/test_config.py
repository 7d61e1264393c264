"""Test configuration loading"""

from pathlib import Path

import pytest

from simply_playlists.core.config import (
    DEFAULT_PLAYLIST_NAME,
    DEFAULT_REDIRECT_URI,
    SpotifyConfig,
    load_config,
)
from simply_playlists.core.exceptions import ConfigError


def write_config(path, text):
    path.write_text(text, encoding="utf-8")
    return path


class TestLoadConfig:
    """Test sources and precedence"""

    def test_defaults_with_env_client_id(self, clean_env, temp_dir):
        clean_env.chdir(temp_dir)
        clean_env.setenv("SPOTIFY_CLIENT_ID", "env_id")

        config = load_config()

        assert config.spotify.client_id == "env_id"
        assert config.spotify.redirect_uri == DEFAULT_REDIRECT_URI
        assert config.spotify.requests_timeout == 10
        assert config.spotify.auth_timeout == 300
        assert config.files.overrides == Path("overrides.json")
        assert config.files.report == Path("misses.json")
        assert config.files.log_directory is None
        assert config.playlist.name == DEFAULT_PLAYLIST_NAME
        assert config.playlist.public is False

    def test_missing_client_id(self, clean_env, temp_dir):
        clean_env.chdir(temp_dir)
        with pytest.raises(ConfigError) as exc_info:
            load_config()
        assert "SPOTIFY_CLIENT_ID" in str(exc_info.value)

    def test_yaml_in_working_directory(self, clean_env, temp_dir):
        clean_env.chdir(temp_dir)
        write_config(temp_dir / "config.yaml", """
spotify:
  client_id: "yaml_id"
  redirect_uri: "http://127.0.0.1:8888/callback"
  requests_timeout: 20
files:
  overrides: "pins.json"
  log_directory: "logs"
playlist:
  name: "From YAML"
  public: true
""")

        config = load_config()

        assert config.spotify.client_id == "yaml_id"
        assert config.spotify.callback_port == 8888
        assert config.spotify.requests_timeout == 20
        assert config.files.overrides == Path("pins.json")
        assert config.files.log_directory == Path("logs")
        assert config.playlist.name == "From YAML"
        assert config.playlist.public is True

    def test_environment_wins_over_yaml(self, clean_env, temp_dir):
        path = write_config(temp_dir / "custom.yaml", """
spotify:
  client_id: "yaml_id"
  redirect_uri: "http://127.0.0.1:8888/callback"
""")
        clean_env.setenv("SPOTIFY_CLIENT_ID", "env_id")
        clean_env.setenv("SPOTIFY_REDIRECT_URI", "http://127.0.0.1:9999/cb")

        config = load_config(path)

        assert config.spotify.client_id == "env_id"
        assert config.spotify.redirect_uri == "http://127.0.0.1:9999/cb"

    def test_explicit_missing_file(self, clean_env, temp_dir):
        with pytest.raises(ConfigError):
            load_config(temp_dir / "nope.yaml")

    def test_empty_yaml_uses_defaults(self, clean_env, temp_dir):
        path = write_config(temp_dir / "config.yaml", "")
        clean_env.setenv("SPOTIFY_CLIENT_ID", "env_id")
        assert load_config(path).playlist.name == DEFAULT_PLAYLIST_NAME

    @pytest.mark.parametrize("text", [
        "spotify: [unclosed",
        "- just\n- a list\n",
        "spotify: 5\n",
        "spotify:\n  requests_timeout: 0\n",
        "spotify:\n  requests_timeout: true\n",
        "spotify:\n  open_browser: sometimes\n",
        "spotify:\n  redirect_uri: not-a-url\n",
        "spotify:\n  redirect_uri: http://127.0.0.1:99999/callback\n",
        "spotify:\n  redirect_uri: http://127.0.0.1:abc/callback\n",
        "playlist:\n  name: ''\n",
        "playlist:\n  public: yes-please\n",
        "files:\n  report: 12\n",
    ])
    def test_invalid_values(self, clean_env, temp_dir, text):
        path = write_config(temp_dir / "config.yaml", text)
        clean_env.setenv("SPOTIFY_CLIENT_ID", "env_id")
        with pytest.raises(ConfigError):
            load_config(path)

    def test_bad_redirect_port_names_the_field(self, clean_env, temp_dir):
        path = write_config(temp_dir / "config.yaml", "spotify:\n  redirect_uri: http://127.0.0.1:99999/callback\n")
        clean_env.setenv("SPOTIFY_CLIENT_ID", "env_id")
        with pytest.raises(ConfigError) as exc_info:
            load_config(path)
        assert exc_info.value.details["field"] == "spotify.redirect_uri"

    def test_dotenv_file_is_loaded(self, monkeypatch, temp_dir):
        monkeypatch.delenv("SPOTIFY_CLIENT_ID", raising=False)
        monkeypatch.delenv("SPOTIFY_REDIRECT_URI", raising=False)
        monkeypatch.chdir(temp_dir)
        (temp_dir / ".env").write_text("SPOTIFY_CLIENT_ID=dotenv_id\n", encoding="utf-8")

        try:
            config = load_config()
        finally:
            # load_dotenv writes to os.environ directly
            monkeypatch.delenv("SPOTIFY_CLIENT_ID", raising=False)

        assert config.spotify.client_id == "dotenv_id"


class TestSpotifyConfig:

    def test_callback_port(self):
        assert SpotifyConfig(client_id="x").callback_port == 5173
        assert SpotifyConfig(client_id="x", redirect_uri="http://localhost/cb").callback_port == 80
        assert SpotifyConfig(client_id="x", redirect_uri="https://localhost/cb").callback_port == 443
