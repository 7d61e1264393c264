# tests/test_utils.py
"""Test utilities and helpers"""

import pytest

from simply_playlists.utils import chunked, entry_key, extract_album_id, normalize


class TestNormalize:
    """Test text normalization"""

    def test_lowercases_and_trims(self):
        assert normalize("  Heartbreaker  ") == "heartbreaker"

    def test_ampersand_becomes_and(self):
        assert normalize("Simon & Garfunkel") == "simon and garfunkel"
        assert normalize("Simon & Garfunkel") == normalize("Simon and Garfunkel")

    def test_curly_apostrophe_becomes_straight(self):
        assert normalize("Don’t Stop") == "don't stop"
        assert normalize("Don’t Stop") == normalize("Don't Stop")

    def test_strips_punctuation_but_keeps_hyphen_and_apostrophe(self):
        assert normalize("Heartbreaker (Deluxe!)") == "heartbreaker deluxe"
        assert normalize("Jay-Z") == "jay-z"
        assert normalize("F# A# ∞") == "f a"

    def test_non_ascii_letters_are_dropped(self):
        assert normalize("Sigur Rós") == "sigur rs"

    def test_collapses_whitespace(self):
        assert normalize("Crosby,\tStills  &\nNash") == "crosby stills and nash"

    def test_empty_and_symbol_only(self):
        assert normalize("") == ""
        assert normalize("!!!") == ""

    @pytest.mark.parametrize("text", [
        "Simon & Garfunkel",
        "Don’t Stop (Deluxe Edition)",
        "  Sigur   Rós ",
        "AC/DC - Back In Black",
        "Crosby, Stills & Nash",
        "",
    ])
    def test_idempotent(self, text):
        once = normalize(text)
        assert normalize(once) == once


class TestEntryKey:
    """Test override/progress key building"""

    def test_trims_each_side(self):
        assert entry_key(" Ryan Adams ", " Heartbreaker ") == "Ryan Adams - Heartbreaker"

    def test_is_not_normalized(self):
        assert entry_key("Simon & Garfunkel", "Bookends") == "Simon & Garfunkel - Bookends"

    def test_empty_album(self):
        assert entry_key("Lonely line", "") == "Lonely line -"


class TestExtractAlbumId:
    """Test override value unwrapping"""

    def test_unwraps_album_uri(self):
        assert extract_album_id("spotify:album:1lXY618HWkwYKJWBRYR4MK") == "1lXY618HWkwYKJWBRYR4MK"

    def test_any_scheme_is_accepted(self):
        assert extract_album_id("custom:album:abc") == "abc"

    def test_bare_id_passes_through(self):
        assert extract_album_id("1lXY618HWkwYKJWBRYR4MK") == "1lXY618HWkwYKJWBRYR4MK"

    def test_other_uri_kinds_pass_through(self):
        assert extract_album_id("spotify:track:abc") == "spotify:track:abc"


class TestChunked:
    """Test fixed-size chunking"""

    def test_last_chunk_is_shorter(self):
        assert list(chunked([1, 2, 3, 4, 5], 2)) == [[1, 2], [3, 4], [5]]

    def test_exact_multiple(self):
        assert list(chunked(list(range(200)), 100)) == [list(range(100)), list(range(100, 200))]

    def test_empty(self):
        assert list(chunked([], 100)) == []

    def test_invalid_size(self):
        with pytest.raises(ValueError):
            list(chunked([1], 0))
