"""
Utility functions for simply-playlists.

This module contains small, pure helpers shared across the pipeline:
    - normalize: Canonical form of artist/album text for comparison
    - entry_key: The "Artist - Album" key used by overrides and progress lines
    - extract_album_id: Unwrap "scheme:album:<id>" override values
    - chunked: Split a sequence into fixed-size consecutive chunks
"""

import re
from typing import Iterator, Sequence, TypeVar

T = TypeVar("T")

_ALBUM_URI_PATTERN = re.compile(r"^[^:]+:album:(.+)$")
_DISALLOWED_CHARS = re.compile(r"[^a-z0-9\s'-]")
_WHITESPACE_RUN = re.compile(r"\s+")


def normalize(text: str) -> str:
    """
    Canonicalize artist or album text for equality and substring checks.

    Steps, in order:
        1. Lower-case
        2. "&" becomes "and"
        3. Curly apostrophe becomes a straight one
        4. Drop everything except a-z, 0-9, whitespace, apostrophe and hyphen
        5. Collapse whitespace runs to one space and trim

    The result is never stored or displayed.

    Examples:
        normalize("Simon & Garfunkel")      # "simon and garfunkel"
        normalize("Don’t Stop (Deluxe!)")   # "don't stop deluxe"
        normalize("  Sigur   Rós ")         # "sigur rs"
    """
    text = text.lower()
    text = text.replace("&", "and")
    text = text.replace("’", "'")
    text = _DISALLOWED_CHARS.sub("", text)
    text = _WHITESPACE_RUN.sub(" ", text)
    return text.strip()


def entry_key(artist: str, album: str) -> str:
    """
    Build the exact, non-normalized "Artist - Album" key.

    The joined key is trimmed as well, so an entry with an empty album
    gives "Artist -".

    Examples:
        entry_key(" Ryan Adams ", "Heartbreaker")  # "Ryan Adams - Heartbreaker"
    """
    return f"{artist.strip()} - {album.strip()}".strip()


def extract_album_id(value: str) -> str:
    """
    Extract the bare album ID from an override value.

    Values of the form "scheme:album:<id>" are unwrapped; anything else
    is returned unchanged and trusted as-is.

    Examples:
        extract_album_id("spotify:album:1lXY618HWkwYKJWBRYR4MK")  # "1lXY618HWkwYKJWBRYR4MK"
        extract_album_id("1lXY618HWkwYKJWBRYR4MK")                # "1lXY618HWkwYKJWBRYR4MK"
        extract_album_id("spotify:track:abc")                     # "spotify:track:abc"
    """
    match = _ALBUM_URI_PATTERN.match(value)
    return match.group(1) if match else value


def chunked(items: Sequence[T], size: int) -> Iterator[list[T]]:
    """
    Yield consecutive chunks of at most `size` items, preserving order.

    Raises:
        ValueError: If size is not positive.

    Examples:
        list(chunked([1, 2, 3, 4, 5], 2))  # [[1, 2], [3, 4], [5]]
    """
    if size < 1:
        raise ValueError(f"Chunk size must be positive, got {size}")
    for start in range(0, len(items), size):
        yield list(items[start:start + size])
