"""
Override store.

Overrides pin an "Artist - Album" entry to a specific album when search
picks the wrong edition or finds nothing. The file is a JSON object:

    {
      "Ryan Adams - Heartbreaker": "spotify:album:1lXY618HWkwYKJWBRYR4MK",
      "Nas - Illmatic": "3kEtdS2pH6hKcMU9Wioob1"
    }

Keys are matched exactly (after trimming each side), not normalized.
Values are either a bare album ID or a "scheme:album:<id>" URI.

The store is read once at startup and never written. A missing or broken
file is not an error: the run continues without overrides.
"""

import json
from pathlib import Path
from types import MappingProxyType
from typing import Mapping

from simply_playlists.core.logger import get_logger
from simply_playlists.utils import entry_key, extract_album_id


logger = get_logger(__name__)

EMPTY_OVERRIDES: Mapping[str, str] = MappingProxyType({})


def load_overrides(path: Path) -> Mapping[str, str]:
    """
    Load the override file into a read-only mapping.

    Returns an empty mapping (and logs a warning, except for a plain
    missing file) when the file cannot be used. Entries whose value is
    not a string are skipped with a warning.
    """
    if not path.exists():
        logger.debug(f"No override file at {path}")
        return EMPTY_OVERRIDES

    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = json.load(f)
    except (OSError, UnicodeDecodeError) as e:
        logger.warning(f"Could not read override file {path}: {e}")
        return EMPTY_OVERRIDES
    except json.JSONDecodeError as e:
        logger.warning(f"Ignoring override file {path}: invalid JSON ({e})")
        return EMPTY_OVERRIDES

    if not isinstance(raw, dict):
        logger.warning(f"Ignoring override file {path}: top level must be a JSON object")
        return EMPTY_OVERRIDES

    overrides: dict[str, str] = {}
    for key, value in raw.items():
        if not isinstance(value, str):
            logger.warning(f"Ignoring override for '{key}': value must be a string")
            continue
        overrides[key] = value

    logger.debug(f"Loaded {len(overrides)} override(s) from {path}")
    return MappingProxyType(overrides)


def lookup_override(overrides: Mapping[str, str], artist: str, album: str) -> str | None:
    """
    Return the pinned album ID for an entry, or None.

    Empty values count as absent. URI values are unwrapped to the bare ID.

    Example:
        lookup_override({"A - B": "spotify:album:xyz"}, " A ", "B")  # "xyz"
    """
    value = overrides.get(entry_key(artist, album))
    if not value:
        return None
    return extract_album_id(value)
