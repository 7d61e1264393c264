"""
Album list parsing.

The list is UTF-8 text with one "Artist - Album" entry per line:

    # Favourites
    Ryan Adams - Heartbreaker
    Crosby, Stills & Nash - Crosby, Stills & Nash
    Godspeed You! Black Emperor - F# A# Infinity - Remastered

A leading byte order mark is dropped. Lines are trimmed; blank lines and
lines starting with "#" are ignored.
The first " - " separates artist from album; any later " - " stays in
the album title. A line without a separator, or with an empty side, is
still an entry but a malformed one: it is reported as a miss.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

from simply_playlists.core.exceptions import InputError
from simply_playlists.utils import entry_key

SEPARATOR = " - "
COMMENT_PREFIX = "#"


@dataclass(frozen=True)
class Entry:
    """
    One parsed line of the album list.

    Attributes:
        artist: Artist text, trimmed. The whole line when there is no separator.
        album: Album text, trimmed. Empty when there is no separator.
        line_number: 1-based line number in the source file.
    """
    artist: str
    album: str
    line_number: int = 0

    @property
    def key(self) -> str:
        """The exact "Artist - Album" key used for overrides and progress."""
        return entry_key(self.artist, self.album)

    @property
    def is_malformed(self) -> bool:
        return not self.artist.strip() or not self.album.strip()


def parse_lines(lines: Iterable[str]) -> list[Entry]:
    """
    Parse list lines into entries, preserving order.

    Example:
        parse_lines(["A - B", "# comment", "", "C - D - E"])
        # [Entry("A", "B", 1), Entry("C", "D - E", 4)]
    """
    entries: list[Entry] = []
    for line_number, raw_line in enumerate(lines, start=1):
        line = raw_line.strip()
        if not line or line.startswith(COMMENT_PREFIX):
            continue
        artist, _, album = line.partition(SEPARATOR)
        entries.append(Entry(artist=artist.strip(), album=album.strip(), line_number=line_number))
    return entries


def parse_list(path: Path) -> list[Entry]:
    """
    Read and parse an album list file.

    Raises:
        InputError: If the file does not exist or cannot be read.
    """
    if not path.is_file():
        raise InputError(
            f"Album list not found: {path}",
            details={"file_path": str(path)}
        )
    try:
        text = path.read_text(encoding="utf-8-sig")
    except (OSError, UnicodeDecodeError) as e:
        raise InputError(
            f"Failed to read album list {path}: {e}",
            details={"file_path": str(path), "original_error": str(e)}
        ) from e
    return parse_lines(text.splitlines())
