"""
Miss report.

Written once at the end of every run (dry or live) and overwritten each
time:

    {
      "generatedAt": "2026-01-31T18:04:11.123Z",
      "playlistName": "Simply Created Playlist",
      "listPath": "playlist.txt",
      "dryRun": false,
      "misses": [
        {"artist": "Ryan Adams", "album": "Heartbreaker"}
      ]
    }

Misses keep the original, non-normalized text so they can be copied into
the override file. A run aborted by a fatal error writes the misses found
so far plus "aborted": true and "error": "<message>".
"""

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from simply_playlists.core.exceptions import ReportError
from simply_playlists.core.logger import get_logger


logger = get_logger(__name__)


def utc_timestamp(moment: datetime | None = None) -> str:
    """
    ISO 8601 UTC timestamp with millisecond precision and a "Z" suffix.

    Example:
        utc_timestamp(datetime(2026, 1, 31, 18, 4, 11, 123456, tzinfo=timezone.utc))
        # "2026-01-31T18:04:11.123Z"
    """
    moment = (moment or datetime.now(timezone.utc)).astimezone(timezone.utc)
    return moment.strftime("%Y-%m-%dT%H:%M:%S.") + f"{moment.microsecond // 1000:03d}Z"


@dataclass(frozen=True)
class MissRecord:
    artist: str
    album: str

    def to_dict(self) -> dict[str, str]:
        return {"artist": self.artist, "album": self.album}


@dataclass(frozen=True)
class RunReport:
    """
    Summary of one run.

    Attributes:
        playlist_name: Name the playlist was (or would have been) created with.
        list_path: Album list path as given by the user.
        dry_run: Whether the run skipped playlist creation.
        misses: Entries that did not end up in the playlist, in list order.
        generated_at: UTC timestamp, see utc_timestamp().
    """
    playlist_name: str
    list_path: str
    dry_run: bool
    misses: tuple[MissRecord, ...] = ()
    generated_at: str = field(default_factory=utc_timestamp)

    def to_dict(self) -> dict[str, Any]:
        return {
            "generatedAt": self.generated_at,
            "playlistName": self.playlist_name,
            "listPath": self.list_path,
            "dryRun": self.dry_run,
            "misses": [miss.to_dict() for miss in self.misses],
        }


def write_report(path: Path, report: RunReport, aborted_error: str | None = None) -> None:
    """
    Write the report as two-space indented JSON with a trailing newline.

    Args:
        path: Destination, overwritten if present.
        report: The report to write.
        aborted_error: Message of the fatal error that stopped the run.
                       When given, "aborted" and "error" keys are added.

    Raises:
        ReportError: If the file cannot be written.
    """
    data = report.to_dict()
    if aborted_error is not None:
        data["aborted"] = True
        data["error"] = aborted_error

    try:
        with open(path, "w", encoding="utf-8") as f:
            f.write(json.dumps(data, indent=2, ensure_ascii=False) + "\n")
    except OSError as e:
        raise ReportError(
            f"Failed to write report {path}: {e}",
            details={"file_path": str(path), "original_error": str(e)}
        ) from e

    logger.debug(f"Wrote report with {len(report.misses)} miss(es) to {path}")
