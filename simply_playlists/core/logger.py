"""
Logging configuration for simply-playlists.

This module sets up the logging system with multiple outputs:
    - Console: Per-entry progress with tqdm-compatible, colored formatting
    - log_full_*.log: Complete log of all events (DEBUG and above)
    - log_errors_*.log: Only ERROR and CRITICAL level messages
    - misses_*.log: Entries that did not end up in the playlist, with the reason

File outputs are only created when a log directory is given.

Usage:
    from simply_playlists.core.logger import setup_logging, get_logger

    setup_logging(log_dir)  # Call once at startup
    logger = get_logger(__name__)  # Get logger for each module

    logger.info("Creating playlist")
    log_entry_miss(logger, artist="Ryan Adams", album="Heartbreaker", reason="no search result")
"""

import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import TextIO

from tqdm import tqdm


# Log format for file output (detailed with timestamp)
FILE_LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
FILE_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class Colors:
    """ANSI color codes for terminal output."""
    RESET = "\033[0m"
    RED = "\033[31m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    BLUE = "\033[34m"
    CYAN = "\033[36m"
    WHITE = "\033[37m"
    BOLD = "\033[1m"


class ColoredConsoleFormatter(logging.Formatter):
    """
    Formatter that colors the level name on console output.

    INFO records are printed bare so that per-entry progress lines
    read like plain output; other levels keep a colored prefix.
    """

    LEVEL_COLORS = {
        logging.DEBUG: Colors.BLUE,
        logging.INFO: Colors.GREEN,
        logging.WARNING: Colors.YELLOW,
        logging.ERROR: Colors.RED,
        logging.CRITICAL: Colors.BOLD + Colors.RED,
    }

    def format(self, record: logging.LogRecord) -> str:
        if record.levelno == logging.INFO:
            return record.getMessage()
        color = self.LEVEL_COLORS.get(record.levelno, Colors.WHITE)
        return f"{color}{record.levelname}{Colors.RESET}: {record.getMessage()}"


class TqdmLoggingHandler(logging.Handler):
    """
    Logging handler that writes through tqdm.write().

    Messages appear above any active progress bar instead of
    corrupting it.

    Attributes:
        stream: The output stream (defaults to sys.stderr).
    """

    def __init__(self, stream: TextIO | None = None) -> None:
        super().__init__()
        self.stream = stream

    def emit(self, record: logging.LogRecord) -> None:
        try:
            msg = self.format(record)
            tqdm.write(msg, file=self.stream or sys.stderr)
        except Exception:
            self.handleError(record)


class MissedEntryHandler(logging.Handler):
    """
    Handler that captures missed entries into a human-readable file.

    The JSON report written at the end of a run is the machine-readable
    record; this file is written as the run progresses, so it survives an
    aborted run. Format:

        Ryan Adams - Heartbreaker
        Reason: no search result

    Only records carrying a 'missed_entry_artist' attribute are written.
    Use log_entry_miss() to produce them.

    Attributes:
        report_path: Path to the misses log file.
        report_file: Open file handle, or None before open()/after close().
    """

    def __init__(self, report_path: Path) -> None:
        super().__init__()
        self.report_path = report_path
        self.report_file: TextIO | None = None

    def open(self) -> None:
        """Open the file for writing, overwriting existing content."""
        self.report_file = open(self.report_path, "w", encoding="utf-8")

    def emit(self, record: logging.LogRecord) -> None:
        if not hasattr(record, "missed_entry_artist"):
            return

        if self.report_file is None:
            return

        try:
            artist = getattr(record, "missed_entry_artist", "")
            album = getattr(record, "missed_entry_album", "")
            reason = getattr(record, "missed_entry_reason", "unknown")

            self.report_file.write(f"{artist} - {album}\n")
            self.report_file.write(f"Reason: {reason}\n\n")
            self.report_file.flush()
        except Exception:
            self.handleError(record)

    def close(self) -> None:
        """Close the file handle. Safe to call multiple times."""
        if self.report_file is not None:
            try:
                self.report_file.close()
            except OSError:
                pass
            self.report_file = None
        super().close()


class ErrorOnlyFilter(logging.Filter):
    """Filter that only allows ERROR and CRITICAL level records."""

    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno >= logging.ERROR


def setup_logging(log_dir: Path | None = None, verbose: bool = False) -> None:
    """
    Configure the logging system for the application.

    Call ONCE at startup, after the configuration is loaded and before
    any network activity.

    Args:
        log_dir: Directory where log files are created. Created if missing.
                 If None, only the console handler is installed.
        verbose: Show DEBUG records (resolver decisions, page fetches)
                 on the console.

    Behavior:
        1. Configure root logger level to DEBUG and drop existing handlers
        2. Add the console handler (TqdmLoggingHandler) at INFO or DEBUG
        3. If log_dir is given, add timestamped full, error-only and
           misses log files
        4. Quiet the chatty third-party loggers (urllib3, spotipy)
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)
    root_logger.handlers.clear()

    console_handler = TqdmLoggingHandler()
    console_handler.setLevel(logging.DEBUG if verbose else logging.INFO)
    console_handler.setFormatter(ColoredConsoleFormatter())
    root_logger.addHandler(console_handler)

    for noisy in ("urllib3", "spotipy"):
        logging.getLogger(noisy).setLevel(logging.WARNING)

    if log_dir is None:
        return

    log_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")

    full_handler = logging.FileHandler(
        log_dir / f"log_full_{timestamp}.log", mode="w", encoding="utf-8"
    )
    full_handler.setLevel(logging.DEBUG)
    full_handler.setFormatter(logging.Formatter(FILE_LOG_FORMAT, FILE_DATE_FORMAT))
    root_logger.addHandler(full_handler)

    error_handler = logging.FileHandler(
        log_dir / f"log_errors_{timestamp}.log", mode="w", encoding="utf-8"
    )
    error_handler.setLevel(logging.DEBUG)  # Filter handles the level restriction
    error_handler.setFormatter(logging.Formatter(FILE_LOG_FORMAT, FILE_DATE_FORMAT))
    error_handler.addFilter(ErrorOnlyFilter())
    root_logger.addHandler(error_handler)

    misses_handler = MissedEntryHandler(log_dir / f"misses_{timestamp}.log")
    misses_handler.open()
    root_logger.addHandler(misses_handler)


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for a module.

    Args:
        name: The logger name, typically __name__ of the calling module.

    Note:
        Loggers obtained before setup_logging() is called have no
        handlers of their own; records propagate to whatever the root
        logger has at emit time.
    """
    return logging.getLogger(name)


def format_outcome(label: str, track_count: int | None = None, via_override: bool = False) -> str:
    """
    Format the tail of a per-entry progress line with colors.

    Examples:
        format_outcome("OK", 12)                      -> "OK (12 tracks)"
        format_outcome("WOULD ADD", 9, True)          -> "OVERRIDE WOULD ADD (9 tracks)"
        format_outcome("MISS")                        -> "MISS"
    """
    color = Colors.GREEN if label in ("OK", "WOULD ADD") else Colors.RED
    prefix = f"{Colors.CYAN}OVERRIDE{Colors.RESET} " if via_override else ""
    suffix = f" ({track_count} tracks)" if track_count is not None else ""
    return f"{prefix}{color}{label}{Colors.RESET}{suffix}"


def log_entry_miss(
    logger: logging.Logger,
    artist: str,
    album: str,
    reason: str
) -> None:
    """
    Log an entry that will not be added to the playlist.

    Logs at DEBUG (the progress line already shows the miss on the
    console) and attaches the extra fields MissedEntryHandler
    writes to the misses log file.

    Example:
        log_entry_miss(logger, "Ryan Adams", "Heartbreaker", "no search result")
    """
    logger.debug(
        f"Missed: {artist} - {album} ({reason})",
        extra={
            "missed_entry_artist": artist,
            "missed_entry_album": album,
            "missed_entry_reason": reason,
        }
    )


def shutdown_logging() -> None:
    """
    Flush, close and remove all root handlers.

    Typically called in a finally block at application exit.
    """
    root_logger = logging.getLogger()

    for handler in root_logger.handlers[:]:
        try:
            handler.flush()
            handler.close()
        except (OSError, ValueError):
            pass
        root_logger.removeHandler(handler)
