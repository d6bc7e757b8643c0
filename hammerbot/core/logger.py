"""
HammerBot - Logger Module
=========================

Tree-style console and file logging, stamped in New York time.

DESIGN:
    A chat session produces a steady stream of small records: one line per
    dropped event, a short tree per sanction or toggle. Trees keep the
    fields of one decision visually together when the console scrolls.

    Files live in one folder per day:
        logs/2024-03-01/Hammer-2024-03-01.log         everything
        logs/2024-03-01/Hammer-Errors-2024-03-01.log  error and critical only

    Day folders older than the retention period are removed at startup and
    whenever the retention is changed from config.
"""

import os
import uuid
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Tuple

from zoneinfo import ZoneInfo


# =============================================================================
# Constants
# =============================================================================

LOGS_DIR = Path(os.getenv("HAMMER_LOG_DIR", "logs"))
"""Root of the dated log folders; HAMMER_LOG_DIR overrides it."""

LOG_RETENTION_DAYS = 7

NY_TZ = ZoneInfo("America/New_York")

DATE_FOLDER_FORMAT = "%Y-%m-%d"

Details = Optional[List[Tuple[str, str]]]


# =============================================================================
# Tree Logger Class
# =============================================================================

class TreeLogger:
    """
    Writes every record to the console and today's log file.

    Attributes:
        run_id: Short id written in the header of each run.
        logs_dir: Root holding the dated folders.
        log_file: Today's main file.
        error_file: Today's errors-only file.
    """

    def __init__(self, logs_dir: Path = LOGS_DIR, retention_days: int = LOG_RETENTION_DAYS) -> None:
        self.run_id: str = uuid.uuid4().hex[:8]
        self.logs_dir = logs_dir
        self.retention_days = retention_days

        today = datetime.now(NY_TZ).strftime(DATE_FOLDER_FORMAT)
        self.log_dir = self.logs_dir / today
        self.log_dir.mkdir(parents=True, exist_ok=True)
        self.log_file = self.log_dir / f"Hammer-{today}.log"
        self.error_file = self.log_dir / f"Hammer-Errors-{today}.log"

        self._cleanup_old_logs()
        self._write_session_header()

    # =========================================================================
    # Retention
    # =========================================================================

    def _cleanup_old_logs(self) -> None:
        """Delete day folders past the retention period. Other folders are kept."""
        if not self.logs_dir.exists():
            return

        now = datetime.now()
        removed = []

        for folder in self.logs_dir.iterdir():
            if not folder.is_dir():
                continue
            try:
                folder_date = datetime.strptime(folder.name, DATE_FOLDER_FORMAT)
            except ValueError:
                continue  # errors/ and friends
            if (now - folder_date).days <= self.retention_days:
                continue
            for path in folder.iterdir():
                path.unlink()
            folder.rmdir()
            removed.append(folder.name)

        if removed:
            print(f"[LOG CLEANUP] Removed {len(removed)} day folder(s): {', '.join(sorted(removed))}")

    def set_retention(self, days: int) -> None:
        """Apply a retention period loaded after startup and clean up again."""
        self.retention_days = days
        self._cleanup_old_logs()

    # =========================================================================
    # Writing
    # =========================================================================

    def _write_session_header(self) -> None:
        started = datetime.now(NY_TZ).strftime("%Y-%m-%d %I:%M:%S %p %Z")
        rule = "=" * 60
        self._append(self.log_file, f"\n{rule}\nHAMMER RUN {self.run_id} - started {started}\n{rule}\n")

    @staticmethod
    def _append(path: Path, text: str) -> None:
        with open(path, "a", encoding="utf-8") as f:
            f.write(text)

    def _write(
        self,
        message: str,
        emoji: str = "",
        include_timestamp: bool = True,
        is_error: bool = False,
    ) -> None:
        """
        Print one line and append it to the log file(s).

        Args:
            message: Line content.
            emoji: Marker placed before the message.
            include_timestamp: False for tree branches and spacer lines.
            is_error: Also append to the errors-only file.
        """
        parts = []
        if include_timestamp:
            parts.append(datetime.now(NY_TZ).strftime("[%I:%M:%S %p %Z]"))
        if emoji:
            parts.append(emoji)
        parts.append(message)
        line = " ".join(parts)

        print(line)
        self._append(self.log_file, f"{line}\n")
        if is_error:
            self._append(self.error_file, f"{line}\n")

    def _write_details(self, details: List[Tuple[str, str]], is_error: bool = False) -> None:
        last = len(details) - 1
        for i, (key, value) in enumerate(details):
            branch = "└─" if i == last else "├─"
            self._write(f"  {branch} {key}: {value}", include_timestamp=False, is_error=is_error)

    def _log(self, msg: str, emoji: str, details: Details, is_error: bool = False) -> None:
        self._write(msg, emoji, is_error=is_error)
        if details:
            self._write_details(details, is_error=is_error)

    # =========================================================================
    # Public API
    # =========================================================================

    def tree(self, title: str, items: List[Tuple[str, str]], emoji: str = "📦") -> None:
        """
        Log a titled group of fields, blank-line separated in the file.

        Example output:
            [08:15:00 PM EST] 🔨 Sanction Issued
              ├─ User: spammer
              ├─ Text: ban me!
              └─ Command: /ban spammer
        """
        self._append(self.log_file, "\n")
        self._log(title, emoji, items)
        self._append(self.log_file, "\n")

    def debug(self, msg: str, details: Details = None) -> None:
        """Only written when the DEBUG environment variable is set."""
        if os.getenv("DEBUG"):
            self._log(msg, "🔍", details)

    def info(self, msg: str, details: Details = None) -> None:
        self._log(msg, "ℹ️", details)

    def success(self, msg: str, details: Details = None) -> None:
        self._log(msg, "✅", details)

    def warning(self, msg: str, details: Details = None) -> None:
        self._log(msg, "⚠️", details)

    def error(self, msg: str, details: Details = None) -> None:
        """Errors with details are padded with blank lines in both files."""
        if not details:
            self._log(msg, "❌", None, is_error=True)
            return
        self._write("", include_timestamp=False, is_error=True)
        self._log(msg, "❌", details, is_error=True)
        self._write("", include_timestamp=False, is_error=True)

    def critical(self, msg: str, details: Details = None) -> None:
        self._log(msg, "🚨", details, is_error=True)


# =============================================================================
# Global Instance
# =============================================================================

logger = TreeLogger()


__all__ = [
    "logger",
    "TreeLogger",
    "NY_TZ",
]
