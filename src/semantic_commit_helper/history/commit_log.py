"""
Append-only audit log of selected commit messages.

Each selected message is appended to a plain text file as
``[<ISO-8601 timestamp>] <message>``. Recording is best-effort: a failure
to write is logged and never interrupts the commit.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


DEFAULT_LOG_FILE = Path("checkupcodes.txt")


def format_entry(message: str, timestamp: datetime) -> str:
    stamp = timestamp.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")
    return f"[{stamp}] {message}\n"


def log_commit_to_file(
    message: str,
    log_path: Path = DEFAULT_LOG_FILE,
    now: Optional[datetime] = None,
) -> bool:
    """Append ``message`` to ``log_path``. Returns False if the write failed."""
    entry = format_entry(message, now or datetime.now(timezone.utc))
    try:
        with open(log_path, "a", encoding="utf-8") as handle:
            handle.write(entry)
    except (OSError, UnicodeError) as exc:
        logger.error("Error writing to log file %s: %s", log_path, exc)
        return False
    return True
