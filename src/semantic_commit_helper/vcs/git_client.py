"""
Git client implementation for semantic_commit_helper.

This module wraps the Git operations the commit assistant needs: listing
staged files, reading their staged diffs and contents, and creating the
commit. All subprocess calls go through :meth:`GitClient._run` so that
unit tests can mock them easily.
"""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from semantic_commit_helper.diff.summarizer import FileContent


logger = logging.getLogger(__name__)
# Attach a null handler to avoid logging errors when the root logger is not
# configured. Logs will propagate to the root when configured by the CLI.
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


@dataclass
class FileChange:
    """Representation of a single staged file change in the repository."""

    path: str
    status: str  # e.g. 'M' modified, 'A' added, 'D' deleted, 'R' renamed


class GitError(Exception):
    """Raised when a Git command fails."""

    pass


class GitClient:
    """Client for interacting with a Git repository."""

    def __init__(self, repo_root: Path) -> None:
        self.repo_root = repo_root

    @staticmethod
    def find_repo_root(start: Path) -> Optional[Path]:
        """Find the root of the Git repository starting from ``start``.

        Walk upwards until a ``.git`` directory is found or the filesystem
        root is reached.
        """
        current = start.resolve()
        while True:
            if (current / ".git").exists():
                return current
            if current.parent == current:
                return None
            current = current.parent

    def _run(self, args: List[str], check: bool = True) -> subprocess.CompletedProcess:
        """Run a Git command in the repository root.

        Raises
        ------
        GitError
            If the command exits with a non-zero status when ``check`` is True.
        """
        full_cmd = ["git"] + args
        logger.debug("Executing Git command: %s", " ".join(full_cmd))
        result = subprocess.run(
            full_cmd,
            cwd=self.repo_root,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            encoding="utf-8",
            errors="replace",
        )
        if check and result.returncode != 0:
            logger.error(
                "Git command failed: %s\nSTDOUT: %s\nSTDERR: %s",
                " ".join(full_cmd),
                result.stdout,
                result.stderr,
            )
            raise GitError(result.stderr.strip() or result.stdout.strip())
        return result

    def get_staged_changes(self) -> List[FileChange]:
        """Return the files staged in the index.

        Parses ``git status --porcelain -z`` so paths arrive unquoted; only
        the index column (the first status character) is considered, so
        unstaged and untracked files are excluded. Renamed and copied files
        report their new path.
        """
        result = self._run(["status", "--porcelain", "-z"], check=True)
        entries = iter(result.stdout.split("\0"))
        changes = []
        for entry in entries:
            if len(entry) < 4:
                continue
            index_status = entry[0]
            if "R" in entry[:2] or "C" in entry[:2]:
                # The original path follows as its own NUL-terminated entry.
                next(entries, None)
            if index_status in (" ", "?", "!"):
                continue
            changes.append(FileChange(path=entry[3:], status=index_status))
        return changes

    def get_staged_files(self) -> List[str]:
        return [change.path for change in self.get_staged_changes()]

    def get_diff(self, file_path: str) -> str:
        """Return the staged unified diff of ``file_path``."""
        return self._run(["diff", "--cached", "--", file_path], check=True).stdout

    def _show(self, revision: str) -> str:
        # Missing blobs (new or deleted files) read as empty content.
        result = self._run(["show", revision], check=False)
        return result.stdout if result.returncode == 0 else ""

    def get_file_content(self, file_path: str) -> FileContent:
        """Return the staged diff with the HEAD and index versions of ``file_path``."""
        return FileContent(
            diff=self.get_diff(file_path),
            old_content=self._show(f"HEAD:{file_path}"),
            new_content=self._show(f":{file_path}"),
        )

    def commit(self, message: str) -> None:
        """Create a commit of the staged changes with the given message.

        Raises
        ------
        GitError
            If the commit fails.
        """
        self._run(["commit", "-m", message], check=True)
