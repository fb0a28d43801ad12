"""
Summaries of staged changes for prompt construction.

Each staged file's unified diff is reduced to a :class:`ChangeRecord`
holding the added and removed line counts, the kind of change and the
file extension. :func:`summarize_changes` aggregates the records into a
:class:`ChangeSummary` whose text lists the files ordered by impact
(added + removed lines), largest first.

The summarizer is a pure function of its input and does not inspect file
contents beyond the diff text.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, FrozenSet, List, Mapping, Tuple, Union


class ChangeKind(Enum):
    ADD = "Add"
    MODIFY = "Modify"
    DELETE = "Delete"


@dataclass(frozen=True)
class FileContent:
    """Diff and full before/after content of a staged file."""

    diff: str
    old_content: str = ""
    new_content: str = ""


ChangeInput = Union[str, FileContent]


@dataclass(frozen=True)
class ChangeRecord:
    """Structured view of a single staged file's diff.

    Attributes
    ----------
    path : str
        File path relative to the repository root.
    kind : ChangeKind
        Derived only from the line counts: additions without removals is
        ``ADD``, removals without additions is ``DELETE``, anything else
        (including no changed lines at all) is ``MODIFY``.
    extension : str
        Text after the last ``.`` of the file name, empty if there is none.
    added_lines : int
        Number of ``+`` lines.
    removed_lines : int
        Number of ``-`` lines.
    change_text : str
        Removed line text followed by added line text, prefixes stripped.
    """

    path: str
    kind: ChangeKind
    extension: str
    added_lines: int
    removed_lines: int
    change_text: str

    @property
    def impact(self) -> int:
        return self.added_lines + self.removed_lines

    @property
    def description(self) -> str:
        return f"{self.kind.name}: {self.path} ({self.impact} lines changed)\n{self.change_text}"


@dataclass(frozen=True)
class ChangeStats:
    """Aggregate counts over all change records."""

    total_files: int = 0
    added: int = 0
    modified: int = 0
    deleted: int = 0
    extensions: FrozenSet[str] = frozenset()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalFiles": self.total_files,
            "added": self.added,
            "modified": self.modified,
            "deleted": self.deleted,
            "fileTypes": sorted(self.extensions),
        }

    def render(self) -> str:
        """Stable JSON rendering used for the prompt ``{stats}`` placeholder."""
        return json.dumps(self.to_dict(), indent=2)


@dataclass(frozen=True)
class ChangeSummary:
    """Aggregate of all change records with the ranked description text."""

    records: Tuple[ChangeRecord, ...] = ()
    stats: ChangeStats = field(default_factory=ChangeStats)
    text: str = ""

    @property
    def total_files(self) -> int:
        return self.stats.total_files

    @property
    def extensions(self) -> FrozenSet[str]:
        return self.stats.extensions

    def count(self, kind: ChangeKind) -> int:
        return sum(1 for record in self.records if record.kind is kind)


def classify_kind(added_lines: int, removed_lines: int) -> ChangeKind:
    if removed_lines == 0 and added_lines > 0:
        return ChangeKind.ADD
    if added_lines == 0 and removed_lines > 0:
        return ChangeKind.DELETE
    return ChangeKind.MODIFY


def file_extension(path: str) -> str:
    """Return the text after the last ``.`` in the file name of ``path``."""
    name = path.replace("\\", "/").rsplit("/", 1)[-1]
    if "." not in name:
        return ""
    return name.rsplit(".", 1)[1]


def split_changed_lines(diff_text: str) -> Tuple[List[str], List[str]]:
    """Partition a unified diff into added and removed lines, prefixes stripped.

    Lines before the first ``@@`` hunk header (``diff --git``, ``index``,
    ``---``/``+++`` file headers) are skipped when a hunk header exists.
    """
    lines = diff_text.splitlines()
    in_body = not any(line.startswith("@@") for line in lines)
    added: List[str] = []
    removed: List[str] = []
    for line in lines:
        if line.startswith("@@"):
            in_body = True
            continue
        if not in_body:
            continue
        if line.startswith("diff --git"):
            # A second file header inside the same text starts a new preamble.
            in_body = False
            continue
        if line.startswith("+"):
            added.append(line[1:])
        elif line.startswith("-"):
            removed.append(line[1:])
    return added, removed


def build_change_record(path: str, diff_text: str) -> ChangeRecord:
    added, removed = split_changed_lines(diff_text or "")
    return ChangeRecord(
        path=path,
        kind=classify_kind(len(added), len(removed)),
        extension=file_extension(path),
        added_lines=len(added),
        removed_lines=len(removed),
        change_text="\n".join(removed) + "\n" + "\n".join(added),
    )


def summarize_changes(changeset: Mapping[str, ChangeInput]) -> ChangeSummary:
    """Build a :class:`ChangeSummary` from a mapping of path to diff.

    Parameters
    ----------
    changeset : Mapping[str, str | FileContent]
        Staged file paths mapped to their unified diff, or to a
        :class:`FileContent` whose ``diff`` is used.

    Returns
    -------
    ChangeSummary
        Records in input order, aggregate counts, and descriptions joined
        by a blank line in descending impact order. Records of equal
        impact keep their input order.
    """
    records = []
    for path, change in changeset.items():
        diff_text = change.diff if isinstance(change, FileContent) else change
        records.append(build_change_record(path, diff_text))

    # sorted() is stable, so equal-impact records stay in input order.
    ranked = sorted(records, key=lambda record: record.impact, reverse=True)
    stats = ChangeStats(
        total_files=len(records),
        added=sum(1 for r in records if r.kind is ChangeKind.ADD),
        modified=sum(1 for r in records if r.kind is ChangeKind.MODIFY),
        deleted=sum(1 for r in records if r.kind is ChangeKind.DELETE),
        extensions=frozenset(r.extension for r in records if r.extension),
    )
    return ChangeSummary(
        records=tuple(records),
        stats=stats,
        text="\n\n".join(record.description for record in ranked),
    )
