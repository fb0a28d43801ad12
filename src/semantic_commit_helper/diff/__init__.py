"""
Diff extraction and change summaries.

:mod:`semantic_commit_helper.diff.diff_extractor` reads staged diffs from a
VCS client; :mod:`semantic_commit_helper.diff.summarizer` turns them into a
ranked :class:`ChangeSummary`.
"""

from .summarizer import (  # noqa: F401
    ChangeKind,
    ChangeRecord,
    ChangeStats,
    ChangeSummary,
    FileContent,
    summarize_changes,
)
from .diff_extractor import extract_diffs  # noqa: F401
