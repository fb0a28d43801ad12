"""
Diff extraction utilities.

The caller provides a VCS client that implements ``get_diff`` on
individual files and the staged paths. The extractor returns the
changeset consumed by :func:`semantic_commit_helper.diff.summarizer.summarize_changes`.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable

from semantic_commit_helper.vcs.git_client import GitError


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


def extract_diffs(vcs_client: Any, paths: Iterable[str]) -> Dict[str, str]:
    """Extract staged unified diffs for ``paths``.

    Parameters
    ----------
    vcs_client : object
        The VCS client instance. Must implement ``get_diff(file_path)``.
    paths : Iterable[str]
        Staged file paths, in the order they should appear in the changeset.

    Returns
    -------
    Dict[str, str]
        Mapping from file path to the diff text. A file whose diff cannot
        be read maps to an empty diff and is summarized as a zero-line
        modification.
    """
    diffs: Dict[str, str] = {}
    for file_path in paths:
        try:
            diffs[file_path] = vcs_client.get_diff(file_path)
        except GitError as exc:
            logger.warning("Could not read diff for %s: %s", file_path, exc)
            diffs[file_path] = ""
    return diffs
