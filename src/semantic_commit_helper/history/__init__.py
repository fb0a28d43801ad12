"""Audit log of applied commit messages."""

from .commit_log import log_commit_to_file  # noqa: F401
