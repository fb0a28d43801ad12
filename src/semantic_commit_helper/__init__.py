"""
Top-level package for semantic_commit_helper.

This package exposes the main CLI entry point via the
``semantic_commit_helper.cli`` module and the commit message pipeline via
:func:`semantic_commit_helper.llm.commit_message_generator.generate_commit_message`.
"""

__all__ = ["__version__", "COMMIT_TYPES", "MESSAGE_COUNT"]

__version__ = "1.0.0"

# Semantic commit vocabulary. Order matters only for display.
COMMIT_TYPES = (
    "feat",
    "fix",
    "docs",
    "style",
    "refactor",
    "perf",
    "test",
    "chore",
)

# Number of candidate messages offered to the user.
MESSAGE_COUNT = 3
