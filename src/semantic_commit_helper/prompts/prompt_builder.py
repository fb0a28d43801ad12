"""
Prompt construction for commit message generation.

Two fixed templates exist: a terse one for code-specialised ("coder")
models and a verbose default one that walks the model through analysing
the change statistics first. :func:`select_template` picks one from the
model identifier and :func:`build_prompt` fills in the placeholders.
"""

from __future__ import annotations

from dataclasses import dataclass
from textwrap import dedent
from typing import Optional

from semantic_commit_helper.config.loader import ConfigurationError
from semantic_commit_helper.diff.summarizer import ChangeStats, ChangeSummary


CHANGES_PLACEHOLDER = "{changes}"
STATS_PLACEHOLDER = "{stats}"

# Model identifiers containing this substring get the coder template.
CODER_MODEL_MARKER = "deepseek"


@dataclass(frozen=True)
class PromptTemplate:
    name: str
    text: str

    @property
    def has_stats(self) -> bool:
        return STATS_PLACEHOLDER in self.text


CODER_TEMPLATE = PromptTemplate(
    name="coder",
    text=dedent(
        """
        Generate 3 semantic commit messages for these changes:

        Change Statistics:
        {stats}

        Detailed Changes:
        {changes}

        Rules:
        - Use one of: feat/fix/docs/style/refactor/perf/test/chore
        - Format: "type: description"
        - Focus on the most impactful changes
        - Group similar changes together
        - Be specific, no generic messages

        Respond with just 3 lines:
        1) type: description
        2) type: description
        3) type: description
        """
    ).strip(),
)

DEFAULT_TEMPLATE = PromptTemplate(
    name="default",
    text=dedent(
        """
        You are a specialized code review assistant. Analyze the following code changes and generate three semantic commit messages.

        Change Statistics:
        {stats}

        Detailed Changes:
        {changes}

        Instructions:
        1. First, analyze the change statistics and patterns:
           - Look at the number of files modified/added/deleted
           - Consider which file types were impacted
           - Identify the most significant changes by line count
           - Look for patterns in the changes

        2. Then, determine ONE of these semantic types that best matches the primary changes:
           - feat: New features or significant additions
           - fix: Bug fixes
           - docs: Documentation changes
           - style: Code formatting, missing semicolons, etc.
           - refactor: Code changes that neither fix bugs nor add features
           - perf: Performance improvements
           - test: Adding or modifying tests
           - chore: Build process, dependencies, or tooling changes

        3. Finally, generate THREE commit messages that:
           - All use the SAME semantic type you chose
           - Follow format: type: description
           - Use present tense (e.g., "add" not "added")
           - Are concise (max 50 chars for description)
           - Start with lowercase
           - Don't end with period
           - Focus on the most significant changes
           - Group similar changes together
           - Are specific to the code changes, not generic

        IMPORTANT: Never return generic messages like "update files". Always be specific about what changed.

        Format your response as:
        1) type: description
        2) type: description
        3) type: description
        """
    ).strip(),
)

TEMPLATES = (CODER_TEMPLATE, DEFAULT_TEMPLATE)


def validate_templates() -> None:
    """Check at startup that every template carries the ``{changes}`` placeholder.

    Raises
    ------
    ConfigurationError
        If a template cannot receive the change summary.
    """
    for template in TEMPLATES:
        if CHANGES_PLACEHOLDER not in template.text:
            raise ConfigurationError(f"Prompt template '{template.name}' lacks {CHANGES_PLACEHOLDER}")


def select_template(model_identifier: str) -> PromptTemplate:
    if CODER_MODEL_MARKER in model_identifier:
        return CODER_TEMPLATE
    return DEFAULT_TEMPLATE


def build_prompt(
    summary: ChangeSummary,
    model_identifier: str,
    stats: Optional[ChangeStats] = None,
) -> str:
    """Render the prompt for ``model_identifier`` from a change summary.

    ``stats`` defaults to the summary's own aggregate counts. Plain string
    replacement is used so braces inside diff text are left untouched.
    """
    template = select_template(model_identifier)
    prompt = template.text
    if template.has_stats:
        prompt = prompt.replace(STATS_PLACEHOLDER, (stats or summary.stats).render())
    return prompt.replace(CHANGES_PLACEHOLDER, summary.text)
