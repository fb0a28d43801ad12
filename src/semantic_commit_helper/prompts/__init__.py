"""Prompt templates and rendering. See :mod:`semantic_commit_helper.prompts.prompt_builder`."""

from .prompt_builder import (  # noqa: F401
    CODER_TEMPLATE,
    DEFAULT_TEMPLATE,
    PromptTemplate,
    build_prompt,
    select_template,
    validate_templates,
)
