"""
Selection of the generation backend for a model profile.

Chat-completion endpoints always use :class:`ChatCompletionBackend`. Local
Ollama profiles stream by default; profiles whose identifier satisfies the
single-shot predicate get one complete JSON payload instead.
"""

from __future__ import annotations

from typing import Callable, Iterable, Optional

from semantic_commit_helper.config.loader import ModelProfile
from semantic_commit_helper.llm.base import GenerationBackend
from semantic_commit_helper.llm.ollama_client import SingleShotOllamaBackend, StreamingOllamaBackend
from semantic_commit_helper.llm.openai_client import ChatCompletionBackend


SingleShotPredicate = Callable[[str], bool]


def make_single_shot_predicate(families: Iterable[str]) -> SingleShotPredicate:
    """Return a predicate matching identifiers that contain any of ``families``."""
    markers = tuple(family for family in families if family)

    def is_single_shot(identifier: str) -> bool:
        return any(marker in identifier for marker in markers)

    return is_single_shot


def never_single_shot(identifier: str) -> bool:
    return False


def select_backend(
    profile: ModelProfile,
    api_key: Optional[str] = None,
    is_single_shot: SingleShotPredicate = never_single_shot,
) -> GenerationBackend:
    """Return the backend variant serving ``profile``.

    Raises
    ------
    ConfigurationError
        If ``profile`` targets a chat-completion service and ``api_key`` is missing.
    """
    if profile.is_chat_completion:
        return ChatCompletionBackend(api_key)
    if is_single_shot(profile.identifier):
        return SingleShotOllamaBackend()
    return StreamingOllamaBackend()
