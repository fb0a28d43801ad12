"""
Language model integration for semantic_commit_helper.

This package contains the generation backends (local Ollama, streaming or
single-shot, and remote chat-completion), the normalizer that turns raw
completions into commit messages, and the :class:`CommitMessageGenerator`
that ties the pipeline together.
"""

from .errors import LLMConnectionError, LLMError, ProtocolError  # noqa: F401
from .base import GenerationBackend  # noqa: F401
from .ollama_client import SingleShotOllamaBackend, StreamingOllamaBackend  # noqa: F401
from .openai_client import ChatCompletionBackend  # noqa: F401
from .gateway import make_single_shot_predicate, select_backend  # noqa: F401
from .message_normalizer import normalize_messages, strip_thinking_tags  # noqa: F401
from .commit_message_generator import (  # noqa: F401
    CommitMessage,
    CommitMessageGenerator,
    PipelineContext,
    generate_commit_message,
)
