"""
Commit message generation using an LLM.

This module provides the :class:`CommitMessageGenerator` class, which runs
one full pass of the pipeline for a set of staged changes:

1. summarize the staged diffs (:mod:`semantic_commit_helper.diff.summarizer`);
2. render the prompt for the selected model profile
   (:mod:`semantic_commit_helper.prompts.prompt_builder`);
3. obtain the raw completion from the matching generation backend
   (:mod:`semantic_commit_helper.llm.gateway`);
4. normalize it into exactly three messages sharing one type
   (:mod:`semantic_commit_helper.llm.message_normalizer`).

Configuration and credentials are passed in through a read-only
:class:`PipelineContext`. Backend and configuration errors are re-raised
unchanged, with a ``remediation`` hint attached for the user.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, List, Mapping, Optional, Tuple, Union

from semantic_commit_helper.config.loader import (
    API_KEY_ENV_VAR,
    AIConfig,
    ConfigurationError,
    ModelProfile,
    get_api_key,
    get_available_models,
    get_model_profile,
    load_config,
)
from semantic_commit_helper.diff.summarizer import ChangeInput, summarize_changes
from semantic_commit_helper.llm.base import GenerationBackend
from semantic_commit_helper.llm.errors import LLMConnectionError, LLMError, ProtocolError
from semantic_commit_helper.llm.gateway import (
    SingleShotPredicate,
    make_single_shot_predicate,
    never_single_shot,
    select_backend,
)
from semantic_commit_helper.llm.message_normalizer import (
    normalize_messages,
    strip_thinking_tags,
    unifying_type,
)
from semantic_commit_helper.prompts.prompt_builder import build_prompt, validate_templates


logger = logging.getLogger(__name__)
# Attach a null handler to prevent logging errors when no handlers are
# configured on the root logger. Logs will propagate when configured.
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


BackendFactory = Callable[[ModelProfile, Optional[str], SingleShotPredicate], GenerationBackend]

OLLAMA_NOT_RUNNING_HELP = (
    "Could not connect to Ollama. Please make sure Ollama is running on {url}\n"
    "Install Ollama from: https://ollama.ai\n\n"
    "Try these steps:\n"
    "1. Open a new terminal\n"
    "2. Run: ollama serve\n"
    "3. Keep that terminal open and try this command again"
)


@dataclass(frozen=True)
class CommitMessage:
    """The final result: exactly three messages sharing one semantic type."""

    messages: Tuple[str, ...]

    @property
    def type(self) -> str:
        return unifying_type(list(self.messages))


@dataclass(frozen=True)
class PipelineContext:
    """Read-only configuration the pipeline runs against.

    Attributes
    ----------
    config : AIConfig
        Available model profiles and the default model.
    api_key : str, optional
        Credential for remote chat-completion backends.
    is_single_shot : Callable[[str], bool]
        Decides from a model identifier whether a local backend is asked
        for one complete payload instead of a stream.
    """

    config: AIConfig
    api_key: Optional[str] = None
    is_single_shot: SingleShotPredicate = never_single_shot

    @classmethod
    def from_environment(
        cls,
        config: Optional[AIConfig] = None,
        environ: Optional[Mapping[str, str]] = None,
    ) -> "PipelineContext":
        config = config if config is not None else load_config()
        return cls(
            config=config,
            api_key=get_api_key(environ),
            is_single_shot=make_single_shot_predicate(config.single_shot_families),
        )


def remediation_for(
    exc: Union[ConfigurationError, LLMError],
    profile: Optional[ModelProfile],
    config: AIConfig,
) -> str:
    """Return the help text shown to the user for ``exc``."""
    remote = profile is not None and profile.is_chat_completion
    if isinstance(exc, ConfigurationError):
        if remote:
            return f"Set your API key:\n  export {API_KEY_ENV_VAR}='your-key-here'"
        return "Available models: " + ", ".join(get_available_models(config))
    if isinstance(exc, LLMConnectionError):
        url = profile.api_url if profile is not None else "the configured endpoint"
        if remote:
            return f"Could not reach {url}. Check your network connection and proxy settings."
        return OLLAMA_NOT_RUNNING_HELP.format(url=url)
    if isinstance(exc, ProtocolError):
        if exc.status_code == 401:
            return f"Invalid API key. Check your {API_KEY_ENV_VAR}."
        if exc.status_code == 404 and profile is not None and not remote:
            return f"Model '{profile.model_name}' not found. Run: ollama pull {profile.model_name}"
        return f"The backend answered with HTTP status {exc.status_code}."
    return str(exc)


class CommitMessageGenerator:
    """Generate three candidate commit messages for a set of staged changes."""

    def __init__(
        self,
        context: PipelineContext,
        backend_factory: BackendFactory = select_backend,
    ) -> None:
        validate_templates()
        self.context = context
        self.backend_factory = backend_factory

    def _complete(self, changeset: Mapping[str, ChangeInput], profile: ModelProfile) -> str:
        summary = summarize_changes(changeset)
        logger.debug(
            "Summarized %d file(s): %d added, %d modified, %d deleted",
            summary.stats.total_files,
            summary.stats.added,
            summary.stats.modified,
            summary.stats.deleted,
        )
        prompt = build_prompt(summary, profile.identifier)
        backend = self.backend_factory(profile, self.context.api_key, self.context.is_single_shot)
        logger.info("Sending request to %s (%s)", backend.name, profile.identifier)
        return backend.generate(prompt, profile)

    def generate(
        self,
        changeset: Mapping[str, ChangeInput],
        model_name: Optional[str] = None,
    ) -> CommitMessage:
        """Run the pipeline once.

        Parameters
        ----------
        changeset : Mapping[str, str | FileContent]
            Staged file paths mapped to their unified diffs.
        model_name : str, optional
            Profile to use instead of the configured default.

        Returns
        -------
        CommitMessage
            Exactly three messages sharing one type.

        Raises
        ------
        ConfigurationError
            Unknown model or missing credential.
        LLMConnectionError
            The backend could not be reached.
        ProtocolError
            The backend answered with a non-success status.
        """
        profile: Optional[ModelProfile] = None
        try:
            profile = get_model_profile(self.context.config, model_name)
            raw = self._complete(changeset, profile)
        except (ConfigurationError, LLMError) as exc:
            exc.remediation = remediation_for(exc, profile, self.context.config)
            raise

        messages: List[str] = normalize_messages(strip_thinking_tags(raw))
        logger.debug("Normalized messages: %s", messages)
        return CommitMessage(messages=tuple(messages))


def generate_commit_message(
    changeset: Mapping[str, ChangeInput],
    model_name: Optional[str] = None,
    context: Optional[PipelineContext] = None,
) -> CommitMessage:
    """Generate a :class:`CommitMessage` for ``changeset``.

    When no ``context`` is given it is built from the user configuration
    file and the process environment.
    """
    generator = CommitMessageGenerator(context or PipelineContext.from_environment())
    return generator.generate(changeset, model_name)
