"""
Backend for a remote OpenAI-style chat-completion service.

The whole completion arrives in one JSON payload and is read from
``choices[0].message.content``. An API key is mandatory; without one a
:class:`ConfigurationError` is raised before any request is made.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from semantic_commit_helper.config.loader import API_KEY_ENV_VAR, ConfigurationError, ModelProfile
from semantic_commit_helper.llm.base import GenerationBackend
from semantic_commit_helper.llm.errors import ProtocolError


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


class ChatCompletionBackend(GenerationBackend):
    """Chat-completion API client authenticated with a bearer token."""

    name = "OpenAI"

    def __init__(self, api_key: Optional[str]) -> None:
        if not api_key:
            raise ConfigurationError(f"{API_KEY_ENV_VAR} environment variable is not set")
        self.api_key = api_key

    def generate(self, prompt: str, profile: ModelProfile) -> str:
        payload: Dict[str, Any] = {
            "model": profile.model_name,
            "messages": [{"role": "user", "content": prompt}],
            "temperature": profile.temperature,
            "top_p": profile.top_p,
        }
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {self.api_key}",
        }
        response = self._post(profile, payload, headers=headers)
        try:
            data = response.json()
            content = data["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as exc:
            logger.error("Unexpected chat-completion payload: %s", exc)
            raise ProtocolError(
                "Unexpected response structure from chat-completion API",
                status_code=response.status_code,
            ) from exc
        return content or ""
