"""
Common contract of the generation backends.

Every backend turns a prompt and a :class:`ModelProfile` into the raw
completion text. The HTTP plumbing shared by all of them lives in
:meth:`GenerationBackend._post`, which maps transport failures onto
:class:`LLMConnectionError` and non-2xx responses onto
:class:`ProtocolError`.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import requests

from semantic_commit_helper.config.loader import ModelProfile
from semantic_commit_helper.llm.errors import LLMConnectionError, ProtocolError


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


class GenerationBackend(ABC):
    """Abstract text-generation backend."""

    name = "backend"

    @abstractmethod
    def generate(self, prompt: str, profile: ModelProfile) -> str:
        """Return the raw completion for ``prompt``.

        Raises
        ------
        LLMConnectionError
            If the backend cannot be reached.
        ProtocolError
            If the backend answers with a non-success status.
        """

    def _post(
        self,
        profile: ModelProfile,
        payload: Dict[str, Any],
        headers: Optional[Dict[str, str]] = None,
        stream: bool = False,
    ) -> requests.Response:
        url = profile.api_url
        logger.debug("Sending request to %s at %s (stream=%s)", self.name, url, stream)
        try:
            response = requests.post(
                url,
                json=payload,
                headers=headers,
                timeout=profile.request_timeout,
                stream=stream,
            )
        except requests.RequestException as exc:
            # Refused connections, DNS failures and timeouts all mean the
            # service is not usable right now.
            logger.error("Failed to connect to %s: %s", self.name, exc)
            raise LLMConnectionError(f"Could not connect to {url}: {exc}") from exc

        if not 200 <= response.status_code < 300:
            logger.error("%s returned non-success status %s: %s", self.name, response.status_code, response.text)
            raise ProtocolError(f"HTTP error! status: {response.status_code}", status_code=response.status_code)
        return response
