"""
Backends for a local Ollama server.

Both variants call the ``/api/generate`` endpoint configured in the model
profile. :class:`StreamingOllamaBackend` requests incremental output and
concatenates the ``response`` field of every newline-delimited JSON
fragment; :class:`SingleShotOllamaBackend` requests the whole completion
in one JSON payload.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Dict, Iterable, Union

import requests

from semantic_commit_helper.config.loader import ModelProfile
from semantic_commit_helper.llm.base import GenerationBackend
from semantic_commit_helper.llm.errors import LLMConnectionError, ProtocolError


logger = logging.getLogger(__name__)
# Attach a null handler to avoid errors when the root logger is missing a
# stream. Messages will still propagate to the root logger if configured.
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


def build_generate_payload(prompt: str, profile: ModelProfile, stream: bool) -> Dict[str, Any]:
    return {
        "model": profile.model_name,
        "prompt": prompt,
        "stream": stream,
        "options": {
            "temperature": profile.temperature,
            "top_p": profile.top_p,
        },
    }


def accumulate_stream(lines: Iterable[Union[bytes, str]]) -> str:
    """Concatenate the ``response`` fields of newline-delimited JSON fragments.

    Fragments that are not valid JSON (typically a frame cut at a buffer
    boundary) are skipped.

    Examples
    --------
    >>> accumulate_stream(['{"response": "fe"}', '{"resp', '{"response": "at"}'])
    'feat'
    """
    parts = []
    for line in lines:
        if isinstance(line, bytes):
            line = line.decode("utf-8", errors="replace")
        line = line.strip()
        if not line:
            continue
        try:
            fragment = json.loads(line)
        except json.JSONDecodeError:
            logger.debug("Skipping malformed stream fragment: %r", line[:80])
            continue
        if isinstance(fragment, dict) and fragment.get("response"):
            parts.append(str(fragment["response"]))
    return "".join(parts)


class StreamingOllamaBackend(GenerationBackend):
    """Ollama ``/api/generate`` with ``stream: true``."""

    name = "Ollama"

    def generate(self, prompt: str, profile: ModelProfile) -> str:
        payload = build_generate_payload(prompt, profile, stream=True)
        response = self._post(profile, payload, stream=True)
        try:
            return accumulate_stream(response.iter_lines())
        except requests.RequestException as exc:
            logger.error("Stream from Ollama interrupted: %s", exc)
            raise LLMConnectionError(f"Connection to {profile.api_url} lost: {exc}") from exc
        finally:
            response.close()


class SingleShotOllamaBackend(GenerationBackend):
    """Ollama ``/api/generate`` with ``stream: false``."""

    name = "Ollama"

    def generate(self, prompt: str, profile: ModelProfile) -> str:
        payload = build_generate_payload(prompt, profile, stream=False)
        response = self._post(profile, payload)
        try:
            data = response.json()
        except ValueError as exc:
            logger.error("Failed to parse Ollama response: %s", exc)
            raise ProtocolError("Failed to parse Ollama response", status_code=response.status_code) from exc
        if not isinstance(data, dict):
            raise ProtocolError("Unexpected response structure from Ollama", status_code=response.status_code)
        return str(data.get("response") or "")
