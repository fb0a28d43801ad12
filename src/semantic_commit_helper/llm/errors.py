"""
Errors raised by the generation backends.

:class:`LLMConnectionError` means the backend could not be reached at all
(refused, unresolvable, timed out). :class:`ProtocolError` means the backend
answered, but not successfully. Callers show different help text for the
two, so they must stay distinguishable.
"""

from __future__ import annotations

from typing import Optional


class LLMError(Exception):
    """Base class for failures while talking to a generation backend."""

    # Human readable help attached by the commit orchestrator.
    remediation: Optional[str] = None


class LLMConnectionError(LLMError, ConnectionError):
    """Raised when the backend transport cannot be reached."""

    pass


class ProtocolError(LLMError):
    """Raised when the backend responds with a non-success status or an unusable payload."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code
