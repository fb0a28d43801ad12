"""
Normalization of raw model output into semantic commit messages.

The model is asked for three numbered messages (``1) type: description``)
but frequently answers with commentary, markdown, upper-case or invented
types, or fewer or more than three lines. :func:`normalize_messages` turns
any such text into exactly :data:`MESSAGE_COUNT` single-line messages of
the form ``type[(scope)]: description`` that all share one type. It never
raises: unusable input degrades to ``chore: update files``.
"""

from __future__ import annotations

import logging
import re
from typing import List, Optional, Tuple, Union

from semantic_commit_helper import COMMIT_TYPES, MESSAGE_COUNT


logger = logging.getLogger(__name__)
if not logger.handlers:
    logger.addHandler(logging.NullHandler())
    logger.propagate = False


DEFAULT_TYPE = "chore"
FALLBACK_DESCRIPTION = "update files"
FALLBACK_MESSAGE = f"{DEFAULT_TYPE}: {FALLBACK_DESCRIPTION}"

_TYPES = "|".join(COMMIT_TYPES)

_NUMBER_MARKER_RE = re.compile(r"\d\)")
_LEADING_MARK_RE = re.compile(r"^\s*[-:]\s*")
_MESSAGE_RE = re.compile(rf"^({_TYPES})(\([^)]+\))?: (.+)$")
# Text followed by a type prefix, unless the fragment already starts with one.
_NESTED_PREFIX_RE = re.compile(
    rf"^(?!(?:{_TYPES})(?:\([^)]*\))?:)(.+?)\b((?:{_TYPES})(?:\([^)]*\))?:\s*\S.*)$",
    re.IGNORECASE | re.ASCII,
)
_TYPE_TOKEN_RE = re.compile(rf"^({_TYPES})(\([^)]*\))?:?$", re.IGNORECASE | re.ASCII)
_EMBEDDED_PREFIX_RE = re.compile(rf"\b(?:{_TYPES})(?:\([^)]*\))?:\s*", re.IGNORECASE | re.ASCII)


def strip_thinking_tags(text: str) -> str:
    """Remove thinking process tags from LLM responses.

    Reasoning models emit their chain of thought in XML-like tags such as
    ``<think>`` or ``<reasoning>``. The tags and their contents are removed,
    leaving only the actual output.

    Examples
    --------
    >>> strip_thinking_tags("<think>reasoning...</think>1) feat: add x")
    '1) feat: add x'
    """
    thinking_patterns = [
        r"<think>.*?</think>",
        r"<thinking>.*?</thinking>",
        r"<thought>.*?</thought>",
        r"<reasoning>.*?</reasoning>",
    ]
    result = text
    for pattern in thinking_patterns:
        result = re.sub(pattern, "", result, flags=re.DOTALL | re.IGNORECASE)
    return result.strip()


def _coerce_text(raw: Union[str, bytes, None]) -> str:
    if raw is None:
        return ""
    if isinstance(raw, bytes):
        return raw.decode("utf-8", errors="replace")
    return str(raw)


def split_candidates(text: str) -> List[str]:
    """Split ``text`` on numbering markers (``1)``, ``2)`` …) into fragments.

    Each fragment is trimmed and reduced to its first line; empty
    fragments are dropped.
    """
    fragments = []
    for segment in _NUMBER_MARKER_RE.split(text):
        segment = segment.strip()
        if segment:
            fragments.append(segment.splitlines()[0].strip())
    return fragments


def repair_candidate(fragment: str) -> str:
    """Repair one fragment into ``type[(scope)]: description`` form."""
    text = _LEADING_MARK_RE.sub("", fragment, count=1).strip()
    text = text.replace("`", "").strip()

    nested = _NESTED_PREFIX_RE.match(text)
    if nested:
        logger.debug("Dropping preamble %r before nested type prefix", nested.group(1))
        text = nested.group(2).strip()

    if _MESSAGE_RE.match(text):
        return text

    parts = text.split(None, 1)
    if parts:
        token = _TYPE_TOKEN_RE.match(parts[0])
        remainder = parts[1].lstrip(":").strip() if len(parts) > 1 else ""
        if token and remainder:
            scope = token.group(2) if token.group(2) and token.group(2) != "()" else ""
            return f"{token.group(1).lower()}{scope}: {remainder}"

    cleaned = _EMBEDDED_PREFIX_RE.sub("", text).strip()
    description = cleaned or text or FALLBACK_DESCRIPTION
    logger.debug("Falling back to %s type for %r", DEFAULT_TYPE, fragment)
    return f"{DEFAULT_TYPE}: {description}"


def _parse(candidate: str) -> Optional[Tuple[str, str, str]]:
    match = _MESSAGE_RE.match(candidate)
    if not match:
        return None
    return match.group(1), match.group(2) or "", match.group(3)


def unifying_type(candidates: List[str]) -> str:
    """Return the type token of the first candidate (text before the first ``:`` or ``(``)."""
    if not candidates:
        return DEFAULT_TYPE
    head = re.split(r"[:(]", candidates[0], maxsplit=1)[0].strip()
    return head if head in COMMIT_TYPES else DEFAULT_TYPE


def unify_types(candidates: List[str]) -> List[str]:
    """Rewrite every candidate onto the type of the first one.

    Candidates already carrying that type are left untouched, scope
    included; the others keep only their description.
    """
    target = unifying_type(candidates)
    unified = []
    for candidate in candidates:
        parsed = _parse(candidate)
        if parsed is None:
            unified.append(f"{target}: {FALLBACK_DESCRIPTION}")
            continue
        commit_type, _scope, description = parsed
        unified.append(candidate if commit_type == target else f"{target}: {description}")
    return unified


def fit_to_count(candidates: List[str], count: int = MESSAGE_COUNT) -> List[str]:
    """Truncate to ``count`` messages or pad by repeating the first one."""
    result = list(candidates[:count])
    filler = result[0] if result else FALLBACK_MESSAGE
    while len(result) < count:
        result.append(filler)
    return result


def normalize_messages(raw: Union[str, bytes, None], count: int = MESSAGE_COUNT) -> List[str]:
    """Turn a raw completion into exactly ``count`` commit messages sharing one type.

    Parameters
    ----------
    raw : str | bytes | None
        Completion text returned by the generation backend.
    count : int, optional
        Number of messages to return. Defaults to :data:`MESSAGE_COUNT`.

    Returns
    -------
    List[str]
        ``count`` messages, each matching ``type[(scope)]: description``.

    Notes
    -----
    Text before the first ``1)`` marker is a candidate like any other. A
    preamble such as ``Here are three commit messages:`` therefore becomes
    the first message (typed ``chore``), sets the shared type for the rest,
    and pushes the last numbered message out.

    Examples
    --------
    >>> normalize_messages("1) feat: add login\\n2) FIX: handle null\\n3) refactor(db): simplify")
    ['feat: add login', 'feat: handle null', 'feat: simplify']
    """
    try:
        fragments = split_candidates(_coerce_text(raw))
        candidates = [repair_candidate(fragment) for fragment in fragments]
        if not candidates:
            logger.debug("No candidates recovered from completion; using fallback message")
            candidates = [FALLBACK_MESSAGE]
        return fit_to_count(unify_types(candidates), count)
    except Exception as exc:
        logger.warning("Failed to normalize completion (%s); using fallback message", exc)
        return [FALLBACK_MESSAGE] * count
