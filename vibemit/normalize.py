"""Turn raw model output into clean, unique commit message candidates.

Everything in this module is pure: it takes text and returns text. The
pipeline applied by :func:`normalize_response` is:

  1. Drop ``<think>...</think>`` reasoning blocks.
  2. Prefer structured output: the whole text, or the first fenced code
     block, parsed as JSON (an array of strings, or an object holding one).
  3. Otherwise split the text: on runs of blank lines for subject+body
     messages, on single newlines for one-line messages.
  4. Clean every piece the same way (numbering, bullets, quotes, emphasis,
     stray reasoning tags) and drop the ones left empty.
  5. Deduplicate case-insensitively and cap at three.

Deciding whether a candidate is an acceptable commit message is left to
:func:`is_valid_commit_message`, which the generator applies per attempt.
"""

from __future__ import annotations

import enum
import json
import re
from typing import Any, Iterable, List, Optional

MAX_CANDIDATES = 3
CODE_FENCE = "```"

_THINK_BLOCK_RE = re.compile(r"<think>[\s\S]*?</think>", re.IGNORECASE)
_THINK_TAG_RE = re.compile(r"</?think>", re.IGNORECASE)
_FENCED_RE = re.compile(r"```(?:json)?\s*([\s\S]*?)```", re.IGNORECASE)
_BLOCK_SEPARATOR_RE = re.compile(r"\n{3,}")

_NUMBERING_RE = re.compile(r"^\d+[.):]\s*")
_BULLET_RE = re.compile(r"^[-*•]\s*")
_QUOTES_RE = re.compile(r"^[\"'`]+|[\"'`]+$")
_EMPHASIS_RE = re.compile(r"^[`*_]+|[`*_]+$")

# Embedded list fragments: "a * b", "a • b" or a run of " - " separators.
_EMBEDDED_GLYPH_RE = re.compile(r"\s[*•]\s+")
_EMBEDDED_DASH_RE = re.compile(r"\s-\s+")


class OutputMode(enum.Enum):
    """Shape of the commit messages requested for one invocation."""

    SINGLE_LINE = "single-line"
    SUBJECT_BODY = "subject+body"

    @classmethod
    def from_body_flag(cls, body: bool) -> "OutputMode":
        return cls.SUBJECT_BODY if body else cls.SINGLE_LINE

    @property
    def has_body(self) -> bool:
        return self is OutputMode.SUBJECT_BODY


def strip_reasoning(text: str) -> str:
    """Remove every balanced ``<think>`` block, across lines."""
    return _THINK_BLOCK_RE.sub("", text)


def _strings_from_json(parsed: Any) -> Optional[List[str]]:
    if isinstance(parsed, list):
        return [item for item in parsed if isinstance(item, str)]
    if isinstance(parsed, dict):
        # "messages" is the key our schema asks for; models that rename it
        # are matched by the first other key holding at least one string.
        preferred = parsed.get("messages")
        if isinstance(preferred, list):
            return [item for item in preferred if isinstance(item, str)]
        for value in parsed.values():
            if not isinstance(value, list):
                continue
            strings = [item for item in value if isinstance(item, str)]
            if strings:
                return strings
    return None


def parse_structured_response(text: str) -> Optional[List[str]]:
    """Return the string list carried by JSON output, or ``None``.

    The trimmed text is tried first, then the inside of the first fenced
    code block. Non-string array elements are discarded.
    """
    attempts = [text.strip()]
    fenced = _FENCED_RE.search(text)
    if fenced and fenced.group(1).strip():
        attempts.append(fenced.group(1).strip())

    for attempt in attempts:
        if not attempt:
            continue
        try:
            parsed = json.loads(attempt)
        except ValueError:
            continue
        strings = _strings_from_json(parsed)
        if strings is not None:
            return strings
    return None


def split_unstructured(text: str, mode: OutputMode) -> List[str]:
    if mode.has_body:
        return _BLOCK_SEPARATOR_RE.split(text)
    return text.split("\n")


def clean_candidate(text: str) -> str:
    """Strip list, quote and markdown decoration from one candidate.

    Order matters: numbering, bullet, quotes, emphasis, then stray
    reasoning tags. Returns ``""`` when nothing is left.
    """
    cleaned = text.strip()
    cleaned = _NUMBERING_RE.sub("", cleaned, count=1)
    cleaned = _BULLET_RE.sub("", cleaned, count=1)
    cleaned = _QUOTES_RE.sub("", cleaned)
    cleaned = _EMPHASIS_RE.sub("", cleaned)
    cleaned = _THINK_TAG_RE.sub("", cleaned)
    return cleaned.strip()


def dedupe_candidates(candidates: Iterable[str]) -> List[str]:
    """Drop case-insensitive repeats, keeping the first-seen spelling."""
    seen: set[str] = set()
    unique: List[str] = []
    for candidate in candidates:
        key = candidate.lower()
        if key in seen:
            continue
        seen.add(key)
        unique.append(candidate)
    return unique


def normalize_response(raw: Optional[str], mode: OutputMode) -> List[str]:
    """Convert one raw model response into at most three candidates."""
    if not raw or not raw.strip():
        return []

    text = strip_reasoning(raw.replace("\r\n", "\n")).strip()
    if not text:
        return []

    pieces = parse_structured_response(text)
    if pieces is None:
        pieces = split_unstructured(text, mode)

    cleaned = (clean_candidate(piece) for piece in pieces)
    return dedupe_candidates(c for c in cleaned if c)[:MAX_CANDIDATES]


def has_embedded_bullet(subject: str) -> bool:
    """True when a one-line subject looks like several list items glued together."""
    if _EMBEDDED_GLYPH_RE.search(subject):
        return True
    return len(_EMBEDDED_DASH_RE.findall(subject)) >= 2


def is_valid_commit_message(message: str, mode: OutputMode) -> bool:
    if not message or not message.strip():
        return False
    if CODE_FENCE in message:
        return False

    lines = message.split("\n")
    subject = lines[0].strip()
    if not subject:
        return False

    if not mode.has_body:
        return len(lines) == 1 and not has_embedded_bullet(subject)

    return any(line.strip() for line in lines[1:])


def filter_valid(messages: Iterable[str], mode: OutputMode) -> List[str]:
    return [m for m in messages if is_valid_commit_message(m, mode)]
