"""Commit message generation logic for vibemit."""

from __future__ import annotations

import logging
from typing import List, Optional

from .config import DEFAULT_MAX_SUBJECT_LENGTH, Config, get_active_config
from .exceptions import EmptyResponseError, LLMError
from .llm import COMMIT_MESSAGES_SCHEMA
from .normalize import (
    MAX_CANDIDATES,
    OutputMode,
    clean_candidate,
    dedupe_candidates,
    filter_valid,
    is_valid_commit_message,
    normalize_response,
    strip_reasoning,
)
from .providers.base import Backend, GenerateRequest, SamplingConfig

logger = logging.getLogger(__name__)

MAX_ATTEMPTS = 3
BASE_TEMPERATURE = 0.2
TEMPERATURE_STEP = 0.2
REPETITION_PENALTY = 1.1
SINGLE_LINE_TOKENS = 300
SUBJECT_BODY_TOKENS = 400

REPAIR_TEMPERATURE = 0.1
REPAIR_TOKENS = 80
REPAIR_SYSTEM_PROMPT = (
    "You shorten Git commit messages. Return only the shortened line. "
    "No commentary."
)
ELLIPSIS = "..."


def attempt_temperature(attempt: int) -> float:
    """Linear schedule: 0.2, 0.4, 0.6 for attempts 0, 1, 2."""
    return round(BASE_TEMPERATURE + attempt * TEMPERATURE_STEP, 2)


def truncate_line(line: str, limit: int) -> str:
    """Hard-cut ``line`` so that, with the ellipsis, it fits ``limit``."""
    if len(line) <= limit:
        return line
    return line[: limit - len(ELLIPSIS)] + ELLIPSIS


class CommitGenerator:
    """Collects up to three valid commit messages from a model backend.

    Attempts run strictly one after another at rising temperature until the
    pool holds three candidates or the attempt budget is spent. Surviving
    candidates then go through a length-repair pass that asks the model to
    shorten an over-long subject and truncates when that does not work.
    """

    def __init__(self, backend: Backend, config: Optional[Config] = None) -> None:
        self.backend = backend
        self._config = config or get_active_config()

    @property
    def max_subject_length(self) -> int:
        return min(DEFAULT_MAX_SUBJECT_LENGTH, self._config.max_subject_length)

    # ------------------------------------------------------------------
    # Retry loop
    # ------------------------------------------------------------------
    def generate(
        self,
        system_prompt: str,
        user_prompt: str,
        model: Optional[str] = None,
        mode: OutputMode = OutputMode.SINGLE_LINE,
    ) -> List[str]:
        """Return 1-3 validated, length-repaired commit messages.

        Raises:
            BackendUnavailableError: the backend could not be reached.
            EmptyResponseError: no attempt produced a valid candidate.
        """
        model = model or self._config.model
        max_tokens = SUBJECT_BODY_TOKENS if mode.has_body else SINGLE_LINE_TOKENS

        pool: List[str] = []
        seen: set[str] = set()
        for attempt in range(MAX_ATTEMPTS):
            if len(pool) >= MAX_CANDIDATES:
                break
            request = GenerateRequest(
                model=model,
                prompt=user_prompt,
                system=system_prompt,
                output_shape=COMMIT_MESSAGES_SCHEMA,
                sampling=SamplingConfig(
                    temperature=attempt_temperature(attempt),
                    max_output_tokens=max_tokens,
                    repetition_penalty=REPETITION_PENALTY,
                ),
            )
            # Transport errors propagate: retrying a dead server is pointless.
            raw = self.backend.submit(request)
            parsed = normalize_response(raw, mode)
            valid = filter_valid(parsed, mode)
            added = 0
            for candidate in valid:
                key = candidate.lower()
                if key in seen or len(pool) >= MAX_CANDIDATES:
                    continue
                seen.add(key)
                pool.append(candidate)
                added += 1
            logger.debug(
                "commit.attempt %d temperature=%s parsed=%d valid=%d added=%d pool=%d",
                attempt + 1,
                request.sampling.temperature,
                len(parsed),
                len(valid),
                added,
                len(pool),
            )

        pool = pool[:MAX_CANDIDATES]
        if not pool:
            raise EmptyResponseError()

        repaired = [self.repair_subject_length(c, model, mode) for c in pool]
        return dedupe_candidates(repaired)

    # ------------------------------------------------------------------
    # Length repair
    # ------------------------------------------------------------------
    def repair_subject_length(
        self, message: str, model: str, mode: OutputMode
    ) -> str:
        """Bring the subject line within the limit, leaving the body alone."""
        if not mode.has_body:
            return self.shorten_line(message, model)

        lines = message.split("\n")
        subject = lines[0]
        if not subject or len(subject) <= self.max_subject_length:
            return message
        lines[0] = self.shorten_line(subject, model)
        return "\n".join(lines)

    def shorten_line(self, line: str, model: str) -> str:
        limit = self.max_subject_length
        if len(line) <= limit:
            return line

        request = GenerateRequest(
            model=model,
            prompt=(
                f"Shorten the following Git commit message to <= {limit} "
                "characters without losing meaning. Return ONLY the shortened "
                f"message, nothing else.\n\n{line}"
            ),
            system=REPAIR_SYSTEM_PROMPT,
            sampling=SamplingConfig(
                temperature=REPAIR_TEMPERATURE,
                max_output_tokens=REPAIR_TOKENS,
                repetition_penalty=REPETITION_PENALTY,
            ),
        )
        try:
            raw = self.backend.submit(request)
        except LLMError as e:
            logger.debug("commit.repair failed (%s); truncating", e)
            return truncate_line(line, limit)

        shortened = clean_candidate(strip_reasoning(raw or ""))
        if (
            len(shortened) <= limit
            and is_valid_commit_message(shortened, OutputMode.SINGLE_LINE)
        ):
            logger.debug("commit.repair %d -> %d chars", len(line), len(shortened))
            return shortened

        logger.debug("commit.repair unusable (%d chars); truncating", len(shortened))
        return truncate_line(line, limit)
