"""Exception hierarchy for vibemit."""

from __future__ import annotations

from typing import Optional


class VibemitError(Exception):
    """Base class for all vibemit errors."""


class GitError(VibemitError):
    """Raised when a Git command fails or no repository is found."""


class ConfigError(VibemitError):
    """Raised for invalid runtime configuration."""


class ValidationError(VibemitError):
    """Raised when user input or repository state is unusable."""


class LLMError(VibemitError):
    """Raised when the model backend cannot produce a usable result."""


class BackendUnavailableError(LLMError):
    """The model backend is unreachable or answered with an error status.

    ``detail`` optionally carries the backend's own error text so the CLI
    can echo it below the short message.
    """

    def __init__(self, message: str, detail: Optional[str] = None) -> None:
        super().__init__(message)
        self.detail = detail


class EmptyResponseError(LLMError):
    """Every attempt finished without a single valid candidate."""

    def __init__(
        self,
        message: str = (
            "Failed to generate commit messages. "
            "The model returned an empty or invalid response."
        ),
    ) -> None:
        super().__init__(message)
