"""vibemit - AI-generated Git commit messages from staged changes."""

from importlib import import_module
from typing import TYPE_CHECKING

__version__ = "0.1.0"

# Public API (lazy-exported to avoid import-time side effects)
__all__ = [
    # Config
    "Config", "load_config",
    # Normalization
    "OutputMode", "normalize_response", "clean_candidate",
    "is_valid_commit_message",
    # Generation
    "CommitGenerator", "LLMClient", "GenerateRequest", "SamplingConfig",
    # Exceptions
    "VibemitError", "GitError", "LLMError", "ConfigError", "ValidationError",
    "BackendUnavailableError", "EmptyResponseError",
]


def __getattr__(name: str):
    """Lazy attribute loader so ``import vibemit`` does not pull in httpx/openai."""
    mapping = {
        "Config": ("vibemit.config", "Config"),
        "load_config": ("vibemit.config", "load_config"),
        "OutputMode": ("vibemit.normalize", "OutputMode"),
        "normalize_response": ("vibemit.normalize", "normalize_response"),
        "clean_candidate": ("vibemit.normalize", "clean_candidate"),
        "is_valid_commit_message": ("vibemit.normalize", "is_valid_commit_message"),
        "CommitGenerator": ("vibemit.commit", "CommitGenerator"),
        "LLMClient": ("vibemit.llm", "LLMClient"),
        "GenerateRequest": ("vibemit.providers.base", "GenerateRequest"),
        "SamplingConfig": ("vibemit.providers.base", "SamplingConfig"),
        "VibemitError": ("vibemit.exceptions", "VibemitError"),
        "GitError": ("vibemit.exceptions", "GitError"),
        "LLMError": ("vibemit.exceptions", "LLMError"),
        "ConfigError": ("vibemit.exceptions", "ConfigError"),
        "ValidationError": ("vibemit.exceptions", "ValidationError"),
        "BackendUnavailableError": ("vibemit.exceptions", "BackendUnavailableError"),
        "EmptyResponseError": ("vibemit.exceptions", "EmptyResponseError"),
    }
    if name in mapping:
        mod_name, attr = mapping[name]
        mod = import_module(mod_name)
        value = getattr(mod, attr)
        globals()[name] = value  # cache for future access
        return value
    raise AttributeError(f"module 'vibemit' has no attribute {name!r}")


if TYPE_CHECKING:
    from .commit import CommitGenerator
    from .config import Config, load_config
    from .exceptions import (
        BackendUnavailableError,
        ConfigError,
        EmptyResponseError,
        GitError,
        LLMError,
        ValidationError,
        VibemitError,
    )
    from .llm import LLMClient
    from .normalize import (
        OutputMode,
        clean_candidate,
        is_valid_commit_message,
        normalize_response,
    )
    from .providers.base import GenerateRequest, SamplingConfig
