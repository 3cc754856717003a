from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, Optional, Protocol, Union

from ..config import Config

OutputShape = Union[Dict[str, Any], str]


@dataclass(frozen=True)
class SamplingConfig:
    """Decoding parameters for one backend call."""

    temperature: float
    max_output_tokens: int
    repetition_penalty: float = 1.1


@dataclass(frozen=True)
class GenerateRequest:
    """One prompt/system pair plus sampling settings.

    ``output_shape`` is either a JSON schema dict or the string ``"json"``;
    backends that support constrained decoding honour it, others ignore it.
    """

    model: str
    prompt: str
    system: str
    sampling: SamplingConfig
    output_shape: Optional[OutputShape] = None


class Backend(Protocol):
    """The single capability the commit generator needs from a backend."""

    def submit(self, request: GenerateRequest) -> str:
        """Return the raw response text or raise ``LLMError``."""
        ...


class BaseDriver(ABC):
    """Abstract base for provider-specific transports.

    Each driver owns one provider's HTTP/client call pattern and maps its
    failures onto ``BackendUnavailableError`` / ``LLMError`` so the
    generator never sees transport-specific exceptions.
    """

    def __init__(self, config: Config) -> None:
        self.config = config

    @abstractmethod
    def submit(self, request: GenerateRequest) -> str:
        raise NotImplementedError

    @abstractmethod
    def check_available(self) -> None:
        """Raise ``BackendUnavailableError`` when the backend cannot serve."""
        raise NotImplementedError

    @abstractmethod
    def list_models(self) -> list[dict[str, Any]]:
        """Return models as dicts minimally containing an 'id' key."""
        raise NotImplementedError
