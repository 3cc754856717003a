"""Provider-aware model client for vibemit."""

from __future__ import annotations

import logging
from typing import Any, Optional

from .config import Config, get_active_config
from .exceptions import ConfigError
from .providers.base import BaseDriver, GenerateRequest
from .providers.ollama_driver import OllamaDriver
from .providers.openai_driver import OpenAIDriver

logger = logging.getLogger(__name__)

# Requested output shape: exactly three strings under "messages".
COMMIT_MESSAGES_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "messages": {
            "type": "array",
            "minItems": 3,
            "maxItems": 3,
            "items": {"type": "string"},
        },
    },
    "required": ["messages"],
    "additionalProperties": False,
}


class LLMClient:
    """Routes generate requests to the configured provider's driver."""

    def __init__(
        self,
        config: Optional[Config] = None,
        driver: Optional[BaseDriver] = None,
    ) -> None:
        self.config = config or get_active_config()
        self.provider = self.config.provider
        self.model = self.config.model

        if driver is not None:
            self._driver = driver
        elif self.provider == "ollama":
            self._driver = OllamaDriver(self.config)
        elif self.provider == "openai":
            self._driver = OpenAIDriver(self.config)
        else:
            raise ConfigError(f"Unsupported provider: {self.provider}")
        logger.debug(
            "LLMClient provider=%s model=%s endpoint=%s",
            self.provider,
            self.model,
            self.config.llm_endpoint,
        )

    def submit(self, request: GenerateRequest) -> str:
        return self._driver.submit(request)

    def check_available(self) -> None:
        self._driver.check_available()

    def list_models(self) -> list[dict[str, Any]]:
        return self._driver.list_models()
