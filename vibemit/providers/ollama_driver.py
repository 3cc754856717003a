from __future__ import annotations

import logging
import shutil
from typing import Any
from urllib.parse import urlparse

import httpx

from ..config import Config
from ..exceptions import BackendUnavailableError, LLMError
from .base import BaseDriver, GenerateRequest

logger = logging.getLogger(__name__)

_LOCAL_HOSTS = {"localhost", "127.0.0.1", "0.0.0.0", "::1"}

NOT_INSTALLED_MESSAGE = "\n".join(
    [
        "Ollama is not installed.",
        "",
        "Install Ollama:",
        "  macOS:  brew install ollama",
        "  Linux:  curl -fsSL https://ollama.com/install.sh | sh",
        "",
        "Then start the server:",
        "  ollama serve",
        "",
        "More info: https://ollama.com",
    ]
)

NOT_RUNNING_MESSAGE = "\n".join(
    [
        "Ollama server is not running.",
        "",
        "Start the server:",
        "  ollama serve",
        "",
        "Then try again.",
    ]
)


class OllamaDriver(BaseDriver):
    """Driver for the native Ollama REST API (``/api/generate``)."""

    def __init__(self, config: Config) -> None:
        super().__init__(config)
        self._base_url = config.llm_endpoint.rstrip("/")
        self._request_timeout = config.request_timeout

    def _is_local(self) -> bool:
        host = urlparse(self._base_url).hostname or ""
        return host in _LOCAL_HOSTS

    def build_payload(self, request: GenerateRequest) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "model": request.model,
            "prompt": request.prompt,
            "system": request.system,
            "stream": False,
            "think": False,
            "options": {
                "temperature": request.sampling.temperature,
                "num_predict": request.sampling.max_output_tokens,
                "repeat_penalty": request.sampling.repetition_penalty,
            },
        }
        if request.output_shape is not None:
            payload["format"] = request.output_shape
        return payload

    def submit(self, request: GenerateRequest) -> str:
        url = self._base_url + "/api/generate"
        payload = self.build_payload(request)
        logger.debug(
            "ollama.generate model=%s temperature=%s num_predict=%s format=%s",
            request.model,
            request.sampling.temperature,
            request.sampling.max_output_tokens,
            "yes" if request.output_shape is not None else "no",
        )
        try:
            response = httpx.post(url, json=payload, timeout=self._request_timeout)
        except httpx.HTTPError as e:
            raise BackendUnavailableError(
                f"Could not connect to Ollama server at {self._base_url}."
            ) from e

        status = int(getattr(response, "status_code", 200))
        if status >= 400:
            raise BackendUnavailableError(
                f"Ollama returned HTTP {status}.",
                detail=getattr(response, "text", "") or None,
            )
        try:
            data = response.json()
        except ValueError as e:
            raise LLMError("Ollama returned a non-JSON response body") from e
        if not isinstance(data, dict):
            raise LLMError("Ollama returned an unexpected response shape")
        text = data.get("response") or ""
        logger.debug("ollama.generate response length=%d", len(text))
        return str(text)

    def check_available(self) -> None:
        if self._is_local() and shutil.which("ollama") is None:
            raise BackendUnavailableError(NOT_INSTALLED_MESSAGE)
        try:
            response = httpx.get(
                self._base_url + "/api/tags", timeout=self._request_timeout
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.debug("ollama.tags failed: %s", e)
            raise BackendUnavailableError(NOT_RUNNING_MESSAGE) from e

    def list_models(self) -> list[dict[str, Any]]:
        try:
            response = httpx.get(
                self._base_url + "/api/tags", timeout=self._request_timeout
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise BackendUnavailableError(f"Ollama list_models failed: {e}") from e
        data = response.json()
        out: list[dict[str, Any]] = []
        for m in data.get("models") or []:
            if not isinstance(m, dict):
                continue
            mid = m.get("name") or m.get("model")
            if not mid:
                continue
            entry: dict[str, Any] = {"id": mid, "owned_by": "ollama"}
            for k in ("size", "modified_at"):
                if k in m:
                    entry[k] = m[k]
            details = m.get("details")
            if isinstance(details, dict) and details.get("parameter_size"):
                entry["parameter_size"] = details["parameter_size"]
            out.append(entry)
        return out
