from __future__ import annotations

import logging
from typing import Any, Callable, Optional

import openai

from ..config import Config
from ..exceptions import BackendUnavailableError, LLMError
from .base import BaseDriver, GenerateRequest

logger = logging.getLogger(__name__)


class OpenAIDriver(BaseDriver):
    """Driver for OpenAI and OpenAI-compatible chat completion servers.

    Local servers (llama.cpp, vLLM, LM Studio, Ollama's ``/v1``) accept a
    ``repetition_penalty`` extension; the hosted OpenAI API rejects unknown
    parameters, so it is only sent to other hosts.
    """

    def __init__(
        self,
        config: Config,
        client_factory: Optional[Callable[..., Any]] = None,
    ) -> None:
        super().__init__(config)
        factory = client_factory or openai.OpenAI
        # Local OpenAI-compatible servers ignore the key but the SDK wants one.
        self._client = factory(
            base_url=config.llm_endpoint,
            api_key=config.resolve_api_key() or "not-needed",
            timeout=config.request_timeout,
        )

    def _is_hosted_openai(self) -> bool:
        return "api.openai.com" in self.config.llm_endpoint

    def build_kwargs(self, request: GenerateRequest) -> dict[str, Any]:
        kwargs: dict[str, Any] = {
            "model": request.model,
            "messages": [
                {"role": "system", "content": request.system},
                {"role": "user", "content": request.prompt},
            ],
            "temperature": request.sampling.temperature,
            "max_tokens": request.sampling.max_output_tokens,
        }
        shape = request.output_shape
        if isinstance(shape, dict):
            kwargs["response_format"] = {
                "type": "json_schema",
                "json_schema": {
                    "name": "commit_messages",
                    "schema": shape,
                    "strict": True,
                },
            }
        elif shape == "json":
            kwargs["response_format"] = {"type": "json_object"}
        if not self._is_hosted_openai():
            kwargs["extra_body"] = {
                "repetition_penalty": request.sampling.repetition_penalty
            }
        return kwargs

    def submit(self, request: GenerateRequest) -> str:
        kwargs = self.build_kwargs(request)
        logger.debug(
            "openai.chat model=%s temperature=%s max_tokens=%s",
            request.model,
            request.sampling.temperature,
            request.sampling.max_output_tokens,
        )
        try:
            resp = self._client.chat.completions.create(**kwargs)
        except openai.APIConnectionError as e:
            raise BackendUnavailableError(
                f"Could not connect to {self.config.llm_endpoint}."
            ) from e
        except openai.APIStatusError as e:
            raise BackendUnavailableError(
                f"Backend returned HTTP {e.status_code}.",
                detail=str(e.message) if e.message else None,
            ) from e
        except openai.OpenAIError as e:
            raise LLMError(f"OpenAI client error: {e}") from e

        try:
            choice0 = resp.choices[0]
        except (AttributeError, IndexError):
            raise LLMError("Missing choices in OpenAI response") from None

        # Content is a string, or a list of fragments on newer SDKs.
        raw_msg = getattr(choice0, "message", None)
        content = ""
        if raw_msg is not None:
            msg_content = getattr(raw_msg, "content", "") or ""
            if isinstance(msg_content, str):
                content = msg_content
            elif isinstance(msg_content, list):
                fragments: list[str] = []
                for part in msg_content:
                    if isinstance(part, dict):
                        txt = part.get("text") or part.get("content") or ""
                    else:
                        txt = getattr(part, "text", "") or getattr(part, "content", "")
                    if txt:
                        fragments.append(str(txt))
                content = "".join(fragments)
        logger.debug(
            "openai.chat finish_reason=%s len=%d",
            getattr(choice0, "finish_reason", None),
            len(content),
        )
        return content

    def check_available(self) -> None:
        try:
            self._client.models.list()
        except openai.OpenAIError as e:
            raise BackendUnavailableError(
                f"Backend at {self.config.llm_endpoint} is not reachable."
            ) from e

    def list_models(self) -> list[dict[str, Any]]:
        try:
            page = self._client.models.list()
        except openai.OpenAIError as e:
            raise BackendUnavailableError(f"OpenAI list_models failed: {e}") from e
        out: list[dict[str, Any]] = []
        for m in getattr(page, "data", None) or []:
            mid = getattr(m, "id", None)
            if not mid:
                continue
            out.append({"id": mid, "owned_by": getattr(m, "owned_by", None)})
        return out
