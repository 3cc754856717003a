"""Configuration management for vibemit."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Dict, Optional

DEFAULT_PROVIDER = "ollama"

DEFAULT_PROVIDERS = {
    "ollama": {
        "model": "qwen3:8b",
        "endpoint": "http://localhost:11434",
        "api_key_env": "",
    },
    "openai": {
        "model": "gpt-4.1-mini",
        "endpoint": "https://api.openai.com/v1",
        "api_key_env": "OPENAI_API_KEY",
    },
}

DEFAULT_MAX_SUBJECT_LENGTH = 72
DEFAULT_MAX_DIFF_LINES = 1500
DEFAULT_REQUEST_TIMEOUT = 120.0


@dataclass
class Config:
    """Runtime configuration for vibemit."""

    provider: str
    model: str
    llm_endpoint: str
    api_key_env: str = ""
    max_subject_length: int = DEFAULT_MAX_SUBJECT_LENGTH
    max_diff_lines: int = DEFAULT_MAX_DIFF_LINES
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT

    def resolve_api_key(self) -> Optional[str]:
        """Return the API key from the configured environment variable."""
        if not self.api_key_env:
            return None
        return os.environ.get(self.api_key_env)


_CONFIG_STATE: Dict[str, Optional[Config]] = {"active": None}


def _int_setting(raw: Optional[str], default: int) -> int:
    try:
        return int(raw) if raw else default
    except ValueError:
        return default


def _float_setting(raw: Optional[str], default: float) -> float:
    try:
        return float(raw) if raw else default
    except ValueError:
        return default


def load_config(*, overrides: Optional[Dict[str, str]] = None) -> Config:
    """Build configuration from overrides, environment and defaults."""

    overrides = {k: v for k, v in (overrides or {}).items() if v is not None}

    provider = (
        overrides.get("provider")
        or os.environ.get("VIBEMIT_PROVIDER")
        or DEFAULT_PROVIDER
    ).lower()
    if provider not in DEFAULT_PROVIDERS:
        provider = DEFAULT_PROVIDER

    defaults = DEFAULT_PROVIDERS[provider]

    model = (
        overrides.get("model")
        or os.environ.get("VIBEMIT_MODEL")
        or defaults["model"]
    )

    # OLLAMA_HOST is the variable the ollama CLI itself honours.
    host_env = os.environ.get("OLLAMA_HOST") if provider == "ollama" else None
    endpoint = (
        overrides.get("endpoint")
        or os.environ.get("VIBEMIT_ENDPOINT")
        or host_env
        or defaults["endpoint"]
    )
    if "://" not in endpoint:
        endpoint = "http://" + endpoint
    endpoint = endpoint.rstrip("/")

    api_key_env = (
        overrides.get("api_key_env")
        or os.environ.get("VIBEMIT_API_KEY_ENV")
        or defaults["api_key_env"]
    )

    max_subject_length = _int_setting(
        overrides.get("max_subject_length")
        or os.environ.get("VIBEMIT_MAX_SUBJECT_LENGTH"),
        DEFAULT_MAX_SUBJECT_LENGTH,
    )
    max_diff_lines = _int_setting(
        overrides.get("max_diff_lines") or os.environ.get("VIBEMIT_MAX_DIFF_LINES"),
        DEFAULT_MAX_DIFF_LINES,
    )
    request_timeout = _float_setting(
        overrides.get("request_timeout")
        or os.environ.get("VIBEMIT_REQUEST_TIMEOUT"),
        DEFAULT_REQUEST_TIMEOUT,
    )

    config = Config(
        provider=provider,
        model=model,
        llm_endpoint=endpoint,
        api_key_env=api_key_env,
        # Subjects never exceed 72 characters; the setting can only tighten it.
        max_subject_length=min(DEFAULT_MAX_SUBJECT_LENGTH, max(4, max_subject_length)),
        max_diff_lines=max(1, max_diff_lines),
        request_timeout=request_timeout,
    )

    set_active_config(config)
    return config


def set_active_config(config: Config) -> None:
    _CONFIG_STATE["active"] = config


def get_active_config() -> Config:
    active = _CONFIG_STATE.get("active")
    if active is None:
        return load_config()
    return active


def clear_active_config() -> None:
    _CONFIG_STATE["active"] = None


def describe_provider(provider: str) -> str:
    meta = DEFAULT_PROVIDERS.get(provider)
    if not meta:
        return provider
    return f"{provider} (default model: {meta['model']})"
