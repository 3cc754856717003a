from collections.abc import Generator
from pathlib import Path

import pytest


@pytest.fixture(autouse=True)
def reset_config(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> Generator[None, None, None]:
    for name in (
        "VIBEMIT_PROVIDER",
        "VIBEMIT_MODEL",
        "VIBEMIT_ENDPOINT",
        "VIBEMIT_API_KEY_ENV",
        "VIBEMIT_MAX_SUBJECT_LENGTH",
        "VIBEMIT_MAX_DIFF_LINES",
        "VIBEMIT_REQUEST_TIMEOUT",
        "OLLAMA_HOST",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("VIBEMIT_CONFIG_HOME", str(tmp_path / ".vibemit"))

    from vibemit.config import clear_active_config

    clear_active_config()
    yield
    clear_active_config()


# No test may reach a real Ollama server. Tests that exercise the driver
# install their own fakes on top of this one.
@pytest.fixture(autouse=True)
def _block_ollama_network(monkeypatch):
    import httpx

    def refuse(url, *args, **kwargs):  # noqa: D401
        raise httpx.ConnectError(
            "network disabled in tests", request=httpx.Request("GET", str(url))
        )

    monkeypatch.setattr(httpx, "post", refuse)
    monkeypatch.setattr(httpx, "get", refuse)


class ScriptedBackend:
    """Backend stub replaying canned responses and recording requests.

    Each script entry is either a string (returned as the response text) or
    an exception instance (raised).
    """

    def __init__(self, *script):
        self.script = list(script)
        self.requests = []

    def submit(self, request):
        self.requests.append(request)
        if not self.script:
            raise AssertionError("backend called more times than scripted")
        item = self.script.pop(0)
        if isinstance(item, BaseException):
            raise item
        return item


@pytest.fixture
def scripted_backend():
    return ScriptedBackend
