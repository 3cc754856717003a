import pytest

from vibemit.config import Config, load_config
from vibemit.exceptions import ConfigError
from vibemit.llm import COMMIT_MESSAGES_SCHEMA, LLMClient
from vibemit.providers.base import BaseDriver, GenerateRequest, SamplingConfig
from vibemit.providers.ollama_driver import OllamaDriver
from vibemit.providers.openai_driver import OpenAIDriver


class EchoDriver(BaseDriver):
    def __init__(self, config):
        super().__init__(config)
        self.checked = False

    def submit(self, request):
        return request.prompt.upper()

    def check_available(self):
        self.checked = True

    def list_models(self):
        return [{"id": "echo"}]


def test_schema_requests_exactly_three_strings():
    messages = COMMIT_MESSAGES_SCHEMA["properties"]["messages"]
    assert messages["minItems"] == 3
    assert messages["maxItems"] == 3
    assert messages["items"] == {"type": "string"}
    assert COMMIT_MESSAGES_SCHEMA["required"] == ["messages"]


def test_ollama_provider_selects_ollama_driver():
    client = LLMClient(load_config())
    assert isinstance(client._driver, OllamaDriver)
    assert client.model == "qwen3:8b"


def test_openai_provider_selects_openai_driver():
    client = LLMClient(load_config(overrides={"provider": "openai"}))
    assert isinstance(client._driver, OpenAIDriver)
    assert client.provider == "openai"


def test_unknown_provider_is_config_error():
    cfg = Config(provider="bogus", model="m", llm_endpoint="http://x")
    with pytest.raises(ConfigError):
        LLMClient(cfg)


def test_defaults_to_active_config():
    load_config(overrides={"model": "llama3"})
    client = LLMClient()
    assert client.model == "llama3"


def test_injected_driver_receives_calls():
    cfg = Config(provider="ollama", model="m", llm_endpoint="http://x")
    driver = EchoDriver(cfg)
    client = LLMClient(cfg, driver=driver)
    request = GenerateRequest(
        model="m",
        prompt="hello",
        system="s",
        sampling=SamplingConfig(temperature=0.2, max_output_tokens=10),
    )
    assert client.submit(request) == "HELLO"
    client.check_available()
    assert driver.checked
    assert client.list_models() == [{"id": "echo"}]
