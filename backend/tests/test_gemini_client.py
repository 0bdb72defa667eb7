"""GeminiPromptExecutor against a fake google-genai client."""

from types import SimpleNamespace

import pytest

from services import gemini_client
from services.errors import AIProviderError
from services.gemini_client import GeminiPromptExecutor
from services.prompt_executor import ChatMessage, PromptOptions


class FakeModels:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.calls = []

    async def generate_content(self, model, contents, config):
        self.calls.append({"model": model, "contents": contents, "config": config})
        if self.error is not None:
            raise self.error
        return self.response


def _executor(models: FakeModels) -> GeminiPromptExecutor:
    client = SimpleNamespace(aio=SimpleNamespace(models=models))
    return GeminiPromptExecutor(model="gemini-test", client=client)


MESSAGES = [
    ChatMessage(role="system", content="Return only JSON."),
    ChatMessage(role="user", content="RESUME TEXT: Jane Doe"),
]


@pytest.mark.asyncio
async def test_execute_maps_messages_and_usage():
    response = SimpleNamespace(
        text='{"name": "Jane Doe"}',
        usage_metadata=SimpleNamespace(prompt_token_count=120, candidates_token_count=30),
    )
    models = FakeModels(response=response)

    result = await _executor(models).execute(MESSAGES, PromptOptions(temperature=0.2, max_tokens=1000))

    assert result.text == '{"name": "Jane Doe"}'
    assert result.usage.input == 120
    assert result.usage.output == 30

    call = models.calls[0]
    assert call["model"] == "gemini-test"
    assert call["config"].system_instruction == "Return only JSON."
    assert call["config"].temperature == 0.2
    assert call["config"].max_output_tokens == 1000
    assert call["config"].response_mime_type == "application/json"
    assert len(call["contents"]) == 1
    assert call["contents"][0].role == "user"
    assert call["contents"][0].parts[0].text == "RESUME TEXT: Jane Doe"


@pytest.mark.asyncio
async def test_transport_error_becomes_provider_error():
    models = FakeModels(error=ConnectionError("connection reset"))
    with pytest.raises(AIProviderError, match="connection reset"):
        await _executor(models).execute(MESSAGES, PromptOptions())


@pytest.mark.asyncio
async def test_empty_response_is_provider_error():
    models = FakeModels(response=SimpleNamespace(text=None, usage_metadata=None))
    with pytest.raises(AIProviderError, match="empty response"):
        await _executor(models).execute(MESSAGES, PromptOptions())


def test_get_executor_without_api_key(monkeypatch):
    monkeypatch.setattr(gemini_client.settings, "gemini_api_key", "")
    assert gemini_client.get_executor() is None
