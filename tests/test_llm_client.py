"""Tests for the Vertex generation client."""

import json
from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from shared.clients.llm.LLMClientManager import LLMClientManager
from shared.clients.llm.vertex.LLMClientVertex import LLMClientVertex
from shared.errors import GenerationError
from tests.conftest import json_response


@pytest.fixture
def token_provider():
    provider = MagicMock()
    provider.get_token = AsyncMock(return_value="access-token")
    provider.get_project_id = MagicMock(return_value="test-project")
    return provider


def _candidate(text: str) -> dict:
    return {"candidates": [{"content": {"role": "model", "parts": [{"text": text}]}, "finishReason": "STOP"}]}


async def _client(helper_config, token_provider, handler) -> LLMClientVertex:
    client = LLMClientVertex(helper_config=helper_config, token_provider=token_provider)
    await client.boot(transport=httpx.MockTransport(handler))
    return client


class TestPayload:
    def test_generation_config_defaults(self, helper_config, token_provider):
        client = LLMClientVertex(helper_config=helper_config, token_provider=token_provider)
        payload = client.get_generate_payload("prompt", system_instruction="be critical")

        assert payload["contents"] == [{"role": "user", "parts": [{"text": "prompt"}]}]
        assert payload["generationConfig"] == {
            "temperature": 0.2,
            "topP": 0.95,
            "topK": 40,
            "maxOutputTokens": 4096,
            "responseMimeType": "application/json",
        }
        assert payload["systemInstruction"] == {"parts": [{"text": "be critical"}]}

    def test_plain_text_output_omits_mime_type(self, helper_config, token_provider):
        client = LLMClientVertex(helper_config=helper_config, token_provider=token_provider)
        payload = client.get_generate_payload("prompt", json_output=False)

        assert "responseMimeType" not in payload["generationConfig"]
        assert "systemInstruction" not in payload

    def test_temperature_from_config(self, helper_config, token_provider, monkeypatch):
        monkeypatch.setenv("LLM_TEMPERATURE", "0.7")
        client = LLMClientVertex(helper_config=helper_config, token_provider=token_provider)
        assert client.get_generate_payload("p")["generationConfig"]["temperature"] == 0.7


class TestGenerate:
    @pytest.mark.asyncio
    async def test_returns_first_candidate_text(self, helper_config, token_provider):
        seen: list[httpx.Request] = []

        def handler(request):
            seen.append(request)
            return json_response(_candidate('{"suggestions": []}'))

        client = await _client(helper_config, token_provider, handler)
        text = await client.do_generate("prompt", system_instruction="system")

        assert text == '{"suggestions": []}'
        request = seen[0]
        assert request.url.host == "aiplatform.googleapis.com"
        assert request.url.path == (
            "/v1/projects/test-project/locations/global/publishers/google/models/gemini-2.5-pro:generateContent"
        )
        assert request.headers["Authorization"] == "Bearer access-token"
        assert json.loads(request.content)["contents"][0]["parts"][0]["text"] == "prompt"
        await client.close()

    @pytest.mark.asyncio
    async def test_regional_location_uses_regional_host(self, helper_config, token_provider, monkeypatch):
        monkeypatch.setenv("LLM_VERTEX_LOCATION", "europe-west4")
        seen: list[httpx.Request] = []

        def handler(request):
            seen.append(request)
            return json_response(_candidate("ok"))

        client = await _client(helper_config, token_provider, handler)
        await client.do_generate("prompt")

        assert seen[0].url.host == "europe-west4-aiplatform.googleapis.com"
        await client.close()

    @pytest.mark.asyncio
    async def test_empty_candidates_raise(self, helper_config, token_provider):
        client = await _client(helper_config, token_provider, lambda request: json_response({"candidates": []}))

        with pytest.raises(GenerationError):
            await client.do_generate("prompt")
        await client.close()

    @pytest.mark.asyncio
    async def test_blocked_candidate_reports_finish_reason(self, helper_config, token_provider):
        body = {"candidates": [{"finishReason": "SAFETY"}]}
        client = await _client(helper_config, token_provider, lambda request: json_response(body))

        with pytest.raises(GenerationError, match="SAFETY"):
            await client.do_generate("prompt")
        await client.close()

    @pytest.mark.asyncio
    async def test_non_success_status_raises(self, helper_config, token_provider):
        client = await _client(helper_config, token_provider, lambda request: json_response({"error": {}}, 500))

        with pytest.raises(GenerationError, match="500"):
            await client.do_generate("prompt")
        await client.close()

    @pytest.mark.asyncio
    async def test_transport_failure_raises(self, helper_config, token_provider):
        def handler(request):
            raise httpx.ReadTimeout("slow", request=request)

        client = await _client(helper_config, token_provider, handler)

        with pytest.raises(GenerationError):
            await client.do_generate("prompt")
        await client.close()


def test_manager_rejects_unknown_engine(helper_config, token_provider, monkeypatch):
    monkeypatch.setenv("LLM_ENGINE", "nonexistent")
    with pytest.raises(ValueError, match="Unsupported LLM engine"):
        LLMClientManager(helper_config=helper_config, token_provider=token_provider)
