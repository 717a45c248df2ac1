"""Unit tests for the Gemini and OpenAI LLM adapters with mocked clients."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import httpx
import openai
import pytest

from duende.config.settings import Settings
from duende.providers.llm.gemini_provider import GeminiLLMProvider
from duende.providers.llm.openai_provider import OpenAILLMProvider
from duende.utils.errors import LLMError

_GEMINI_URL = (
    "https://generativelanguage.googleapis.com/v1beta/models/"
    "gemini-1.5-flash-latest:generateContent"
)


def _settings(**overrides) -> Settings:
    defaults = {"gemini_api_key": "", "openai_api_key": "", "openai_base_url": ""}
    defaults.update(overrides)
    return Settings(_env_file=None, **defaults)


def _http_response(status: int, payload: dict, url: str = _GEMINI_URL) -> httpx.Response:
    return httpx.Response(status, json=payload, request=httpx.Request("POST", url))


def _http_client(response: httpx.Response | None = None, error: Exception | None = None) -> MagicMock:
    client = MagicMock(spec=httpx.AsyncClient)
    client.post = AsyncMock(return_value=response, side_effect=error)
    client.get = AsyncMock(return_value=response, side_effect=error)
    return client


# ======================================================================
# Gemini
# ======================================================================


class TestGeminiLLMProvider:
    @pytest.mark.asyncio
    async def test_complete_posts_generate_content(self) -> None:
        payload = {
            "candidates": [{"content": {"parts": [{"text": "¡Olé!"}]}}],
            "usageMetadata": {"totalTokenCount": 12},
        }
        client = _http_client(_http_response(200, payload))
        provider = GeminiLLMProvider(_settings(gemini_api_key="g-key"), client)

        text = await provider.complete("sistema", "usuario", temperature=0.5, max_tokens=100)

        assert text == "¡Olé!"
        args, kwargs = client.post.call_args
        assert args[0] == _GEMINI_URL
        assert kwargs["headers"] == {"x-goog-api-key": "g-key"}
        body = kwargs["json"]
        assert body["systemInstruction"] == {"parts": [{"text": "sistema"}]}
        assert body["contents"] == [{"role": "user", "parts": [{"text": "usuario"}]}]
        assert body["generationConfig"] == {"temperature": 0.5, "maxOutputTokens": 100}

    @pytest.mark.asyncio
    async def test_http_error_raises_llm_error(self) -> None:
        client = _http_client(_http_response(403, {"error": {"message": "denied"}}))
        provider = GeminiLLMProvider(_settings(gemini_api_key="bad"), client)

        with pytest.raises(LLMError, match="HTTP 403"):
            await provider.complete("s", "u")

    @pytest.mark.asyncio
    async def test_timeout_raises_llm_error(self) -> None:
        client = _http_client(error=httpx.ReadTimeout("slow"))
        provider = GeminiLLMProvider(_settings(gemini_api_key="g-key"), client)

        with pytest.raises(LLMError, match="timed out"):
            await provider.complete("s", "u")

    @pytest.mark.asyncio
    async def test_missing_candidates_raise_llm_error(self) -> None:
        client = _http_client(_http_response(200, {"candidates": []}))
        provider = GeminiLLMProvider(_settings(gemini_api_key="g-key"), client)

        with pytest.raises(LLMError, match="empty response"):
            await provider.complete("s", "u")

    @pytest.mark.asyncio
    async def test_validate_credentials(self) -> None:
        client = _http_client(_http_response(200, {"name": "models/gemini"}))
        provider = GeminiLLMProvider(_settings(gemini_api_key="g-key"), client)
        assert await provider.validate_credentials() is True
        assert provider.get_provider_name() == "gemini"

    def test_is_available_requires_key(self) -> None:
        assert GeminiLLMProvider(_settings(), _http_client()).is_available() is False


# ======================================================================
# OpenAI
# ======================================================================


def _openai_client(content: str | None = "Plan", error: Exception | None = None) -> MagicMock:
    response = MagicMock()
    response.choices = [MagicMock()]
    response.choices[0].message.content = content
    response.usage.total_tokens = 7
    client = MagicMock()
    client.chat.completions.create = AsyncMock(return_value=response, side_effect=error)
    client.models.list = AsyncMock(return_value=[])
    return client


class TestOpenAILLMProvider:
    @pytest.mark.asyncio
    async def test_complete_sends_system_and_user_messages(self) -> None:
        client = _openai_client("Plan")
        provider = OpenAILLMProvider(_settings(openai_api_key="sk-test"), client=client)

        assert await provider.complete("sistema", "usuario") == "Plan"
        kwargs = client.chat.completions.create.call_args.kwargs
        assert kwargs["model"] == "gpt-4o-mini"
        assert kwargs["messages"] == [
            {"role": "system", "content": "sistema"},
            {"role": "user", "content": "usuario"},
        ]

    @pytest.mark.asyncio
    async def test_empty_content_raises(self) -> None:
        provider = OpenAILLMProvider(_settings(openai_api_key="sk"), client=_openai_client(None))
        with pytest.raises(LLMError):
            await provider.complete("s", "u")

    @pytest.mark.asyncio
    async def test_timeout_is_wrapped(self) -> None:
        error = openai.APITimeoutError(request=httpx.Request("POST", "https://api.openai.com"))
        provider = OpenAILLMProvider(
            _settings(openai_api_key="sk"), client=_openai_client(error=error)
        )
        with pytest.raises(LLMError, match="timed out"):
            await provider.complete("s", "u")

    def test_custom_base_url_changes_label(self) -> None:
        provider = OpenAILLMProvider(
            _settings(openai_api_key="sk", openai_base_url="https://api.groq.com/openai/v1"),
            client=_openai_client(),
        )
        assert provider.get_provider_name() == "openai-compatible"

    def test_builds_sdk_client_when_none_injected(self) -> None:
        provider = OpenAILLMProvider(_settings(openai_api_key="sk-test"))
        assert isinstance(provider._client, openai.AsyncOpenAI)
        assert provider.is_available() is True

