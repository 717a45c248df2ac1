"""Google Gemini LLM provider adapter.

Calls the Generative Language REST API
(``POST {base_url}/models/{model}:generateContent``) through the shared
``httpx.AsyncClient`` built in main.py.  The API key travels in the
``x-goog-api-key`` header rather than the query string so it never shows
up in access logs.

Response shape (abridged)::

    {"candidates": [{"content": {"parts": [{"text": "..."}]}}],
     "usageMetadata": {"totalTokenCount": 123}}
"""

from __future__ import annotations

from typing import Any

import httpx
import structlog

from duende.config.settings import Settings
from duende.interfaces.llm_provider import ILLMProvider
from duende.utils.errors import LLMError

logger = structlog.get_logger(logger_name=__name__)


def _extract_text(payload: dict[str, Any]) -> str | None:
    candidates = payload.get("candidates") or []
    if not candidates:
        return None
    parts = (candidates[0].get("content") or {}).get("parts") or []
    texts = [p.get("text", "") for p in parts if isinstance(p, dict)]
    text = "".join(texts)
    return text or None


class GeminiLLMProvider(ILLMProvider):
    """LLM provider backed by the Gemini ``generateContent`` endpoint.

    Parameters
    ----------
    settings:
        Supplies ``gemini_api_key``, ``gemini_model`` and ``gemini_base_url``.
    http_client:
        Injected ``httpx.AsyncClient`` for testability and connection pooling.
    """

    def __init__(self, settings: Settings, http_client: httpx.AsyncClient) -> None:
        self._api_key = settings.gemini_api_key
        self._model = settings.gemini_model
        self._base_url = settings.gemini_base_url.rstrip("/")
        self._http = http_client

    # ------------------------------------------------------------------
    # ILLMProvider implementation
    # ------------------------------------------------------------------

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        temperature: float = 0.7,
        max_tokens: int = 2048,
    ) -> str:
        """Generate text with a single-turn ``generateContent`` request."""
        url = f"{self._base_url}/models/{self._model}:generateContent"
        body = {
            "systemInstruction": {"parts": [{"text": system_prompt}]},
            "contents": [{"role": "user", "parts": [{"text": user_prompt}]}],
            "generationConfig": {
                "temperature": temperature,
                "maxOutputTokens": max_tokens,
            },
        }
        try:
            response = await self._http.post(
                url,
                json=body,
                headers={"x-goog-api-key": self._api_key},
            )
            response.raise_for_status()
            payload = response.json()
        except httpx.TimeoutException as exc:
            raise LLMError(
                message="Gemini request timed out",
                provider_name=self.get_provider_name(),
            ) from exc
        except httpx.HTTPStatusError as exc:
            raise LLMError(
                message=f"Gemini API error: HTTP {exc.response.status_code}",
                provider_name=self.get_provider_name(),
            ) from exc
        except (httpx.HTTPError, ValueError) as exc:
            raise LLMError(
                message=f"Gemini API error: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        text = _extract_text(payload)
        if text is None:
            raise LLMError(
                message="Gemini returned empty response",
                provider_name=self.get_provider_name(),
            )
        usage = payload.get("usageMetadata") or {}
        logger.info(
            "gemini_completion",
            model=self._model,
            tokens=usage.get("totalTokenCount"),
        )
        return text

    def is_available(self) -> bool:
        return bool(self._api_key and self._api_key.strip())

    async def validate_credentials(self) -> bool:
        """Fetch the model metadata; a 200 means the key is accepted."""
        if not self.is_available():
            return False
        try:
            response = await self._http.get(
                f"{self._base_url}/models/{self._model}",
                headers={"x-goog-api-key": self._api_key},
            )
        except httpx.HTTPError:
            return False
        return response.status_code == 200

    def get_provider_name(self) -> str:
        return "gemini"
