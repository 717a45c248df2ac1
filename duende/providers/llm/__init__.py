"""LLM provider adapters.

Two concrete implementations of ILLMProvider (duende/interfaces/llm_provider.py):
    - GeminiLLMProvider  - Gemini generateContent REST API over httpx
    - OpenAILLMProvider  - gpt-4o-mini (also any OpenAI-compatible endpoint)

At startup, main.py creates the provider matching the available API key
(GEMINI_API_KEY first, then OPENAI_API_KEY) and stores it on app.state.
"""

from duende.providers.llm.gemini_provider import GeminiLLMProvider
from duende.providers.llm.openai_provider import OpenAILLMProvider

__all__ = ["GeminiLLMProvider", "OpenAILLMProvider"]
