"""Async text-completion providers.

The content generator depends on one capability only: given a system
instruction and a user prompt, return generated text
(:class:`CompletionProvider`).  The adapters here wrap the Gemini, OpenAI and
local Ollama HTTP APIs with ``httpx.AsyncClient``; every transport or protocol
failure surfaces as :class:`~skaya.exceptions.AIProviderError`.

Typical usage::

    provider = build_provider(settings.ai)
    text = await provider.complete("You are ...", "Create a button component")
"""

from __future__ import annotations

from typing import Any, Protocol

import httpx

from ..config import AISettings
from ..exceptions import AIProviderError
from .keys import resolve_api_key


class CompletionProvider(Protocol):
    """Anything that can turn (system, user) prompts into text."""

    name: str

    async def complete(self, system: str, user: str) -> str: ...


class HTTPCompletionProvider:
    """Shared ``httpx`` plumbing for the concrete providers."""

    name = "http"
    default_base_url = ""

    def __init__(
        self,
        model: str,
        base_url: str = "",
        timeout: int = 120,
        temperature: float = 0.3,
        max_tokens: int = 2000,
    ) -> None:
        self.model = model
        self.base_url = (base_url or self.default_base_url).rstrip("/")
        self.timeout = timeout
        self.temperature = temperature
        self.max_tokens = max_tokens

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _client(self) -> httpx.AsyncClient:
        """Return a fresh ``AsyncClient`` configured with our base URL and timeout."""
        return httpx.AsyncClient(
            base_url=self.base_url,
            timeout=httpx.Timeout(self.timeout, connect=10.0),
        )

    def _headers(self) -> dict[str, str]:
        return {}

    async def _post(self, path: str, payload: dict[str, Any]) -> dict[str, Any]:
        try:
            async with self._client() as client:
                response = await client.post(path, json=payload, headers=self._headers())
                response.raise_for_status()
                return response.json()
        except httpx.ConnectError as exc:
            raise AIProviderError(
                f"Cannot connect to {self.name} at {self.base_url}."
            ) from exc
        except httpx.TimeoutException as exc:
            raise AIProviderError(
                f"Request to {self.name} timed out after {self.timeout}s."
            ) from exc
        except httpx.HTTPStatusError as exc:
            raise AIProviderError(
                f"{self.name} returned HTTP {exc.response.status_code}: {exc.response.text[:500]}"
            ) from exc
        except Exception as exc:
            raise AIProviderError(f"Unexpected error calling {self.name}: {exc}") from exc

    # Subclasses describe their wire format with these three hooks.

    def _endpoint(self) -> str:
        raise NotImplementedError

    def _payload(self, system: str, user: str) -> dict[str, Any]:
        raise NotImplementedError

    def _extract_text(self, data: dict[str, Any]) -> str:
        raise NotImplementedError

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def complete(self, system: str, user: str) -> str:
        """Return the generated text for one (system, user) exchange."""
        data = await self._post(self._endpoint(), self._payload(system, user))
        try:
            return self._extract_text(data)
        except (KeyError, IndexError, TypeError) as exc:
            raise AIProviderError(f"Malformed {self.name} response: {exc}") from exc


class GeminiProvider(HTTPCompletionProvider):
    """Google Gemini ``generateContent`` REST API."""

    name = "gemini"
    default_base_url = "https://generativelanguage.googleapis.com/v1beta"

    def __init__(self, api_key: str, model: str = "gemini-2.0-flash", **kwargs: Any) -> None:
        super().__init__(model, **kwargs)
        self.api_key = api_key

    def _endpoint(self) -> str:
        return f"/models/{self.model}:generateContent"

    def _headers(self) -> dict[str, str]:
        return {"x-goog-api-key": self.api_key}

    def _payload(self, system: str, user: str) -> dict[str, Any]:
        return {
            "systemInstruction": {"parts": [{"text": system}]},
            "contents": [{"role": "user", "parts": [{"text": user}]}],
            "generationConfig": {
                "temperature": self.temperature,
                "maxOutputTokens": self.max_tokens,
            },
        }

    def _extract_text(self, data: dict[str, Any]) -> str:
        parts = data["candidates"][0]["content"]["parts"]
        return "".join(part.get("text", "") for part in parts)


class OpenAIProvider(HTTPCompletionProvider):
    """OpenAI-compatible ``/chat/completions`` API."""

    name = "openai"
    default_base_url = "https://api.openai.com/v1"

    def __init__(self, api_key: str, model: str = "gpt-4o-mini", **kwargs: Any) -> None:
        super().__init__(model, **kwargs)
        self.api_key = api_key

    def _endpoint(self) -> str:
        return "/chat/completions"

    def _headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.api_key}"}

    def _payload(self, system: str, user: str) -> dict[str, Any]:
        return {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system},
                {"role": "user", "content": user},
            ],
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
        }

    def _extract_text(self, data: dict[str, Any]) -> str:
        return data["choices"][0]["message"].get("content") or ""


class OllamaProvider(HTTPCompletionProvider):
    """Local Ollama ``/api/generate``; needs no API key."""

    name = "ollama"
    default_base_url = "http://localhost:11434"

    def _endpoint(self) -> str:
        return "/api/generate"

    def _payload(self, system: str, user: str) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "model": self.model,
            "prompt": user,
            "stream": False,
            "options": {"temperature": self.temperature, "num_predict": self.max_tokens},
        }
        if system:
            payload["system"] = system
        return payload

    def _extract_text(self, data: dict[str, Any]) -> str:
        """Ollama's non-streaming response puts the full text in ``"response"``."""
        return data.get("response", "")


def build_provider(settings: AISettings, api_key: str | None = None) -> CompletionProvider:
    """Construct the configured provider.

    Hosted providers resolve their API key here, so
    :class:`~skaya.exceptions.MissingAPIKey` is raised before any request.
    """
    common = {
        "base_url": settings.base_url,
        "timeout": settings.timeout,
        "temperature": settings.temperature,
        "max_tokens": settings.max_tokens,
    }
    model = settings.resolved_model
    if settings.provider == "ollama":
        return OllamaProvider(model, **common)
    key = api_key or resolve_api_key()
    if settings.provider == "openai":
        return OpenAIProvider(key, model=model, **common)
    return GeminiProvider(key, model=model, **common)
