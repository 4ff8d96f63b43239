"""Text-completion providers, API key lookup and prompt construction."""

from .keys import resolve_api_key
from .prompts import build_prompts, file_category
from .providers import (
    CompletionProvider,
    GeminiProvider,
    OllamaProvider,
    OpenAIProvider,
    build_provider,
)

__all__ = [
    "CompletionProvider",
    "GeminiProvider",
    "OllamaProvider",
    "OpenAIProvider",
    "build_prompts",
    "build_provider",
    "file_category",
    "resolve_api_key",
]
