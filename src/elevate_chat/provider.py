from collections.abc import AsyncIterator
from typing import Protocol, runtime_checkable

DEFAULT_MODELS = {
    "gemini": "gemini-1.5-flash",
    "anthropic": "claude-sonnet-4-5-20250929",
    "openai": "gpt-4o-mini",
}


@runtime_checkable
class ResponseProvider(Protocol):
    def stream(self, prompt: str) -> AsyncIterator[str]:
        """Yield response text fragments in generation order.

        The iterator ends when generation completes and raises if it fails.
        """
        ...


def create_provider(provider_name: str, api_key: str, model: str | None = None) -> ResponseProvider:
    """Factory: create a ResponseProvider by name."""
    name = provider_name.strip().lower()
    if name not in DEFAULT_MODELS:
        raise ValueError(f"Unknown provider: {provider_name!r}. Supported: 'gemini', 'anthropic', 'openai'")
    model_name = model or DEFAULT_MODELS[name]
    if name == "gemini":
        from elevate_chat.providers.gemini_provider import GeminiProvider
        return GeminiProvider(api_key, model=model_name)
    if name == "anthropic":
        from elevate_chat.providers.anthropic_provider import AnthropicProvider
        return AnthropicProvider(api_key, model=model_name)
    from elevate_chat.providers.openai_provider import OpenAIProvider
    return OpenAIProvider(api_key, model=model_name)
