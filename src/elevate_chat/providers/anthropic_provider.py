from collections.abc import AsyncIterator

import anthropic
from loguru import logger
from tenacity import retry

from elevate_chat.providers.common import default_retry_kwargs


class AnthropicProvider:
    def __init__(
        self,
        api_key: str,
        *,
        model: str = "claude-sonnet-4-5-20250929",
        max_tokens: int = 4096,
        temperature: float = 1.0,
    ):
        self._client = anthropic.AsyncAnthropic(api_key=api_key)
        self._model = model
        self._max_tokens = max_tokens
        self._temperature = temperature

    @retry(**default_retry_kwargs((
        anthropic.RateLimitError,
        anthropic.APIConnectionError,
        anthropic.APITimeoutError,
    )))
    async def _open_stream(self, prompt: str):
        logger.debug(f"API request: model={self._model}, max_tokens={self._max_tokens}")
        return await self._client.messages.create(
            model=self._model,
            max_tokens=self._max_tokens,
            temperature=self._temperature,
            messages=[{"role": "user", "content": prompt}],
            stream=True,
        )

    async def stream(self, prompt: str) -> AsyncIterator[str]:
        events = await self._open_stream(prompt)
        stop_reason = None
        async for event in events:
            if event.type == "content_block_delta" and event.delta.type == "text_delta":
                if event.delta.text:
                    yield event.delta.text
            elif event.type == "message_delta":
                stop_reason = getattr(event.delta, "stop_reason", None)
        logger.debug(f"API response: stop_reason={stop_reason}")
