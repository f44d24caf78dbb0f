from collections.abc import AsyncIterator

import openai
from loguru import logger
from tenacity import retry

from elevate_chat.providers.common import default_retry_kwargs


class OpenAIProvider:
    def __init__(
        self,
        api_key: str,
        *,
        model: str = "gpt-4o-mini",
        max_tokens: int = 4096,
        temperature: float = 1.0,
    ):
        self._client = openai.AsyncOpenAI(api_key=api_key)
        self._model = model
        self._max_tokens = max_tokens
        self._temperature = temperature

    @retry(**default_retry_kwargs((
        openai.RateLimitError,
        openai.APIConnectionError,
        openai.APITimeoutError,
    )))
    async def _open_stream(self, prompt: str):
        logger.debug(f"API request: model={self._model}, max_tokens={self._max_tokens}")
        return await self._client.chat.completions.create(
            model=self._model,
            max_tokens=self._max_tokens,
            temperature=self._temperature,
            messages=[{"role": "user", "content": prompt}],
            stream=True,
        )

    async def stream(self, prompt: str) -> AsyncIterator[str]:
        chunks = await self._open_stream(prompt)
        finish_reason: str | None = None
        async for chunk in chunks:
            choice = chunk.choices[0] if chunk.choices else None
            if choice is None:
                continue
            if choice.finish_reason:
                finish_reason = choice.finish_reason
            delta = choice.delta
            if delta is not None and delta.content:
                yield delta.content
        logger.debug(f"API response: finish_reason={finish_reason}")
        if finish_reason == "length":
            logger.warning("Response truncated at max_tokens")
