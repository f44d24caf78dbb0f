from collections.abc import AsyncIterator

from google import genai
from google.genai import errors as genai_errors
from loguru import logger
from tenacity import retry

from elevate_chat.providers.common import default_retry_kwargs


class GeminiProvider:
    """Streams replies from the Gemini API using an API key."""

    def __init__(self, api_key: str, *, model: str = "gemini-1.5-flash"):
        self._client = genai.Client(api_key=api_key)
        self._model = model

    @retry(**default_retry_kwargs((genai_errors.ServerError,)))
    async def _open_stream(self, prompt: str):
        logger.debug(f"Gemini request: model={self._model}, prompt_chars={len(prompt)}")
        return await self._client.aio.models.generate_content_stream(
            model=self._model,
            contents=prompt,
        )

    async def stream(self, prompt: str) -> AsyncIterator[str]:
        response_stream = await self._open_stream(prompt)
        fragments = 0
        async for chunk in response_stream:
            text = chunk.text or ""
            if not text:
                continue
            fragments += 1
            yield text
        logger.debug(f"Gemini response complete: fragments={fragments}")
