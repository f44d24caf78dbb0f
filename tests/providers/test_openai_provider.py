import asyncio
import unittest
from types import SimpleNamespace

from elevate_chat.providers.openai_provider import OpenAIProvider
from tests.providers.fakes import FakeAsyncStream, RecordingCreate


def _chunk(content: str | None, finish_reason: str | None = None) -> SimpleNamespace:
    return SimpleNamespace(
        choices=[SimpleNamespace(delta=SimpleNamespace(content=content), finish_reason=finish_reason)]
    )


class OpenAIProviderStreamTests(unittest.TestCase):
    def _make_provider(self, create: RecordingCreate) -> OpenAIProvider:
        provider = OpenAIProvider.__new__(OpenAIProvider)
        provider._client = SimpleNamespace(chat=SimpleNamespace(completions=SimpleNamespace(create=create)))
        provider._model = "gpt-test"
        provider._max_tokens = 64
        provider._temperature = 1.0
        return provider

    def test_stream_yields_content_deltas(self) -> None:
        chunks = [
            _chunk("Hel"),
            SimpleNamespace(choices=[]),
            _chunk(None),
            _chunk("lo!"),
            _chunk(None, finish_reason="stop"),
        ]
        create = RecordingCreate(FakeAsyncStream(chunks))
        provider = self._make_provider(create)

        async def scenario() -> list[str]:
            return [fragment async for fragment in provider.stream("Hi")]

        self.assertEqual(["Hel", "lo!"], asyncio.run(scenario()))
        self.assertEqual("gpt-test", create.calls[0]["model"])
        self.assertEqual([{"role": "user", "content": "Hi"}], create.calls[0]["messages"])

    def test_open_failure_that_is_not_retryable_propagates(self) -> None:
        create = RecordingCreate(ValueError("bad request"))
        provider = self._make_provider(create)

        async def scenario() -> None:
            async for _ in provider.stream("Hi"):
                pass

        with self.assertRaises(ValueError):
            asyncio.run(scenario())
        self.assertEqual(1, len(create.calls))


if __name__ == "__main__":
    unittest.main()
