import asyncio
import unittest
from types import SimpleNamespace

from elevate_chat.providers.gemini_provider import GeminiProvider
from tests.providers.fakes import FakeAsyncStream, RecordingCreate


class GeminiProviderStreamTests(unittest.TestCase):
    def _make_provider(self, generate: RecordingCreate) -> GeminiProvider:
        provider = GeminiProvider.__new__(GeminiProvider)
        provider._client = SimpleNamespace(
            aio=SimpleNamespace(models=SimpleNamespace(generate_content_stream=generate))
        )
        provider._model = "gemini-1.5-flash"
        return provider

    def test_stream_skips_chunks_without_text(self) -> None:
        chunks = [SimpleNamespace(text="Hel"), SimpleNamespace(text=None), SimpleNamespace(text="lo!")]
        generate = RecordingCreate(FakeAsyncStream(chunks))
        provider = self._make_provider(generate)

        async def scenario() -> list[str]:
            return [fragment async for fragment in provider.stream("Hi")]

        self.assertEqual(["Hel", "lo!"], asyncio.run(scenario()))
        self.assertEqual({"model": "gemini-1.5-flash", "contents": "Hi"}, generate.calls[0])


class CreateProviderTests(unittest.TestCase):
    def test_unknown_provider_is_rejected(self) -> None:
        from elevate_chat.provider import create_provider

        with self.assertRaises(ValueError):
            create_provider("llama", "key")

    def test_gemini_is_built_with_default_model(self) -> None:
        from elevate_chat.provider import create_provider

        provider = create_provider("Gemini", "test-key")
        self.assertIsInstance(provider, GeminiProvider)
        self.assertEqual("gemini-1.5-flash", provider._model)


if __name__ == "__main__":
    unittest.main()
