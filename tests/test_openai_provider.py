import unittest
from types import SimpleNamespace

from pinegen.infrastructure.llm.openai_provider import (
    AI_MODEL_LIST,
    DEFAULT_MODEL,
    MODEL_CONFIG,
    OpenAIProvider,
    ProviderConfigError,
    is_ai_model,
    resolve_default_model,
)


class FakeCompletions:
    def __init__(self, content="", chunks=()):
        self.content = content
        self.chunks = chunks
        self.requests = []

    async def create(self, **kwargs):
        self.requests.append(kwargs)
        if kwargs.get("stream"):
            return self._stream()
        return SimpleNamespace(
            choices=[SimpleNamespace(message=SimpleNamespace(content=self.content))]
        )

    async def _stream(self):
        for text in self.chunks:
            yield SimpleNamespace(choices=[SimpleNamespace(delta=SimpleNamespace(content=text))])
        yield SimpleNamespace(choices=[])


def fake_client(completions):
    return SimpleNamespace(chat=SimpleNamespace(completions=completions))


class ModelResolutionTests(unittest.TestCase):
    def test_model_list(self):
        self.assertEqual(AI_MODEL_LIST, ["gpt-4o", "gpt-4o-mini", "o3-mini", "deepseek-r1"])
        self.assertTrue(is_ai_model("deepseek-r1"))
        self.assertFalse(is_ai_model("gpt-5"))
        self.assertFalse(is_ai_model(None))

    def test_resolve_default_model(self):
        self.assertEqual(resolve_default_model("o3-mini"), "o3-mini")
        self.assertEqual(resolve_default_model(" gpt-4o-mini "), "gpt-4o-mini")
        self.assertEqual(resolve_default_model("claude"), DEFAULT_MODEL)
        self.assertEqual(resolve_default_model(None), DEFAULT_MODEL)

    def test_image_support(self):
        provider = OpenAIProvider(default_model="gpt-4o")
        self.assertTrue(provider.supports_image_input())
        self.assertTrue(provider.supports_image_input("gpt-4o-mini"))
        self.assertFalse(provider.supports_image_input("o3-mini"))
        self.assertFalse(provider.supports_image_input("deepseek-r1"))
        # unknown keys fall back to the default model
        self.assertTrue(provider.supports_image_input("unknown"))

    def test_deepseek_api_name(self):
        self.assertEqual(MODEL_CONFIG["deepseek-r1"].api_model, "deepseek-reasoner")
        self.assertEqual(MODEL_CONFIG["deepseek-r1"].provider, "deepseek")


class OpenAIProviderTests(unittest.IsolatedAsyncioTestCase):
    async def test_missing_openai_key(self):
        provider = OpenAIProvider(deepseek_api_key="ds-key")
        with self.assertRaises(ProviderConfigError) as ctx:
            await provider.complete("sys", "user")
        self.assertIn("OPENAI_API_KEY", str(ctx.exception))

    async def test_missing_deepseek_key(self):
        provider = OpenAIProvider(openai_api_key="sk-test")
        with self.assertRaises(ProviderConfigError) as ctx:
            await provider.complete("sys", "user", model="deepseek-r1")
        self.assertIn("DEEPSEEK_API_KEY", str(ctx.exception))

    async def test_complete_request(self):
        completions = FakeCompletions(content="```pine\nplot(close)\n```")
        provider = OpenAIProvider(openai_api_key="sk-test", max_tokens=1000, temperature=0.3)
        provider._clients["openai"] = fake_client(completions)

        text = await provider.complete("sys", "user", model="gpt-4o-mini")

        self.assertEqual(text, "```pine\nplot(close)\n```")
        self.assertEqual(
            completions.requests[0],
            {
                "model": "gpt-4o-mini",
                "messages": [
                    {"role": "system", "content": "sys"},
                    {"role": "user", "content": "user"},
                ],
                "temperature": 0.3,
                "max_tokens": 1000,
            },
        )

    async def test_reasoning_model_omits_temperature(self):
        completions = FakeCompletions(content="ok")
        provider = OpenAIProvider(deepseek_api_key="ds-key", max_tokens=2048)
        provider._clients["deepseek"] = fake_client(completions)

        await provider.complete("sys", "user", model="deepseek-r1")

        request = completions.requests[0]
        self.assertEqual(request["model"], "deepseek-reasoner")
        self.assertNotIn("temperature", request)
        self.assertNotIn("max_tokens", request)
        self.assertEqual(request["max_completion_tokens"], 2048)

    async def test_none_content_is_empty_string(self):
        completions = FakeCompletions(content=None)
        provider = OpenAIProvider(openai_api_key="sk-test")
        provider._clients["openai"] = fake_client(completions)

        self.assertEqual(await provider.complete("sys", "user"), "")

    async def test_chat_stream(self):
        completions = FakeCompletions(chunks=["Hel", "", "lo"])
        provider = OpenAIProvider(openai_api_key="sk-test")
        provider._clients["openai"] = fake_client(completions)

        messages = [{"role": "user", "content": "hi"}]
        tokens = [t async for t in provider.chat_stream(messages)]

        self.assertEqual(tokens, ["Hel", "lo"])
        self.assertTrue(completions.requests[0]["stream"])
        self.assertEqual(completions.requests[0]["model"], "gpt-4o")

    def test_clients_are_cached_per_provider(self):
        provider = OpenAIProvider(openai_api_key="sk-test", deepseek_api_key="ds-key")

        openai_client = provider._client_for(MODEL_CONFIG["gpt-4o"])
        self.assertIs(provider._client_for(MODEL_CONFIG["o3-mini"]), openai_client)

        deepseek_client = provider._client_for(MODEL_CONFIG["deepseek-r1"])
        self.assertIsNot(deepseek_client, openai_client)
        self.assertIn("api.deepseek.com", str(deepseek_client.base_url))


if __name__ == "__main__":
    unittest.main()
