import unittest

from pinegen.core.models.chat import ChatHistory, ChatMessage
from pinegen.core.services.chat_service import ChatService
from pinegen.core.services.prompt_builder import (
    COACH_SYSTEM_PROMPT,
    RECOVERY_SYSTEM_PROMPT,
)


class StreamingLLM:
    def __init__(self, tokens, vision=True):
        self.tokens = tokens
        self.vision = vision
        self.calls = []

    async def complete(self, system_prompt, user_prompt, model=None):
        return "".join(self.tokens)

    async def chat_stream(self, messages, model=None):
        self.calls.append({"messages": messages, "model": model})
        for token in self.tokens:
            yield token

    def supports_image_input(self, model=None):
        return self.vision


async def collect(stream):
    return [token async for token in stream]


class ChatServiceTests(unittest.IsolatedAsyncioTestCase):
    async def test_stream_reply_records_history(self):
        llm = StreamingLLM(["Risk ", "first."])
        service = ChatService(llm, history_limit=4)
        history = service.new_history()

        tokens = await collect(service.stream_reply("How big should I size?", history))

        self.assertEqual(tokens, ["Risk ", "first."])
        self.assertEqual(
            [(m.role, m.content) for m in history.messages],
            [("user", "How big should I size?"), ("assistant", "Risk first.")],
        )
        messages = llm.calls[0]["messages"]
        self.assertEqual(messages[0], {"role": "system", "content": COACH_SYSTEM_PROMPT})
        self.assertEqual(messages[-1], {"role": "user", "content": "How big should I size?"})

    async def test_mode_and_model_forwarded(self):
        llm = StreamingLLM(["ok"])
        service = ChatService(llm)
        history = service.new_history()
        history.add_pair("earlier", "reply")

        await collect(service.stream_reply("I lost 3R", history, mode="recovery", model="gpt-4o-mini"))

        call = llm.calls[0]
        self.assertEqual(call["model"], "gpt-4o-mini")
        self.assertEqual(call["messages"][0]["content"], RECOVERY_SYSTEM_PROMPT)
        self.assertEqual(
            [m["content"] for m in call["messages"][1:]],
            ["earlier", "reply", "I lost 3R"],
        )

    async def test_unknown_mode_uses_coach(self):
        llm = StreamingLLM(["ok"])
        service = ChatService(llm)

        await collect(service.stream_reply("hi", service.new_history(), mode="trader"))

        self.assertEqual(llm.calls[0]["messages"][0]["content"], COACH_SYSTEM_PROMPT)

    async def test_image_parts_for_vision_models(self):
        llm = StreamingLLM(["ok"], vision=True)
        service = ChatService(llm)

        await collect(
            service.stream_reply("", service.new_history(), image_url="data:image/png;base64,AAA")
        )

        content = llm.calls[0]["messages"][-1]["content"]
        self.assertEqual(content[0], {"type": "text", "text": "Analyze this image."})
        self.assertEqual(content[1]["image_url"]["url"], "data:image/png;base64,AAA")

    async def test_images_dropped_for_text_models(self):
        llm = StreamingLLM(["ok"], vision=False)
        service = ChatService(llm)
        history = service.new_history()
        history.add(ChatMessage(role="user", content="old chart", image_url="http://x/1.png"))

        await collect(
            service.stream_reply("new chart", history, image_url="http://x/2.png", model="o3-mini")
        )

        messages = llm.calls[0]["messages"]
        self.assertEqual(messages[1], {"role": "user", "content": "old chart"})
        self.assertEqual(messages[-1], {"role": "user", "content": "new chart"})


class FailingLLM(StreamingLLM):
    async def chat_stream(self, messages, model=None):
        raise RuntimeError("provider down")
        yield


class ChatStreamLifecycleTests(unittest.IsolatedAsyncioTestCase):
    async def test_closed_stream_keeps_partial_reply(self):
        llm = StreamingLLM(["Cut ", "size ", "in half."])
        service = ChatService(llm)
        history = service.new_history()

        stream = service.stream_reply("I am on tilt", history)
        first = await stream.__anext__()
        await stream.aclose()

        self.assertEqual(first, "Cut ")
        self.assertEqual(
            [(m.role, m.content) for m in history.messages],
            [("user", "I am on tilt"), ("assistant", "Cut ")],
        )

    async def test_failed_stream_leaves_history_untouched(self):
        service = ChatService(FailingLLM([]))
        history = service.new_history()

        with self.assertRaises(RuntimeError):
            await collect(service.stream_reply("hi", history))

        self.assertEqual(history.messages, [])

    async def test_empty_reply_is_recorded(self):
        service = ChatService(StreamingLLM([]))
        history = service.new_history()

        await collect(service.stream_reply("hi", history))

        self.assertEqual([m.content for m in history.messages], ["hi", ""])


class ChatHistoryTests(unittest.TestCase):
    def test_trims_to_limit(self):
        history = ChatHistory(max_messages=3)
        history.add_pair("q1", "a1")
        history.add_pair("q2", "a2")

        self.assertEqual([m.content for m in history.messages], ["a1", "q2", "a2"])


if __name__ == "__main__":
    unittest.main()
