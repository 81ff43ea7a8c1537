"""Chat service - agent-mode conversations over the LLM provider."""

import logging
from typing import AsyncIterator, Optional

from ..models.chat import ChatHistory, ChatMessage
from ..protocols.llm import LLMProtocol
from .prompt_builder import AgentMode, get_system_prompt, normalize_agent_mode

logger = logging.getLogger(__name__)


class ChatService:
    """Streams assistant replies in the selected agent mode."""

    def __init__(self, llm: LLMProtocol, history_limit: int = 10):
        """Initialize chat service.

        Args:
            llm: Chat-completion provider.
            history_limit: Messages kept in newly created histories.
        """
        self._llm = llm
        self._history_limit = history_limit

    def new_history(self) -> ChatHistory:
        return ChatHistory(max_messages=self._history_limit)

    def build_messages(
        self,
        user_message: ChatMessage,
        history: ChatHistory,
        mode: AgentMode | str = AgentMode.COACH,
        include_images: bool = True,
    ) -> list[dict]:
        """Assemble system prompt, prior turns and the new user turn."""
        messages = [{"role": "system", "content": get_system_prompt(mode)}]
        messages.extend(history.to_list(include_images=include_images))
        if include_images:
            messages.append(user_message.to_payload())
        else:
            messages.append({"role": "user", "content": user_message.content})
        return messages

    async def stream_reply(
        self,
        user_message: str,
        history: ChatHistory,
        mode: AgentMode | str = AgentMode.COACH,
        image_url: Optional[str] = None,
        model: Optional[str] = None,
    ) -> AsyncIterator[str]:
        """Stream the reply and record the exchange in history.

        Args:
            user_message: User's message.
            history: Conversation so far; updated once streaming ends or is closed.
            mode: Agent mode (unknown values fall back to coach).
            image_url: Optional chart screenshot for vision models.
            model: Model key override.

        Yields:
            Response tokens.
        """
        agent_mode = normalize_agent_mode(mode)
        supports_images = getattr(self._llm, "supports_image_input", None)
        include_images = supports_images(model) if supports_images else True

        messages = self.build_messages(
            ChatMessage(role="user", content=user_message, image_url=image_url),
            history,
            agent_mode,
            include_images=include_images,
        )

        parts: list[str] = []
        completed = False
        try:
            async for token in self._llm.chat_stream(messages, model=model):
                parts.append(token)
                yield token
            completed = True
        finally:
            # Partial replies are kept when the consumer stops early
            if completed or parts:
                history.add(ChatMessage(role="user", content=user_message, image_url=image_url))
                history.add(ChatMessage(role="assistant", content="".join(parts)))
                logger.info(
                    f"[{agent_mode.value}] Reply: {sum(len(p) for p in parts)} chars, "
                    f"complete={completed}, history={len(history.messages)}"
                )
