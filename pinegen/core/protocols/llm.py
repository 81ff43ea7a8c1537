"""LLM protocol for dependency injection."""
from typing import Any, AsyncIterator, Optional, Protocol, runtime_checkable


@runtime_checkable
class LLMProtocol(Protocol):
    """Protocol for a chat-completion provider."""

    async def complete(
        self,
        system_prompt: str,
        user_prompt: str,
        model: Optional[str] = None,
    ) -> str:
        """Run a single non-streaming completion.

        Args:
            system_prompt: System instruction.
            user_prompt: User prompt.
            model: Model key override (provider default if None).

        Returns:
            Full response text.
        """
        ...

    def chat_stream(
        self,
        messages: list[dict[str, Any]],
        model: Optional[str] = None,
    ) -> AsyncIterator[str]:
        """Stream a chat response.

        Args:
            messages: OpenAI-style message list, system prompt included.
            model: Model key override.

        Yields:
            Response tokens.
        """
        ...
