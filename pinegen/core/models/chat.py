"""Chat domain models."""
from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass
class ChatMessage:
    """Chat message, optionally carrying a chart screenshot."""
    role: str  # "user" | "assistant" | "system"
    content: str
    image_url: Optional[str] = None

    def to_payload(self) -> dict[str, Any]:
        """Convert to an OpenAI chat message."""
        if self.image_url:
            return {
                "role": self.role,
                "content": [
                    {"type": "text", "text": self.content or "Analyze this image."},
                    {"type": "image_url", "image_url": {"url": self.image_url}},
                ],
            }
        return {"role": self.role, "content": self.content}


@dataclass
class ChatHistory:
    """Chat history trimmed to the most recent messages."""
    messages: list[ChatMessage] = field(default_factory=list)
    max_messages: int = 10

    def add(self, message: ChatMessage) -> None:
        self.messages.append(message)
        if len(self.messages) > self.max_messages:
            self.messages = self.messages[-self.max_messages:]

    def add_pair(self, user_content: str, assistant_content: str) -> None:
        self.add(ChatMessage(role="user", content=user_content))
        self.add(ChatMessage(role="assistant", content=assistant_content))

    def to_list(self, include_images: bool = True) -> list[dict[str, Any]]:
        """Convert to list of dicts for the LLM.

        Args:
            include_images: Drop image parts when the model has no vision input.
        """
        if include_images:
            return [m.to_payload() for m in self.messages]
        return [{"role": m.role, "content": m.content} for m in self.messages]
