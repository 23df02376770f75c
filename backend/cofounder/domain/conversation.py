"""In-memory conversation turn mutated while an assistant reply streams in."""

from dataclasses import dataclass, field
from enum import StrEnum


class Role(StrEnum):
    USER = "user"
    ASSISTANT = "assistant"


@dataclass
class ConversationTurn:
    """Ordered ``{role, content}`` messages exchanged in one request.

    While streaming, the assistant text is applied to the last message: in
    place when the last message already is an assistant message, otherwise as
    a new assistant message. After ``freeze()`` the turn is read-only.
    """

    messages: list[dict[str, str]] = field(default_factory=list)
    frozen: bool = False

    def add_user_message(self, content: str) -> None:
        self._ensure_open()
        self.messages.append({"role": Role.USER.value, "content": content})

    def apply_assistant_text(self, text: str) -> None:
        """Show the accumulated assistant text as a single in-place update."""
        self._ensure_open()
        if self.messages and self.messages[-1]["role"] == Role.ASSISTANT:
            self.messages[-1]["content"] = text
        else:
            self.messages.append({"role": Role.ASSISTANT.value, "content": text})

    def freeze(self) -> str | None:
        """Mark the turn complete; return the final assistant text, if any was streamed."""
        self.frozen = True
        if self.messages and self.messages[-1]["role"] == Role.ASSISTANT:
            return self.messages[-1]["content"]
        return None

    def _ensure_open(self) -> None:
        if self.frozen:
            raise RuntimeError("Conversation turn is frozen")
