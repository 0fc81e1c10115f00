"""Chat logs sent to the completion API, and token counting for them."""

from dataclasses import dataclass
from enum import Enum
from typing import Iterator, Optional

import tiktoken


class ChatRole(str, Enum):
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


@dataclass
class ChatEntry:
    role: ChatRole
    content: str

    def to_message(self) -> dict[str, str]:
        return {"role": self.role.value, "content": self.content}


class ChatLog:
    """An ordered list of chat entries.

    The role helpers return the log itself so entries can be chained::

        log = ChatLog().system(prompt).user("Ana says: hi")
    """

    def __init__(self, entries: Optional[list[ChatEntry]] = None) -> None:
        self.entries: list[ChatEntry] = list(entries) if entries else []

    def add(self, role: ChatRole, content: str) -> "ChatLog":
        self.entries.append(ChatEntry(role=role, content=content))
        return self

    def system(self, content: str) -> "ChatLog":
        return self.add(ChatRole.SYSTEM, content)

    def user(self, content: str) -> "ChatLog":
        return self.add(ChatRole.USER, content)

    def assistant(self, content: str) -> "ChatLog":
        return self.add(ChatRole.ASSISTANT, content)

    def to_messages(self) -> list[dict[str, str]]:
        """Return the log in the ``[{"role": ..., "content": ...}]`` wire shape."""
        return [entry.to_message() for entry in self.entries]

    def __len__(self) -> int:
        return len(self.entries)

    def __iter__(self) -> Iterator[ChatEntry]:
        return iter(self.entries)

    def __repr__(self) -> str:
        return f"ChatLog({self.entries!r})"


# ── Token counting ─────────────────────────────────────────────────────────────

FALLBACK_ENCODING = "cl100k_base"

# Every message is wrapped as <|start|>{role}\n{content}<|end|>\n
TOKENS_PER_MESSAGE = 3
# Every reply is primed with <|start|>assistant<|message|>
TOKENS_PER_REPLY = 3


class TokenCounter:
    """Count the prompt tokens a chat log costs for a given model."""

    def __init__(self, model: str) -> None:
        self.model = model
        self._encoding: Optional[tiktoken.Encoding] = None

    @property
    def encoding(self) -> tiktoken.Encoding:
        if self._encoding is None:
            try:
                self._encoding = tiktoken.encoding_for_model(self.model)
            except KeyError:
                # Non-OpenAI models: close enough for budgeting purposes.
                self._encoding = tiktoken.get_encoding(FALLBACK_ENCODING)
        return self._encoding

    def count_text(self, text: str) -> int:
        # Chat text may quote special tokens such as <|endoftext|>; count them as text.
        return len(self.encoding.encode(text, disallowed_special=()))

    def __call__(self, chat_log: ChatLog) -> int:
        total = TOKENS_PER_REPLY
        for entry in chat_log:
            total += TOKENS_PER_MESSAGE
            total += self.count_text(entry.role.value)
            total += self.count_text(entry.content)
        return total
