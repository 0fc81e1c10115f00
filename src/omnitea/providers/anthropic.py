"""Anthropic Claude provider."""

from typing import Any

import anthropic

from omnitea.chat_log import ChatLog, ChatRole
from omnitea.providers.base import BaseProvider, CompletionError


class AnthropicProvider(BaseProvider):
    def __init__(self, api_key: str, model: str) -> None:
        self.client = anthropic.Anthropic(api_key=api_key)
        self.model = model

    def complete(self, chat_log: ChatLog) -> str:
        system, messages = _split_system(chat_log)

        kwargs: dict[str, Any] = {"model": self.model, "max_tokens": 4096, "messages": messages}
        if system:
            kwargs["system"] = system

        try:
            response = self.client.messages.create(**kwargs)
        except anthropic.AnthropicError as e:
            raise CompletionError(f"Anthropic request failed: {e}") from e

        text = "".join(
            block.text for block in response.content if block.type == "text"
        )
        if not text:
            raise CompletionError("Empty completion")
        return text


def _split_system(chat_log: ChatLog) -> tuple[str, list[dict[str, Any]]]:
    """Pull system entries out of the log and merge consecutive same-role turns.

    The Messages API takes the system prompt as a separate parameter and
    expects user and assistant turns to alternate, starting with a user turn.
    Assistant turns left at the front by window trimming are dropped.
    """
    system_parts: list[str] = []
    messages: list[dict[str, Any]] = []
    for entry in chat_log:
        if entry.role == ChatRole.SYSTEM:
            system_parts.append(entry.content)
        elif not messages and entry.role == ChatRole.ASSISTANT:
            continue
        elif messages and messages[-1]["role"] == entry.role.value:
            messages[-1]["content"] += "\n\n" + entry.content
        else:
            messages.append({"role": entry.role.value, "content": entry.content})
    return "\n\n".join(system_parts), messages
