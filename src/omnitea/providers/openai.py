"""OpenAI chat-completions provider."""

import openai
from openai import OpenAI

from omnitea.chat_log import ChatLog
from omnitea.providers.base import BaseProvider, CompletionError


class OpenAIProvider(BaseProvider):
    def __init__(self, api_key: str, model: str) -> None:
        self.client = OpenAI(api_key=api_key)
        self.model = model

    def complete(self, chat_log: ChatLog) -> str:
        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=chat_log.to_messages(),
            )
        except openai.OpenAIError as e:
            raise CompletionError(f"OpenAI request failed: {e}") from e

        if not response.choices:
            raise CompletionError("No choices")
        content = response.choices[0].message.content
        if not content:
            raise CompletionError("Empty completion")
        return content
