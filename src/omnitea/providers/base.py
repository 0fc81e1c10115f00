"""Abstract base for chat-completion providers."""

from abc import ABC, abstractmethod

from omnitea.chat_log import ChatLog


class CompletionError(RuntimeError):
    """The provider answered, but without a usable completion."""


class BaseProvider(ABC):
    @abstractmethod
    def complete(self, chat_log: ChatLog) -> str:
        """Send the chat log to the model and return the reply text."""
        ...
