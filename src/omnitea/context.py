"""Selecting which channel history goes into the chat log.

Two message prefixes steer the selection:

``|b|`` (barrier)
    History before the barrier is never sent to the model.  Any text after
    the prefix replaces the system prompt for the conversation that follows.

``|a|`` (aside)
    The message is left out of the conversation entirely.

Older messages are added until the token budget is exceeded, then the
oldest are dropped again until the log fits.  The message being answered
is always kept.
"""

import asyncio
from dataclasses import dataclass
from enum import Enum
from typing import AsyncIterator, Callable, Optional

from loguru import logger

from omnitea.chat_log import ChatLog

BARRIER_PREFIX = "|b|"
ASIDE_PREFIX = "|a|"

# The system prompt goes just before this many trailing messages, so it
# stays close to the end of long conversations.
PROMPT_DEPTH = 4


class MessageKind(str, Enum):
    NORMAL = "normal"
    BARRIER = "barrier"
    ASIDE = "aside"


@dataclass
class HistoryMessage:
    """A channel message reduced to what the chat log needs."""

    author: str
    content: str
    is_own: bool = False


def classify(content: str) -> MessageKind:
    if content.startswith(BARRIER_PREFIX):
        return MessageKind.BARRIER
    if content.startswith(ASIDE_PREFIX):
        return MessageKind.ASIDE
    return MessageKind.NORMAL


def barrier_prompt(content: str) -> Optional[str]:
    """Return the prompt carried by a barrier message, or None if it has none."""
    remainder = content[len(BARRIER_PREFIX):].strip()
    return remainder or None


def build_chat_log(messages: list[HistoryMessage], prompt: str) -> ChatLog:
    """Build a chat log from *messages* in chronological order."""
    chat_log = ChatLog()
    prompt_index = max(len(messages) - PROMPT_DEPTH, 0)
    for i, message in enumerate(messages):
        if i == prompt_index:
            chat_log.system(prompt)
        if message.is_own:
            chat_log.assistant(message.content)
        else:
            chat_log.user(f"{message.author} says: {message.content}")
    return chat_log


async def collect_context(
    latest: HistoryMessage,
    older: AsyncIterator[HistoryMessage],
    count_tokens: Callable[[ChatLog], int],
    prompt: str,
    max_tokens: int,
) -> ChatLog:
    """Walk back through *older* (newest first) and return the chat log to complete.

    Args:
        latest:       The message being answered.
        older:        Earlier channel messages, newest first.
        count_tokens: Token counter for a chat log.
        prompt:       Default system prompt; a barrier may override it.
        max_tokens:   Budget for the whole log.
    """
    included = [latest]

    async for message in older:
        kind = classify(message.content)
        if kind is MessageKind.BARRIER:
            logger.debug("Barrier found, stopping")
            prompt = barrier_prompt(message.content) or prompt
            break
        if kind is MessageKind.ASIDE:
            logger.debug("Aside found, skipping")
            continue

        included.insert(0, message)
        if await _over_budget(included, prompt, count_tokens, max_tokens):
            break

    while len(included) > 1 and await _over_budget(included, prompt, count_tokens, max_tokens):
        included.pop(0)

    return build_chat_log(included, prompt)


async def _over_budget(
    messages: list[HistoryMessage],
    prompt: str,
    count_tokens: Callable[[ChatLog], int],
    max_tokens: int,
) -> bool:
    # Tokenizing is CPU-bound; keep it off the event loop.
    tokens = await asyncio.to_thread(count_tokens, build_chat_log(messages, prompt))
    return tokens > max_tokens
