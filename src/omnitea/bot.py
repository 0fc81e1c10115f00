"""The Discord client: listens in one channel (and DMs) and answers."""

import asyncio
from pathlib import Path
from typing import AsyncIterator, Callable, Optional

import discord
from loguru import logger

from omnitea.chat_log import ChatLog, TokenCounter
from omnitea.config import Config
from omnitea.context import HistoryMessage, MessageKind, classify, collect_context
from omnitea.messaging import ASIDE_REACTION, BARRIER_REACTION, split_message
from omnitea.providers.base import BaseProvider, CompletionError
from omnitea.response import BotResponse, ImageResponse, TextResponse, parse_response


def default_intents() -> discord.Intents:
    intents = discord.Intents.none()
    intents.guilds = True
    intents.guild_messages = True
    intents.dm_messages = True
    intents.message_content = True
    return intents


class OmniteaBot(discord.Client):
    def __init__(
        self,
        config: Config,
        provider: BaseProvider,
        render: Callable[[str], list[Path]],
        count_tokens: Optional[Callable[[ChatLog], int]] = None,
        intents: Optional[discord.Intents] = None,
    ) -> None:
        super().__init__(intents=intents or default_intents())
        self.config = config
        self.provider = provider
        self.render = render
        self.count_tokens = count_tokens or TokenCounter(config.model)

    # ── Events ────────────────────────────────────────────────────────────

    async def setup_hook(self) -> None:
        # Counting once loads the tokenizer (a download on first use) before any message arrives.
        prompt_tokens = await asyncio.to_thread(self.count_tokens, ChatLog().system(self.config.prompt))
        logger.info("System prompt: {} tokens", prompt_tokens)

    async def on_ready(self) -> None:
        logger.info("{} is connected!", self.user.name)

    async def on_message(self, message: discord.Message) -> None:
        if message.author == self.user:
            return
        if not self.is_target_channel(message.channel):
            return

        logger.info("Received message: {}", message.content)

        kind = classify(message.content)
        if kind is MessageKind.BARRIER:
            logger.info("Barrier received")
            await self._react(message, BARRIER_REACTION)
            return
        if kind is MessageKind.ASIDE:
            logger.info("Aside received")
            await self._react(message, ASIDE_REACTION)
            return

        await self.respond(message)

    # ── Answering ─────────────────────────────────────────────────────────

    def is_target_channel(self, channel) -> bool:
        """DMs always count; in a server only the configured channel does."""
        if isinstance(channel, discord.DMChannel):
            return True
        if isinstance(channel, (discord.abc.GuildChannel, discord.Thread)):
            return channel.name == self.config.channel_name
        return False

    async def respond(self, message: discord.Message) -> None:
        latest = await self.to_history(message)
        chat_log = await collect_context(
            latest,
            self.older_messages(message),
            self.count_tokens,
            self.config.prompt,
            self.config.max_context_tokens,
        )
        logger.debug("Chat log: {!r}", chat_log)
        logger.info("Context length: {}", await asyncio.to_thread(self.count_tokens, chat_log))

        async with message.channel.typing():
            try:
                completion = await asyncio.to_thread(self.provider.complete, chat_log)
            except CompletionError as e:
                logger.error("Error completing chat: {}", e)
                return
            logger.debug("Completion: {!r}", completion)

            response = await asyncio.to_thread(parse_response, completion, self.render)
            await self.send_response(message.channel, response)

    async def send_response(self, channel: discord.abc.Messageable, response: BotResponse) -> None:
        if isinstance(response, TextResponse):
            await self.send_text(channel, response.text)
            return

        try:
            for path in response.images:
                try:
                    await channel.send(file=discord.File(path))
                except discord.HTTPException as e:
                    logger.error("Error sending image {}: {!r}", path.name, e)
            await self.send_text(channel, response.text, escape=True)
        finally:
            _remove_images(response)

    async def send_text(self, channel: discord.abc.Messageable, text: str, escape: bool = False) -> None:
        for chunk in split_message(text, escape=escape):
            try:
                await channel.send(chunk)
            except discord.HTTPException as e:
                logger.error("Error sending message: {!r}", e)

    # ── History ───────────────────────────────────────────────────────────

    async def older_messages(self, message: discord.Message) -> AsyncIterator[HistoryMessage]:
        """Yield the messages before *message*, newest first."""
        async for past in message.channel.history(limit=None, before=message):
            yield await self.to_history(past)

    async def to_history(self, message: discord.Message) -> HistoryMessage:
        if message.author == self.user:
            return HistoryMessage(author=message.author.display_name, content=message.content, is_own=True)

        content = message.content
        for attachment in message.attachments:
            try:
                data = await attachment.read()
            except discord.HTTPException as e:
                logger.error("Error reading attachment {}: {!r}", attachment.filename, e)
                continue
            content += f"File {attachment.filename}: \n{data.decode('utf-8', errors='replace')}"

        return HistoryMessage(author=message.author.display_name, content=content)

    async def _react(self, message: discord.Message, emoji: str) -> None:
        try:
            await message.add_reaction(emoji)
        except discord.HTTPException as e:
            logger.error("Error reacting: {!r}", e)


def _remove_images(response: ImageResponse) -> None:
    for path in response.images:
        path.unlink(missing_ok=True)
