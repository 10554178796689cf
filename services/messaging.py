"""Message-send capability backed by the Telegram bot."""

from __future__ import annotations

import logging
from typing import Awaitable, Protocol

from aiogram import Bot

logger = logging.getLogger(__name__)

# Telegram rejects longer messages
MAX_MESSAGE_LENGTH = 4096


class MessageSender(Protocol):
    def send(self, destination: int, text: str) -> Awaitable[object]: ...


class BotMessageSender:
    """Sends plain-text messages to chats through an aiogram ``Bot``."""

    def __init__(self, bot: Bot) -> None:
        self.bot = bot

    async def send(self, destination: int, text: str) -> object:
        if len(text) > MAX_MESSAGE_LENGTH:
            logger.debug("Truncating message for %s (%s chars)", destination, len(text))
            text = text[: MAX_MESSAGE_LENGTH - 1] + "…"
        return await self.bot.send_message(destination, text)


__all__ = ["MAX_MESSAGE_LENGTH", "BotMessageSender", "MessageSender"]
