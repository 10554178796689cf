"""Tests for services.messaging"""
from unittest.mock import AsyncMock, MagicMock

from services.messaging import MAX_MESSAGE_LENGTH, BotMessageSender


def _bot():
    bot = MagicMock()
    bot.send_message = AsyncMock(return_value="message")
    return bot


async def test_send_uses_bot():
    bot = _bot()
    result = await BotMessageSender(bot).send(123, "New video: XYZ")

    assert result == "message"
    bot.send_message.assert_awaited_once_with(123, "New video: XYZ")


async def test_long_text_is_truncated():
    bot = _bot()
    await BotMessageSender(bot).send(1, "x" * (MAX_MESSAGE_LENGTH + 10))

    sent = bot.send_message.await_args.args[1]
    assert len(sent) == MAX_MESSAGE_LENGTH
    assert sent.endswith("…")
