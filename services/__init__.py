"""Outbound chat delivery."""

from .messaging import BotMessageSender, MessageSender

__all__ = ["BotMessageSender", "MessageSender"]
