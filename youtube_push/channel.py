"""
Bounded event channel between producers (webhook, config) and the announcer.

Producers never wait: ``try_send`` drops the event when the channel is full.
The receiver sees ``ChannelClosed`` once every sender is closed and all queued
events have been consumed.
"""

from __future__ import annotations

import asyncio
import logging

from .events import Event

logger = logging.getLogger(__name__)

DEFAULT_CAPACITY = 8


class ChannelClosed(Exception):
    """Raised by ``recv`` when all senders are gone and the queue is empty."""


class EventSender:
    __slots__ = ("_channel", "_closed", "name")

    def __init__(self, channel: "EventChannel", name: str) -> None:
        self._channel = channel
        self._closed = False
        self.name = name

    @property
    def closed(self) -> bool:
        return self._closed

    def try_send(self, event: Event) -> bool:
        if self._closed:
            logger.debug("Sender %s is closed, dropping %r", self.name, event)
            return False
        return self._channel._offer(event)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._channel._release()


class EventChannel:
    def __init__(self, capacity: int = DEFAULT_CAPACITY) -> None:
        if capacity <= 0:
            raise ValueError("capacity must be a positive integer")
        self._queue: asyncio.Queue[Event] = asyncio.Queue(maxsize=capacity)
        self._senders = 0
        self._closed = asyncio.Event()

    @property
    def capacity(self) -> int:
        return self._queue.maxsize

    def qsize(self) -> int:
        return self._queue.qsize()

    def sender(self, name: str = "sender") -> EventSender:
        if self._closed.is_set():
            raise ChannelClosed("channel has no senders left")
        self._senders += 1
        return EventSender(self, name)

    def _offer(self, event: Event) -> bool:
        try:
            self._queue.put_nowait(event)
        except asyncio.QueueFull:
            logger.debug("Event channel full, dropping %r", event)
            return False
        return True

    def _release(self) -> None:
        self._senders -= 1
        if self._senders <= 0:
            self._closed.set()

    async def recv(self, timeout: float | None = None) -> Event | None:
        """Next event, or None when ``timeout`` seconds pass without one."""
        if not self._queue.empty():
            return self._queue.get_nowait()
        if self._closed.is_set():
            raise ChannelClosed

        getter = asyncio.ensure_future(self._queue.get())
        closer = asyncio.ensure_future(self._closed.wait())
        try:
            done, _ = await asyncio.wait(
                {getter, closer},
                timeout=timeout,
                return_when=asyncio.FIRST_COMPLETED,
            )
        finally:
            for task in (getter, closer):
                if not task.done():
                    task.cancel()

        if getter in done:
            return getter.result()
        if closer in done:
            if not self._queue.empty():
                return self._queue.get_nowait()
            raise ChannelClosed
        return None


__all__ = ["DEFAULT_CAPACITY", "ChannelClosed", "EventChannel", "EventSender"]
