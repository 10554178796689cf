"""
Announcer loop.

The single owner of the subscription ledger. It waits for the next event or
for the wake-up instant chosen by the last transition (whichever comes first),
runs the transition and performs the resulting effects:

* hub subscribe calls are awaited in place, so at most one is ever in flight
  and every other event waits on the channel meanwhile;
* announcements and log-channel notices go through the outbox and are never
  awaited by the loop.
"""

from __future__ import annotations

import asyncio
import logging

from services.messaging import MessageSender

from .buffer import DEFAULT_HISTORY_SIZE, DedupBuffer
from .channel import ChannelClosed, EventChannel
from .config import ConfigStore, YoutubeConfig
from .events import AttemptFailed, AttemptSucceeded, Event, Reconsider
from .hub import HubClient, HubError
from .ledger import Announce, Effect, LedgerState, LogNotice, SubscribeTopic, Transition, reduce
from .outbox import Outbox

logger = logging.getLogger(__name__)


class Announcer:
    def __init__(
        self,
        store: ConfigStore,
        channel: EventChannel,
        hub: HubClient,
        sender: MessageSender,
        *,
        history_size: int = DEFAULT_HISTORY_SIZE,
    ) -> None:
        self.store = store
        self.channel = channel
        self.hub = hub
        self.sender = sender
        self.outbox = Outbox()
        self._state = LedgerState(history=DedupBuffer(history_size))
        self._wake_at: float | None = None
        self._task: asyncio.Task | None = None

    @property
    def state(self) -> LedgerState:
        return self._state

    @property
    def wake_at(self) -> float | None:
        return self._wake_at

    def start(self) -> asyncio.Task:
        if self._task is None:
            self._task = asyncio.create_task(self.run(), name="youtube-announcer")
        return self._task

    async def join(self, drain_timeout: float | None = 10.0) -> None:
        """Wait for the loop to finish (all senders closed) and drain the outbox."""
        if self._task is not None:
            await self._task
        await self.outbox.drain(drain_timeout)

    async def run(self) -> None:
        loop = asyncio.get_running_loop()
        # First tick happens immediately
        self._wake_at = loop.time()
        logger.info("Announcer started")
        try:
            while True:
                if self._wake_at is None:
                    timeout = None
                else:
                    timeout = max(0.0, self._wake_at - loop.time())
                try:
                    event = await self.channel.recv(timeout)
                except ChannelClosed:
                    break
                if event is None:
                    # The expiry is consumed; a transition without a wake-up leaves the loop idle.
                    self._wake_at = None
                    event = Reconsider()
                try:
                    await self._step(event, self.store.current)
                except Exception:  # noqa: BLE001
                    logger.exception("Announcer failed to handle %r", event)
        finally:
            logger.info("Announcer stopped")

    async def _step(self, event: Event, config: YoutubeConfig) -> Transition:
        now = asyncio.get_running_loop().time()
        transition = reduce(self._state, event, config, now)
        self._state = transition.state
        if transition.next_wake is not None:
            self._wake_at = transition.next_wake
        for effect in transition.effects:
            await self._perform(effect, config)
        return transition

    async def _perform(self, effect: Effect, config: YoutubeConfig) -> None:
        if isinstance(effect, SubscribeTopic):
            await self._subscribe(effect.topic, config)
        elif isinstance(effect, Announce):
            self.outbox.dispatch(
                "announce",
                effect.title,
                lambda: self.sender.send(effect.destination, effect.text),
            )
        elif isinstance(effect, LogNotice):
            log_channel = config.log_channel
            if log_channel is None:
                return
            self.outbox.dispatch("log", effect.text, lambda: self.sender.send(log_channel, effect.text))
        else:
            raise TypeError(f"Unknown effect: {effect!r}")

    async def _subscribe(self, topic: str, config: YoutubeConfig) -> None:
        issued_at = asyncio.get_running_loop().time()
        try:
            await self.hub.subscribe(topic)
        except HubError as exc:
            result: Event = AttemptFailed(topic, str(exc))
        except Exception as exc:  # noqa: BLE001
            logger.exception("Unexpected error subscribing to '%s'", topic)
            result = AttemptFailed(topic, str(exc) or exc.__class__.__name__)
        else:
            result = AttemptSucceeded(topic, issued_at)
        await self._step(result, config)


__all__ = ["Announcer"]
