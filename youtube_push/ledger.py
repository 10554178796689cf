"""
Subscription ledger and reconciler.

Pure state transitions: ``reduce(state, event, config, now)`` returns the new
state, the side effects to perform and the next wake-up instant. Nothing here
performs I/O; the announcer loop executes effects and feeds hub call results
back in as ``AttemptSucceeded`` / ``AttemptFailed`` events.

Instants are monotonic seconds (the asyncio loop clock).
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
import logging
from typing import Mapping, Union

from .buffer import DedupBuffer
from .config import YoutubeConfig
from .events import (
    AttemptFailed,
    AttemptSucceeded,
    Denied,
    Event,
    PublicationReceived,
    Reconsider,
    Subscribed,
)

logger = logging.getLogger(__name__)

VALIDATION_TIMEOUT = 30.0
RETRY_INTERVAL = 30.0
RENEW_MARGIN = 600
IDLE_WAKE = 24 * 60 * 60.0


@dataclass(slots=True, frozen=True)
class SubscribeTopic:
    topic: str


@dataclass(slots=True, frozen=True)
class Announce:
    destination: int
    text: str
    title: str


@dataclass(slots=True, frozen=True)
class LogNotice:
    """Operator notice for the optional log channel."""

    text: str


Effect = Union[SubscribeTopic, Announce, LogNotice]


@dataclass(slots=True, frozen=True)
class LedgerState:
    # topic -> validation deadline
    pending: Mapping[str, float] = field(default_factory=dict)
    # topic -> instant the subscription must be renewed
    subscribed: Mapping[str, float] = field(default_factory=dict)
    history: DedupBuffer[str] = field(default_factory=DedupBuffer)
    # A subscribe attempt was made on the latest reconcile tick; its retry
    # schedule must not be replaced by confirmations.
    attempting: bool = False

    def earliest_deadline(self) -> float | None:
        instants = [*self.pending.values(), *self.subscribed.values()]
        return min(instants) if instants else None

    def candidate(self, config: YoutubeConfig) -> str | None:
        for topic in config.subscriptions:
            if topic not in self.pending and topic not in self.subscribed:
                return topic
        return None


@dataclass(slots=True, frozen=True)
class Transition:
    state: LedgerState
    effects: tuple[Effect, ...] = ()
    # None keeps the current wake-up schedule
    next_wake: float | None = None


def renewal_instant(now: float, lease_seconds: int) -> float:
    return now + max(lease_seconds - RENEW_MARGIN, 0)


def _wake_for(state: LedgerState, now: float) -> float:
    earliest = state.earliest_deadline()
    return earliest if earliest is not None else now + IDLE_WAKE


def on_reconsider(state: LedgerState, config: YoutubeConfig, now: float) -> Transition:
    effects: list[Effect] = []
    subscribed = {topic: expiry for topic, expiry in state.subscribed.items() if expiry > now}
    pending: dict[str, float] = {}
    for topic, deadline in state.pending.items():
        if deadline > now:
            pending[topic] = deadline
            continue
        logger.warning("Unable to subscribe to '%s': Validation timed out", topic)
        effects.append(LogNotice(f"Unable to subscribe to `{topic}`:\n```Validation timed out```"))
    state = replace(state, pending=pending, subscribed=subscribed)

    if not config.enabled:
        return Transition(state, tuple(effects))

    topic = state.candidate(config)
    if topic is not None:
        logger.debug("Subscribing to '%s'", topic)
        effects.append(SubscribeTopic(topic))
        return Transition(replace(state, attempting=True), tuple(effects), now + RETRY_INTERVAL)

    state = replace(state, attempting=False)
    return Transition(state, tuple(effects), _wake_for(state, now))


def on_attempt_succeeded(state: LedgerState, event: AttemptSucceeded, now: float) -> Transition:
    pending = dict(state.pending)
    subscribed = dict(state.subscribed)
    subscribed.pop(event.topic, None)
    pending[event.topic] = event.issued_at + VALIDATION_TIMEOUT
    return Transition(replace(state, pending=pending, subscribed=subscribed), (), now + RETRY_INTERVAL)


def on_attempt_failed(state: LedgerState, event: AttemptFailed, now: float) -> Transition:
    logger.warning("Unable to subscribe to '%s': %s", event.topic, event.error)
    notice = LogNotice(f"Unable to subscribe to `{event.topic}`:\n```{event.error}```")
    return Transition(state, (notice,), now + RETRY_INTERVAL)


def on_subscribed(state: LedgerState, event: Subscribed, now: float) -> Transition:
    logger.info("Subscribed to '%s'", event.topic)
    pending = {topic: deadline for topic, deadline in state.pending.items() if topic != event.topic}
    renewals = dict(state.subscribed)
    renewals[event.topic] = renewal_instant(now, event.lease_seconds)
    state = replace(state, pending=pending, subscribed=renewals)
    if state.attempting:
        return Transition(state)
    return Transition(state, (), _wake_for(state, now))


def on_denied(state: LedgerState, event: Denied, now: float) -> Transition:
    pending = {topic: deadline for topic, deadline in state.pending.items() if topic != event.topic}
    if event.reason is not None:
        logger.warning("Subscription to '%s' denied: %s", event.topic, event.reason)
        notice = LogNotice(f"Subscription to `{event.topic}` denied:\n```{event.reason}```")
    else:
        logger.warning("Subscription to '%s' denied", event.topic)
        notice = LogNotice(f"Subscription to `{event.topic}` denied")
    return Transition(replace(state, pending=pending), (notice,), now + RETRY_INTERVAL)


def on_publication(state: LedgerState, event: PublicationReceived, config: YoutubeConfig) -> Transition:
    pub = event.publication
    if not config.enabled:
        return Transition(state)
    rule = config.subscriptions.get(pub.topic)
    if rule is None:
        logger.info("Skipping announcement for '%s': not subscribed", pub.topic)
        return Transition(state)
    if pub.video_id in state.history:
        logger.debug("Skipping duplicate announcement for '%s'", pub.video_id)
        return Transition(state)
    history = state.history.copy()
    history.insert(pub.video_id)
    announce = Announce(destination=rule.destination, text=rule.render(pub.video_id), title=pub.title)
    return Transition(replace(state, history=history), (announce,))


def reduce(state: LedgerState, event: Event, config: YoutubeConfig, now: float) -> Transition:
    if isinstance(event, Reconsider):
        return on_reconsider(state, config, now)
    if isinstance(event, PublicationReceived):
        return on_publication(state, event, config)
    if isinstance(event, Subscribed):
        return on_subscribed(state, event, now)
    if isinstance(event, Denied):
        return on_denied(state, event, now)
    if isinstance(event, AttemptSucceeded):
        return on_attempt_succeeded(state, event, now)
    if isinstance(event, AttemptFailed):
        return on_attempt_failed(state, event, now)
    raise TypeError(f"Unknown event: {event!r}")


__all__ = [
    "IDLE_WAKE",
    "RENEW_MARGIN",
    "RETRY_INTERVAL",
    "VALIDATION_TIMEOUT",
    "Announce",
    "Effect",
    "LedgerState",
    "LogNotice",
    "SubscribeTopic",
    "Transition",
    "reduce",
    "renewal_instant",
]
