"""Events consumed by the announcer loop."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from .feed import Publication


@dataclass(slots=True, frozen=True)
class PublicationReceived:
    publication: Publication


@dataclass(slots=True, frozen=True)
class Reconsider:
    """Re-run reconciliation: timer expiry or a configuration change."""


@dataclass(slots=True, frozen=True)
class Subscribed:
    topic: str
    lease_seconds: int


@dataclass(slots=True, frozen=True)
class Denied:
    topic: str
    reason: str | None = None


# Fed back by the announcer itself once the hub call of a tick completes.
@dataclass(slots=True, frozen=True)
class AttemptSucceeded:
    topic: str
    issued_at: float


@dataclass(slots=True, frozen=True)
class AttemptFailed:
    topic: str
    error: str


Event = Union[PublicationReceived, Reconsider, Subscribed, Denied, AttemptSucceeded, AttemptFailed]


__all__ = [
    "AttemptFailed",
    "AttemptSucceeded",
    "Denied",
    "Event",
    "PublicationReceived",
    "Reconsider",
    "Subscribed",
]
