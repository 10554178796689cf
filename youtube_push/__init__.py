"""YouTube push-notification subsystem exports."""

from .announcer import Announcer
from .buffer import DedupBuffer
from .channel import ChannelClosed, EventChannel, EventSender
from .config import (
    AnnouncementRule,
    ConfigStore,
    ConfigWatcher,
    ConfigurationError,
    YoutubeConfig,
    external_url,
    load_youtube_config,
    parse_youtube_config,
)
from .events import AttemptFailed, AttemptSucceeded, Denied, PublicationReceived, Reconsider, Subscribed
from .feed import InvalidXml, MissingChild, MissingChildInner, Publication, PublicationError, parse_publication
from .hub import HubClient, HubError
from .ledger import LedgerState, Transition, reduce
from .outbox import Outbox, OutboxEntry
from .webhook import WEBHOOK_PATH, WebhookServer, start_webhook

__all__ = [
    "Announcer",
    "AnnouncementRule",
    "AttemptFailed",
    "AttemptSucceeded",
    "ChannelClosed",
    "ConfigStore",
    "ConfigWatcher",
    "ConfigurationError",
    "DedupBuffer",
    "Denied",
    "EventChannel",
    "EventSender",
    "HubClient",
    "HubError",
    "InvalidXml",
    "LedgerState",
    "MissingChild",
    "MissingChildInner",
    "Outbox",
    "OutboxEntry",
    "Publication",
    "PublicationError",
    "PublicationReceived",
    "Reconsider",
    "Subscribed",
    "Transition",
    "WEBHOOK_PATH",
    "WebhookServer",
    "YoutubeConfig",
    "external_url",
    "load_youtube_config",
    "parse_youtube_config",
    "reduce",
    "start_webhook",
]
