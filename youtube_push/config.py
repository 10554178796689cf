"""YouTube module configuration: loading, snapshots and hot-reload."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
import json
import logging
from pathlib import Path
from types import MappingProxyType
from typing import Any, Callable, Mapping

logger = logging.getLogger(__name__)

ID_PLACEHOLDER = "%ID%"


class ConfigurationError(Exception):
    """Raised when configuration is missing or invalid."""


@dataclass(slots=True, frozen=True)
class AnnouncementRule:
    destination: int
    template: str

    def render(self, video_id: str) -> str:
        return self.template.replace(ID_PLACEHOLDER, video_id)


@dataclass(slots=True, frozen=True)
class YoutubeConfig:
    """Immutable snapshot of the module configuration."""

    enabled: bool = False
    subscriptions: Mapping[str, AnnouncementRule] = field(default_factory=lambda: MappingProxyType({}))
    log_channel: int | None = None


def _parse_chat_id(value: Any, name: str) -> int:
    if isinstance(value, bool):
        raise ConfigurationError(f"Invalid chat id for {name}: {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"Invalid chat id for {name}: {value!r}") from None


def _parse_rule(topic: str, entry: Any) -> AnnouncementRule:
    if not isinstance(entry, Mapping):
        raise ConfigurationError(f"Subscription '{topic}' must be an object")
    if "channel_id" not in entry:
        raise ConfigurationError(f"Subscription '{topic}' has no channel_id")
    text = entry.get("text")
    if not isinstance(text, str):
        raise ConfigurationError(f"Subscription '{topic}' has no text template")
    return AnnouncementRule(
        destination=_parse_chat_id(entry["channel_id"], f"subscription '{topic}'"),
        template=text,
    )


def parse_youtube_config(raw: Any) -> YoutubeConfig:
    if not isinstance(raw, Mapping):
        raise ConfigurationError("YouTube config must be a JSON object")
    enabled = raw.get("enabled")
    if not isinstance(enabled, bool):
        raise ConfigurationError("'enabled' must be true or false")
    subscriptions_raw = raw.get("subscriptions") or {}
    if not isinstance(subscriptions_raw, Mapping):
        raise ConfigurationError("'subscriptions' must be an object")
    # Insertion order of the document is kept: it decides which topic is tried first.
    subscriptions = {str(topic): _parse_rule(str(topic), entry) for topic, entry in subscriptions_raw.items()}
    log_channel_raw = raw.get("log_channel")
    log_channel = None if log_channel_raw is None else _parse_chat_id(log_channel_raw, "log_channel")
    return YoutubeConfig(
        enabled=enabled,
        subscriptions=MappingProxyType(subscriptions),
        log_channel=log_channel,
    )


def load_youtube_config(path: str | Path) -> YoutubeConfig:
    file_path = Path(path)
    try:
        with file_path.open("r", encoding="utf-8") as fp:
            raw = json.load(fp)
    except json.JSONDecodeError as exc:
        raise ConfigurationError(f"Unable to parse {file_path}: {exc}") from exc
    return parse_youtube_config(raw)


ConfigListener = Callable[[YoutubeConfig], None]


class ConfigStore:
    """Holds the current snapshot; publishing swaps the reference wholesale.

    Readers take ``current`` once and work with that snapshot, so no lock is
    ever held while awaiting.
    """

    def __init__(self, initial: YoutubeConfig | None = None) -> None:
        self._current = initial or YoutubeConfig()
        self._listeners: list[ConfigListener] = []

    @property
    def current(self) -> YoutubeConfig:
        return self._current

    def add_listener(self, listener: ConfigListener) -> None:
        self._listeners.append(listener)

    def publish(self, config: YoutubeConfig) -> None:
        old, self._current = self._current, config
        if old.enabled != config.enabled:
            if config.enabled:
                logger.info("Module enabled with %s subscriptions", len(config.subscriptions))
            else:
                logger.info("Module disabled")
        else:
            logger.info("Config updated")
        for listener in list(self._listeners):
            try:
                listener(config)
            except Exception:  # noqa: BLE001
                logger.exception("Config listener failed")


class ConfigWatcher:
    """Polls the module config file and publishes a new snapshot when it changes."""

    def __init__(
        self,
        store: ConfigStore,
        path: str | Path,
        *,
        poll_interval: float = 10.0,
    ) -> None:
        self.store = store
        self.path = Path(path)
        self.poll_interval = poll_interval
        self._mtime: float | None = None
        self._task: asyncio.Task | None = None
        self._stopping = False

    def check(self) -> bool:
        """Reload the file if it changed since the last check. Returns True on publish."""
        try:
            mtime = self.path.stat().st_mtime
        except FileNotFoundError:
            if self._mtime is None:
                logger.warning("Module config %s not found; module stays disabled", self.path)
                self._mtime = -1.0
            return False
        if mtime == self._mtime:
            return False
        self._mtime = mtime
        try:
            config = load_youtube_config(self.path)
        except (OSError, ConfigurationError) as exc:
            logger.warning("Unable to load youtube config: %s", exc)
            return False
        self.store.publish(config)
        return True

    def start(self) -> asyncio.Task:
        if self._task is None:
            self._task = asyncio.create_task(self.run(), name="youtube-config-watcher")
        return self._task

    async def stop(self) -> None:
        self._stopping = True
        if self._task:
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:  # noqa: PERF203 - expected flow
                pass
            self._task = None

    async def run(self) -> None:
        logger.info("Config watcher started for %s", self.path)
        try:
            while not self._stopping:
                try:
                    self.check()
                except Exception:  # noqa: BLE001
                    logger.exception("Config watcher iteration failed")
                await asyncio.sleep(self.poll_interval)
        finally:
            logger.info("Config watcher stopped")


def external_url(host: str, *, port: int | None = None, ext_port: int | None = None, secure: bool = False) -> str:
    """Base URL under which the hub can reach this service."""
    protocol = "https" if secure else "http"
    effective_port = ext_port if ext_port is not None else port
    suffix = f":{effective_port}" if effective_port is not None else ""
    return f"{protocol}://{host}{suffix}"


__all__ = [
    "ID_PLACEHOLDER",
    "AnnouncementRule",
    "ConfigListener",
    "ConfigStore",
    "ConfigWatcher",
    "ConfigurationError",
    "YoutubeConfig",
    "external_url",
    "load_youtube_config",
    "parse_youtube_config",
]
