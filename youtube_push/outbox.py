"""In-memory outbox for side effects that must not block the announcer loop."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
import itertools
import logging
from typing import Awaitable, Callable

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class OutboxEntry:
    id: int
    kind: str
    description: str
    created_at: float
    task: asyncio.Task


class Outbox:
    """Runs effects as background tasks and keeps track of the ones in flight.

    Failures are logged and otherwise ignored: nothing is retried and nothing
    flows back to the caller.
    """

    def __init__(self) -> None:
        self._entries: dict[int, OutboxEntry] = {}
        self._ids = itertools.count(1)
        self.sent = 0
        self.failed = 0

    @property
    def in_flight(self) -> list[OutboxEntry]:
        return list(self._entries.values())

    def __len__(self) -> int:
        return len(self._entries)

    def dispatch(
        self,
        kind: str,
        description: str,
        send: Callable[[], Awaitable[object]],
    ) -> OutboxEntry:
        entry_id = next(self._ids)
        loop = asyncio.get_running_loop()
        task = loop.create_task(self._run(kind, description, send), name=f"outbox-{kind}-{entry_id}")
        entry = OutboxEntry(
            id=entry_id,
            kind=kind,
            description=description,
            created_at=loop.time(),
            task=task,
        )
        self._entries[entry_id] = entry
        task.add_done_callback(lambda _t: self._entries.pop(entry_id, None))
        return entry

    async def _run(self, kind: str, description: str, send: Callable[[], Awaitable[object]]) -> None:
        try:
            await send()
        except asyncio.CancelledError:
            raise
        except Exception as exc:  # noqa: BLE001
            self.failed += 1
            if kind == "announce":
                logger.warning("Failed to announce '%s': %s", description, exc)
            else:
                logger.warning("Unable to create %s message: %s", kind, exc)
            return
        self.sent += 1
        if kind == "announce":
            logger.info("Announced '%s'", description)

    async def drain(self, timeout: float | None = None) -> None:
        """Wait for in-flight entries; whatever is left after ``timeout`` is cancelled."""
        tasks = [entry.task for entry in self._entries.values()]
        if not tasks:
            return
        logger.info("Draining %s outbox entr%s", len(tasks), "y" if len(tasks) == 1 else "ies")
        _, pending = await asyncio.wait(tasks, timeout=timeout)
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)
            logger.warning("Cancelled %s outbox entries on shutdown", len(pending))


__all__ = ["Outbox", "OutboxEntry"]
