"""Long-polling loop that feeds updates to the routers.

A router is any object with ``handle(update, bot) -> bool``:
:class:`~sutradhar.bot.dispatcher.CommandDispatcher`,
:class:`~sutradhar.bot.callbacks.CallbackQueryRouter` and
:class:`~sutradhar.bot.events.EventRouter` all qualify.  Each update is
offered to the routers in order and the first one returning ``True`` wins.

Routers re-raise handler failures; this is the layer that catches them, logs
them and moves on to the next update.
"""

from __future__ import annotations

import logging
import time
from collections import OrderedDict
from typing import Any, Callable, Iterable, Optional, Protocol

from sutradhar.core.logger import SutradharLogger
from sutradhar.sdk.exceptions import SDKException, ValidationException
from sutradhar.sdk.update import TelegramUpdate


class Router(Protocol):
    def handle(self, update: TelegramUpdate, bot: Any) -> bool: ...  # noqa: E704


class UpdateStorage(Protocol):
    def has(self, update_id: int) -> bool: ...  # noqa: E704
    def mark_processed(self, update_id: int) -> None: ...  # noqa: E704


class MemoryUpdateStorage:
    """In-process record of handled update ids, oldest evicted first."""

    def __init__(self, max_size: int = 1000) -> None:
        if max_size < 1:
            raise ValidationException("max_size must be at least 1", parameter="max_size")
        self._max_size = max_size
        self._seen: OrderedDict[int, None] = OrderedDict()

    def has(self, update_id: int) -> bool:
        return update_id in self._seen

    def mark_processed(self, update_id: int) -> None:
        self._seen[update_id] = None
        self._seen.move_to_end(update_id)
        while len(self._seen) > self._max_size:
            self._seen.popitem(last=False)

    def __len__(self) -> int:
        return len(self._seen)


class UpdatePoller:
    """Fetch updates with ``getUpdates`` and route each one once.

    Args:
        client: A :class:`~sutradhar.sdk.client.BotClient` (or anything with
            ``get_updates``); it is also passed to handlers as ``bot``.
        routers: Routers tried in order for every update.
        storage: Duplicate guard; defaults to :class:`MemoryUpdateStorage`.
        poll_timeout: Long-poll timeout sent to Telegram, in seconds.
        idle_delay: Pause between polls, in seconds.
    """

    def __init__(
        self,
        client: Any,
        routers: Iterable[Router],
        storage: Optional[UpdateStorage] = None,
        poll_timeout: int = 30,
        idle_delay: float = 1.0,
        logger: Optional[logging.Logger] = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._client = client
        self._routers = list(routers)
        self._storage = storage if storage is not None else MemoryUpdateStorage()
        self._poll_timeout = poll_timeout
        self._idle_delay = idle_delay
        self._sleep = sleep
        self._logger = logger or SutradharLogger.get_logger()
        self._running = False
        self.last_update_id: Optional[int] = None

    @property
    def running(self) -> bool:
        return self._running

    def process_update(self, update: TelegramUpdate) -> bool:
        """Offer *update* to the routers.  Returns ``True`` if one handled it."""
        update_id = update.update_id
        if self._storage.has(update_id):
            self._logger.debug("Skipping already processed update", extra={"update_id": update_id})
            return False

        handled = False
        try:
            for router in self._routers:
                if router.handle(update, self._client):
                    handled = True
                    break
            if not handled:
                self._logger.debug("No router handled update", extra={"update_id": update_id, "kind": update.kind})
        except Exception as exc:
            self._logger.error(
                "Error processing update",
                extra={"update_id": update_id, "error": str(exc), "error_type": type(exc).__name__},
            )
        finally:
            self._storage.mark_processed(update_id)
        return handled

    def poll_once(self) -> int:
        """Fetch one batch of updates and process it.  Returns the batch size."""
        offset = self.last_update_id + 1 if self.last_update_id is not None else None
        try:
            updates = self._client.get_updates(offset=offset, timeout=self._poll_timeout)
        except SDKException as exc:
            self._logger.error("Error in polling", extra={"error": str(exc), "error_type": type(exc).__name__})
            return 0

        if updates:
            self._logger.debug("Received updates", extra={"count": len(updates)})
        for update in updates:
            update_id = update.update_id
            if self.last_update_id is None or update_id > self.last_update_id:
                self.last_update_id = update_id
            self.process_update(update)
        return len(updates)

    def run(self, max_iterations: Optional[int] = None) -> None:
        """Poll until :meth:`stop` is called or *max_iterations* polls have run."""
        self._running = True
        self._logger.info("Starting polling", extra={"poll_timeout": self._poll_timeout})
        iterations = 0
        try:
            while self._running:
                self.poll_once()
                iterations += 1
                if max_iterations is not None and iterations >= max_iterations:
                    break
                if self._running:
                    self._sleep(self._idle_delay)
        finally:
            self._running = False
            self._logger.info("Polling stopped", extra={"iterations": iterations})

    def stop(self) -> None:
        self._running = False
