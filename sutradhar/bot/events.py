"""Event router for non-command messages (chat types and media kinds).

An event is a named predicate over ``message``.  Every registered event whose
predicate holds, and whose extra ``conditions`` all equal the corresponding
``message.<field>`` values, has its handler called as
``handler(update, bot, is_admin)``.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterable, Mapping, Optional

from sutradhar.core.logger import SutradharLogger
from sutradhar.sdk.exceptions import ValidationException
from sutradhar.sdk.update import TelegramUpdate

EventHandler = Callable[[TelegramUpdate, Any, bool], Any]

_CHAT_TYPE_EVENTS = ("private", "group", "supergroup", "channel")
_CONTENT_EVENTS = (
    "photo", "video", "audio", "voice", "document", "animation",
    "sticker", "location", "contact", "poll", "text",
)

EVENTS: frozenset[str] = frozenset(_CHAT_TYPE_EVENTS + _CONTENT_EVENTS)

# Command messages belong to the dispatcher, not to these events.
_SKIP_COMMANDS = frozenset({"private", "text"})


def _matches(event: str, update: TelegramUpdate) -> bool:
    if event in _CHAT_TYPE_EVENTS:
        return update.get_field("message.chat.type") == event
    return update.get_field(f"message.{event}") is not None


class EventRouter:
    """Fan-out router: one update may trigger several event handlers."""

    def __init__(self, admin_ids: Iterable[int] = (), logger: Optional[logging.Logger] = None) -> None:
        self._events: dict[str, tuple[EventHandler, dict[str, Any]]] = {}
        self._admin_ids = frozenset(admin_ids)
        self._logger = logger or SutradharLogger.get_logger()

    def register(
        self,
        event: str,
        handler: EventHandler,
        conditions: Optional[Mapping[str, Any]] = None,
    ) -> EventRouter:
        """Bind *handler* to *event*, replacing any earlier binding (fluent).

        Raises:
            ValidationException: If *event* is unknown or *handler* is not callable.
        """
        if event not in EVENTS:
            raise ValidationException(f"Unknown event: {event!r}", parameter="event")
        if not callable(handler):
            raise ValidationException(f"Handler for event '{event}' is not callable", parameter="handler")
        self._events[event] = (handler, dict(conditions or {}))
        self._logger.debug("Set event", extra={"event": event})
        return self

    def on(self, event: str, conditions: Optional[Mapping[str, Any]] = None):
        """Decorator form of :meth:`register`."""
        def decorator(func: EventHandler) -> EventHandler:
            self.register(event, func, conditions)
            return func
        return decorator

    def is_admin(self, update: TelegramUpdate) -> bool:
        """True if the sender or the chat is one of the configured admins."""
        for path in ("message.from.id", "message.chat.id"):
            value = update.get_field(path)
            if value is not None and value in self._admin_ids:
                return True
        return False

    def handle(self, update: TelegramUpdate, bot: Any) -> bool:
        """Run every matching event handler.  Returns ``True`` if any ran."""
        if not update.has_message():
            self._logger.debug("No message found in update", extra={"update_id": update.raw.get("update_id")})
            return False

        text = update.get_field("message.text", "")
        is_command = isinstance(text, str) and text.strip().startswith("/")

        handled = False
        for event, (handler, conditions) in list(self._events.items()):
            if not _matches(event, update):
                continue
            if any(update.get_field(f"message.{field}") != value for field, value in conditions.items()):
                continue
            if is_command and event in _SKIP_COMMANDS:
                self._logger.debug("Skipping command message in event handler", extra={"event": event})
                continue

            self._logger.info("Processing event", extra={"event": event})
            try:
                handler(update, bot, self.is_admin(update))
            except Exception as exc:
                self._logger.error(
                    "Error executing event",
                    extra={"event": event, "error": str(exc), "error_type": type(exc).__name__},
                    exc_info=True,
                )
                raise
            handled = True
        return handled
