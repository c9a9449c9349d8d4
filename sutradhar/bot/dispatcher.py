"""Command dispatcher: matches updates to registered command handlers.

For each update the dispatcher:

1. reads ``message.text``; anything without a message, or whose trimmed text
   does not start with ``/``, is not a command and yields ``False``;
2. splits the text on the first space into the command token and the
   argument string;
3. drops a ``@botusername`` suffix from the token and normalizes it the way
   :func:`~sutradhar.bot.registry.normalize_command` does at registration;
4. calls ``handler(update, bot, args)`` for a registered name.

Handler failures are logged once at error level with the traceback and then
re-raised unchanged.  The caller (usually
:class:`~sutradhar.bot.polling.UpdatePoller`) decides whether to continue
with the next update or abort.
"""

from __future__ import annotations

import inspect
import logging
from typing import Any, Mapping, Optional, Union

from sutradhar.bot.registry import CommandEntry, CommandHandler, CommandRegistry, normalize_command
from sutradhar.core.logger import SutradharLogger
from sutradhar.sdk.update import TelegramUpdate

UpdateLike = Union[TelegramUpdate, Mapping[str, Any]]


def parse_command(text: str) -> tuple[str, str] | None:
    """Split command text into ``(normalized_name, args)``.

    Returns ``None`` when *text* is not a command.

    >>> parse_command("/Ping@MyBot  extra args")
    ('ping', ' extra args')
    """
    if not isinstance(text, str):
        return None
    text = text.strip()
    if not text.startswith("/"):
        return None
    token, _, args = text.partition(" ")
    token = token.split("@", 1)[0]
    return normalize_command(token), args


class CommandDispatcher:
    """Routes command updates to the handlers of a :class:`CommandRegistry`."""

    def __init__(
        self,
        registry: Optional[CommandRegistry] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._logger = logger or SutradharLogger.get_logger()
        self.registry = registry if registry is not None else CommandRegistry(logger=self._logger)

    # ── registration (delegates to the registry) ─────────────────────────

    def register(self, name: str, handler: CommandHandler, description: str = "") -> CommandDispatcher:
        self.registry.register(name, handler, description=description)
        return self

    def command(self, name: str, description: str = ""):
        return self.registry.command(name, description=description)

    # ── dispatch ─────────────────────────────────────────────────────────

    def dispatch(self, update: UpdateLike, bot: Any) -> bool:
        """Invoke the handler matching *update*'s command, if any.

        Returns ``True`` if a handler ran to completion, ``False`` if the
        update is not a command or the command is unknown.  Exceptions
        raised by the handler propagate after being logged.
        """
        update = _wrap(update)
        match = self._match(update)
        if match is None:
            return False
        entry, args = match

        self._logger.info("Processing command", extra={"command": entry.name, "update_id": update.raw.get("update_id")})
        try:
            entry.handler(update, bot, args)
        except Exception as exc:
            self._log_failure(entry, exc)
            raise
        return True

    # Router interface shared with CallbackQueryRouter and EventRouter.
    handle = dispatch

    async def dispatch_async(self, update: UpdateLike, bot: Any) -> bool:
        """Like :meth:`dispatch`, awaiting handlers that return awaitables.

        Cancellation (``asyncio.CancelledError``) passes through without an
        error event.
        """
        update = _wrap(update)
        match = self._match(update)
        if match is None:
            return False
        entry, args = match

        self._logger.info("Processing command", extra={"command": entry.name, "update_id": update.raw.get("update_id")})
        try:
            result = entry.handler(update, bot, args)
            if inspect.isawaitable(result):
                await result
        except Exception as exc:
            self._log_failure(entry, exc)
            raise
        return True

    # ── helpers ──────────────────────────────────────────────────────────

    def _match(self, update: TelegramUpdate) -> tuple[CommandEntry, str] | None:
        if not update.has_message():
            return None
        parsed = parse_command(update.get_field("message.text", ""))
        if parsed is None:
            return None
        name, args = parsed
        entry = self.registry.get(name) if name else None
        if entry is None:
            self._logger.debug("No handler registered for command", extra={"command": name})
            return None
        return entry, args

    def _log_failure(self, entry: CommandEntry, exc: Exception) -> None:
        self._logger.error(
            "Error executing command",
            extra={"command": entry.name, "error": str(exc), "error_type": type(exc).__name__},
            exc_info=True,
        )


def _wrap(update: UpdateLike) -> TelegramUpdate:
    return update if isinstance(update, TelegramUpdate) else TelegramUpdate(update)
