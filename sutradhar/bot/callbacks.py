"""Callback-query router for inline keyboard button presses.

Handlers are keyed by the exact ``callback_data`` string of the button.  A
matched handler runs as ``handler(update, bot)``; the query is then
acknowledged with ``answerCallbackQuery`` so the client's spinner stops.
Failures follow the same log-and-rethrow policy as
:class:`~sutradhar.bot.dispatcher.CommandDispatcher`.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional

from sutradhar.core.logger import SutradharLogger
from sutradhar.sdk.exceptions import ValidationException
from sutradhar.sdk.update import TelegramUpdate

CallbackHandler = Callable[[TelegramUpdate, Any], Any]


class CallbackQueryRouter:
    """Exact-match router over ``callback_query.data``."""

    def __init__(self, logger: Optional[logging.Logger] = None) -> None:
        self._callbacks: dict[str, CallbackHandler] = {}
        self._logger = logger or SutradharLogger.get_logger()

    def register(self, data: str, handler: CallbackHandler) -> CallbackQueryRouter:
        """Bind *handler* to buttons carrying *data* (fluent).

        Raises:
            ValidationException: If *data* is blank or *handler* is not callable.
        """
        key = data.strip() if isinstance(data, str) else ""
        if not key:
            raise ValidationException("Callback data must not be empty.", parameter="data")
        if not callable(handler):
            raise ValidationException(f"Handler for callback '{key}' is not callable", parameter="handler")
        self._callbacks[key] = handler
        self._logger.debug("Set callback handler", extra={"callback_data": key})
        return self

    def callback(self, data: str) -> Callable[[CallbackHandler], CallbackHandler]:
        """Decorator form of :meth:`register`."""
        def decorator(func: CallbackHandler) -> CallbackHandler:
            self.register(data, func)
            return func
        return decorator

    def __contains__(self, data: object) -> bool:
        return isinstance(data, str) and data.strip() in self._callbacks

    def handle(self, update: TelegramUpdate, bot: Any) -> bool:
        """Run the handler for this update's callback data, if one is bound."""
        if not update.get_callback_query():
            return False
        data = update.get_field("callback_query.data", "")
        data = data.strip() if isinstance(data, str) else ""
        if not data:
            return False

        handler = self._callbacks.get(data)
        if handler is None:
            self._logger.debug("No handler found for callback query", extra={"callback_data": data})
            return False

        self._logger.info("Processing callback query", extra={"callback_data": data})
        try:
            handler(update, bot)
            bot.answer_callback_query(update.get_field("callback_query.id"))
        except Exception as exc:
            self._logger.error(
                "Error executing callback handler",
                extra={"callback_data": data, "error": str(exc)},
                exc_info=True,
            )
            raise
        return True
