"""BotClient: the bot facade handed to command handlers.

Every outbound call goes ``request() -> MiddlewareChain -> transport.send``.
Call sites never change when cross-cutting behaviour (auth injection,
response shaping, logging) is added; register a middleware instead.

Usage::

    client = BotClient(BOT_TOKEN)
    client.add_middleware(LoggingMiddleware())
    client.send_message(chat_id=42, text="hello")
"""

from __future__ import annotations

import asyncio
import logging
import re
from typing import Any, Callable, Dict, List, Mapping, Optional, Union

from pydantic import BaseModel

from sutradhar.core.logger import SutradharLogger
from sutradhar.sdk.exceptions import APIException, NetworkException, SDKException, ValidationException
from sutradhar.sdk.middleware import MiddlewareChain
from sutradhar.sdk.models import BotCommand, File, User
from sutradhar.sdk.transport import DEFAULT_BASE_URL, RequestsTransport
from sutradhar.sdk.update import TelegramUpdate

_MISSING = object()

_TOKEN_RE = re.compile(r"^\d+:[A-Za-z0-9_-]+$")
_METHOD_RE = re.compile(r"^[a-zA-Z]+$")

ErrorHandler = Callable[[str, Exception, Dict[str, Any]], Any]


class BotClient:
    """Client-side facade for the Telegram Bot API.

    Args:
        token: Bot token in ``<digits>:<secret>`` form.
        transport: Any object with ``send(method, params)``; defaults to a
            :class:`~sutradhar.sdk.transport.RequestsTransport` built from the
            remaining keyword arguments.
    """

    _DEFAULT_TIMEOUT: int = 10

    def __init__(
        self,
        token: str,
        *,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = _DEFAULT_TIMEOUT,
        retries: int = 3,
        retry_delay: float = 1.0,
        verify_ssl: bool = True,
        proxy: Optional[str] = None,
        transport: Any = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        if not token or not _TOKEN_RE.match(token):
            raise ValidationException("Invalid or empty Telegram API token provided.", parameter="token")
        self._token = token
        self._logger = logger or SutradharLogger.get_logger()
        self._transport = transport or RequestsTransport(
            token,
            base_url=base_url,
            timeout=timeout,
            retries=retries,
            retry_delay=retry_delay,
            verify_ssl=verify_ssl,
            proxy=proxy,
            logger=self._logger,
        )
        self._middleware = MiddlewareChain()
        self._error_handler: Optional[ErrorHandler] = None

    def __repr__(self) -> str:
        bot_id = self._token.split(":", 1)[0]
        return f"BotClient(bot_id={bot_id}, middleware={len(self._middleware)})"

    @property
    def middleware(self) -> MiddlewareChain:
        return self._middleware

    def add_middleware(self, middleware: Any) -> BotClient:
        """Append *middleware* to the outbound chain (fluent)."""
        self._middleware.add(middleware)
        return self

    def set_error_handler(self, handler: Optional[ErrorHandler]) -> BotClient:
        """Route network/API failures to ``handler(method, exc, params)``.

        The handler's return value becomes the result of :meth:`request`.
        Pass ``None`` to restore raising.
        """
        self._error_handler = handler
        return self

    # ------------------------------------------------------------------
    #  Core request path
    # ------------------------------------------------------------------

    def request(self, method: str, params: Optional[Mapping[str, Any]] = None) -> Any:
        """Call Bot API *method* with *params* through the middleware chain.

        Raises:
            ValidationException: If *method* is not a plain API method name.
            NetworkException: On transport failure (unless an error handler is set).
            APIException: On ``ok: false`` (unless an error handler is set).
        """
        if not method or not _METHOD_RE.match(method):
            raise ValidationException(f"Invalid Telegram API method: {method!r}", parameter="method")

        payload = _normalize_params(params or {})
        try:
            return self._middleware.execute(method, payload, self._transport.send)
        except (NetworkException, APIException) as exc:
            if self._error_handler is None:
                raise
            self._logger.warning(
                "Bot API call failed, delegating to error handler",
                extra={"api_method": method, "error": str(exc)},
            )
            return self._error_handler(method, exc, payload)

    async def request_async(self, method: str, params: Optional[Mapping[str, Any]] = None) -> Any:
        """Run :meth:`request` in a worker thread to keep the event loop free."""
        return await asyncio.to_thread(self.request, method, params)

    # ------------------------------------------------------------------
    #  Endpoint helpers
    # ------------------------------------------------------------------

    def get_me(self) -> User:
        """Return the bot's own :class:`~sutradhar.sdk.models.User`."""
        return User.model_validate(_result("getMe", self.request("getMe")))

    def get_updates(
        self,
        offset: Optional[int] = None,
        limit: Optional[int] = None,
        timeout: Optional[int] = None,
        allowed_updates: Optional[List[str]] = None,
    ) -> List[TelegramUpdate]:
        """Long-poll for updates and wrap each one in :class:`TelegramUpdate`."""
        payload: Dict[str, Any] = {}
        if offset is not None:
            payload["offset"] = offset
        if limit is not None:
            payload["limit"] = limit
        if timeout is not None:
            payload["timeout"] = timeout
        if allowed_updates is not None:
            payload["allowed_updates"] = allowed_updates
        data = self.request("getUpdates", payload)
        return [TelegramUpdate(raw) for raw in _result("getUpdates", data, default=[]) or []]

    def send_message(
        self,
        chat_id: Union[int, str],
        text: str,
        parse_mode: Optional[str] = None,
        reply_markup: Optional[Union[Dict[str, Any], BaseModel]] = None,
        reply_to_message_id: Optional[int] = None,
        disable_notification: Optional[bool] = None,
    ) -> Dict[str, Any]:
        """Send a text message.  Returns the raw response body."""
        payload: Dict[str, Any] = {"chat_id": chat_id, "text": text}
        if parse_mode is not None:
            payload["parse_mode"] = parse_mode
        if reply_markup is not None:
            payload["reply_markup"] = reply_markup
        if reply_to_message_id is not None:
            payload["reply_to_message_id"] = reply_to_message_id
        if disable_notification is not None:
            payload["disable_notification"] = disable_notification
        return self.request("sendMessage", payload)

    def edit_message_text(
        self,
        chat_id: Union[int, str],
        message_id: int,
        text: str,
        parse_mode: Optional[str] = None,
        reply_markup: Optional[Union[Dict[str, Any], BaseModel]] = None,
    ) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"chat_id": chat_id, "message_id": message_id, "text": text}
        if parse_mode is not None:
            payload["parse_mode"] = parse_mode
        if reply_markup is not None:
            payload["reply_markup"] = reply_markup
        return self.request("editMessageText", payload)

    def delete_message(self, chat_id: Union[int, str], message_id: int) -> bool:
        data = self.request("deleteMessage", {"chat_id": chat_id, "message_id": message_id})
        return bool(_result("deleteMessage", data, default=False))

    def answer_callback_query(
        self,
        callback_query_id: str,
        text: Optional[str] = None,
        show_alert: Optional[bool] = None,
    ) -> Dict[str, Any]:
        """Acknowledge a callback query so the client's spinner stops."""
        payload: Dict[str, Any] = {"callback_query_id": callback_query_id}
        if text is not None:
            payload["text"] = text
        if show_alert is not None:
            payload["show_alert"] = show_alert
        return self.request("answerCallbackQuery", payload)

    def set_my_commands(self, commands: List[BotCommand]) -> Dict[str, Any]:
        """Publish *commands* as the bot's command menu."""
        return self.request("setMyCommands", {"commands": commands})

    def get_file(self, file_id: str) -> File:
        data = self.request("getFile", {"file_id": file_id})
        return File.model_validate(_result("getFile", data))


def _normalize_params(params: Mapping[str, Any]) -> Dict[str, Any]:
    """Drop ``None`` values and dump pydantic models to plain JSON data."""
    normalized: Dict[str, Any] = {}
    for key, value in params.items():
        if value is None:
            continue
        normalized[key] = _to_plain(value)
    return normalized


def _to_plain(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(by_alias=True, exclude_none=True)
    if isinstance(value, (list, tuple)):
        return [_to_plain(item) for item in value]
    if isinstance(value, dict):
        return {k: _to_plain(v) for k, v in value.items() if v is not None}
    return value


def _result(method: str, data: Any, default: Any = _MISSING) -> Any:
    """Return ``data["result"]`` from a Bot API body.

    Middleware and error handlers may replace the body, so anything that is
    not a mapping (or lacks ``result`` when no *default* is given) raises.
    """
    if not isinstance(data, Mapping) or ("result" not in data and default is _MISSING):
        raise SDKException(f"Unexpected response for {method}: {data!r}")
    return data.get("result", default)
