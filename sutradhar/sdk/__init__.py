"""Telegram Bot API SDK: client facade, middleware chain, transport and models.

Usage::

    from sutradhar.sdk import BotClient, LoggingMiddleware
    from sutradhar.sdk.update import TelegramUpdate
"""

from sutradhar.sdk.client import BotClient
from sutradhar.sdk.exceptions import (
    APIException,
    NetworkException,
    SDKException,
    ValidationException,
)
from sutradhar.sdk.middleware import (
    DefaultParamsMiddleware,
    LoggingMiddleware,
    Middleware,
    MiddlewareChain,
)
from sutradhar.sdk.transport import RequestsTransport
from sutradhar.sdk.update import TelegramUpdate

__all__ = [
    "BotClient",
    "RequestsTransport",
    "TelegramUpdate",
    # Middleware
    "Middleware",
    "MiddlewareChain",
    "DefaultParamsMiddleware",
    "LoggingMiddleware",
    # Exceptions
    "SDKException",
    "ValidationException",
    "NetworkException",
    "APIException",
]
