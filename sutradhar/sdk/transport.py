"""HTTP transport for the Telegram Bot API: the terminal of the middleware chain.

:class:`RequestsTransport` turns ``(method, params)`` into a POST against
``https://api.telegram.org/bot<token>/<method>`` using ``requests`` and
returns the decoded JSON body.  Retry and flood-control handling live here so
middleware sees one logical call per request.
"""

from __future__ import annotations

import io
import json
import logging
import time
from typing import Any, Callable, Dict, Mapping, Optional, Tuple

import requests
from pydantic import ValidationError

from sutradhar.core.logger import SutradharLogger
from sutradhar.sdk.exceptions import APIException, NetworkException
from sutradhar.sdk.models import Error

DEFAULT_BASE_URL = "https://api.telegram.org/bot"


class RequestsTransport:
    """Synchronous transport built on :mod:`requests`.

    Args:
        token: Bot token, appended to *base_url*.
        base_url: API prefix, ``https://api.telegram.org/bot`` by default.
        timeout: Per-request timeout in seconds.
        retries: Extra attempts after a :class:`NetworkException`.
        retry_delay: Seconds to sleep between those attempts.
        verify_ssl: Passed to ``requests`` as ``verify``.
        proxy: Optional ``http://`` or ``socks5://`` proxy URL.
        keep_alive: Send ``Connection: keep-alive``.
        sleep: Injected for tests.
    """

    _MAX_FLOOD_RETRIES: int = 3

    def __init__(
        self,
        token: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = 10,
        retries: int = 3,
        retry_delay: float = 1.0,
        verify_ssl: bool = True,
        proxy: Optional[str] = None,
        keep_alive: bool = True,
        sleep: Callable[[float], None] = time.sleep,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._base_url = f"{base_url}{token}"
        self._timeout = timeout
        self._retries = max(0, retries)
        self._retry_delay = retry_delay
        self._verify_ssl = verify_ssl
        self._proxies = {"http": proxy, "https": proxy} if proxy else None
        self._headers = {"Connection": "keep-alive"} if keep_alive else {}
        self._sleep = sleep
        self._logger = logger or SutradharLogger.get_logger()

    def url_for(self, method: str) -> str:
        return f"{self._base_url}/{method}"

    # ------------------------------------------------------------------
    #  Public API
    # ------------------------------------------------------------------

    def send(self, method: str, params: Mapping[str, Any]) -> Dict[str, Any]:
        """POST *params* to *method* and return the decoded ``ok: true`` body.

        Raises:
            NetworkException: After every attempt failed at the transport level.
            APIException: When Telegram answers ``ok: false``.
        """
        attempts = 0
        flood_retries = 0
        while True:
            try:
                return self._send_once(method, params)
            except NetworkException as exc:
                attempts += 1
                self._logger.error(
                    "Request attempt failed",
                    extra={"api_method": method, "attempt": attempts, "error": str(exc), "status_code": exc.status_code},
                )
                if attempts > self._retries:
                    raise
                self._sleep(self._retry_delay)
            except APIException as exc:
                if exc.status_code != 429 or flood_retries >= self._MAX_FLOOD_RETRIES:
                    raise
                flood_retries += 1
                wait = exc.retry_after or 1
                self._logger.warning(
                    "Rate limit exceeded, retrying",
                    extra={"api_method": method, "retry_after": wait},
                )
                self._sleep(wait)

    # ------------------------------------------------------------------
    #  Internal helpers
    # ------------------------------------------------------------------

    def _send_once(self, method: str, params: Mapping[str, Any]) -> Dict[str, Any]:
        kwargs: Dict[str, Any] = {
            "timeout": self._timeout,
            "verify": self._verify_ssl,
            "headers": self._headers,
        }
        if self._proxies:
            kwargs["proxies"] = self._proxies

        data, files = _split_files(params)
        if files:
            kwargs["data"] = data
            kwargs["files"] = files
        else:
            kwargs["json"] = dict(params)

        try:
            response = requests.post(self.url_for(method), **kwargs)
        except requests.RequestException as exc:
            raise NetworkException(f"Network error: {exc}") from exc

        try:
            body = response.json()
        except ValueError:
            raise NetworkException(
                "Invalid JSON response from Telegram API.",
                status_code=response.status_code,
                raw_response=response.text,
            )
        if not isinstance(body, dict):
            raise NetworkException(
                "Unexpected response shape from Telegram API.",
                status_code=response.status_code,
                raw_response=response.text,
            )

        if not body.get("ok"):
            raise APIException(_error_code(body, response.status_code), body)

        self._logger.debug("Request successful", extra={"api_method": method})
        return body


def _error_code(body: Dict[str, Any], fallback: int) -> int:
    try:
        return Error.model_validate(body).error_code or fallback
    except ValidationError:
        return fallback


def _is_file(value: Any) -> bool:
    return isinstance(value, (io.IOBase, bytes, bytearray))


def _split_files(params: Mapping[str, Any]) -> Tuple[Dict[str, Any], Dict[str, Any]]:
    """Separate uploadable values from the rest for a multipart request.

    Non-file values are sent as form fields; lists and dicts are
    JSON-encoded as the Bot API expects.
    """
    files = {key: value for key, value in params.items() if _is_file(value)}
    if not files:
        return dict(params), {}
    data: Dict[str, Any] = {}
    for key, value in params.items():
        if key in files:
            continue
        data[key] = json.dumps(value) if isinstance(value, (dict, list)) else value
    return data, files
