"""Exception hierarchy for the Sutradhar Telegram SDK."""

from typing import Any, Dict, Optional


class SDKException(Exception):
    """Base class for every error raised by the SDK itself."""


class ValidationException(SDKException):
    """Raised when a value is rejected before any request is sent.

    Attributes:
        parameter: Name of the offending parameter, when known.
    """

    def __init__(self, message: str, parameter: Optional[str] = None) -> None:
        self.parameter = parameter
        super().__init__(message)


class NetworkException(SDKException):
    """Raised when the Bot API could not be reached or answered garbage.

    Attributes:
        status_code: HTTP status code of the response, if one was received.
        raw_response: Raw response body, if one was received.
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        raw_response: Optional[str] = None,
    ) -> None:
        self.status_code = status_code
        self.raw_response = raw_response
        super().__init__(message)


class APIException(SDKException):
    """Raised when the Telegram Bot API answers with ``ok: false``.

    Attributes:
        status_code: Telegram ``error_code`` (mirrors the HTTP status).
        response_body: Raw response body as a dict, when available.
    """

    def __init__(self, status_code: int, response_body: Optional[Dict[str, Any]] = None) -> None:
        """Initialise with the error code and optional body."""
        self.status_code = status_code
        self.response_body = response_body or {}
        description = self.response_body.get("description", "Unknown error")
        super().__init__(f"API error {status_code}: {description}")

    @property
    def description(self) -> str:
        return self.response_body.get("description", "Unknown error")

    @property
    def retry_after(self) -> Optional[int]:
        """Seconds to wait before retrying, for flood-control (429) errors."""
        parameters = self.response_body.get("parameters") or {}
        return parameters.get("retry_after")
