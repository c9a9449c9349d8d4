"""Read-only wrapper around a raw Telegram update.

Handlers receive a :class:`TelegramUpdate` rather than the bare dict so they
can reach nested values with :meth:`TelegramUpdate.get_field` instead of
chains of ``.get()`` calls::

    text = update.get_field("message.text", "")
    chat_id = update.get_field("message.chat.id")
    first_photo = update.get_field("message.photo.0.file_id")
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from pydantic import ValidationError

from sutradhar.sdk.exceptions import ValidationException
from sutradhar.sdk.models import Update

_MISSING = object()


def lookup_path(data: Any, path: str, default: Any = None) -> Any:
    """Walk *path* (dot-separated) through nested mappings and sequences.

    A numeric segment indexes into a list.  Missing keys, out-of-range
    indexes, scalar intermediates and ``None`` values all yield *default*.
    """
    value = data
    for key in path.split("."):
        value = _step(value, key)
        if value is _MISSING or value is None:
            return default
    return value


def _step(value: Any, key: str) -> Any:
    if isinstance(value, Mapping):
        return value.get(key, _MISSING)
    if isinstance(value, Sequence) and not isinstance(value, (str, bytes)):
        try:
            return value[int(key)]
        except (ValueError, IndexError):
            return _MISSING
    return _MISSING


class TelegramUpdate:
    """A single inbound update.

    Raises:
        ValidationException: If *data* is not a mapping holding ``update_id``.
    """

    def __init__(self, data: Mapping[str, Any]) -> None:
        if not isinstance(data, Mapping) or "update_id" not in data:
            raise ValidationException(
                "Invalid update data: update_id is missing or data is empty.",
                parameter="update_id",
            )
        self._data = data

    def __repr__(self) -> str:
        return f"TelegramUpdate(update_id={self._data.get('update_id')!r})"

    @property
    def update_id(self) -> int:
        raw = self._data["update_id"]
        try:
            return int(raw)
        except (TypeError, ValueError):
            raise ValidationException(f"Invalid update_id format: {raw!r}", parameter="update_id")

    @property
    def raw(self) -> Mapping[str, Any]:
        """The wrapped payload.  Callers must not mutate it."""
        return self._data

    def has_message(self) -> bool:
        return isinstance(self._data.get("message"), Mapping)

    def get_message(self) -> Mapping[str, Any] | None:
        return self._data.get("message")

    def get_callback_query(self) -> Mapping[str, Any] | None:
        return self._data.get("callback_query")

    def get_field(self, path: str, default: Any = None) -> Any:
        """Return the value at *path* (e.g. ``"message.text"``) or *default*."""
        return lookup_path(self._data, path, default)

    @property
    def kind(self) -> str | None:
        """Name of the payload key this update carries (``"message"``, …)."""
        for key in self._data:
            if key != "update_id":
                return key
        return None

    def to_model(self) -> Update:
        """Parse into the typed :class:`~sutradhar.sdk.models.Update` model.

        Raises:
            ValidationException: If the payload does not fit the model.
        """
        try:
            return Update.model_validate(dict(self._data))
        except ValidationError as exc:
            raise ValidationException(f"Update does not match the Bot API schema: {exc}", parameter="update")
