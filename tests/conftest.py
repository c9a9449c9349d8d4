"""Shared fixtures.  Keeps the shared logger off the filesystem during tests."""

import os
import sys

os.environ.setdefault("LOG_TO_FILE", "false")

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from unittest.mock import MagicMock

import pytest

from sutradhar.sdk.update import TelegramUpdate

TOKEN = "123456:ABC-def_ghi"


def make_update(text=None, update_id=1, chat_id=1000, chat_type="private", user_id=42, **message_fields) -> dict:
    """Build a raw update dict carrying a message."""
    message = {
        "message_id": 1,
        "date": 0,
        "chat": {"id": chat_id, "type": chat_type},
        "from": {"id": user_id, "is_bot": False, "first_name": "Asha"},
    }
    if text is not None:
        message["text"] = text
    message.update(message_fields)
    return {"update_id": update_id, "message": message}


def make_callback_update(data, update_id=2, chat_id=1000, query_id="cb-1") -> dict:
    return {
        "update_id": update_id,
        "callback_query": {
            "id": query_id,
            "from": {"id": 42, "is_bot": False, "first_name": "Asha"},
            "chat_instance": "ci",
            "data": data,
            "message": {"message_id": 5, "date": 0, "chat": {"id": chat_id, "type": "private"}},
        },
    }


@pytest.fixture()
def logger() -> MagicMock:
    return MagicMock()


@pytest.fixture()
def bot() -> MagicMock:
    return MagicMock()


@pytest.fixture()
def ping_update() -> TelegramUpdate:
    return TelegramUpdate(make_update("/ping"))
