"""Pydantic models for the slice of the Telegram Bot API the framework touches.

Only the objects the dispatcher, routers and client read or build are
modelled.  Every model allows extra fields, so newer Bot API payloads
validate without losing data.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class TelegramModel(BaseModel):
    """Base for every Bot API object."""

    model_config = {"populate_by_name": True, "extra": "allow"}


class User(TelegramModel):
    """A Telegram user or bot."""

    id: int
    is_bot: bool
    first_name: str
    last_name: Optional[str] = None
    username: Optional[str] = None
    language_code: Optional[str] = None


class Chat(TelegramModel):
    """A private chat, group, supergroup or channel."""

    id: int
    type: str
    title: Optional[str] = None
    username: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None


class MessageEntity(TelegramModel):
    type: str
    offset: int
    length: int
    url: Optional[str] = None
    user: Optional[User] = None


class PhotoSize(TelegramModel):
    file_id: str
    file_unique_id: str
    width: int
    height: int
    file_size: Optional[int] = None


class Document(TelegramModel):
    file_id: str
    file_unique_id: str
    file_name: Optional[str] = None
    mime_type: Optional[str] = None
    file_size: Optional[int] = None


class Message(TelegramModel):
    """A message.  Media fields other than photo/document stay as raw dicts."""

    message_id: int
    date: int
    chat: Chat
    from_field: Optional[User] = Field(None, alias="from")
    sender_chat: Optional[Chat] = None
    reply_to_message: Optional[Message] = None
    text: Optional[str] = None
    entities: Optional[List[MessageEntity]] = None
    caption: Optional[str] = None
    photo: Optional[List[PhotoSize]] = None
    document: Optional[Document] = None

    @property
    def command_entity(self) -> Optional[MessageEntity]:
        """The ``bot_command`` entity at offset 0, if the text starts with one."""
        for entity in self.entities or []:
            if entity.type == "bot_command" and entity.offset == 0:
                return entity
        return None


class CallbackQuery(TelegramModel):
    """An incoming press on an inline keyboard button."""

    id: str
    from_field: User = Field(..., alias="from")
    chat_instance: str
    message: Optional[Message] = None
    inline_message_id: Optional[str] = None
    data: Optional[str] = None


class Update(TelegramModel):
    """An incoming update.  At most one of the optional fields is present."""

    update_id: int
    message: Optional[Message] = None
    edited_message: Optional[Message] = None
    channel_post: Optional[Message] = None
    edited_channel_post: Optional[Message] = None
    callback_query: Optional[CallbackQuery] = None
    inline_query: Optional[Dict[str, Any]] = None
    poll: Optional[Dict[str, Any]] = None
    my_chat_member: Optional[Dict[str, Any]] = None
    chat_member: Optional[Dict[str, Any]] = None


class ResponseParameters(TelegramModel):
    """Why a request was unsuccessful."""

    migrate_to_chat_id: Optional[int] = None
    retry_after: Optional[int] = None


class Error(TelegramModel):
    """Body of an ``ok: false`` response."""

    ok: bool = False
    error_code: int = 0
    description: str = "Unknown error"
    parameters: Optional[ResponseParameters] = None


class BotCommand(TelegramModel):
    """A command shown in the client's command menu (``setMyCommands``)."""

    command: str = Field(..., min_length=1, max_length=32)
    description: str = Field(..., min_length=1, max_length=256)


class File(TelegramModel):
    file_id: str
    file_unique_id: str
    file_size: Optional[int] = None
    file_path: Optional[str] = None


class InlineKeyboardButton(TelegramModel):
    text: str
    url: Optional[str] = None
    callback_data: Optional[str] = None


class InlineKeyboardMarkup(TelegramModel):
    inline_keyboard: List[List[InlineKeyboardButton]]


class WebhookInfo(TelegramModel):
    url: str
    has_custom_certificate: bool
    pending_update_count: int
    last_error_message: Optional[str] = None
    allowed_updates: Optional[List[str]] = None
