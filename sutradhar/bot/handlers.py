"""Built-in command and callback handlers.

Each command handler has the registry signature ``handler(update, bot, args)``
and replies through the :class:`~sutradhar.sdk.client.BotClient` it is given.
:func:`register_default_commands` wires them onto a dispatcher, and
:func:`register_default_callbacks` adds the inline-button handlers that
``/start`` advertises.
"""

from typing import Any

from sutradhar.bot.callbacks import CallbackQueryRouter
from sutradhar.bot.dispatcher import CommandDispatcher
from sutradhar.core.logger import SutradharLogger
from sutradhar.sdk.models import InlineKeyboardButton, InlineKeyboardMarkup
from sutradhar.sdk.update import TelegramUpdate

logger = SutradharLogger.get_logger()

PING_CALLBACK = "ping"


def _chat_id(update: TelegramUpdate) -> Any:
    return update.get_field("message.chat.id")


def handle_start(update: TelegramUpdate, bot: Any, args: str) -> None:
    """Handle /start: greet the user and offer a ping button."""
    name = update.get_field("message.from.first_name", "there")
    logger.info("User invoked /start", extra={"chat_id": _chat_id(update), "command": "start"})
    markup = InlineKeyboardMarkup(
        inline_keyboard=[[InlineKeyboardButton(text="Ping", callback_data=PING_CALLBACK)]]
    )
    bot.send_message(_chat_id(update), f"Hello, {name}! Send /help to see what I can do.", reply_markup=markup)


def make_help_handler(dispatcher: CommandDispatcher):
    """Build a /help handler that lists the commands registered on *dispatcher*."""
    def handle_help(update: TelegramUpdate, bot: Any, args: str) -> None:
        lines = [
            f"/{entry.name} - {entry.description}" if entry.description else f"/{entry.name}"
            for entry in dispatcher.registry
        ]
        bot.send_message(_chat_id(update), "Available commands:\n" + "\n".join(lines))
    return handle_help


def handle_ping(update: TelegramUpdate, bot: Any, args: str) -> None:
    bot.send_message(_chat_id(update), "pong")


def handle_echo(update: TelegramUpdate, bot: Any, args: str) -> None:
    """Handle /echo <text>: send *args* back, or a usage hint when empty."""
    bot.send_message(_chat_id(update), args.strip() or "Usage: /echo <text>")


def handle_ping_button(update: TelegramUpdate, bot: Any) -> None:
    chat_id = update.get_field("callback_query.message.chat.id")
    if chat_id is None:
        logger.warning("Ping button pressed without a message", extra={"callback_data": PING_CALLBACK})
        return
    bot.send_message(chat_id, "pong")


def register_default_commands(dispatcher: CommandDispatcher) -> CommandDispatcher:
    """Register /start, /help, /ping and /echo on *dispatcher*."""
    return (
        dispatcher
        .register("start", handle_start, description="Start the bot")
        .register("help", make_help_handler(dispatcher), description="Show available commands")
        .register("ping", handle_ping, description="Check that the bot is alive")
        .register("echo", handle_echo, description="Repeat your text")
    )


def register_default_callbacks(router: CallbackQueryRouter) -> CallbackQueryRouter:
    return router.register(PING_CALLBACK, handle_ping_button)
