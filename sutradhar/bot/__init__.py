"""Bot application layer: command dispatch, callback and event routing, polling.

This package may import from ``core/`` and ``sdk/``; neither imports it back.
"""

from sutradhar.bot.callbacks import CallbackQueryRouter
from sutradhar.bot.dispatcher import CommandDispatcher, parse_command
from sutradhar.bot.events import EventRouter
from sutradhar.bot.handlers import register_default_callbacks, register_default_commands
from sutradhar.bot.polling import MemoryUpdateStorage, UpdatePoller
from sutradhar.bot.registry import CommandEntry, CommandRegistry, normalize_command

__all__ = [
    # Commands
    "CommandRegistry",
    "CommandEntry",
    "CommandDispatcher",
    "normalize_command",
    "parse_command",
    # Routers
    "CallbackQueryRouter",
    "EventRouter",
    # Polling
    "UpdatePoller",
    "MemoryUpdateStorage",
    # Defaults
    "register_default_commands",
    "register_default_callbacks",
]
