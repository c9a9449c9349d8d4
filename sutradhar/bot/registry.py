"""Command registry: single source of truth for command → handler mapping.

Names are normalized once, at registration and at lookup, so ``"Start"``,
``"/start"`` and ``"/START"`` all address the same entry.  Registering a name
twice replaces the earlier handler; there is no duplicate error.

Design:
- ``CommandHandler`` is a :class:`Protocol` for the one handler signature
  in use: ``handler(update, bot, args)``.
- ``CommandEntry`` stores the normalized name, the handler and a
  human-readable description (used for ``/help`` and ``setMyCommands``).
- ``CommandRegistry.command()`` is the decorator form of ``register()``.
"""

from __future__ import annotations

import dataclasses
import logging
from typing import Any, Callable, Iterator, Optional, Protocol, runtime_checkable

from sutradhar.core.logger import SutradharLogger
from sutradhar.sdk.exceptions import ValidationException
from sutradhar.sdk.models import BotCommand


# ── Handler protocol ─────────────────────────────────────────────────────────

@runtime_checkable
class CommandHandler(Protocol):
    """Handler invoked as ``handler(update, bot, args)``."""
    def __call__(self, update: Any, bot: Any, args: str) -> Any: ...  # noqa: E704


# ── Normalization ────────────────────────────────────────────────────────────

def normalize_command(name: str) -> str:
    """Strip surrounding whitespace and one leading ``/``, then lowercase."""
    name = name.strip()
    if name.startswith("/"):
        name = name[1:]
    return name.lower()


# ── Registry entry ───────────────────────────────────────────────────────────

@dataclasses.dataclass(frozen=True, slots=True)
class CommandEntry:
    """Metadata for a single registered command."""
    name: str                 # normalized, e.g. "ping"
    handler: CommandHandler   # called as handler(update, bot, args)
    description: str = ""     # shown in /help and the client menu


# ── Registry ─────────────────────────────────────────────────────────────────

class CommandRegistry:
    """Mapping of normalized command name → :class:`CommandEntry`.

    Usage::

        registry = CommandRegistry()
        registry.register("/ping", handle_ping, description="Ping")

        @registry.command("echo", description="Repeat your text")
        def handle_echo(update, bot, args): ...

        entry = registry.get("PING")
    """

    def __init__(self, logger: Optional[logging.Logger] = None) -> None:
        self._entries: dict[str, CommandEntry] = {}
        self._logger = logger or SutradharLogger.get_logger()

    # ── registration ─────────────────────────────────────────────────────

    def register(self, name: str, handler: CommandHandler, description: str = "") -> CommandRegistry:
        """Insert or overwrite the entry for *name* (fluent).

        Raises:
            ValidationException: If *name* is empty after normalization or
                contains ``@``, or *handler* is not callable.
        """
        normalized = normalize_command(name) if isinstance(name, str) else ""
        if not normalized:
            raise ValidationException(f"Command name must not be empty: {name!r}", parameter="name")
        # "@" starts the bot-username suffix that dispatch strips from commands.
        if "@" in normalized:
            raise ValidationException(f"Command name must not contain '@': {name!r}", parameter="name")
        if not callable(handler):
            raise ValidationException(f"Handler for '{normalized}' is not callable", parameter="handler")

        self._entries[normalized] = CommandEntry(name=normalized, handler=handler, description=description)
        self._logger.debug("Registered command", extra={"command": normalized})
        return self

    def command(self, name: str, description: str = "") -> Callable[[CommandHandler], CommandHandler]:
        """Decorator that registers the wrapped function for *name*.

        Example::

            @registry.command("/start", description="Say hello")
            def handle_start(update, bot, args): ...
        """
        def decorator(func: CommandHandler) -> CommandHandler:
            self.register(name, func, description=description)
            return func
        return decorator

    def unregister(self, name: str) -> bool:
        """Remove *name*.  Returns ``True`` if an entry existed."""
        normalized = normalize_command(name)
        removed = self._entries.pop(normalized, None) is not None
        if removed:
            self._logger.debug("Unregistered command", extra={"command": normalized})
        return removed

    # ── lookup helpers ───────────────────────────────────────────────────

    def get(self, name: str) -> CommandEntry | None:
        """Return the entry for *name* (any case, with or without ``/``)."""
        return self._entries.get(normalize_command(name))

    def entries(self) -> dict[str, CommandEntry]:
        """Return a copy of all registered commands."""
        return dict(self._entries)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and normalize_command(name) in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[CommandEntry]:
        return iter(list(self._entries.values()))

    def to_bot_commands(self) -> list[BotCommand]:
        """The registry as ``setMyCommands`` payload, in registration order.

        Entries without a description are left out, since Telegram requires one.
        """
        return [
            BotCommand(command=entry.name, description=entry.description)
            for entry in self._entries.values()
            if entry.description
        ]
