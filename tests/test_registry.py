"""Tests for command name normalization and the CommandRegistry."""

from unittest.mock import MagicMock

import pytest

from sutradhar.bot.registry import CommandEntry, CommandRegistry, normalize_command
from sutradhar.sdk.exceptions import ValidationException
from sutradhar.sdk.models import BotCommand


def _noop(update, bot, args) -> None:
    return None


class TestNormalizeCommand:

    @pytest.mark.parametrize("raw", ["start", "/start", "Start", "/START", "  /Start  "])
    def test_equivalent_forms(self, raw: str) -> None:
        assert normalize_command(raw) == "start"

    def test_strips_only_one_slash(self) -> None:
        assert normalize_command("//start") == "/start"

    def test_empty(self) -> None:
        assert normalize_command(" / ") == ""


class TestRegister:

    def test_register_and_get(self, logger: MagicMock) -> None:
        registry = CommandRegistry(logger=logger)
        registry.register("/Ping", _noop, description="Ping")

        entry = registry.get("ping")
        assert entry == CommandEntry(name="ping", handler=_noop, description="Ping")
        assert registry.get("/PING") is entry
        assert "Ping" in registry
        assert len(registry) == 1

    def test_register_is_fluent(self, logger: MagicMock) -> None:
        registry = CommandRegistry(logger=logger)
        assert registry.register("a", _noop).register("b", _noop) is registry
        assert [entry.name for entry in registry] == ["a", "b"]

    def test_last_registration_wins(self, logger: MagicMock) -> None:
        first, second = MagicMock(), MagicMock()
        registry = CommandRegistry(logger=logger)
        registry.register("start", first)
        registry.register("/START", second)

        assert len(registry) == 1
        assert registry.get("start").handler is second

    @pytest.mark.parametrize("name", ["", "   ", "/", " / "])
    def test_empty_name_rejected(self, name: str, logger: MagicMock) -> None:
        registry = CommandRegistry(logger=logger)
        with pytest.raises(ValidationException) as exc_info:
            registry.register(name, _noop)
        assert exc_info.value.parameter == "name"
        assert len(registry) == 0

    @pytest.mark.parametrize("name", ["a@b", "/ping@MyBot"])
    def test_bot_suffix_in_name_rejected(self, name: str, logger: MagicMock) -> None:
        registry = CommandRegistry(logger=logger)
        with pytest.raises(ValidationException) as exc_info:
            registry.register(name, _noop)
        assert exc_info.value.parameter == "name"
        assert len(registry) == 0

    def test_non_callable_handler_rejected(self, logger: MagicMock) -> None:
        registry = CommandRegistry(logger=logger)
        with pytest.raises(ValidationException) as exc_info:
            registry.register("start", "not a function")
        assert exc_info.value.parameter == "handler"

    def test_decorator(self, logger: MagicMock) -> None:
        registry = CommandRegistry(logger=logger)

        @registry.command("/echo", description="Repeat")
        def handle_echo(update, bot, args):
            return args

        assert registry.get("echo").handler is handle_echo
        assert handle_echo(None, None, "x") == "x"

    def test_logs_registration(self, logger: MagicMock) -> None:
        CommandRegistry(logger=logger).register("/Start", _noop)
        logger.debug.assert_called_once_with("Registered command", extra={"command": "start"})


class TestLookupHelpers:

    def test_unknown_returns_none(self, logger: MagicMock) -> None:
        assert CommandRegistry(logger=logger).get("missing") is None

    def test_unregister(self, logger: MagicMock) -> None:
        registry = CommandRegistry(logger=logger).register("ping", _noop)
        assert registry.unregister("/PING") is True
        assert registry.unregister("ping") is False
        assert "ping" not in registry

    def test_entries_is_a_copy(self, logger: MagicMock) -> None:
        registry = CommandRegistry(logger=logger).register("ping", _noop)
        entries = registry.entries()
        entries.clear()
        assert "ping" in registry

    def test_contains_non_string(self, logger: MagicMock) -> None:
        assert 5 not in CommandRegistry(logger=logger)

    def test_to_bot_commands_skips_undescribed(self, logger: MagicMock) -> None:
        registry = (
            CommandRegistry(logger=logger)
            .register("start", _noop, description="Start the bot")
            .register("hidden", _noop)
        )
        assert registry.to_bot_commands() == [BotCommand(command="start", description="Start the bot")]
