"""Tests for command parsing and CommandDispatcher."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from conftest import make_callback_update, make_update
from sutradhar.bot.dispatcher import CommandDispatcher, parse_command
from sutradhar.bot.registry import CommandRegistry
from sutradhar.sdk.update import TelegramUpdate


class TestParseCommand:

    @pytest.mark.parametrize(
        "text, expected",
        [
            ("/ping", ("ping", "")),
            ("/ping extra args", ("ping", "extra args")),
            ("  /START   hello  ", ("start", "  hello")),
            ("/Ping@MyBot now", ("ping", "now")),
            ("/", ("", "")),
        ],
    )
    def test_commands(self, text: str, expected: tuple) -> None:
        assert parse_command(text) == expected

    @pytest.mark.parametrize("text", ["hello", "", "  ", "ping /x", None, 7])
    def test_not_commands(self, text) -> None:
        assert parse_command(text) is None


class TestDispatch:

    def test_ping_invoked_once_with_empty_args(self, logger: MagicMock, bot: MagicMock) -> None:
        handler = MagicMock()
        dispatcher = CommandDispatcher(logger=logger).register("ping", handler)
        update = TelegramUpdate(make_update("/ping"))

        assert dispatcher.dispatch(update, bot) is True
        handler.assert_called_once_with(update, bot, "")

    def test_args_passed_through(self, logger: MagicMock, bot: MagicMock) -> None:
        handler = MagicMock()
        dispatcher = CommandDispatcher(logger=logger).register("ping", handler)

        assert dispatcher.dispatch(make_update("/ping extra args"), bot) is True
        assert handler.call_args.args[2] == "extra args"

    def test_case_and_slash_insensitive(self, logger: MagicMock, bot: MagicMock) -> None:
        handler = MagicMock()
        dispatcher = CommandDispatcher(logger=logger).register("Start", handler)

        assert dispatcher.dispatch(make_update("/START hello"), bot) is True
        handler.assert_called_once()
        assert handler.call_args.args[2] == "hello"

    def test_args_keep_inner_whitespace(self, logger: MagicMock, bot: MagicMock) -> None:
        handler = MagicMock()
        dispatcher = CommandDispatcher(logger=logger).register("ping", handler)

        assert dispatcher.dispatch(make_update("/ping  two spaces  "), bot) is True
        assert handler.call_args.args[2] == " two spaces"

    def test_raw_mapping_is_wrapped(self, logger: MagicMock, bot: MagicMock) -> None:
        handler = MagicMock()
        dispatcher = CommandDispatcher(logger=logger).register("ping", handler)

        dispatcher.dispatch(make_update("/ping"), bot)
        passed = handler.call_args.args[0]
        assert isinstance(passed, TelegramUpdate)
        assert passed.update_id == 1

    def test_bot_suffix_stripped(self, logger: MagicMock, bot: MagicMock) -> None:
        handler = MagicMock()
        dispatcher = CommandDispatcher(logger=logger).register("ping", handler)
        assert dispatcher.dispatch(make_update("/ping@SutradharBot"), bot) is True

    @pytest.mark.parametrize(
        "raw",
        [
            make_update("hello"),
            make_update(None),
            make_update("   "),
            make_callback_update("ping"),
            {"update_id": 9},
        ],
    )
    def test_non_commands_return_false(self, raw: dict, logger: MagicMock, bot: MagicMock) -> None:
        handler = MagicMock()
        dispatcher = CommandDispatcher(logger=logger).register("ping", handler)

        assert dispatcher.dispatch(raw, bot) is False
        handler.assert_not_called()

    def test_unknown_command_returns_false(self, logger: MagicMock, bot: MagicMock) -> None:
        handler = MagicMock()
        dispatcher = CommandDispatcher(logger=logger).register("ping", handler)

        assert dispatcher.dispatch(make_update("/pong"), bot) is False
        handler.assert_not_called()
        logger.error.assert_not_called()

    def test_bare_slash_returns_false(self, logger: MagicMock, bot: MagicMock) -> None:
        dispatcher = CommandDispatcher(logger=logger).register("ping", MagicMock())
        assert dispatcher.dispatch(make_update("/"), bot) is False

    def test_reregistration_replaces_handler(self, logger: MagicMock, bot: MagicMock) -> None:
        first, second = MagicMock(), MagicMock()
        dispatcher = CommandDispatcher(logger=logger).register("ping", first).register("/PING", second)

        dispatcher.dispatch(make_update("/ping"), bot)
        first.assert_not_called()
        second.assert_called_once()

    def test_shares_given_registry(self, logger: MagicMock, bot: MagicMock) -> None:
        registry = CommandRegistry(logger=logger)
        handler = MagicMock()
        registry.register("ping", handler)

        dispatcher = CommandDispatcher(registry=registry, logger=logger)
        assert dispatcher.registry is registry
        assert dispatcher.dispatch(make_update("/ping"), bot) is True

    def test_decorator(self, logger: MagicMock, bot: MagicMock) -> None:
        dispatcher = CommandDispatcher(logger=logger)
        calls = []

        @dispatcher.command("/echo")
        def handle_echo(update, bot, args):
            calls.append(args)

        dispatcher.dispatch(make_update("/echo hi there"), bot)
        assert calls == ["hi there"]

    def test_handle_alias(self, logger: MagicMock, bot: MagicMock) -> None:
        handler = MagicMock()
        dispatcher = CommandDispatcher(logger=logger).register("ping", handler)
        assert dispatcher.handle(TelegramUpdate(make_update("/ping")), bot) is True


class TestDispatchErrors:

    def test_error_reraised_with_single_log(self, logger: MagicMock, bot: MagicMock) -> None:
        def boom(update, bot, args):
            raise RuntimeError("boom")

        dispatcher = CommandDispatcher(logger=logger).register("ping", boom)

        with pytest.raises(RuntimeError, match="^boom$"):
            dispatcher.dispatch(make_update("/ping"), bot)

        logger.error.assert_called_once()
        _, kwargs = logger.error.call_args
        assert kwargs["extra"]["command"] == "ping"
        assert kwargs["extra"]["error"] == "boom"
        assert kwargs["extra"]["error_type"] == "RuntimeError"
        assert kwargs["exc_info"] is True

    def test_same_exception_object_propagates(self, logger: MagicMock, bot: MagicMock) -> None:
        error = ValueError("bad input")
        handler = MagicMock(side_effect=error)
        dispatcher = CommandDispatcher(logger=logger).register("ping", handler)

        with pytest.raises(ValueError) as exc_info:
            dispatcher.dispatch(make_update("/ping"), bot)
        assert exc_info.value is error


class TestDispatchAsync:

    @pytest.mark.asyncio
    async def test_awaits_coroutine_handler(self, logger: MagicMock, bot: MagicMock) -> None:
        handler = AsyncMock()
        dispatcher = CommandDispatcher(logger=logger).register("ping", handler)

        assert await dispatcher.dispatch_async(make_update("/ping now"), bot) is True
        handler.assert_awaited_once()
        assert handler.await_args.args[2] == "now"

    @pytest.mark.asyncio
    async def test_sync_handler_supported(self, logger: MagicMock, bot: MagicMock) -> None:
        handler = MagicMock(return_value=None)
        dispatcher = CommandDispatcher(logger=logger).register("ping", handler)

        assert await dispatcher.dispatch_async(make_update("/ping"), bot) is True
        handler.assert_called_once()

    @pytest.mark.asyncio
    async def test_non_command_false(self, logger: MagicMock, bot: MagicMock) -> None:
        dispatcher = CommandDispatcher(logger=logger).register("ping", AsyncMock())
        assert await dispatcher.dispatch_async(make_update("hello"), bot) is False

    @pytest.mark.asyncio
    async def test_async_error_logged_and_reraised(self, logger: MagicMock, bot: MagicMock) -> None:
        handler = AsyncMock(side_effect=KeyError("missing"))
        dispatcher = CommandDispatcher(logger=logger).register("ping", handler)

        with pytest.raises(KeyError):
            await dispatcher.dispatch_async(make_update("/ping"), bot)
        logger.error.assert_called_once()
        assert logger.error.call_args.kwargs["extra"]["command"] == "ping"

    @pytest.mark.asyncio
    async def test_cancellation_not_logged(self, logger: MagicMock, bot: MagicMock) -> None:
        handler = AsyncMock(side_effect=asyncio.CancelledError())
        dispatcher = CommandDispatcher(logger=logger).register("ping", handler)

        with pytest.raises(asyncio.CancelledError):
            await dispatcher.dispatch_async(make_update("/ping"), bot)
        logger.error.assert_not_called()

    @pytest.mark.asyncio
    async def test_concurrent_dispatch(self, logger: MagicMock, bot: MagicMock) -> None:
        seen = []

        async def handle(update, bot, args):
            await asyncio.sleep(0)
            seen.append(args)

        dispatcher = CommandDispatcher(logger=logger).register("echo", handle)
        results = await asyncio.gather(
            *(dispatcher.dispatch_async(make_update(f"/echo {i}", update_id=i), bot) for i in range(5))
        )
        assert results == [True] * 5
        assert sorted(seen) == ["0", "1", "2", "3", "4"]
