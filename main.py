"""Entry point: wire the client, routers and poller from configuration, then poll."""

from sutradhar import config
from sutradhar.bot import (
    CallbackQueryRouter,
    CommandDispatcher,
    EventRouter,
    UpdatePoller,
    register_default_callbacks,
    register_default_commands,
)
from sutradhar.core.logger import SutradharLogger
from sutradhar.sdk import APIException, BotClient, LoggingMiddleware, NetworkException

logger = SutradharLogger.get_logger()


def build_poller(token: str) -> UpdatePoller:
    """Assemble the bot from :mod:`sutradhar.config` around *token*."""
    client = BotClient(
        token,
        base_url=config.API_BASE_URL,
        timeout=config.HTTP_TIMEOUT,
        retries=config.HTTP_RETRIES,
        retry_delay=config.RETRY_DELAY,
        verify_ssl=config.VERIFY_SSL,
        proxy=config.HTTP_PROXY,
    )
    client.add_middleware(LoggingMiddleware())

    dispatcher = register_default_commands(CommandDispatcher())
    callbacks = register_default_callbacks(CallbackQueryRouter())
    events = EventRouter(admin_ids=config.ADMIN_IDS)

    try:
        client.set_my_commands(dispatcher.registry.to_bot_commands())
    except (NetworkException, APIException) as exc:
        logger.warning("Could not publish the command menu", extra={"error": str(exc)})

    return UpdatePoller(client, [dispatcher, callbacks, events], poll_timeout=config.POLL_TIMEOUT)


def main():
    if not config.BOT_TOKEN:
        raise EnvironmentError("BOT_TOKEN environment variable is not set or is empty.")

    poller = build_poller(config.BOT_TOKEN)
    logger.info("Sutradhar bot is running. Polling for updates...")
    try:
        poller.run()
    except KeyboardInterrupt:
        poller.stop()
        logger.info("Interrupted, shutting down")
    finally:
        SutradharLogger().cleanup()


if __name__ == "__main__":
    main()
