"""Application entry point.

Initializes and runs the Telegram bot application. Handles both webhook mode
(for production deployment on Railway) and polling mode (for local
development). Configures logging, opens the database and cache on startup and
registers the bot handlers.
"""

import logging

from telegram.ext import (
    Application,
    CallbackQueryHandler,
    CommandHandler,
    MessageHandler,
    PreCheckoutQueryHandler,
    filters,
)

from .bot.handlers import (
    handle_callback,
    handle_text,
    precheckout,
    start,
    successful_payment,
)
from .config import config
from .core.container import container

# Logging
logging.basicConfig(
    format="%(asctime)s - %(levelname)s - %(message)s",
    level=getattr(logging, config.bot.log_level.upper(), logging.INFO),
)
logging.getLogger("httpx").setLevel(logging.WARNING)
logger = logging.getLogger(__name__)


async def initialize_resources() -> None:
    """Open the database and, when enabled, the Redis cache."""
    await container.database().connect()
    logger.info(f"Database ready at {config.database.path}")

    try:
        cache = container.cache_service()
        if await cache.connect():
            logger.info("Redis cache connected")
        else:
            logger.info("Redis cache unavailable, running without caching")
    except Exception as e:
        logger.warning(f"Error initializing cache: {e}")


async def cleanup_resources() -> None:
    """Close the cache and the database."""
    try:
        await container.cache_service().close()
        logger.info("Cache service closed")
    except Exception as e:
        logger.warning(f"Error closing cache: {e}")

    await container.database().disconnect()
    logger.info("Database connection closed")


def build_application() -> Application:
    """Create the bot application with every handler registered."""
    app = Application.builder().token(config.bot.bot_token).build()

    async def post_init(application: Application) -> None:
        await initialize_resources()

    async def post_shutdown(application: Application) -> None:
        await cleanup_resources()

    app.post_init = post_init
    app.post_shutdown = post_shutdown

    app.add_handler(CommandHandler("start", start))
    app.add_handler(CallbackQueryHandler(handle_callback))
    app.add_handler(PreCheckoutQueryHandler(precheckout))
    app.add_handler(MessageHandler(filters.SUCCESSFUL_PAYMENT, successful_payment))
    app.add_handler(MessageHandler(filters.TEXT & ~filters.COMMAND, handle_text))

    return app


def main() -> None:
    """Main application entry point.

    Starts the bot in either webhook mode (production) or polling mode
    (development).

    Raises:
        RuntimeError: If BOT_TOKEN environment variable is not set.
    """
    if not config.bot.bot_token:
        raise RuntimeError("Set BOT_TOKEN environment variable")

    if not config.ebay.client_id:
        logger.warning("EBAY_CLIENT_ID is not set; eBay searches will fail")
    if not config.payments.enabled:
        logger.warning("STRIPE_PROVIDER_TOKEN is not set; payments are disabled")

    app = build_application()

    # Run in webhook or polling mode
    if config.bot.use_webhook:
        path = f"/{config.bot.bot_token}"
        webhook_url = f"https://{config.bot.webhook_domain}{path}"
        logger.info(f"Starting webhook on port {config.bot.port}")

        app.run_webhook(
            listen=config.bot.listen_host,
            port=config.bot.port,
            url_path=path,
            webhook_url=webhook_url,
        )
    else:
        logger.warning("No public domain found; falling back to long-polling")
        app.run_polling()


if __name__ == "__main__":
    main()
