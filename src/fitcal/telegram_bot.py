"""fitcal Telegram bot."""

import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor

from telegram import Update
from telegram.ext import (
    Application,
    CommandHandler,
    ContextTypes,
    MessageHandler,
    filters,
)
from apscheduler.schedulers.asyncio import AsyncIOScheduler

from .adapters.telegram_notifier import TelegramNotifier
from .config import Config, load_config
from .telegram_handlers import (
    start_handler,
    help_handler,
    today_handler,
    day_handler,
    slots_handler,
    clients_handler,
    book_handler,
)
from .ticker import add_tick_job, tick_now
from .workflows import open_store

logger = logging.getLogger(__name__)


class AuthFilter(filters.BaseFilter):
    """Filter to only allow authorized users."""

    def __init__(self, allowed_users: list[int]):
        super().__init__()
        self.allowed_users = allowed_users

    def check_update(self, update: Update) -> bool:
        if not self.allowed_users:
            return True  # No restriction if no users configured
        user = update.effective_user
        if user is None:
            return False
        return user.id in self.allowed_users


def create_application(config: Config | None = None) -> Application:
    """Create and configure the Telegram bot application."""
    if config is None:
        config = load_config()

    if not config.telegram_bot_token:
        raise ValueError(
            "TELEGRAM_BOT_TOKEN not configured. "
            "Get a token from @BotFather on Telegram and add it to fitcal.conf"
        )

    app = Application.builder().token(config.telegram_bot_token).build()

    # All store access funnels through one worker thread
    app.bot_data["config"] = config
    app.bot_data["store"] = open_store(config)
    app.bot_data["actor"] = ThreadPoolExecutor(max_workers=1, thread_name_prefix="fitcal-store")

    auth_filter = AuthFilter(config.telegram_allowed_users)

    app.add_handler(CommandHandler("start", start_handler, filters=auth_filter))
    app.add_handler(CommandHandler("help", help_handler, filters=auth_filter))
    app.add_handler(CommandHandler("today", today_handler, filters=auth_filter))
    app.add_handler(CommandHandler("day", day_handler, filters=auth_filter))
    app.add_handler(CommandHandler("slots", slots_handler, filters=auth_filter))
    app.add_handler(CommandHandler("clients", clients_handler, filters=auth_filter))
    app.add_handler(CommandHandler("book", book_handler, filters=auth_filter))

    async def unauthorized_handler(update: Update, context: ContextTypes.DEFAULT_TYPE):
        user = update.effective_user
        logger.warning(f"Unauthorized access attempt from user {user.id} ({user.username})")
        await update.message.reply_text(
            "Unauthorized. This bot is private.\n"
            "If you're the owner, add your Telegram user ID to TELEGRAM_ALLOWED_USERS in fitcal.conf"
        )

    if config.telegram_allowed_users:
        app.add_handler(
            MessageHandler(~auth_filter & filters.ALL, unauthorized_handler)
        )

    return app


def setup_scheduler(app: Application, config: Config) -> AsyncIOScheduler:
    """Set up the recurring ledger/reminder tick."""
    scheduler = AsyncIOScheduler(timezone=config.timezone or None)

    if not config.telegram_allowed_users:
        logger.warning("No TELEGRAM_ALLOWED_USERS configured - reminders have nowhere to go")

    notifier = TelegramNotifier(
        app.bot,
        config.telegram_allowed_users,
        loop=asyncio.get_running_loop(),
        timeout=config.telegram_send_timeout,
    )
    add_tick_job(scheduler, scheduled_tick, [app, notifier, config], config)
    return scheduler


async def scheduled_tick(app: Application, notifier: TelegramNotifier, config: Config):
    """Run one tick on the store's actor thread."""
    loop = asyncio.get_running_loop()
    try:
        await loop.run_in_executor(
            app.bot_data["actor"], tick_now, app.bot_data["store"], notifier, config
        )
    except Exception as e:
        logger.error(f"Tick failed: {e}")


def run_bot(config: Config | None = None):
    """Run the Telegram bot."""
    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        level=logging.INFO,
    )

    if config is None:
        config = load_config()
    app = create_application(config)

    async def post_init(application: Application) -> None:
        """Start scheduler after event loop is running."""
        scheduler = setup_scheduler(application, config)
        scheduler.start()
        application.bot_data["scheduler"] = scheduler
        logger.info("Scheduler started")

    async def post_shutdown(application: Application) -> None:
        scheduler = application.bot_data.get("scheduler")
        if scheduler is not None:
            scheduler.shutdown(wait=False)
        application.bot_data["actor"].shutdown(wait=True)

    app.post_init = post_init
    app.post_shutdown = post_shutdown

    if config.telegram_allowed_users:
        logger.info(f"Bot authorized for users: {config.telegram_allowed_users}")
    else:
        logger.warning("No TELEGRAM_ALLOWED_USERS configured - bot is open to anyone!")

    logger.info("Starting fitcal Telegram bot...")

    app.run_polling(allowed_updates=Update.ALL_TYPES)
