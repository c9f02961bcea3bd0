"""Telegram command handlers."""

import asyncio
import logging
from datetime import date, datetime

from telegram import Update
from telegram.ext import ContextTypes

from .config import local_now
from .core.calendar import day_schedule
from .core.errors import SchedulingError
from .core.models import Session
from .telegram_format import format_clients, format_day, send_markdown
from .workflows import BookingResult, book_session, get_engine

logger = logging.getLogger(__name__)

USAGE_DAY = "Usage: /day YYYY-MM-DD"
USAGE_SLOTS = "Usage: /slots YYYY-MM-DD HH:MM"
USAGE_BOOK = "Usage: /book CLIENT_ID YYYY-MM-DD HH:MM DURATION [LEAD_MINUTES]"


def _fresh(store, func, *args):
    store.reload()
    return func(*args)


async def on_actor(context: ContextTypes.DEFAULT_TYPE, func, *args):
    """Run store work on the single actor thread shared with the tick job.

    The store is reloaded first so records added from the CLI are visible.
    """
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(
        context.bot_data["actor"], _fresh, context.bot_data["store"], func, *args
    )


def _parse_start(day_str: str, time_str: str) -> datetime:
    return datetime.strptime(f"{day_str} {time_str}", "%Y-%m-%d %H:%M")


# ============== Simple Commands ==============


async def start_handler(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle /start command."""
    await update.message.reply_text(
        "Hi! I'm fitcal, your training calendar.\n\n"
        "Commands:\n"
        "/today - Today's schedule\n"
        "/day - Schedule for a date\n"
        "/slots - Bookable durations at a time\n"
        "/book - Book a session\n"
        "/clients - List clients\n"
        "/help - Show all commands"
    )


async def help_handler(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle /help command."""
    await update.message.reply_text(
        "*fitcal Commands*\n\n"
        "/today - Today's schedule with free slots\n"
        "/day YYYY-MM-DD - Schedule for a date\n"
        "/slots YYYY-MM-DD HH:MM - Durations bookable at a start time\n"
        "/book CLIENT\\_ID YYYY-MM-DD HH:MM DURATION \\[LEAD] - Book a session\n"
        "/clients - Clients and remaining module sessions\n",
        parse_mode="Markdown",
    )


# ============== Calendar ==============


async def _send_day(update: Update, context: ContextTypes.DEFAULT_TYPE, day: date):
    store = context.bot_data["store"]
    engine = get_engine(store, context.bot_data["config"])
    cells = await on_actor(context, day_schedule, store, engine, day)
    await send_markdown(update.message, format_day(day, cells))


async def today_handler(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle /today command - today's schedule."""
    await _send_day(update, context, local_now(context.bot_data["config"]).date())


async def day_handler(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle /day command - schedule for a given date."""
    if len(context.args) != 1:
        await update.message.reply_text(USAGE_DAY)
        return
    try:
        day = date.fromisoformat(context.args[0])
    except ValueError:
        await update.message.reply_text(USAGE_DAY)
        return
    await _send_day(update, context, day)


async def slots_handler(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle /slots command - durations bookable at a start time."""
    if len(context.args) != 2:
        await update.message.reply_text(USAGE_SLOTS)
        return
    try:
        start = _parse_start(*context.args)
    except ValueError:
        await update.message.reply_text(USAGE_SLOTS)
        return

    engine = get_engine(context.bot_data["store"], context.bot_data["config"])
    durations = await on_actor(context, engine.available_durations, start)
    if durations:
        await update.message.reply_text(
            f"{start.strftime('%Y-%m-%d %H:%M')}: {', '.join(str(d) for d in durations)} min available"
        )
    else:
        await update.message.reply_text(f"{start.strftime('%Y-%m-%d %H:%M')}: nothing available")


# ============== Clients & Booking ==============


async def clients_handler(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle /clients command."""
    clients = await on_actor(context, context.bot_data["store"].list_clients)
    await send_markdown(update.message, format_clients(clients))


async def book_handler(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle /book command."""
    config = context.bot_data["config"]
    if len(context.args) not in (4, 5):
        await update.message.reply_text(USAGE_BOOK)
        return
    try:
        client_id = context.args[0]
        start = _parse_start(context.args[1], context.args[2])
        duration = int(context.args[3])
        lead = int(context.args[4]) if len(context.args) == 5 else config.default_lead_minutes
    except ValueError:
        await update.message.reply_text(USAGE_BOOK)
        return

    store = context.bot_data["store"]
    engine = get_engine(store, config)
    try:
        result: BookingResult = await on_actor(
            context, book_session, store, engine, client_id, start, duration, lead
        )
    except SchedulingError as e:
        await update.message.reply_text(f"Not booked: {e}")
        return

    if result.booked:
        session: Session = result.session
        await update.message.reply_text(
            f"Booked {session.interval.format()} on {session.start.strftime('%Y-%m-%d')}"
        )
    else:
        reason = result.status.value.replace("_", " ")
        await update.message.reply_text(f"Not booked: {reason}")
