"""Telegram message formatting utilities."""

import telegramify_markdown

from .core.calendar import CellKind

MAX_MESSAGE_LENGTH = 4000


async def send_markdown(bot_or_msg, text: str, *, chat_id: int | None = None):
    """Send markdown text to Telegram, converting to MarkdownV2.

    bot_or_msg: a Bot instance (pass chat_id) or an Update.message (calls reply_text).
    """
    converted = telegramify_markdown.markdownify(text)
    chunks = [converted[i : i + MAX_MESSAGE_LENGTH] for i in range(0, len(converted), MAX_MESSAGE_LENGTH)]
    for chunk in chunks:
        if chat_id is not None:
            await bot_or_msg.send_message(chat_id=chat_id, text=chunk, parse_mode="MarkdownV2")
        else:
            await bot_or_msg.reply_text(chunk, parse_mode="MarkdownV2")


def format_day(day, cells) -> str:
    """Markdown day view. Continuation cells are folded into their session."""
    lines = [f"**{day.strftime('%A, %B %d')}**", ""]
    for cell in cells:
        if cell.kind == CellKind.CONTINUATION:
            continue
        lines.append(f"`{cell.format()}`")
    return "\n".join(lines)


def format_clients(clients) -> str:
    if not clients:
        return "No clients yet."
    lines = ["**Clients**", ""]
    for client in clients:
        plan = f" - {client.module_count} left" if client.is_module else ""
        phone = f" ({client.phone})" if client.phone else ""
        lines.append(f"- {client.name}{phone}{plan}")
    return "\n".join(lines)
