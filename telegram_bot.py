# ---------------- TELEGRAM BOT ----------------
import asyncio
import logging

from telegram import Update
from telegram.ext import (
    ApplicationBuilder,
    CommandHandler,
    ContextTypes,
    MessageHandler,
    filters,
)

import config
from chat_manager import HELP_MESSAGE, process_message
from user_store import UserStore, store_lock

logger = logging.getLogger(__name__)


def telegram_user_id(update: Update) -> str:
    return f"telegram:{update.message.from_user.id}"


# ---------------- COMMAND HANDLERS ----------------
async def start(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handles /start command."""
    welcome_text = (
        f"👋 Hi {update.message.from_user.first_name or 'there'}!\n"
        "I track your crypto holdings against a wealth goal.\n\n"
        f"{HELP_MESSAGE}"
    )
    await update.message.reply_text(welcome_text)


def strip_bot_mention(text):
    """Turn '/add@MyBot btc 1' (group chat form) into '/add btc 1'."""
    parts = text.strip().split(maxsplit=1)
    if not parts or not parts[0].startswith("/") or "@" not in parts[0]:
        return text
    parts[0] = parts[0].split("@", 1)[0]
    return " ".join(parts)


def run_command(user_id, text):
    with store_lock:
        store = UserStore.load(config.USER_DATA_FILE)
        return process_message(store, user_id, text)


# ---------------- MESSAGE HANDLER ----------------
async def handle_message(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Forward every text message (commands included) to the chat manager."""
    if update.message is None or update.message.text is None:
        return

    # Price lookups block, so keep them off the event loop
    reply_text = await asyncio.to_thread(
        run_command, telegram_user_id(update), strip_bot_mention(update.message.text)
    )
    await update.message.reply_text(reply_text)


def build_application(token):
    app = ApplicationBuilder().token(token).build()
    app.add_handler(CommandHandler("start", start))
    app.add_handler(MessageHandler(filters.TEXT, handle_message))
    return app


# ---------------- MAIN ENTRY POINT ----------------
def main():
    """Start the Telegram bot."""
    logging.basicConfig(level=config.LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    print("🚀 Telegram bot starting...")

    if not config.TELEGRAM_TOKEN:
        print("❌ TELEGRAM_TOKEN is not set!")
        return

    app = build_application(config.TELEGRAM_TOKEN)
    print("✅ Bot is running. Press Ctrl+C to stop.")
    app.run_polling()


if __name__ == "__main__":
    main()
