# chat_manager.py
"""
Central chat manager shared by every channel (LINE, WhatsApp, Telegram, console):
- Makes sure the user has a record
- Parses the message into a command
- Runs the command against the store / price API
Returns: the reply text for that one message.
"""
import logging
from decimal import Decimal

import config
from command_parser import (
    AddCommand,
    CommandError,
    HelpCommand,
    SetGoalCommand,
    StatusCommand,
    parse_command,
)
from crypto_prices import PriceError, fetch_prices, symbol_to_id

logger = logging.getLogger(__name__)

HELP_MESSAGE = (
    "📘 Commands:\n"
    "/add [coin] [amount]\n"
    "/setgoal [target amount]\n"
    "/status check total value and goal progress"
)
NO_HOLDINGS_MESSAGE = "📭 You have no holdings yet. Add one with /add [coin] [amount]."
UNRECOGNIZED_MESSAGE = "❓ None of your coins are recognized. Supported: BTC, ETH, USDT and a few more."
RATE_LIMIT_MESSAGE = "⏳ Price lookups are too frequent right now, please try again later."
PRICE_ERROR_MESSAGE = "⚠️ Could not fetch prices right now, please try again later."
ERROR_MESSAGE = "⚠️ Something went wrong while processing your message."
SEPARATOR = "--------------------------"


def format_number(value):
    """Print 2.0 as '2', 0.5 as '0.5' and 1e-05 as '0.00001'."""
    return format(Decimal(repr(value)).normalize(), "f")


def goal_percent(total_local, goal):
    if goal <= 0:
        return "N/A"
    return f"{round(total_local / goal * 100, 2):.2f}"


# ---------------- COMMAND HANDLERS ----------------
def handle_add(store, user_id, command):
    with store.transaction(user_id):
        store.set_asset(user_id, command.symbol, command.amount)
    return f"✅ Added {command.symbol.upper()} amount: {command.raw_amount}"


def handle_set_goal(store, user_id, command):
    with store.transaction(user_id):
        store.set_goal(user_id, command.goal)
    return f"🎯 Wealth goal set to: {command.goal} TWD"


def handle_status(store, user_id, fetch=fetch_prices):
    record = store.get_user(user_id)
    assets = record["assets"]
    if not assets:
        return NO_HOLDINGS_MESSAGE

    ids = {symbol_to_id(s) for s in assets}
    ids.discard(None)
    if not ids:
        return UNRECOGNIZED_MESSAGE

    prices, error = fetch(ids)
    if error is PriceError.RATE_LIMIT:
        return RATE_LIMIT_MESSAGE
    if error is not None:
        return PRICE_ERROR_MESSAGE

    total_usd = 0.0
    detail = ""
    for symbol, quantity in assets.items():
        entry = prices.get(symbol_to_id(symbol))
        if not entry:
            continue
        price = entry["usd"]
        value = price * quantity
        total_usd += value
        detail += f"{symbol.upper()}: {format_number(quantity)} x ${format_number(price)} = ${value:.2f}\n"

    total_local = total_usd * config.TWD_PER_USD
    percent = goal_percent(total_local, record.get("goal") or 0)
    suffix = "%" if percent != "N/A" else ""

    return (
        "📊 Crypto portfolio overview:\n\n"
        f"{detail}{SEPARATOR}\n"
        f"💰 Total value: ${total_usd:.2f} (about NT${total_local:,.2f})\n"
        f"🎯 Goal progress: {percent}{suffix}"
    )


# ---------------- MAIN ROUTER ----------------
def process_message(store, user_id, text, fetch=fetch_prices):
    """
    Handle one incoming text message and return the reply text.
    Never raises: unexpected failures are logged and answered generically.
    """
    try:
        store.get_user(user_id)
        command = parse_command(text)

        if isinstance(command, AddCommand):
            return handle_add(store, user_id, command)
        if isinstance(command, SetGoalCommand):
            return handle_set_goal(store, user_id, command)
        if isinstance(command, StatusCommand):
            return handle_status(store, user_id, fetch)
        if isinstance(command, HelpCommand):
            return HELP_MESSAGE
        raise TypeError(f"Unhandled command: {command!r}")

    except CommandError as e:
        logger.info("Rejected command from %s: %r", user_id, text)
        return e.usage
    except Exception:
        logger.exception("Error processing message from %s", user_id)
        return ERROR_MESSAGE
