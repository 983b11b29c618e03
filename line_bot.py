# ---------------- LINE BOT (Flask webhook) ----------------
import json
import logging

from flask import Blueprint, abort, request
from linebot.v3.messaging import (
    ApiClient,
    Configuration,
    MessagingApi,
    ReplyMessageRequest,
    TextMessage,
)
from linebot.v3.webhook import SignatureValidator
from linebot.v3.webhooks import Event, MessageEvent, TextMessageContent

import config
from chat_manager import process_message
from user_store import UserStore, store_lock

logger = logging.getLogger(__name__)

line_bp = Blueprint("line", __name__)


# ---------------- UTILITIES ----------------
def verify_signature(body, signature, channel_secret=None):
    """Check X-Line-Signature against the raw request body (a str)."""
    secret = channel_secret if channel_secret is not None else config.LINE_CHANNEL_SECRET
    if not signature or not secret:
        return False
    return SignatureValidator(secret).validate(body, signature)


def reply_message(reply_token, text):
    """Send one text bubble back through the LINE reply API."""
    configuration = Configuration(access_token=config.LINE_CHANNEL_ACCESS_TOKEN)
    with ApiClient(configuration) as api_client:
        MessagingApi(api_client).reply_message(
            ReplyMessageRequest(reply_token=reply_token, messages=[TextMessage(text=text)]),
            _request_timeout=config.REPLY_TIMEOUT,
        )


def extract_text_event(raw_event):
    """Return (reply_token, user_id, text) for a text message event, else None."""
    event = Event.from_dict(raw_event)
    if not isinstance(event, MessageEvent) or not isinstance(event.message, TextMessageContent):
        return None
    user_id = getattr(event.source, "user_id", None)
    if not event.reply_token or not user_id:
        return None
    return event.reply_token, user_id, event.message.text


# ---------------- BATCH HANDLING ----------------
def handle_events(events, store, reply=None):
    """Process one webhook batch strictly in order; one failure never stops the rest."""
    reply = reply or reply_message
    for raw_event in events:
        try:
            parsed = extract_text_event(raw_event)
            if parsed is None:
                continue
            reply_token, user_id, text = parsed

            reply(reply_token, process_message(store, user_id, text))
        except Exception:
            logger.exception("Failed to handle LINE event %r", raw_event)


@line_bp.route("/webhook", methods=["POST"])
def line_webhook():
    """Handle incoming LINE webhook deliveries."""
    body = request.get_data(as_text=True)
    if not verify_signature(body, request.headers.get("X-Line-Signature")):
        logger.warning("Rejected LINE webhook with invalid signature")
        abort(400)

    try:
        payload = json.loads(body)
    except ValueError:
        abort(400)
    events = payload.get("events") if isinstance(payload, dict) else None
    if not isinstance(events, list):
        events = []

    # The platform redelivers the whole batch on anything but 200
    try:
        with store_lock:
            store = UserStore.load(config.USER_DATA_FILE)
            handle_events(events, store)
    except Exception:
        logger.exception("Error handling LINE webhook batch")

    return "", 200
