# ---------------- WHATSAPP BOT (Twilio webhook) ----------------
import logging

from flask import Blueprint, abort, request
from twilio.request_validator import RequestValidator
from twilio.twiml.messaging_response import MessagingResponse

import config
from chat_manager import process_message
from user_store import UserStore, store_lock

logger = logging.getLogger(__name__)

whatsapp_bp = Blueprint("whatsapp", __name__)


def is_valid_twilio_request():
    """Validate X-Twilio-Signature when an auth token is configured."""
    if not config.TWILIO_AUTH_TOKEN:
        return True
    validator = RequestValidator(config.TWILIO_AUTH_TOKEN)
    return validator.validate(
        request.url,
        request.form.to_dict(),
        request.headers.get("X-Twilio-Signature", ""),
    )


@whatsapp_bp.route("/whatsapp", methods=["POST"])
def whatsapp_webhook():
    """Handle incoming WhatsApp messages from Twilio."""
    if not is_valid_twilio_request():
        logger.warning("Rejected WhatsApp webhook with invalid signature")
        abort(403)

    incoming_msg = request.values.get("Body", "").strip()
    user_number = request.values.get("From")  # e.g. whatsapp:+123456789

    resp = MessagingResponse()
    if not user_number:
        return str(resp), 200, {"Content-Type": "application/xml"}

    with store_lock:
        store = UserStore.load(config.USER_DATA_FILE)
        reply_text = process_message(store, user_number, incoming_msg)

    resp.message(reply_text)
    return str(resp), 200, {"Content-Type": "application/xml"}
