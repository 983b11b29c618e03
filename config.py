# config.py
# -----------------------------
# Reads bot settings from the environment (or a local .env file).
# Every other module imports its settings from here.

import os
from dotenv import load_dotenv

load_dotenv()

# ---------------- LINE ----------------
LINE_CHANNEL_ACCESS_TOKEN = os.getenv("LINE_CHANNEL_ACCESS_TOKEN", "")
LINE_CHANNEL_SECRET = os.getenv("LINE_CHANNEL_SECRET", "")
REPLY_TIMEOUT = float(os.getenv("REPLY_TIMEOUT", "10"))

# ---------------- OTHER CHANNELS ----------------
TELEGRAM_TOKEN = os.getenv("TELEGRAM_TOKEN", "")
TWILIO_AUTH_TOKEN = os.getenv("TWILIO_AUTH_TOKEN", "")

# ---------------- PRICES ----------------
COINGECKO_BASE_URL = os.getenv("COINGECKO_BASE_URL", "https://api.coingecko.com/api/v3")
COINGECKO_API_KEY = os.getenv("COINGECKO_API_KEY", "")
PRICE_TIMEOUT = float(os.getenv("PRICE_TIMEOUT", "10"))

# Fixed USD -> TWD multiplier used for goal progress
TWD_PER_USD = float(os.getenv("TWD_PER_USD", "32"))

# ---------------- STORAGE ----------------
USER_DATA_FILE = os.getenv("USER_DATA_FILE", "userData.json")

# ---------------- SERVER ----------------
PORT = int(os.getenv("PORT", "3000"))
USE_NGROK = os.getenv("USE_NGROK", "false").lower() in ("1", "true", "yes")
NGROK_AUTHTOKEN = os.getenv("NGROK_AUTHTOKEN", "")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
