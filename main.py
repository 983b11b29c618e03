# ---------------- WEBHOOK SERVER (Flask + optional Ngrok) ----------------
import logging

from flask import Flask
from werkzeug.middleware.proxy_fix import ProxyFix

import config
from line_bot import line_bp
from whatsapp_bot import whatsapp_bp


def create_app():
    """Build the Flask app serving the LINE and WhatsApp webhooks."""
    app = Flask(__name__)
    # ngrok / TLS proxies forward https; Twilio signs the public URL
    app.wsgi_app = ProxyFix(app.wsgi_app, x_proto=1, x_host=1)
    app.register_blueprint(line_bp)
    app.register_blueprint(whatsapp_bp)
    return app


def start_ngrok(port):
    """Open a public tunnel so the chat platforms can reach a local server."""
    from pyngrok import ngrok

    if config.NGROK_AUTHTOKEN:
        ngrok.set_auth_token(config.NGROK_AUTHTOKEN)
    public_url = ngrok.connect(port).public_url
    print(f"🌍 Public URL: {public_url}")
    print(f"🔗 LINE webhook URL: {public_url}/webhook")
    print(f"🔗 WhatsApp webhook URL (use in Twilio): {public_url}/whatsapp")
    return public_url


def main():
    logging.basicConfig(level=config.LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    app = create_app()
    if config.USE_NGROK:
        start_ngrok(config.PORT)
    print(f"✅ Bot is running on port {config.PORT}")
    app.run(host="0.0.0.0", port=config.PORT)


if __name__ == "__main__":
    main()
