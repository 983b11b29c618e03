import json
from unittest.mock import patch

import pytest

import config
from main import create_app


@pytest.fixture
def client(data_file, monkeypatch):
    monkeypatch.setattr(config, "TWILIO_AUTH_TOKEN", "")
    app = create_app()
    app.testing = True
    return app.test_client()


def test_add_replies_with_twiml(client, data_file):
    resp = client.post("/whatsapp", data={"Body": " /add eth 2 ", "From": "whatsapp:+15550001"})

    assert resp.status_code == 200
    assert resp.content_type.startswith("application/xml")
    assert "Added ETH amount: 2</Message>" in resp.get_data(as_text=True)
    saved = json.loads(data_file.read_text())
    assert saved["whatsapp:+15550001"]["assets"] == {"eth": 2.0}


def test_missing_sender_gets_empty_response(client, data_file):
    resp = client.post("/whatsapp", data={"Body": "/add eth 2"})

    assert resp.status_code == 200
    assert "<Message>" not in resp.get_data(as_text=True)
    assert not data_file.exists()


@patch("whatsapp_bot.RequestValidator")
def test_invalid_signature_rejected(mock_validator, client, monkeypatch):
    monkeypatch.setattr(config, "TWILIO_AUTH_TOKEN", "twilio-token")
    mock_validator.return_value.validate.return_value = False

    resp = client.post("/whatsapp", data={"Body": "/status", "From": "whatsapp:+1"})

    assert resp.status_code == 403
    mock_validator.assert_called_once_with("twilio-token")


@patch("whatsapp_bot.RequestValidator")
def test_valid_signature_accepted(mock_validator, client, monkeypatch):
    monkeypatch.setattr(config, "TWILIO_AUTH_TOKEN", "twilio-token")
    mock_validator.return_value.validate.return_value = True

    resp = client.post(
        "/whatsapp",
        data={"Body": "hello", "From": "whatsapp:+1"},
        headers={"X-Twilio-Signature": "sig"},
    )

    assert resp.status_code == 200
    assert "/setgoal" in resp.get_data(as_text=True)
    assert mock_validator.return_value.validate.call_args.args[2] == "sig"


@patch("whatsapp_bot.RequestValidator")
def test_signature_checked_against_forwarded_https_url(mock_validator, client, monkeypatch):
    monkeypatch.setattr(config, "TWILIO_AUTH_TOKEN", "twilio-token")
    mock_validator.return_value.validate.return_value = True

    client.post(
        "/whatsapp",
        data={"Body": "/status", "From": "whatsapp:+1"},
        headers={"X-Forwarded-Proto": "https", "X-Forwarded-Host": "abc.ngrok.io"},
    )

    assert mock_validator.return_value.validate.call_args.args[0] == "https://abc.ngrok.io/whatsapp"
