# tests/unit/test_messaging.py
# Envío de SMS/WhatsApp por la API REST de Twilio (requests simulado).

from dataclasses import replace

import pytest
import requests

from nupci import messaging
from nupci.messaging import MessageType, format_phone_number, is_valid_phone_number, send_message


class FakeResponse:
    def __init__(self, status_code, data=None):
        self.status_code = status_code
        self._data = data

    def json(self):
        if self._data is None:
            raise ValueError("no json")
        return self._data


@pytest.fixture
def live_settings(settings):
    return replace(
        settings,
        dry_run=False,
        twilio_account_sid="AC123",
        twilio_auth_token="secret",
        twilio_phone_number="+15005550006",
    )


@pytest.fixture
def post_calls(monkeypatch):
    """Cola de respuestas programadas para requests.post; registra cada llamada."""
    calls = []
    responses = []

    def fake_post(url, data=None, auth=None, timeout=None):
        calls.append({"url": url, "data": data, "auth": auth, "timeout": timeout})
        item = responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    monkeypatch.setattr(messaging.requests, "post", fake_post)
    monkeypatch.setattr(messaging.time, "sleep", lambda _s: None)
    return calls, responses


def test_phone_validation_and_formatting():
    assert is_valid_phone_number("+34600111222")
    assert is_valid_phone_number("whatsapp:+34600111222")
    assert not is_valid_phone_number("600111222")
    assert not is_valid_phone_number("+0123456789")
    assert not is_valid_phone_number(None)
    assert format_phone_number("34 600-111-222", MessageType.SMS) == "+34600111222"
    assert format_phone_number("+34 600 111 222", MessageType.WHATSAPP) == "whatsapp:+34600111222"


def test_invalid_phone_is_rejected_without_calling_twilio(live_settings, post_calls):
    calls, _ = post_calls
    result = send_message(live_settings, "12", "hola", MessageType.SMS)
    assert not result.success and result.error == "invalid_phone_number"
    assert calls == []


def test_dry_run_returns_synthetic_id(settings, post_calls):
    calls, _ = post_calls
    result = send_message(settings, "+34600111222", "hola", MessageType.SMS)
    assert result.success and result.message_id.startswith("dry-run-")
    assert calls == []


def test_missing_credentials(live_settings, post_calls):
    calls, _ = post_calls
    result = send_message(replace(live_settings, twilio_auth_token=""), "+34600111222", "hola", MessageType.SMS)
    assert result.error == "twilio_not_configured"
    assert calls == []


def test_whatsapp_payload_with_media(live_settings, post_calls):
    calls, responses = post_calls
    responses.append(FakeResponse(201, {"sid": "SM1"}))

    result = send_message(live_settings, "+34600111222", "hola", MessageType.WHATSAPP, "https://x/img.png")

    assert result.success and result.message_id == "SM1"
    call = calls[0]
    assert call["url"] == f"{messaging.TWILIO_API_BASE}/Accounts/AC123/Messages.json"
    assert call["auth"] == ("AC123", "secret")
    assert call["data"] == {
        "To": "whatsapp:+34600111222",
        "From": "whatsapp:+14155238886",
        "Body": "hola",
        "MediaUrl": "https://x/img.png",
    }


def test_sms_never_sends_media(live_settings, post_calls):
    calls, responses = post_calls
    responses.append(FakeResponse(201, {"sid": "SM2"}))

    send_message(live_settings, "+34600111222", "hola", MessageType.SMS, "https://x/img.png")

    assert calls[0]["data"] == {"To": "+34600111222", "From": "+15005550006", "Body": "hola"}


def test_status_callback_only_for_public_urls(live_settings, post_calls):
    calls, responses = post_calls
    responses.extend([FakeResponse(201, {"sid": "a"}), FakeResponse(201, {"sid": "b"})])

    send_message(replace(live_settings, twilio_status_callback=True), "+34600111222", "x", MessageType.SMS)
    send_message(
        replace(live_settings, twilio_status_callback=True, app_url="http://localhost:3000"),
        "+34600111222", "x", MessageType.SMS,
    )

    assert calls[0]["data"]["StatusCallback"] == "https://nupci.test/api/webhooks/twilio/status"
    assert "StatusCallback" not in calls[1]["data"]


def test_server_errors_are_retried(live_settings, post_calls):
    calls, responses = post_calls
    responses.extend([FakeResponse(503), requests.ConnectionError("boom"), FakeResponse(201, {"sid": "SM3"})])

    result = send_message(live_settings, "+34600111222", "hola", MessageType.SMS)

    assert result.success and result.message_id == "SM3"
    assert len(calls) == 3


def test_client_errors_are_not_retried(live_settings, post_calls):
    calls, responses = post_calls
    responses.append(FakeResponse(400, {"code": 21211, "message": "Invalid 'To' Phone Number"}))

    result = send_message(live_settings, "+34600111222", "hola", MessageType.SMS)

    assert not result.success
    assert result.error == "twilio_21211: Invalid 'To' Phone Number"
    assert len(calls) == 1


def test_retries_exhausted(live_settings, post_calls):
    calls, responses = post_calls
    responses.extend([FakeResponse(429), FakeResponse(500), FakeResponse(500)])

    result = send_message(live_settings, "+34600111222", "hola", MessageType.SMS)

    assert not result.success and result.error == "twilio_status_500"
    assert len(calls) == live_settings.send_retries


def test_accepted_response_without_json_is_still_a_send(live_settings, post_calls):
    calls, responses = post_calls
    responses.append(FakeResponse(201))

    result = send_message(live_settings, "+34600111222", "hola", MessageType.SMS)

    assert result.success and result.message_id is None
    assert len(calls) == 1


@pytest.mark.parametrize("number", ["", "whatsapp:", "  "])
def test_blank_whatsapp_sender_is_not_configured(live_settings, post_calls, number):
    calls, _ = post_calls
    result = send_message(
        replace(live_settings, twilio_whatsapp_number=number), "+34600111222", "hola", MessageType.WHATSAPP
    )
    assert not result.success and result.error == "twilio_not_configured"
    assert calls == []


def test_whatsapp_sender_without_prefix_gets_one(live_settings, post_calls):
    calls, responses = post_calls
    responses.append(FakeResponse(201, {"sid": "SM4"}))

    send_message(replace(live_settings, twilio_whatsapp_number="+15005550007"), "+34600111222", "x", MessageType.WHATSAPP)

    assert calls[0]["data"]["From"] == "whatsapp:+15005550007"
