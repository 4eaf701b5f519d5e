# tests/api/test_twilio_webhook_api.py
# Webhook /api/webhooks/twilio/status: firma, mapeo de estados y eventos enlazados.

from dataclasses import replace

import pytest

from nupci.config import get_settings
from nupci.crud import tracking_crud
from nupci.models import Channel, EventType, TrackingEvent
from nupci.services.delivery_status import compute_twilio_signature

URL = "/api/webhooks/twilio/status"
SIGNED_URL = "https://nupci.test/api/webhooks/twilio/status"
TOKEN = "twilio-secret"
SID = "SM0123456789abcdef0123456789abcdef"


@pytest.fixture
def twilio_app(app, settings):
    app.dependency_overrides[get_settings] = lambda: replace(settings, twilio_auth_token=TOKEN)
    return app


@pytest.fixture
def sent_reminder(db, factory, wedding):
    family = factory.family(wedding, "García", phone="+34600111222")
    event = tracking_crud.add_event(
        db,
        family_id=family.id,
        wedding_id=wedding.id,
        event_type=EventType.REMINDER_SENT,
        channel=Channel.SMS,
        metadata={"template_type": "REMINDER", "channel": "SMS", "message_id": SID},
        admin_triggered=True,
    )
    db.commit()
    return event


def _post(client, params, token=TOKEN, signature=None):
    headers = {"X-Twilio-Signature": signature or compute_twilio_signature(SIGNED_URL, params, token)}
    return client.post(URL, data=params, headers=headers)


def _status_events(db):
    return (
        db.query(TrackingEvent)
        .filter(TrackingEvent.event_type.in_([EventType.MESSAGE_DELIVERED, EventType.MESSAGE_FAILED]))
        .all()
    )


def test_delivered_status_is_linked_to_original_send(twilio_app, client, db, sent_reminder):
    res = _post(client, {"MessageSid": SID, "MessageStatus": "delivered"})

    assert res.status_code == 200
    assert res.json() == {"success": True}
    [event] = _status_events(db)
    assert event.event_type is EventType.MESSAGE_DELIVERED
    assert event.family_id == sent_reminder.family_id
    assert event.wedding_id == sent_reminder.wedding_id
    assert event.channel is Channel.SMS
    assert event.admin_triggered is False
    assert event.event_metadata == {
        "message_id": SID,
        "original_event_id": sent_reminder.id,
        "original_event_type": "REMINDER",
        "error_code": None,
        "error_message": None,
    }


def test_repeated_callback_is_recorded_once(twilio_app, client, db, sent_reminder):
    params = {"MessageSid": SID, "MessageStatus": "undelivered", "ErrorCode": "30003", "ErrorMessage": "Unreachable"}

    assert _post(client, params).status_code == 200
    assert _post(client, params).status_code == 200

    [event] = _status_events(db)
    assert event.event_type is EventType.MESSAGE_FAILED
    assert event.event_metadata["error_code"] == "30003"
    assert event.event_metadata["error_message"] == "Unreachable"


def test_intermediate_status_is_ignored(twilio_app, client, db, sent_reminder):
    res = _post(client, {"MessageSid": SID, "MessageStatus": "queued"})
    assert res.status_code == 200
    assert _status_events(db) == []


def test_unknown_sid_is_acknowledged_without_event(twilio_app, client, db, sent_reminder):
    res = _post(client, {"MessageSid": "SMffffffffffffffffffffffffffffffff", "MessageStatus": "delivered"})
    assert res.status_code == 200
    assert _status_events(db) == []


def test_missing_signature(twilio_app, client, sent_reminder):
    res = client.post(URL, data={"MessageSid": SID, "MessageStatus": "delivered"})
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "VALIDATION_ERROR"


def test_invalid_signature(twilio_app, client, db, sent_reminder):
    res = _post(client, {"MessageSid": SID, "MessageStatus": "delivered"}, token="other-token")
    assert res.status_code == 403
    assert res.json()["error"]["code"] == "FORBIDDEN"
    assert _status_events(db) == []


def test_missing_message_sid(twilio_app, client):
    res = _post(client, {"MessageStatus": "delivered"})
    assert res.status_code == 400


def test_auth_token_not_configured(client, sent_reminder):
    res = _post(client, {"MessageSid": SID, "MessageStatus": "delivered"})
    assert res.status_code == 500
    assert res.json()["error"]["code"] == "INTERNAL_ERROR"
