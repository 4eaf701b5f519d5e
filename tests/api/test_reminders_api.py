# tests/api/test_reminders_api.py
# Endpoints /api/admin/reminders: auth, validación, cutoff, envío, preview y validate.

from datetime import datetime

from nupci.auth import ROLE_PLANNER, ROLE_WEDDING_ADMIN
from nupci.models import Channel, EventType, TrackingEvent

URL = "/api/admin/reminders"


def _bearer(token):
    return {"Authorization": f"Bearer {token}"}


# --------------------------------------------------------------------------
# Autenticación / autorización
# --------------------------------------------------------------------------
def test_requires_token(client):
    res = client.post(URL, json={"channel": "EMAIL"})
    assert res.status_code == 401
    assert res.json() == {"success": False, "error": {"code": "UNAUTHORIZED", "message": "Authentication required"}}


def test_rejects_invalid_token(client):
    res = client.post(URL, json={"channel": "EMAIL"}, headers=_bearer("not-a-jwt"))
    assert res.status_code == 401


def test_rejects_other_roles(client, make_token, wedding):
    res = client.post(URL, json={"channel": "EMAIL"}, headers=_bearer(make_token(wedding.id, role=ROLE_PLANNER)))
    assert res.status_code == 403
    assert res.json()["error"]["code"] == "FORBIDDEN"


def test_requires_wedding_in_session(client, make_token):
    res = client.post(URL, json={"channel": "EMAIL"}, headers=_bearer(make_token(None, role=ROLE_WEDDING_ADMIN)))
    assert res.status_code == 403
    assert res.json()["error"]["message"] == "Wedding ID not found in session"


# --------------------------------------------------------------------------
# POST /api/admin/reminders
# --------------------------------------------------------------------------
def test_invalid_channel_is_validation_error(client, auth_headers):
    res = client.post(URL, json={"channel": "PIGEON"}, headers=auth_headers)
    assert res.status_code == 400
    body = res.json()
    assert body["success"] is False
    assert body["error"]["code"] == "VALIDATION_ERROR"
    assert body["error"]["details"][0]["field"] == "channel"


def test_blank_family_id_is_validation_error(client, auth_headers):
    res = client.post(URL, json={"channel": "EMAIL", "family_ids": [" "]}, headers=auth_headers)
    assert res.status_code == 400


def test_cutoff_passed_sends_nothing(client, db, factory, make_token, transports):
    closed = factory.wedding(rsvp_cutoff_date=datetime(2020, 1, 1))
    factory.family(closed, "A", email="a@example.com")

    res = client.post(URL, json={"channel": "EMAIL"}, headers=_bearer(make_token(closed.id)))

    assert res.status_code == 400
    assert res.json()["error"] == {
        "code": "RSVP_CUTOFF_PASSED",
        "message": "RSVP cutoff date has passed. Cannot send reminders.",
    }
    assert transports.sent == []
    assert db.query(TrackingEvent).count() == 0


def test_unknown_wedding_is_not_found(client, make_token):
    res = client.post(URL, json={"channel": "EMAIL"}, headers=_bearer(make_token("ghost-wedding")))
    assert res.status_code == 404


def test_sends_batch(client, db, factory, wedding, auth_headers, transports):
    invited = factory.family(wedding, "Invitada", email="i@example.com")
    factory.event(invited)
    factory.family(wedding, "Responde", email="r@example.com", attending=(True,))
    no_email = factory.family(wedding, "Sin email")

    res = client.post(URL, json={"channel": "EMAIL", "message_template": "  "}, headers=auth_headers)

    assert res.status_code == 200
    assert res.json() == {
        "success": True,
        "data": {"sent_count": 1, "failed_count": 1, "recipient_families": [invited.id, no_email.id]},
    }
    assert [m.to for m in transports.sent] == ["i@example.com"]
    event = db.query(TrackingEvent).filter(TrackingEvent.event_type == EventType.REMINDER_SENT).one()
    assert event.event_metadata["admin_id"] == "admin-1"


def test_explicit_family_filter(client, factory, wedding, auth_headers, transports):
    factory.family(wedding, "A", email="a@example.com")
    c = factory.family(wedding, "C", email="c@example.com", attending=(False,))

    res = client.post(URL, json={"channel": "EMAIL", "family_ids": [c.id, "unknown"]}, headers=auth_headers)

    assert res.json()["data"] == {"sent_count": 1, "failed_count": 0, "recipient_families": [c.id]}
    assert [m.to for m in transports.sent] == ["c@example.com"]


# --------------------------------------------------------------------------
# Preview / validate
# --------------------------------------------------------------------------
def test_preview_lists_families_without_rsvp(client, factory, wedding, auth_headers, transports):
    pending = factory.family(wedding, "Pendiente", channel_preference=Channel.SMS)
    factory.family(wedding, "Responde", attending=(True,))

    res = client.get(f"{URL}/preview", headers=auth_headers)

    assert res.status_code == 200
    data = res.json()["data"]
    assert data["eligible_families"] == 1
    assert data["families"] == [
        {"id": pending.id, "name": "Pendiente", "preferred_language": None, "channel_preference": "SMS"}
    ]
    assert transports.sent == []


def test_validate_contacts(client, factory, wedding, auth_headers):
    ok = factory.family(wedding, "Con WA", whatsapp_number="+393331234567", channel_preference=Channel.WHATSAPP)
    bad = factory.family(wedding, "Sin tel", email="x@example.com", channel_preference=Channel.SMS)
    default = factory.family(wedding, "Por defecto")

    res = client.post(
        f"{URL}/validate",
        json={"channel": "PREFERRED", "family_ids": [ok.id, bad.id, default.id]},
        headers=auth_headers,
    )

    data = res.json()["data"]
    assert data["valid_families"] == [{"id": ok.id, "name": "Con WA", "channel": "WHATSAPP"}]
    assert data["invalid_families"] == [
        {"id": bad.id, "name": "Sin tel", "missing_info": "phone", "expected_channel": "SMS"},
        {"id": default.id, "name": "Por defecto", "missing_info": "email", "expected_channel": "EMAIL"},
    ]
    assert data["summary"] == {"total": 3, "valid": 1, "invalid": 2}


def test_validate_requires_ids(client, auth_headers):
    res = client.post(f"{URL}/validate", json={"channel": "EMAIL", "family_ids": []}, headers=auth_headers)
    assert res.status_code == 400


# --------------------------------------------------------------------------
# Confirmación
# --------------------------------------------------------------------------
def test_resend_confirmation_falls_back_to_email(client, factory, wedding, auth_headers, transports):
    family = factory.family(
        wedding, "García", email="g@example.com", channel_preference=Channel.SMS, attending=(True,)
    )

    res = client.post(f"{URL}/confirmation/{family.id}", headers=auth_headers)

    data = res.json()["data"]
    assert data["success"] is True and data["channel"] == "EMAIL"
    assert transports.sent[0].subject == "¡Gracias por confirmar tu asistencia!"


def test_resend_confirmation_unknown_family(client, auth_headers):
    res = client.post(f"{URL}/confirmation/nope", headers=auth_headers)
    assert res.status_code == 404
