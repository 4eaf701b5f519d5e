# nupci/services/delivery_status.py
# =================================================================================
# 📬 Estados de entrega de Twilio (StatusCallback).
# ---------------------------------------------------------------------------------
# - Firma X-Twilio-Signature: HMAC-SHA1 (auth token) de la URL + pares clave/valor
#   ordenados por clave, en base64.
# - delivered / read / failed / undelivered → MESSAGE_DELIVERED / READ / FAILED;
#   el resto de estados (queued, sent...) se ignora.
# - El evento nuevo se enlaza al envío original por metadata.message_id (SID).
#   Nunca modifica el original: la bitácora es append-only.
# =================================================================================

import base64
import hashlib
import hmac
import re
from collections.abc import Mapping
from typing import Optional

from loguru import logger
from sqlalchemy.orm import Session

from nupci.crud import tracking_crud
from nupci.models import EventType, TrackingEvent

STATUS_EVENT_TYPES = {
    "delivered": EventType.MESSAGE_DELIVERED,
    "read": EventType.MESSAGE_READ,
    "failed": EventType.MESSAGE_FAILED,
    "undelivered": EventType.MESSAGE_FAILED,
}

SENT_EVENT_TYPES = (EventType.INVITATION_SENT, EventType.REMINDER_SENT)

_SID_RE = re.compile(r"^[A-Za-z0-9]{2,64}$")


def compute_twilio_signature(url: str, params: Mapping[str, str], auth_token: str) -> str:
    data = url + "".join(f"{key}{params[key]}" for key in sorted(params))
    digest = hmac.new(auth_token.encode("utf-8"), data.encode("utf-8"), hashlib.sha1).digest()
    return base64.b64encode(digest).decode("ascii")


def is_valid_twilio_signature(url: str, params: Mapping[str, str], signature: str, auth_token: str) -> bool:
    """Comparación en tiempo constante con la firma esperada."""
    expected = compute_twilio_signature(url, params, auth_token)
    return hmac.compare_digest(expected.encode("ascii"), signature.encode("utf-8"))


def map_twilio_status(status: Optional[str]) -> Optional[EventType]:
    return STATUS_EVENT_TYPES.get((status or "").strip().lower())


def record_status_callback(db: Session, params: Mapping[str, str]) -> Optional[TrackingEvent]:
    """Registra el estado recibido; None si se ignora, no hay envío original o ya estaba."""
    event_type = map_twilio_status(params.get("MessageStatus"))
    if event_type is None:
        logger.debug("Estado Twilio ignorado: {}", params.get("MessageStatus"))
        return None

    sid = (params.get("MessageSid") or "").strip()
    if not _SID_RE.match(sid):
        logger.warning("Callback de Twilio con MessageSid inválido: {!r}", sid)
        return None

    original = tracking_crud.find_by_message_id(db, sid, SENT_EVENT_TYPES)
    if original is None:
        logger.warning("Sin envío registrado para el SID {}", sid)
        return None

    if tracking_crud.find_by_message_id(db, sid, (event_type,), family_id=original.family_id) is not None:
        logger.info("Estado {} ya registrado para el SID {}", event_type.value, sid)
        return None

    event = tracking_crud.add_event(
        db,
        family_id=original.family_id,
        wedding_id=original.wedding_id,
        event_type=event_type,
        channel=original.channel,
        metadata={
            "message_id": sid,
            "original_event_id": original.id,
            "original_event_type": (original.event_metadata or {}).get("template_type") or "UNKNOWN",
            "error_code": params.get("ErrorCode"),
            "error_message": params.get("ErrorMessage"),
        },
        admin_triggered=False,
    )
    db.commit()
    logger.info("Estado {} registrado para familia {} (SID {})", event_type.value, original.family_id, sid)
    return event
