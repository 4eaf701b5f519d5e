# nupci/routers/webhooks.py
# =============================================================================
# 🔔 Webhooks públicos de proveedores
# - POST /api/webhooks/twilio/status → estados de entrega de SMS/WhatsApp
# Sin JWT: se autentica con la cabecera X-Twilio-Signature.
# Una vez validada la firma siempre responde 200 para que Twilio no reintente.
# =============================================================================

from fastapi import APIRouter, Depends, Request                             # Router y request crudo.
from loguru import logger                                                   # Trazas.
from sqlalchemy.orm import Session                                          # Sesión de BD.

from nupci.config import Settings, get_settings                             # Auth token de Twilio.
from nupci.db import get_db                                                 # Sesión por request.
from nupci.errors import ForbiddenError, UnexpectedError, ValidationError   # Sobre de error.
from nupci.messaging import TWILIO_STATUS_PATH, twilio_status_url           # URL firmada por Twilio.
from nupci.services.delivery_status import (                                # Firma + registro.
    is_valid_twilio_signature,
    map_twilio_status,
    record_status_callback,
)

router = APIRouter(tags=["webhooks"])


@router.post(TWILIO_STATUS_PATH)
async def twilio_status(
    request: Request,
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings),
):
    form = await request.form()
    params = {key: str(value) for key, value in form.items()}

    signature = request.headers.get("X-Twilio-Signature")
    if not signature:
        raise ValidationError("Missing X-Twilio-Signature header")
    if not settings.twilio_auth_token:
        raise UnexpectedError("Twilio auth token is not configured")
    if not is_valid_twilio_signature(twilio_status_url(settings), params, signature, settings.twilio_auth_token):
        logger.warning("Firma de Twilio inválida para SID {}", params.get("MessageSid"))
        raise ForbiddenError("Invalid Twilio signature")

    if map_twilio_status(params.get("MessageStatus")) is None:              # queued, sent...
        return {"success": True}
    if not params.get("MessageSid"):
        raise ValidationError("Missing MessageSid")

    try:
        record_status_callback(db, params)
    except Exception:
        db.rollback()
        logger.exception("Error registrando el estado de Twilio {}", params.get("MessageSid"))
    return {"success": True}
