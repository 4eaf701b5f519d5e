# nupci/routers/reminders.py
# =============================================================================
# 📣 Rutas de administración: recordatorios RSVP
# - POST /api/admin/reminders            → lanza un lote (envío real)
# - GET  /api/admin/reminders/preview    → familias que recibirían el lote
# - POST /api/admin/reminders/validate   → qué familias tienen contacto para el canal
# - POST /api/admin/reminders/confirmation/{family_id} → reenvía la confirmación
# Protegido con `require_wedding_admin` (JWT de rol wedding_admin).
# =============================================================================

from fastapi import APIRouter, Depends                                      # Router y dependencias.
from loguru import logger                                                   # Trazas.
from sqlalchemy.orm import Session                                          # Sesión de BD.

import nupci.schemas as schemas                                             # Esquemas de entrada/salida.
from nupci.config import Settings, get_settings                             # Configuración explícita.
from nupci.core.security import AdminContext, require_wedding_admin         # Sesión de admin.
from nupci.crud import families_crud                                        # Lecturas de familias.
from nupci.db import get_db                                                 # Sesión por request.
from nupci.errors import NotFoundError, NupciError, UnexpectedError         # Errores de dominio.
from nupci.services.dispatcher import (                                     # Orquestador y helpers.
    ReminderDispatcher,
    ReminderRequest,
    missing_contact_field,
    resolve_effective_channel,
)
from nupci.services.eligibility import select_eligible_families             # Filtro + cutoff.
from nupci.utils.alerts import alert_admin                                  # Aviso de fallos.

router = APIRouter(prefix="/api/admin/reminders", tags=["reminders"])


def get_dispatcher(settings: Settings = Depends(get_settings)) -> ReminderDispatcher:
    """Dependencia: dispatcher construido con la configuración del proceso."""
    return ReminderDispatcher(settings)


def _require_wedding(db: Session, wedding_id: str):
    wedding = families_crud.get_wedding(db, wedding_id)
    if wedding is None:
        raise NotFoundError("Wedding not found")
    return wedding


# --------------------------------- Endpoints -----------------------------------

@router.post("", response_model=schemas.ApiResponse[schemas.ReminderResultData])
def send_reminders(
    payload: schemas.SendRemindersRequest,
    admin: AdminContext = Depends(require_wedding_admin),
    db: Session = Depends(get_db),
    dispatcher: ReminderDispatcher = Depends(get_dispatcher),
    settings: Settings = Depends(get_settings),
):
    """
    Envía recordatorios (o invitaciones de primer contacto) a las familias elegibles.
    - Nunca aborta el lote por una familia: los fallos se cuentan en failed_count.
    - Cutoff superado → 400 RSVP_CUTOFF_PASSED sin ningún envío.
    """
    request = ReminderRequest(
        channel=payload.channel,
        message_template=payload.message_template,
        family_ids=payload.family_ids,
    )
    try:
        batch = dispatcher.run(db, admin.wedding_id, request, admin_id=admin.id)
    except NupciError:
        raise
    except Exception as e:
        logger.exception("Error inesperado enviando recordatorios (wedding={}): {}", admin.wedding_id, e)
        raise UnexpectedError("Failed to send reminders") from e

    if batch.failed_count:
        failed = [r for r in batch.results if not r.success]
        alert_admin(
            settings,
            "Recordatorios con fallos",
            f"Boda {admin.wedding_id}: {batch.failed_count}/{len(batch.recipient_families)} fallidos.\n"
            + "\n".join(f"- {r.family_id}: {r.error}" for r in failed[:20]),
        )
    return {"success": True, "data": batch.to_dict()}


@router.get("/preview", response_model=schemas.ApiResponse[schemas.ReminderPreviewData])
def preview_reminders(
    admin: AdminContext = Depends(require_wedding_admin),
    db: Session = Depends(get_db),
):
    """Familias que recibirían un lote sin filtro explícito (sin enviar nada)."""
    wedding = _require_wedding(db, admin.wedding_id)
    families = select_eligible_families(db, wedding)
    return {
        "success": True,
        "data": {
            "eligible_families": len(families),
            "families": [schemas.PreviewFamily.model_validate(f) for f in families],
        },
    }


@router.post("/validate", response_model=schemas.ApiResponse[schemas.ValidateRemindersData])
def validate_reminders(
    payload: schemas.ValidateRemindersRequest,
    admin: AdminContext = Depends(require_wedding_admin),
    db: Session = Depends(get_db),
):
    """Comprueba, sin enviar, si cada familia tiene el contacto que exige su canal efectivo."""
    families = families_crud.get_families_by_ids(db, admin.wedding_id, payload.family_ids)
    valid, invalid = [], []
    for family in families:
        channel = resolve_effective_channel(payload.channel, family)
        missing = missing_contact_field(family, channel)
        if missing:
            invalid.append({"id": family.id, "name": family.name, "missing_info": missing, "expected_channel": channel})
        else:
            valid.append({"id": family.id, "name": family.name, "channel": channel})
    return {
        "success": True,
        "data": {
            "valid_families": valid,
            "invalid_families": invalid,
            "summary": {"total": len(families), "valid": len(valid), "invalid": len(invalid)},
        },
    }


@router.post("/confirmation/{family_id}", response_model=schemas.ApiResponse[schemas.ConfirmationResultData])
def resend_confirmation(
    family_id: str,
    admin: AdminContext = Depends(require_wedding_admin),
    db: Session = Depends(get_db),
    dispatcher: ReminderDispatcher = Depends(get_dispatcher),
):
    """Reenvía a una familia el mensaje de confirmación de su RSVP."""
    wedding = _require_wedding(db, admin.wedding_id)
    family = families_crud.get_family(db, wedding.id, family_id)
    if family is None:
        raise NotFoundError("Family not found")
    outcome = dispatcher.invitation_sender.send_confirmation(db, wedding, family)
    return {
        "success": True,
        "data": {
            "family_id": family.id,
            "success": outcome.success,
            "channel": outcome.channel,
            "message_id": outcome.message_id,
            "error": outcome.error,
        },
    }
