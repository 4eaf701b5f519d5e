# nupci/services/recorder.py
# =================================================================================
# 🧾 Registro de entregas en la bitácora (tracking_events).
# ---------------------------------------------------------------------------------
# Un evento por envío correcto, con commit inmediato: si el lote se corta a
# mitad, lo ya enviado queda registrado y la siguiente ejecución no repite
# invitaciones. El índice único parcial sobre INVITATION_SENT convierte una
# carrera entre dos lotes concurrentes en un no-op detectado.
# =================================================================================

from typing import Optional

from loguru import logger
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from nupci.crud import tracking_crud
from nupci.models import Channel, EventType, Family, TrackingEvent
from nupci.templates.compose import RenderedMessage


class DeliveryRecorder:
    def record(
        self,
        db: Session,
        *,
        family: Family,
        event_type: EventType,
        channel: Channel,
        message: RenderedMessage,
        admin_id: Optional[str],
        message_id: Optional[str] = None,
    ) -> Optional[TrackingEvent]:
        """Añade y confirma el evento; None si otra ejecución ya registró la invitación."""
        metadata = message.snapshot()
        metadata.update(
            {
                "channel": channel.value,
                "admin_id": admin_id,
                "message_id": message_id,
            }
        )
        event = tracking_crud.add_event(
            db,
            family_id=family.id,
            wedding_id=family.wedding_id,
            event_type=event_type,
            channel=channel,
            metadata=metadata,
            admin_triggered=True,
        )
        try:
            db.commit()
        except IntegrityError:
            db.rollback()
            if event_type is not EventType.INVITATION_SENT:
                raise
            logger.warning("Invitación ya registrada para familia {} por otra ejecución", family.id)
            return None
        logger.debug("Evento {} registrado para familia {} ({})", event_type.value, family.id, channel.value)
        return event
