# nupci/services/invitations.py                                                  # Ruta del módulo.

# =================================================================================
# 💌 ENVÍO DE INVITACIÓN (PRIMER CONTACTO) Y CONFIRMACIÓN DE RSVP
# ---------------------------------------------------------------------------------
# El dispatcher delega aquí cuando una familia no tiene INVITATION_SENT.
# La invitación usa su propia plantilla (tipo INVITATION) y devuelve el
# mensaje renderizado para que el dispatcher lo registre.
# La confirmación (tipo CONFIRMATION) se manda por el canal preferido de la
# familia y cae a EMAIL si falta el contacto de ese canal.
# =================================================================================

from dataclasses import dataclass                                                    # Resultado de envío.
from typing import Optional                                                          # Tipado.

from loguru import logger                                                            # Trazas.
from sqlalchemy.orm import Session                                                   # Sesión de BD.

from nupci.config import Settings                                                    # app_url para enlaces.
from nupci.errors import TransportError                                              # Fallo de transporte.
from nupci.models import Channel, Family, TemplateType, Wedding                      # Modelos y enums.
from nupci.services.transports import Transports, contact_for, deliver               # Capa de transporte.
from nupci.templates.compose import RenderedMessage, compose_message                 # Resolución + render.


@dataclass(frozen=True)
class DeliveryOutcome:
    success: bool
    channel: Channel
    message: Optional[RenderedMessage] = None
    message_id: Optional[str] = None
    error: Optional[str] = None


class InvitationSender:
    """Colaborador de primer contacto: plantilla INVITATION + transporte del canal efectivo."""

    def __init__(self, settings: Settings, transports: Transports):
        self.settings = settings
        self.transports = transports

    def send(self, db: Session, wedding: Wedding, family: Family, channel: Channel) -> DeliveryOutcome:
        """Renderiza y envía la invitación; TransportError si el proveedor falla."""
        message = compose_message(db, self.settings, wedding, family, TemplateType.INVITATION, channel)
        result = deliver(self.transports, family, channel, message)
        logger.info("Invitación enviada a familia {} por {} ({})", family.id, channel.value, message.template_source)
        return DeliveryOutcome(success=True, channel=channel, message=message, message_id=result.message_id)

    def send_confirmation(self, db: Session, wedding: Wedding, family: Family) -> DeliveryOutcome:
        """Confirmación de RSVP por el canal preferido (fallback a EMAIL si falta el contacto)."""
        channel = family.channel_preference or Channel.EMAIL
        if channel is not Channel.EMAIL and contact_for(family, channel) is None:
            logger.warning("Familia {} sin contacto para {}; confirmación por EMAIL", family.id, channel.value)
            channel = Channel.EMAIL
        if contact_for(family, channel) is None:
            return DeliveryOutcome(success=False, channel=channel, error="missing_contact:email")

        message = compose_message(db, self.settings, wedding, family, TemplateType.CONFIRMATION, channel)
        try:
            result = deliver(self.transports, family, channel, message)
        except TransportError as e:
            return DeliveryOutcome(success=False, channel=channel, message=message, error=e.error)
        logger.info("Confirmación enviada a familia {} por {}", family.id, channel.value)
        return DeliveryOutcome(success=True, channel=channel, message=message, message_id=result.message_id)
