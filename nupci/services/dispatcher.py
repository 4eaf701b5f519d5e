# nupci/services/dispatcher.py                                                     # Ruta del módulo.

# =================================================================================
# 📣 DISPATCHER DE RECORDATORIOS (ORQUESTADOR DEL LOTE)
# ---------------------------------------------------------------------------------
# Para cada familia elegible, en orden de listado:
#   1. Canal efectivo (PREFERRED → preferencia de la familia o EMAIL).
#   2. ¿Tiene el contacto que exige el canal? Si no → fallo de esa familia.
#   3. Plan: FirstContact (sin INVITATION_SENT) o FollowUp (REMINDER renderizado).
#   4. Envío por el transporte; TransportError → fallo de esa familia.
#   5. Registro del evento (INVITATION_SENT / REMINDER_SENT).
# El fallo de una familia nunca aborta el lote. Los errores de BD sí se
# propagan (la API responde 500 y lo ya registrado se conserva).
# =================================================================================

from dataclasses import dataclass, field                                             # Tipos de resultado.
from datetime import datetime                                                        # Hora de referencia del lote.
from typing import Optional, Sequence, Union                                         # Tipado.

from loguru import logger                                                            # Trazas.
from sqlalchemy.orm import Session                                                   # Sesión de BD.

from nupci.config import Settings                                                    # Configuración explícita.
from nupci.crud import families_crud, tracking_crud                                  # Lecturas de BD.
from nupci.errors import NotFoundError, TransportError                               # Errores de dominio.
from nupci.models import Channel, EventType, Family, RequestChannel, TemplateType, Wedding
from nupci.services.eligibility import select_eligible_families                      # Filtro + cutoff.
from nupci.services.invitations import InvitationSender                              # Primer contacto.
from nupci.services.recorder import DeliveryRecorder                                 # Bitácora.
from nupci.services.transports import CONTACT_FIELD, Transports, contact_for, deliver
from nupci.templates.compose import RenderedMessage, compose_message                 # Resolución + render.

PATH_INVITATION = "invitation"
PATH_REMINDER = "reminder"


# =================================================================================
# 🧱 Tipos
# =================================================================================
@dataclass(frozen=True)
class ReminderRequest:
    channel: RequestChannel
    message_template: Optional[str] = None                                           # Sustituye el cuerpo del REMINDER.
    family_ids: Optional[Sequence[str]] = None


@dataclass(frozen=True)
class FirstContact:
    family: Family
    channel: Channel


@dataclass(frozen=True)
class FollowUp:
    family: Family
    channel: Channel
    message: RenderedMessage


DispatchPlan = Union[FirstContact, FollowUp]


@dataclass(frozen=True)
class FamilyDispatchResult:
    family_id: str
    success: bool
    channel: Optional[Channel] = None
    path: Optional[str] = None
    message_id: Optional[str] = None
    error: Optional[str] = None


@dataclass
class ReminderBatchResult:
    recipient_families: list[str] = field(default_factory=list)                      # Todas las familias intentadas.
    results: list[FamilyDispatchResult] = field(default_factory=list)

    @property
    def sent_count(self) -> int:
        return sum(1 for r in self.results if r.success)

    @property
    def failed_count(self) -> int:
        return sum(1 for r in self.results if not r.success)

    def add(self, result: FamilyDispatchResult) -> None:
        self.recipient_families.append(result.family_id)
        self.results.append(result)

    def to_dict(self) -> dict:
        return {
            "sent_count": self.sent_count,
            "failed_count": self.failed_count,
            "recipient_families": list(self.recipient_families),
        }


# =================================================================================
# 🔀 Helpers puros
# =================================================================================
def resolve_effective_channel(requested: RequestChannel, family: Family) -> Channel:
    """PREFERRED → preferencia de la familia (EMAIL si no tiene); el resto tal cual."""
    if requested is RequestChannel.PREFERRED:
        return family.channel_preference or Channel.EMAIL
    return Channel(requested.value)


def missing_contact_field(family: Family, channel: Channel) -> Optional[str]:
    """Nombre del campo de contacto que falta para el canal, o None si está."""
    return None if contact_for(family, channel) else CONTACT_FIELD[channel]


# =================================================================================
# 🚀 Dispatcher
# =================================================================================
class ReminderDispatcher:
    def __init__(
        self,
        settings: Settings,
        transports: Optional[Transports] = None,
        invitation_sender: Optional[InvitationSender] = None,
        recorder: Optional[DeliveryRecorder] = None,
    ):
        self.settings = settings
        self.transports = transports or Transports(settings)
        self.invitation_sender = invitation_sender or InvitationSender(settings, self.transports)
        self.recorder = recorder or DeliveryRecorder()

    def plan(
        self,
        db: Session,
        wedding: Wedding,
        family: Family,
        channel: Channel,
        message_template: Optional[str] = None,
    ) -> DispatchPlan:
        """Decide una sola vez si la familia recibe invitación o recordatorio."""
        if not tracking_crud.has_invitation(db, family.id):
            return FirstContact(family=family, channel=channel)
        message = compose_message(
            db, self.settings, wedding, family, TemplateType.REMINDER, channel, body_override=message_template
        )
        return FollowUp(family=family, channel=channel, message=message)

    def dispatch_family(
        self,
        db: Session,
        wedding: Wedding,
        family: Family,
        request: ReminderRequest,
        admin_id: Optional[str],
    ) -> FamilyDispatchResult:
        """Procesa una familia de principio a fin; nunca lanza por fallos de transporte."""
        channel = resolve_effective_channel(request.channel, family)

        missing = missing_contact_field(family, channel)
        if missing:
            logger.warning("Familia {} sin {} para {}; se marca como fallida", family.id, missing, channel.value)
            return FamilyDispatchResult(family.id, False, channel, error=f"missing_contact:{missing}")

        plan = self.plan(db, wedding, family, channel, request.message_template)
        try:
            if isinstance(plan, FirstContact):
                outcome = self.invitation_sender.send(db, wedding, family, channel)
                event_type, path, message, message_id = (
                    EventType.INVITATION_SENT, PATH_INVITATION, outcome.message, outcome.message_id
                )
            else:
                result = deliver(self.transports, family, channel, plan.message)
                event_type, path, message, message_id = (
                    EventType.REMINDER_SENT, PATH_REMINDER, plan.message, result.message_id
                )
        except TransportError as e:
            logger.warning("Envío fallido a familia {} por {}: {}", family.id, channel.value, e.error)
            path = PATH_INVITATION if isinstance(plan, FirstContact) else PATH_REMINDER
            return FamilyDispatchResult(family.id, False, channel, path=path, error=e.error)

        self.recorder.record(
            db,
            family=family,
            event_type=event_type,
            channel=channel,
            message=message,
            admin_id=admin_id,
            message_id=message_id,
        )
        logger.info("Familia {} → {} por {} (id={})", family.id, path, channel.value, message_id)
        return FamilyDispatchResult(family.id, True, channel, path=path, message_id=message_id)

    def run(
        self,
        db: Session,
        wedding_id: str,
        request: ReminderRequest,
        admin_id: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> ReminderBatchResult:
        """Ejecuta un lote completo: elegibilidad → envío por familia → totales."""
        wedding = families_crud.get_wedding(db, wedding_id)
        if wedding is None:
            raise NotFoundError("Wedding not found")

        families = select_eligible_families(db, wedding, request.family_ids, now)
        logger.info(
            "Lote de recordatorios wedding={} canal={} familias={}",
            wedding.id, request.channel.value, len(families),
        )

        batch = ReminderBatchResult()
        for family in families:
            batch.add(self.dispatch_family(db, wedding, family, request, admin_id))

        logger.info(
            "Resumen lote wedding={}: enviados={} fallidos={} total={}",
            wedding.id, batch.sent_count, batch.failed_count, len(batch.recipient_families),
        )
        return batch
