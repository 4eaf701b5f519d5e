# nupci/models.py  # Define la ruta y nombre del archivo del módulo de modelos.

# =================================================================================
# 🏛️ DEFINICIÓN DE LOS MODELOS DE LA BASE DE DATOS (ORM)
# ---------------------------------------------------------------------------------
# Tablas que consume el motor de recordatorios:
# - Wedding (tenant), Family (hogar invitado), FamilyMember (persona con RSVP).
# - MessageTemplate (plantillas editables por el admin).
# - TrackingEvent (bitácora append-only de envíos y acciones del invitado).
# - Gift (pagos/regalos conciliados por código de referencia).
# =================================================================================

import enum  # Enumeraciones tipadas.
import uuid  # Claves primarias tipo UUID en texto.

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Date,
    DateTime,
    Enum as SQLAlchemyEnum,
    ForeignKey,
    Index,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    text,
)
from sqlalchemy.orm import relationship as orm_relationship

from nupci.db import Base
from nupci.utils.dates import utcnow


def _uuid() -> str:
    return str(uuid.uuid4())


def _enum(enum_cls):
    """Enum guardado como VARCHAR (sin tipos nativos de PostgreSQL que migrar)."""
    return SQLAlchemyEnum(enum_cls, native_enum=False, length=20, validate_strings=True)


# 🗂️ ENUMS PARA CONSISTENCIA DE DATOS
# ---------------------------------------------------------------------------------
class Language(str, enum.Enum):  # Idiomas soportados por plantillas y fechas.
    ES = "ES"
    EN = "EN"
    FR = "FR"
    IT = "IT"
    DE = "DE"


class Channel(str, enum.Enum):  # Canales de transporte reales.
    EMAIL = "EMAIL"
    SMS = "SMS"
    WHATSAPP = "WHATSAPP"


class RequestChannel(str, enum.Enum):  # Canal pedido por el admin (PREFERRED se resuelve por familia).
    EMAIL = "EMAIL"
    SMS = "SMS"
    WHATSAPP = "WHATSAPP"
    PREFERRED = "PREFERRED"


class TemplateType(str, enum.Enum):
    INVITATION = "INVITATION"
    REMINDER = "REMINDER"
    CONFIRMATION = "CONFIRMATION"


class EventType(str, enum.Enum):  # Tipos de evento en la bitácora.
    LINK_OPENED = "LINK_OPENED"
    RSVP_STARTED = "RSVP_STARTED"
    RSVP_SUBMITTED = "RSVP_SUBMITTED"
    RSVP_UPDATED = "RSVP_UPDATED"
    GUEST_ADDED = "GUEST_ADDED"
    PAYMENT_RECEIVED = "PAYMENT_RECEIVED"
    INVITATION_SENT = "INVITATION_SENT"
    REMINDER_SENT = "REMINDER_SENT"
    MESSAGE_DELIVERED = "MESSAGE_DELIVERED"  # Estados que notifica Twilio por webhook.
    MESSAGE_READ = "MESSAGE_READ"
    MESSAGE_FAILED = "MESSAGE_FAILED"


class MemberType(str, enum.Enum):
    ADULT = "ADULT"
    CHILD = "CHILD"
    INFANT = "INFANT"


class GiftStatus(str, enum.Enum):
    PENDING = "PENDING"
    RECEIVED = "RECEIVED"
    CONFIRMED = "CONFIRMED"


class PaymentTrackingMode(str, enum.Enum):
    AUTOMATED = "AUTOMATED"  # Se generan códigos de referencia por familia.
    MANUAL = "MANUAL"


class WeddingStatus(str, enum.Enum):
    ACTIVE = "ACTIVE"
    ARCHIVED = "ARCHIVED"


# 💒 BODA (TENANT)
# ---------------------------------------------------------------------------------
class Wedding(Base):
    __tablename__ = "weddings"

    id = Column(String(36), primary_key=True, default=_uuid)
    couple_names = Column(String(200), nullable=False)
    wedding_date = Column(Date, nullable=False)
    wedding_time = Column(String(20), nullable=False, default="")  # Texto libre, p. ej. "17:30".
    location = Column(String(300), nullable=False, default="")
    rsvp_cutoff_date = Column(DateTime, nullable=False)  # Tras esta fecha no se envían recordatorios.
    default_language = Column(_enum(Language), nullable=False, default=Language.ES)
    payment_tracking_mode = Column(
        _enum(PaymentTrackingMode), nullable=False, default=PaymentTrackingMode.MANUAL
    )
    status = Column(_enum(WeddingStatus), nullable=False, default=WeddingStatus.ACTIVE)
    is_deleted = Column(Boolean, nullable=False, default=False)  # Borrado lógico.
    created_at = Column(DateTime, nullable=False, default=utcnow)

    families = orm_relationship("Family", back_populates="wedding", cascade="all, delete-orphan")

    def __repr__(self) -> str:
        return f"<Wedding id={self.id} couple={self.couple_names!r}>"


# 👨‍👩‍👧 FAMILIA INVITADA (HOGAR)
# ---------------------------------------------------------------------------------
class Family(Base):
    __tablename__ = "families"
    __table_args__ = (
        Index("ix_families_wedding_created", "wedding_id", "created_at"),
    )

    id = Column(String(36), primary_key=True, default=_uuid)
    wedding_id = Column(String(36), ForeignKey("weddings.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(200), nullable=False)

    # --- Contacto (todos opcionales; el canal elegido decide cuál se exige) ---
    email = Column(String(254), nullable=True)
    phone = Column(String(32), nullable=True)
    whatsapp_number = Column(String(32), nullable=True)

    magic_token = Column(String(64), unique=True, nullable=False, index=True)  # Capability URL del RSVP.
    reference_code = Column(String(16), unique=True, nullable=True)  # Para conciliar transferencias.
    channel_preference = Column(_enum(Channel), nullable=True)
    preferred_language = Column(_enum(Language), nullable=True)  # None → idioma de la boda.
    created_at = Column(DateTime, nullable=False, default=utcnow)

    wedding = orm_relationship("Wedding", back_populates="families")
    members = orm_relationship(
        "FamilyMember", back_populates="family", cascade="all, delete-orphan", order_by="FamilyMember.name"
    )

    @property
    def has_rsvp(self) -> bool:
        """True si al menos un miembro ya respondió (attending no nulo)."""
        return any(member.attending is not None for member in self.members)

    def __repr__(self) -> str:
        return f"<Family id={self.id} name={self.name!r}>"


class FamilyMember(Base):
    __tablename__ = "family_members"

    id = Column(String(36), primary_key=True, default=_uuid)
    family_id = Column(String(36), ForeignKey("families.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(200), nullable=False)
    type = Column(_enum(MemberType), nullable=False, default=MemberType.ADULT)
    attending = Column(Boolean, nullable=True)  # None = sin respuesta; True/False = respuesta.

    family = orm_relationship("Family", back_populates="members")


# ✉️ PLANTILLAS DE MENSAJE
# ---------------------------------------------------------------------------------
class MessageTemplate(Base):
    __tablename__ = "message_templates"
    __table_args__ = (
        UniqueConstraint("wedding_id", "type", "language", "channel", name="uq_message_templates_key"),
    )

    id = Column(String(36), primary_key=True, default=_uuid)
    wedding_id = Column(String(36), ForeignKey("weddings.id", ondelete="CASCADE"), nullable=False, index=True)
    type = Column(_enum(TemplateType), nullable=False)
    language = Column(_enum(Language), nullable=False)
    channel = Column(_enum(Channel), nullable=False)
    subject = Column(String(200), nullable=False)
    body = Column(Text, nullable=False)
    image_url = Column(String(500), nullable=True)
    created_at = Column(DateTime, nullable=False, default=utcnow)
    updated_at = Column(DateTime, nullable=False, default=utcnow, onupdate=utcnow)


# 📒 BITÁCORA DE EVENTOS (APPEND-ONLY)
# ---------------------------------------------------------------------------------
class TrackingEvent(Base):
    __tablename__ = "tracking_events"
    __table_args__ = (
        Index("ix_tracking_events_family_type", "family_id", "event_type"),
        # Una sola invitación registrada por familia: dos lotes concurrentes no pueden
        # marcar la misma familia como invitada dos veces.
        Index(
            "uq_tracking_events_invitation_once",
            "family_id",
            unique=True,
            sqlite_where=text("event_type = 'INVITATION_SENT'"),
            postgresql_where=text("event_type = 'INVITATION_SENT'"),
        ),
    )

    id = Column(String(36), primary_key=True, default=_uuid)
    family_id = Column(String(36), ForeignKey("families.id", ondelete="CASCADE"), nullable=False)
    wedding_id = Column(String(36), ForeignKey("weddings.id", ondelete="CASCADE"), nullable=False, index=True)
    event_type = Column(_enum(EventType), nullable=False)
    channel = Column(_enum(Channel), nullable=True)
    event_metadata = Column("metadata", JSON, nullable=True)  # 'metadata' está reservado en la Base declarativa.
    admin_triggered = Column(Boolean, nullable=False, default=False)
    timestamp = Column(DateTime, nullable=False, default=utcnow, index=True)


# 🎁 REGALOS / PAGOS
# ---------------------------------------------------------------------------------
class Gift(Base):
    __tablename__ = "gifts"

    id = Column(String(36), primary_key=True, default=_uuid)
    family_id = Column(String(36), ForeignKey("families.id", ondelete="CASCADE"), nullable=False, index=True)
    wedding_id = Column(String(36), ForeignKey("weddings.id", ondelete="CASCADE"), nullable=False, index=True)
    amount = Column(Numeric(10, 2), nullable=False)
    reference_code_used = Column(String(64), nullable=True)
    auto_matched = Column(Boolean, nullable=False, default=False)
    status = Column(_enum(GiftStatus), nullable=False, default=GiftStatus.PENDING)
    transaction_date = Column(DateTime, nullable=False)
    created_at = Column(DateTime, nullable=False, default=utcnow)

    family = orm_relationship("Family")
