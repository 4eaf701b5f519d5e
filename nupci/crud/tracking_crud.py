# nupci/crud/tracking_crud.py
# =================================================================================
# 📒 Acceso a la bitácora append-only (tracking_events).
# Solo hay inserciones y lecturas: ningún helper actualiza ni borra eventos.
# =================================================================================

from typing import Any, Iterable, Optional

from sqlalchemy import String, cast
from sqlalchemy.orm import Session

from nupci.models import Channel, EventType, TrackingEvent


def has_invitation(db: Session, family_id: str) -> bool:
    """True si la familia ya tiene un INVITATION_SENT registrado."""
    return (
        db.query(TrackingEvent.id)
        .filter(
            TrackingEvent.family_id == family_id,
            TrackingEvent.event_type == EventType.INVITATION_SENT,
        )
        .first()
        is not None
    )


def add_event(
    db: Session,
    *,
    family_id: str,
    wedding_id: str,
    event_type: EventType,
    channel: Optional[Channel] = None,
    metadata: Optional[dict[str, Any]] = None,
    admin_triggered: bool = False,
) -> TrackingEvent:
    """Añade el evento a la sesión (sin commit; lo decide quien llama)."""
    event = TrackingEvent(
        family_id=family_id,
        wedding_id=wedding_id,
        event_type=event_type,
        channel=channel,
        event_metadata=metadata or {},
        admin_triggered=admin_triggered,
    )
    db.add(event)
    return event


def list_events(db: Session, family_id: str, event_type: Optional[EventType] = None) -> list[TrackingEvent]:
    query = db.query(TrackingEvent).filter(TrackingEvent.family_id == family_id)
    if event_type is not None:
        query = query.filter(TrackingEvent.event_type == event_type)
    return query.order_by(TrackingEvent.timestamp.asc()).all()


def find_by_message_id(
    db: Session,
    message_id: str,
    event_types: Iterable[EventType],
    family_id: Optional[str] = None,
) -> Optional[TrackingEvent]:
    """Primer evento de esos tipos cuyo metadata.message_id coincide (más antiguo primero)."""
    query = db.query(TrackingEvent).filter(
        TrackingEvent.event_type.in_(list(event_types)),
        # Prefiltro textual portable (SQLite/PostgreSQL); la igualdad exacta se comprueba abajo.
        cast(TrackingEvent.event_metadata, String).like(f'%"{message_id}"%'),
    )
    if family_id is not None:
        query = query.filter(TrackingEvent.family_id == family_id)
    for event in query.order_by(TrackingEvent.timestamp.asc()):
        if (event.event_metadata or {}).get("message_id") == message_id:
            return event
    return None
