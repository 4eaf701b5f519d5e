# nupci/crud/templates_crud.py                                                  # Ruta del archivo.

# =================================================================================
# ✉️ CRUD de plantillas de mensaje (message_templates).
# - Clave natural única: (wedding_id, type, language, channel).
# - get_for_sending() es la consulta que usa el resolvedor en cada envío.
# - Todas las operaciones por id comprueban la boda dueña (404 si es de otra).
# =================================================================================

from typing import Any, Optional                                                # Tipado.

from loguru import logger                                                       # Trazas de auditoría.
from sqlalchemy.exc import IntegrityError                                       # Violación de la clave única.
from sqlalchemy.orm import Session                                              # Sesión de BD.

from nupci.errors import ConflictError, NotFoundError                           # Errores de dominio.
from nupci.models import Channel, Language, MessageTemplate, TemplateType       # Modelo y enums.


def get_for_sending(
    db: Session,
    wedding_id: str,
    template_type: TemplateType,
    language: Language,
    channel: Channel,
) -> Optional[MessageTemplate]:
    """Plantilla guardada para los cuatro campos de la clave, o None."""
    return (
        db.query(MessageTemplate)
        .filter(
            MessageTemplate.wedding_id == wedding_id,
            MessageTemplate.type == template_type,
            MessageTemplate.language == language,
            MessageTemplate.channel == channel,
        )
        .first()
    )


def get_owned(db: Session, wedding_id: str, template_id: str) -> MessageTemplate:
    """Devuelve la plantilla si pertenece a la boda; NotFoundError en otro caso."""
    template = db.query(MessageTemplate).filter(MessageTemplate.id == template_id).first()
    if template is None or template.wedding_id != wedding_id:                   # No revela plantillas ajenas.
        raise NotFoundError("Template not found")
    return template


def list_templates(
    db: Session,
    wedding_id: str,
    *,
    template_type: Optional[TemplateType] = None,
    language: Optional[Language] = None,
    channel: Optional[Channel] = None,
    page: int = 1,
    limit: int = 50,
) -> tuple[list[MessageTemplate], int]:
    """Listado paginado con filtros opcionales; devuelve (items, total)."""
    query = db.query(MessageTemplate).filter(MessageTemplate.wedding_id == wedding_id)
    if template_type is not None:
        query = query.filter(MessageTemplate.type == template_type)
    if language is not None:
        query = query.filter(MessageTemplate.language == language)
    if channel is not None:
        query = query.filter(MessageTemplate.channel == channel)
    total = query.count()
    items = (
        query.order_by(MessageTemplate.type.asc(), MessageTemplate.language.asc(), MessageTemplate.channel.asc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )
    return items, total


def create_template(db: Session, wedding_id: str, data: dict[str, Any]) -> MessageTemplate:
    """Crea la plantilla; ConflictError si ya existe una con la misma clave."""
    template = MessageTemplate(wedding_id=wedding_id, **data)
    db.add(template)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ConflictError(
            "A template already exists for this type, language and channel",
            details={k: str(getattr(data.get(k), "value", data.get(k))) for k in ("type", "language", "channel")},
        )
    db.refresh(template)
    logger.info("Plantilla creada id={} wedding={} {}/{}/{}", template.id, wedding_id,
                template.type.value, template.language.value, template.channel.value)
    return template


def update_template(db: Session, wedding_id: str, template_id: str, changes: dict[str, Any]) -> MessageTemplate:
    """Aplica solo los campos presentes en `changes` (subject, body, image_url)."""
    template = get_owned(db, wedding_id, template_id)
    for field in ("subject", "body", "image_url"):
        if field in changes:
            setattr(template, field, changes[field])
    db.commit()
    db.refresh(template)
    logger.info("Plantilla actualizada id={} campos={}", template.id, sorted(changes))
    return template


def delete_template(db: Session, wedding_id: str, template_id: str) -> None:
    template = get_owned(db, wedding_id, template_id)
    db.delete(template)
    db.commit()
    logger.info("Plantilla eliminada id={} wedding={}", template_id, wedding_id)
