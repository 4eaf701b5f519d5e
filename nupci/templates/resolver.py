# nupci/templates/resolver.py
# =================================================================================
# 🔎 Resolución de plantilla: guardada (boda, tipo, idioma, canal) → integrada.
# =================================================================================

from dataclasses import dataclass
from typing import Optional

from loguru import logger
from sqlalchemy.orm import Session

from nupci.crud import templates_crud
from nupci.models import Channel, Language, TemplateType
from nupci.templates.defaults import get_builtin

SOURCE_STORED = "stored"
SOURCE_BUILTIN = "builtin"


@dataclass(frozen=True)
class ResolvedTemplate:
    subject: str
    body: str
    greeting: str = ""                  # Solo las integradas separan saludo y CTA.
    cta: str = ""
    image_url: Optional[str] = None
    source: str = SOURCE_BUILTIN
    template_id: Optional[str] = None


def resolve_template(
    db: Session,
    wedding_id: str,
    template_type: TemplateType,
    language: Language,
    channel: Channel,
) -> ResolvedTemplate:
    """Devuelve la plantilla guardada para la clave completa o la integrada del idioma."""
    stored = templates_crud.get_for_sending(db, wedding_id, template_type, language, channel)
    if stored is not None:
        return ResolvedTemplate(
            subject=stored.subject,
            body=stored.body,
            image_url=stored.image_url or None,
            source=SOURCE_STORED,
            template_id=stored.id,
        )

    logger.debug(
        "Sin plantilla guardada para wedding={} {}/{}/{}; usando integrada",
        wedding_id, template_type.value, language.value, channel.value,
    )
    builtin = get_builtin(language, template_type)
    return ResolvedTemplate(
        subject=builtin.subject,
        body=builtin.body,
        greeting=builtin.greeting,
        cta=builtin.cta,
    )
