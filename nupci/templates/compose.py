# nupci/templates/compose.py                                                      # Ruta del módulo.

# =================================================================================
# 📝 COMPOSICIÓN DEL MENSAJE FINAL PARA UNA FAMILIA
# ---------------------------------------------------------------------------------
# Junta resolvedor + renderer: calcula las variables de la familia (fechas
# localizadas, magic link, código de referencia), renderiza asunto/saludo/
# cuerpo/CTA y produce el texto que viaja por el transporte. El mismo
# objeto se guarda como snapshot en la bitácora.
# =================================================================================

from dataclasses import dataclass                                                   # Mensaje renderizado inmutable.
from typing import Optional                                                         # Tipado.

from sqlalchemy.orm import Session                                                  # Sesión de BD.

from nupci.config import Settings                                                   # app_url para enlaces e imágenes.
from nupci.models import Channel, Family, Language, TemplateType, Wedding           # Modelos y enums.
from nupci.templates.renderer import render                                         # Sustitución de placeholders.
from nupci.templates.resolver import ResolvedTemplate, resolve_template             # Plantilla guardada o integrada.
from nupci.utils.i18n import format_date, resolve_language                          # Idioma y fechas.


@dataclass(frozen=True)
class RenderedMessage:
    template_type: TemplateType
    language: Language
    channel: Channel
    subject: str
    greeting: str
    body: str
    cta: str
    magic_link: str
    image_url: Optional[str]
    template_source: str
    template_id: Optional[str] = None

    def as_text(self) -> str:
        """Texto plano final (cuerpo de SMS/WhatsApp y parte de texto del email)."""
        parts = [self.greeting, self.body]
        if self.cta and self.magic_link:                                             # CTA integrada → añade el enlace.
            parts.append(f"{self.cta}: {self.magic_link}")
        return "\n\n".join(p for p in parts if p)

    def snapshot(self) -> dict:
        """Copia serializable para el metadata del TrackingEvent."""
        return {
            "template_type": self.template_type.value,
            "template_source": self.template_source,
            "template_id": self.template_id,
            "language": self.language.value,
            "subject": self.subject,
            "greeting": self.greeting,
            "body": self.body,
            "cta": self.cta,
            "magic_link": self.magic_link,
            "image_url": self.image_url,
        }


def build_magic_link(app_url: str, magic_token: str) -> str:
    """Enlace de RSVP de la familia: {APP_URL}/rsvp/{token}."""
    return f"{app_url.rstrip('/')}/rsvp/{magic_token}"


def absolute_image_url(app_url: str, image_url: Optional[str]) -> Optional[str]:
    """Las imágenes subidas se guardan con ruta relativa; los transportes necesitan URL absoluta."""
    if not image_url:
        return None
    if image_url.startswith(("http://", "https://")):
        return image_url
    return f"{app_url.rstrip('/')}/{image_url.lstrip('/')}"


def family_language(family: Family, wedding: Wedding) -> Language:
    return resolve_language(family.preferred_language, wedding.default_language)


def build_variables(wedding: Wedding, family: Family, language: Language, magic_link: str) -> dict[str, str]:
    """Variables disponibles para las plantillas de esta familia."""
    variables = {
        "familyName": family.name,
        "coupleNames": wedding.couple_names,
        "weddingDate": format_date(wedding.wedding_date, language),
        "weddingTime": wedding.wedding_time or "",
        "location": wedding.location or "",
        "magicLink": magic_link,
        "rsvpCutoffDate": format_date(wedding.rsvp_cutoff_date, language),
    }
    if family.reference_code:                                                         # Solo si la boda usa códigos.
        variables["referenceCode"] = family.reference_code
    return variables


def render_resolved(
    settings: Settings,
    resolved: ResolvedTemplate,
    variables: dict[str, str],
    *,
    template_type: TemplateType,
    language: Language,
    channel: Channel,
    body_override: Optional[str] = None,
) -> RenderedMessage:
    """Renderiza una plantilla ya resuelta con las variables dadas."""
    body = body_override if body_override else resolved.body
    return RenderedMessage(
        template_type=template_type,
        language=language,
        channel=channel,
        subject=render(resolved.subject, variables),
        greeting=render(resolved.greeting, variables),
        body=render(body, variables),
        cta=render(resolved.cta, variables),
        magic_link=variables.get("magicLink", ""),
        image_url=absolute_image_url(settings.app_url, resolved.image_url),
        template_source=resolved.source,
        template_id=resolved.template_id,
    )


def compose_message(
    db: Session,
    settings: Settings,
    wedding: Wedding,
    family: Family,
    template_type: TemplateType,
    channel: Channel,
    body_override: Optional[str] = None,
) -> RenderedMessage:
    """Resuelve y renderiza la plantilla `template_type` para la familia y el canal efectivo."""
    language = family_language(family, wedding)
    resolved = resolve_template(db, wedding.id, template_type, language, channel)
    magic_link = build_magic_link(settings.app_url, family.magic_token)
    variables = build_variables(wedding, family, language, magic_link)
    return render_resolved(
        settings,
        resolved,
        variables,
        template_type=template_type,
        language=language,
        channel=channel,
        body_override=body_override,
    )
