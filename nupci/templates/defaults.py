# nupci/templates/defaults.py                                                    # Ruta del módulo.

# =================================================================================
# 📚 PLANTILLAS INTEGRADAS (FALLBACK SIN CONFIGURACIÓN)
# ---------------------------------------------------------------------------------
# Se usan cuando la boda no tiene una MessageTemplate guardada para
# (tipo, idioma, canal). Cubren los 5 idiomas x 3 tipos; si falta una
# combinación el módulo falla al importarse.
# Los textos usan los mismos {{placeholders}} que las plantillas del admin.
# =================================================================================

from dataclasses import dataclass                                                 # Registro inmutable de plantilla.

from nupci.models import Language, TemplateType                                   # Claves del mapeo.


@dataclass(frozen=True)
class BuiltinTemplate:
    subject: str                                                                  # Asunto (solo email).
    greeting: str                                                                 # Saludo inicial.
    body: str                                                                     # Texto principal.
    cta: str                                                                      # Texto del botón / enlace.


BUILTIN_TEMPLATES: dict[Language, dict[TemplateType, BuiltinTemplate]] = {
    # ----------------------------------------------------------------- Español
    Language.ES: {
        TemplateType.INVITATION: BuiltinTemplate(
            subject="¡Estamos emocionados de compartir nuestro gran día!",
            greeting="Hola, Familia {{familyName}}!",
            body=(
                "Nos complace invitaros a celebrar el matrimonio de {{coupleNames}} "
                "el {{weddingDate}} a las {{weddingTime}} en {{location}}. "
                "Por favor, confirmad vuestra asistencia antes del {{rsvpCutoffDate}}."
            ),
            cta="Confirmar asistencia",
        ),
        TemplateType.REMINDER: BuiltinTemplate(
            subject="Recordatorio: Confirma tu asistencia",
            greeting="Hola, Familia {{familyName}}!",
            body=(
                "Este es un recordatorio amable de que aún no hemos recibido vuestra "
                "confirmación para la boda de {{coupleNames}} el {{weddingDate}}. "
                "Por favor, confirmad antes del {{rsvpCutoffDate}}."
            ),
            cta="Confirmar asistencia",
        ),
        TemplateType.CONFIRMATION: BuiltinTemplate(
            subject="¡Gracias por confirmar tu asistencia!",
            greeting="Hola, Familia {{familyName}}!",
            body=(
                "Hemos recibido vuestra respuesta para la boda de {{coupleNames}} "
                "el {{weddingDate}}. Podéis modificarla hasta el {{rsvpCutoffDate}}."
            ),
            cta="Ver mi respuesta",
        ),
    },
    # ----------------------------------------------------------------- English
    Language.EN: {
        TemplateType.INVITATION: BuiltinTemplate(
            subject="You're invited to celebrate our wedding!",
            greeting="Hello, {{familyName}} Family!",
            body=(
                "We are delighted to invite you to celebrate the wedding of {{coupleNames}} "
                "on {{weddingDate}} at {{weddingTime}} in {{location}}. "
                "Please confirm your attendance by {{rsvpCutoffDate}}."
            ),
            cta="Confirm attendance",
        ),
        TemplateType.REMINDER: BuiltinTemplate(
            subject="Reminder: Please confirm your attendance",
            greeting="Hello, {{familyName}} Family!",
            body=(
                "This is a friendly reminder that we haven't received your RSVP for "
                "{{coupleNames}}'s wedding on {{weddingDate}}. "
                "Please confirm by {{rsvpCutoffDate}}."
            ),
            cta="Confirm attendance",
        ),
        TemplateType.CONFIRMATION: BuiltinTemplate(
            subject="Thank you for your RSVP!",
            greeting="Hello, {{familyName}} Family!",
            body=(
                "We have received your response for {{coupleNames}}'s wedding on "
                "{{weddingDate}}. You can update it until {{rsvpCutoffDate}}."
            ),
            cta="View my RSVP",
        ),
    },
    # ----------------------------------------------------------------- Français
    Language.FR: {
        TemplateType.INVITATION: BuiltinTemplate(
            subject="Vous êtes invités à célébrer notre mariage!",
            greeting="Bonjour, Famille {{familyName}}!",
            body=(
                "Nous sommes ravis de vous inviter au mariage de {{coupleNames}} "
                "le {{weddingDate}} à {{weddingTime}} à {{location}}. "
                "Veuillez confirmer votre présence avant le {{rsvpCutoffDate}}."
            ),
            cta="Confirmer la présence",
        ),
        TemplateType.REMINDER: BuiltinTemplate(
            subject="Rappel: Confirmez votre présence",
            greeting="Bonjour, Famille {{familyName}}!",
            body=(
                "Ceci est un rappel amical que nous n'avons pas encore reçu votre réponse "
                "pour le mariage de {{coupleNames}} le {{weddingDate}}. "
                "Veuillez confirmer avant le {{rsvpCutoffDate}}."
            ),
            cta="Confirmer la présence",
        ),
        TemplateType.CONFIRMATION: BuiltinTemplate(
            subject="Merci pour votre réponse!",
            greeting="Bonjour, Famille {{familyName}}!",
            body=(
                "Nous avons bien reçu votre réponse pour le mariage de {{coupleNames}} "
                "le {{weddingDate}}. Vous pouvez la modifier jusqu'au {{rsvpCutoffDate}}."
            ),
            cta="Voir ma réponse",
        ),
    },
    # ----------------------------------------------------------------- Italiano
    Language.IT: {
        TemplateType.INVITATION: BuiltinTemplate(
            subject="Siete invitati a celebrare il nostro matrimonio!",
            greeting="Ciao, Famiglia {{familyName}}!",
            body=(
                "Siamo felici di invitarvi al matrimonio di {{coupleNames}} "
                "il {{weddingDate}} alle {{weddingTime}} a {{location}}. "
                "Vi preghiamo di confermare la vostra presenza entro il {{rsvpCutoffDate}}."
            ),
            cta="Conferma partecipazione",
        ),
        TemplateType.REMINDER: BuiltinTemplate(
            subject="Promemoria: Conferma la tua partecipazione",
            greeting="Ciao, Famiglia {{familyName}}!",
            body=(
                "Questo è un promemoria amichevole: non abbiamo ancora ricevuto la vostra "
                "conferma per il matrimonio di {{coupleNames}} il {{weddingDate}}. "
                "Vi preghiamo di confermare entro il {{rsvpCutoffDate}}."
            ),
            cta="Conferma partecipazione",
        ),
        TemplateType.CONFIRMATION: BuiltinTemplate(
            subject="Grazie per la vostra risposta!",
            greeting="Ciao, Famiglia {{familyName}}!",
            body=(
                "Abbiamo ricevuto la vostra risposta per il matrimonio di {{coupleNames}} "
                "il {{weddingDate}}. Potete modificarla fino al {{rsvpCutoffDate}}."
            ),
            cta="Vedi la mia risposta",
        ),
    },
    # ----------------------------------------------------------------- Deutsch
    Language.DE: {
        TemplateType.INVITATION: BuiltinTemplate(
            subject="Ihr seid zu unserer Hochzeit eingeladen!",
            greeting="Hallo, Familie {{familyName}}!",
            body=(
                "Wir freuen uns, Sie zur Hochzeit von {{coupleNames}} am {{weddingDate}} "
                "um {{weddingTime}} in {{location}} einzuladen. "
                "Bitte bestätigen Sie Ihre Teilnahme bis zum {{rsvpCutoffDate}}."
            ),
            cta="Teilnahme bestätigen",
        ),
        TemplateType.REMINDER: BuiltinTemplate(
            subject="Erinnerung: Bitte bestätigen Sie Ihre Teilnahme",
            greeting="Hallo, Familie {{familyName}}!",
            body=(
                "Dies ist eine freundliche Erinnerung, dass wir Ihre Rückmeldung für die "
                "Hochzeit von {{coupleNames}} am {{weddingDate}} noch nicht erhalten haben. "
                "Bitte bestätigen Sie bis zum {{rsvpCutoffDate}}."
            ),
            cta="Teilnahme bestätigen",
        ),
        TemplateType.CONFIRMATION: BuiltinTemplate(
            subject="Vielen Dank für Ihre Rückmeldung!",
            greeting="Hallo, Familie {{familyName}}!",
            body=(
                "Wir haben Ihre Antwort für die Hochzeit von {{coupleNames}} am "
                "{{weddingDate}} erhalten. Sie können sie bis zum {{rsvpCutoffDate}} ändern."
            ),
            cta="Meine Antwort ansehen",
        ),
    },
}


def _assert_exhaustive() -> None:
    """Comprueba que existe una plantilla para cada idioma y tipo."""
    missing = [
        f"{lang.value}/{kind.value}"
        for lang in Language
        for kind in TemplateType
        if kind not in BUILTIN_TEMPLATES.get(lang, {})
    ]
    if missing:
        raise RuntimeError(f"Faltan plantillas integradas: {', '.join(missing)}")


_assert_exhaustive()


def get_builtin(language: Language, template_type: TemplateType) -> BuiltinTemplate:
    return BUILTIN_TEMPLATES[language][template_type]
