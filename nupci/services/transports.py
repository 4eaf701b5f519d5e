# nupci/services/transports.py
# =================================================================================
# 🚚 Fachada de transportes que consume el dispatcher.
# ---------------------------------------------------------------------------------
# Transports expone la interfaz de colaborador (send_email / send_message)
# y deliver() traduce el canal efectivo al transporte correcto. Los tests
# sustituyen Transports por un doble que registra las llamadas.
# =================================================================================

from loguru import logger

from nupci import mailer, messaging
from nupci.config import Settings
from nupci.core.delivery import SendResult
from nupci.errors import TransportError
from nupci.messaging import MessageType
from nupci.models import Channel, Family, Language
from nupci.templates.compose import RenderedMessage


class Transports:
    def __init__(self, settings: Settings):
        self.settings = settings

    def send_email(self, to: str, subject: str, body: str, lang: Language, image_url: str | None = None) -> SendResult:
        return mailer.send_email(self.settings, to, subject, body, lang, image_url)

    def send_message(self, to: str, body: str, kind: MessageType, media_url: str | None = None) -> SendResult:
        return messaging.send_message(self.settings, to, body, kind, media_url)


CONTACT_FIELD = {
    Channel.EMAIL: "email",
    Channel.SMS: "phone",
    Channel.WHATSAPP: "whatsapp_number",
}


def contact_for(family: Family, channel: Channel) -> str | None:
    """Dato de contacto que exige el canal (email, phone o whatsapp_number)."""
    value = getattr(family, CONTACT_FIELD[channel])
    return value.strip() if value and value.strip() else None


def deliver(transports: Transports, family: Family, channel: Channel, message: RenderedMessage) -> SendResult:
    """Envía el mensaje por el canal efectivo; TransportError si el proveedor falla."""
    to = contact_for(family, channel)
    if to is None:
        raise TransportError(channel.value, f"missing_contact:{CONTACT_FIELD[channel]}")

    text = message.as_text()
    try:
        if channel is Channel.EMAIL:
            result = transports.send_email(to, message.subject, text, message.language, message.image_url)
        elif channel is Channel.SMS:
            result = transports.send_message(to, text, MessageType.SMS)
        else:
            result = transports.send_message(to, text, MessageType.WHATSAPP, message.image_url)
    except Exception as e:                                              # Un proveedor roto no corta el lote.
        logger.exception("Error inesperado del transporte {} para familia {}", channel.value, family.id)
        raise TransportError(channel.value, f"unexpected_error: {e}") from e

    if not result.success:
        logger.warning("Transporte {} falló para familia {}: {}", channel.value, family.id, result.error)
        raise TransportError(channel.value, result.error)
    return result
