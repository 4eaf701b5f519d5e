# nupci/messaging.py                                                                        # Ruta del módulo.

# =================================================================================
# 📱 ENVÍO DE SMS Y WHATSAPP (Twilio REST API)
# ---------------------------------------------------------------------------------
# - Llama a POST /2010-04-01/Accounts/{sid}/Messages.json con requests + basic auth.
# - Valida E.164 (+ y 10-15 dígitos) y añade el prefijo 'whatsapp:' cuando toca.
# - Imagen (MediaUrl) solo en WhatsApp; StatusCallback solo si está activado y la
#   app tiene URL pública.
# - Reintenta errores de red / 5xx / 429 hasta settings.send_retries veces.
# - Nunca lanza: devuelve SendResult.
# =================================================================================

import enum                                                                                  # Tipo de mensaje.
import re                                                                                    # Validación de teléfonos.
import time                                                                                  # Pausa entre reintentos.
import uuid                                                                                  # Ids sintéticos en DRY_RUN.

import requests                                                                              # Cliente HTTP.
from loguru import logger                                                                    # Trazas.

from nupci.config import Settings                                                            # Credenciales y reintentos.
from nupci.core.delivery import SendResult, mask_phone                                       # Resultado común.

TWILIO_API_BASE = "https://api.twilio.com/2010-04-01"
_E164_RE = re.compile(r"^\+[1-9]\d{9,14}$")


class MessageType(str, enum.Enum):
    SMS = "SMS"
    WHATSAPP = "WHATSAPP"


def is_valid_phone_number(phone: str | None) -> bool:
    """True si el número (sin prefijo whatsapp:) está en formato E.164."""
    if not phone:
        return False
    clean = phone.replace("whatsapp:", "").strip()
    return bool(_E164_RE.match(clean))


def format_phone_number(phone: str, kind: MessageType) -> str:
    """Normaliza espacios, añade '+' si falta y el prefijo 'whatsapp:' para WhatsApp."""
    formatted = re.sub(r"[\s\-()]", "", phone.replace("whatsapp:", "").strip())              # Quita separadores.
    if not formatted.startswith("+"):
        formatted = f"+{formatted}"
    if kind is MessageType.WHATSAPP:
        return f"whatsapp:{formatted}"
    return formatted


TWILIO_STATUS_PATH = "/api/webhooks/twilio/status"


def twilio_status_url(settings: Settings) -> str:
    """URL pública del webhook de estados (la misma que firma Twilio)."""
    return f"{settings.app_url.rstrip('/')}{TWILIO_STATUS_PATH}"


def _status_callback_url(settings: Settings) -> str | None:
    if not settings.twilio_status_callback:
        return None
    if "localhost" in settings.app_url or "127.0.0.1" in settings.app_url:                   # Twilio no alcanza localhost.
        return None
    return twilio_status_url(settings)


def _sender_for(settings: Settings, kind: MessageType) -> str:
    """Remitente configurado; vacío si falta el número (sin prefijo suelto)."""
    if kind is MessageType.SMS:
        return settings.twilio_phone_number.strip()
    raw = settings.twilio_whatsapp_number.replace("whatsapp:", "").strip()
    return f"whatsapp:{raw}" if raw else ""


def _post_message(settings: Settings, payload: dict) -> requests.Response:
    url = f"{TWILIO_API_BASE}/Accounts/{settings.twilio_account_sid}/Messages.json"
    return requests.post(
        url,
        data=payload,
        auth=(settings.twilio_account_sid, settings.twilio_auth_token),
        timeout=settings.twilio_timeout,
    )


def send_message(
    settings: Settings,
    to: str,
    body: str,
    kind: MessageType,
    media_url: str | None = None,
) -> SendResult:
    """Envía un SMS o WhatsApp ya renderizado y devuelve el SID de Twilio."""
    if not to or not is_valid_phone_number(format_phone_number(to, kind)):                   # Sin número o inválido.
        logger.warning("Teléfono inválido para {}: {}", kind.value, mask_phone(to))
        return SendResult.fail("invalid_phone_number")

    to_formatted = format_phone_number(to, kind)
    sender = _sender_for(settings, kind)

    if settings.dry_run:                                                                     # Simulación.
        logger.info("[DRY_RUN] Simular {} a {} ({} chars)", kind.value, mask_phone(to_formatted), len(body))
        return SendResult.ok(f"dry-run-{uuid.uuid4().hex[:12]}")

    if not (settings.twilio_account_sid and settings.twilio_auth_token and sender):
        logger.error("Twilio no está configurado (TWILIO_ACCOUNT_SID/TWILIO_AUTH_TOKEN/remitente).")
        return SendResult.fail("twilio_not_configured")

    payload = {"To": to_formatted, "From": sender, "Body": body}
    if media_url and kind is MessageType.WHATSAPP:                                          # SMS no lleva imagen.
        payload["MediaUrl"] = media_url
    callback = _status_callback_url(settings)
    if callback:
        payload["StatusCallback"] = callback

    attempts = max(1, settings.send_retries)
    last_error = "unknown_error"
    for i in range(1, attempts + 1):                                                         # Bucle de intentos.
        try:
            response = _post_message(settings, payload)
        except requests.RequestException as e:                                               # Red / timeout.
            last_error = f"network_error: {e}"
            logger.warning("Intento {}/{} fallido ({}) a {}: {}", i, attempts, kind.value, mask_phone(to_formatted), e)
        else:
            if response.status_code in (200, 201):
                sid = _twilio_sid(response)
                if i > 1:
                    logger.info("Reintento {}/{} OK → {}", i, attempts, mask_phone(to_formatted))
                logger.info("Twilio {} enviado a {} sid={}", kind.value, mask_phone(to_formatted), sid)
                return SendResult.ok(sid)
            last_error = _twilio_error(response)
            if response.status_code != 429 and response.status_code < 500:                   # 4xx: no tiene sentido reintentar.
                logger.error("Twilio rechazó {} a {}: {}", kind.value, mask_phone(to_formatted), last_error)
                return SendResult.fail(last_error)
            logger.warning("Intento {}/{} fallido ({}) a {}: {}", i, attempts, kind.value, mask_phone(to_formatted), last_error)
        if i < attempts:
            time.sleep(settings.retry_delay_seconds)
    return SendResult.fail(last_error)


def _twilio_error(response: requests.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        return f"twilio_status_{response.status_code}"
    return f"twilio_{data.get('code', response.status_code)}: {data.get('message', '')}".strip()


def _twilio_sid(response: requests.Response) -> str | None:
    """SID del mensaje aceptado; None si el 2xx no trae JSON legible."""
    try:
        data = response.json()
    except ValueError:
        logger.warning("Twilio devolvió {} sin JSON; se da por enviado sin SID.", response.status_code)
        return None
    return data.get("sid") if isinstance(data, dict) else None
