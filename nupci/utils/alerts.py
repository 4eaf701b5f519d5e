# nupci/utils/alerts.py                                                               # Ruta del archivo.

# ==================================================================================== # Separador visual.
# 📣 Alertas al administrador                                                          # Título descriptivo.
# ------------------------------------------------------------------------------------ # Descripción.
# - Webhook (Slack/Teams compatible) si ALERT_WEBHOOK_URL está definido.              # Canal 1.
# - Email al admin si ADMIN_ALERT_EMAIL está definido.                                # Canal 2.
# - Nunca lanza: una alerta fallida no debe tumbar la petición que la dispara.        # Contrato.
# ==================================================================================== # Cierre encabezado.

import requests                                                                        # HTTP para el webhook.
from loguru import logger                                                              # Logger para trazas.

from nupci import mailer                                                               # Reutiliza el mailer central.
from nupci.config import Settings                                                      # Destinos de alerta.
from nupci.models import Language                                                      # Idioma del email de alerta.


def send_alert_webhook(settings: Settings, title: str, message: str) -> bool:          # Notifica por webhook.
    """Envía la alerta al webhook configurado; False si no hay URL o falla."""
    if not settings.alert_webhook_url:                                                 # Opcional de verdad.
        return False
    try:
        response = requests.post(
            settings.alert_webhook_url,
            json={"text": f"{title}\n{message}"},                                      # Payload simple.
            timeout=5,
        )
        response.raise_for_status()
        return True
    except requests.RequestException as e:                                             # Red o status no 2xx.
        logger.error("No se pudo notificar alerta por webhook: {}", e)
        return False


def alert_admin(settings: Settings, subject: str, body: str) -> bool:                  # Punto de entrada público.
    """Envía la alerta por webhook y/o email. True si algún canal la entregó."""
    title = f"[{settings.commercial_name}] {subject}"
    delivered = send_alert_webhook(settings, title, body)
    if not settings.admin_alert_email:                                                 # Sin destinatario de email...
        if not delivered:
            logger.warning("Sin destino de alertas configurado; se omite: {}", subject)
        return delivered

    result = mailer.send_email(settings, settings.admin_alert_email, title, body, Language.ES)
    if result.success:
        logger.info("Alerta enviada a admin: {}", subject)
    else:
        logger.error("Fallo enviando alerta a admin: {}", result.error)
    return delivered or result.success
