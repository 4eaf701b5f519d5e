# nupci/mailer.py  # Ruta y nombre del archivo.                                           # Módulo de envío de correos.

# =================================================================================
# 📧 MÓDULO DE ENVÍO DE CORREOS (texto + HTML)                                       # Describe propósito del módulo.
# ---------------------------------------------------------------------------------
# Envía por SendGrid o Gmail SMTP (EMAIL_PROVIDER). El cuerpo llega ya                # Proveedores conmutables.
# renderizado en texto plano; aquí solo se envuelve en HTML (escape + párrafos,     # El mailer no conoce plantillas.
# enlaces clicables e imagen de cabecera opcional). DRY_RUN simula sin red.          # Modo simulación.
# Nunca lanza: devuelve SendResult(success, message_id, error).                      # Contrato con el dispatcher.
# =================================================================================

# 🐍 Importaciones
import html                                                                            # Escape seguro de texto libre.
import re                                                                              # Detección de URLs en el cuerpo.
import smtplib                                                                         # Envío SMTP (Gmail).
import uuid                                                                            # Ids sintéticos en DRY_RUN.
from email.mime.multipart import MIMEMultipart                                         # Contenedor multipart/alternative.
from email.mime.text import MIMEText                                                   # Partes de texto y HTML.
from email.utils import make_msgid                                                     # Message-ID propio para SMTP.
from ssl import create_default_context                                                 # Contexto TLS seguro.

from loguru import logger                                                              # Logger estructurado.
from pydantic import EmailStr, TypeAdapter, ValidationError                            # Validación de direcciones.
from sendgrid import SendGridAPIClient                                                 # Cliente API de SendGrid.
from sendgrid.helpers.mail import From, Mail, ReplyTo                                  # Construcción del mensaje.

from nupci.config import Settings                                                      # Configuración explícita.
from nupci.core.delivery import SendResult, mask_email                                 # Resultado y enmascarado.
from nupci.models import Language                                                      # Idiomas del pie de página.

_EMAIL_ADAPTER = TypeAdapter(EmailStr)                                                 # Validador reutilizable.
_URL_RE = re.compile(r"(https?://[^\s<]+)")                                            # URLs en texto ya escapado.

# Pie de página por idioma (el nombre comercial se inserta al formatear).             # i18n mínima del envoltorio.
_FOOTERS = {
    Language.ES: "Enviado con {name}",
    Language.EN: "Sent with {name}",
    Language.FR: "Envoyé avec {name}",
    Language.IT: "Inviato con {name}",
    Language.DE: "Gesendet mit {name}",
}


def is_valid_email(address: str | None) -> bool:                                       # Valida formato de email.
    """True si la dirección es un email sintácticamente válido."""
    if not address:
        return False
    try:
        _EMAIL_ADAPTER.validate_python(address.strip())
        return True
    except ValidationError:
        return False


# =================================================================================
# 🧱 Envoltorio HTML
# =================================================================================
def build_email_html(subject: str, body: str, lang: Language, sender_name: str, image_url: str | None = None) -> str:
    """Convierte el cuerpo de texto plano en un HTML sencillo y seguro."""
    paragraphs = []                                                                    # Un <p> por bloque de texto.
    for block in (body or "").split("\n\n"):
        if not block.strip():
            continue
        safe = html.escape(block.strip())                                              # Escapa antes de enlazar.
        safe = _URL_RE.sub(r"<a href='\1' style='color:#6D28D9;'>\1</a>", safe)        # URLs clicables.
        paragraphs.append(f"<p>{safe.replace(chr(10), '<br>')}</p>")                   # Saltos simples → <br>.
    image_html = (
        f"<img src='{html.escape(image_url, quote=True)}' alt='' "
        "style='max-width:100%;border-radius:8px;margin-bottom:16px;'>"
        if image_url else ""
    )
    footer = _FOOTERS.get(lang, _FOOTERS[Language.EN]).format(name=html.escape(sender_name))
    return (
        "<div style='font-family:Inter,Arial,sans-serif;line-height:1.6;max-width:600px;margin:0 auto;'>"
        f"{image_html}"
        f"<h2>{html.escape(subject)}</h2>"
        f"{''.join(paragraphs)}"
        f"<p style='color:#888;font-size:12px;margin-top:24px;'>{footer}</p>"
        "</div>"
    )


# =================================================================================
# ✉️ Proveedores
# =================================================================================
def _send_via_sendgrid(settings: Settings, to_email: str, subject: str, text: str, html_body: str) -> SendResult:
    """Envía multipart (texto + HTML) con SendGrid y devuelve el X-Message-Id."""
    if not settings.sendgrid_api_key or not settings.email_from:                       # Config incompleta…
        logger.error("Config de mailer incompleta (SendGrid): EMAIL_FROM o SENDGRID_API_KEY ausentes.")
        return SendResult.fail("sendgrid_not_configured")

    message = Mail(                                                                    # Construye mensaje.
        from_email=From(settings.email_from, settings.email_sender_name),              # Remitente con nombre.
        to_emails=to_email,
        subject=subject,
        plain_text_content=text,
        html_content=html_body,
    )
    if settings.email_reply_to:                                                        # Reply-To opcional.
        message.reply_to = ReplyTo(settings.email_reply_to)
    try:
        response = SendGridAPIClient(settings.sendgrid_api_key).send(message)          # Envía.
    except Exception as e:                                                             # HTTPError de la librería, red...
        logger.error("Excepción enviando con SendGrid a {}: {}", mask_email(to_email), e)
        return SendResult.fail(f"sendgrid_exception: {e}")

    message_id = response.headers.get("X-Message-Id") if response.headers else None   # Id para trazabilidad.
    logger.info("SendGrid response: {} | X-Message-Id: {}", response.status_code, message_id)
    if 200 <= response.status_code < 300:                                              # Éxito si 2xx.
        return SendResult.ok(message_id)
    logger.error("SendGrid rechazó el envío a {}. Código: {}", mask_email(to_email), response.status_code)
    return SendResult.fail(f"sendgrid_status_{response.status_code}")


def _send_via_gmail(settings: Settings, to_email: str, subject: str, text: str, html_body: str) -> SendResult:
    """Envía multipart/alternative por SMTP (587 STARTTLS o 465 SSL)."""
    user, pwd, from_addr = settings.email_user, settings.email_pass, settings.email_from
    if not (user and pwd and from_addr):                                               # Credenciales mínimas.
        logger.error("Gmail SMTP no está configurado (EMAIL_USER/EMAIL_PASS/EMAIL_FROM).")
        return SendResult.fail("smtp_not_configured")

    msg = MIMEMultipart("alternative")                                                 # Texto + HTML.
    msg["From"] = f"{settings.email_sender_name} <{from_addr}>"
    msg["To"] = to_email.strip()
    msg["Subject"] = subject
    msg["Message-ID"] = make_msgid(domain=from_addr.split("@")[-1])                    # Id propio (SMTP no devuelve uno).
    if settings.email_reply_to:
        msg["Reply-To"] = settings.email_reply_to
    msg.attach(MIMEText(text, "plain", "utf-8"))                                       # Texto primero.
    msg.attach(MIMEText(html_body, "html", "utf-8"))                                   # HTML después.

    try:
        if settings.smtp_port == 465:                                                  # TLS directo.
            server = smtplib.SMTP_SSL(settings.smtp_host, settings.smtp_port,
                                      timeout=settings.smtp_timeout, context=create_default_context())
        else:                                                                          # STARTTLS.
            server = smtplib.SMTP(settings.smtp_host, settings.smtp_port, timeout=settings.smtp_timeout)
        with server:                                                                   # Cierra el socket aunque falle el TLS.
            if settings.smtp_port != 465:
                server.ehlo()
                server.starttls(context=create_default_context())
                server.ehlo()
            server.login(user, pwd)
            server.sendmail(from_addr, [msg["To"]], msg.as_string())
    except (smtplib.SMTPException, OSError) as e:                                      # Errores SMTP y de red.
        logger.exception("Gmail SMTP → excepción enviando a {}: {}", mask_email(to_email), e)
        return SendResult.fail(f"smtp_exception: {e}")

    logger.info("Gmail SMTP → enviado a {}", mask_email(to_email))
    return SendResult.ok(msg["Message-ID"])


# =================================================================================
# 🚦 Punto de entrada público
# =================================================================================
def send_email(
    settings: Settings,
    to_email: str,
    subject: str,
    body: str,
    lang: Language,
    image_url: str | None = None,
) -> SendResult:
    """Envía un email ya renderizado por el proveedor configurado."""
    if not is_valid_email(to_email):                                                   # Evita llamadas inútiles al proveedor.
        logger.warning("Email inválido, no se envía: {}", mask_email(to_email))
        return SendResult.fail("invalid_email")

    html_body = build_email_html(subject, body, lang, settings.email_sender_name, image_url)

    if settings.dry_run:                                                               # Simulación.
        logger.info("[DRY_RUN] Simular envío a {} | Asunto: {}", mask_email(to_email), subject)
        return SendResult.ok(f"dry-run-{uuid.uuid4().hex[:12]}")

    if settings.email_provider == "gmail":
        return _send_via_gmail(settings, to_email, subject, body, html_body)
    return _send_via_sendgrid(settings, to_email, subject, body, html_body)
