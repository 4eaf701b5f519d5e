# nupci/config.py                                                             # Ruta del módulo de configuración.

# =================================================================================
# ⚙️ CONFIGURACIÓN EXPLÍCITA DEL SERVICIO
# ---------------------------------------------------------------------------------
# Lee el entorno (.env vía python-dotenv) una sola vez y lo congela en un
# dataclass. El dispatcher, los transportes y los routers reciben este objeto
# en vez de consultar os.getenv por su cuenta.
# =================================================================================

import os                                                                      # Acceso a variables de entorno.
from dataclasses import dataclass                                              # Estructura inmutable de configuración.
from functools import lru_cache                                                # Cachea la instancia por proceso.

from dotenv import load_dotenv                                                 # Carga .env en desarrollo.


def _env_bool(name: str, default: str = "0") -> bool:
    """Interpreta '1/true/yes/on' como True."""
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name, "").strip()
    return int(raw) if raw else default


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name, "").strip()
    return float(raw) if raw else default


def _env_list(name: str, default: str = "") -> tuple[str, ...]:
    raw = os.getenv(name, default)
    return tuple(item.strip() for item in raw.split(",") if item.strip())


@dataclass(frozen=True)
class Settings:
    # --- Aplicación ---
    app_url: str = "http://localhost:3000"                                     # Base de los magic links y callbacks.
    commercial_name: str = "Nupci"                                             # Nombre mostrado en remitentes y alertas.
    dry_run: bool = True                                                       # Simula envíos (sin red).
    cors_origins: tuple[str, ...] = ("http://localhost:3000",)

    # --- Email ---
    email_provider: str = "sendgrid"                                           # sendgrid | gmail
    email_from: str = ""
    email_sender_name: str = "Nupci"
    email_reply_to: str = ""
    sendgrid_api_key: str = ""
    email_user: str = ""                                                       # Gmail/SMTP usuario.
    email_pass: str = ""                                                       # Gmail/SMTP app password.
    smtp_host: str = "smtp.gmail.com"
    smtp_port: int = 587
    smtp_timeout: float = 20.0

    # --- Twilio (SMS / WhatsApp) ---
    twilio_account_sid: str = ""
    twilio_auth_token: str = ""
    twilio_phone_number: str = ""
    twilio_whatsapp_number: str = "whatsapp:+14155238886"                      # Sandbox de Twilio por defecto.
    twilio_status_callback: bool = False
    twilio_timeout: float = 15.0

    # --- Reintentos de transporte ---
    send_retries: int = 3
    retry_delay_seconds: float = 1.0

    # --- Alertas ---
    alert_webhook_url: str = ""
    admin_alert_email: str = ""

    # --- JWT ---
    jwt_secret: str = "dev_secret"
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 1440

    @classmethod
    def from_env(cls) -> "Settings":
        """Construye la configuración a partir del entorno (y .env si existe)."""
        load_dotenv()                                                          # No pisa variables ya definidas.
        email_from = os.getenv("EMAIL_FROM", "").strip()
        email_user = os.getenv("EMAIL_USER", "").strip()
        return cls(
            app_url=os.getenv("APP_URL", "http://localhost:3000").strip().rstrip("/"),
            commercial_name=os.getenv("COMMERCIAL_NAME", "Nupci").strip(),
            dry_run=_env_bool("DRY_RUN", "1"),
            cors_origins=_env_list("CORS_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000"),
            email_provider=os.getenv("EMAIL_PROVIDER", "sendgrid").strip().lower(),
            email_from=email_from or email_user,                               # Gmail: el propio usuario como remitente.
            email_sender_name=os.getenv("EMAIL_SENDER_NAME", os.getenv("COMMERCIAL_NAME", "Nupci")).strip(),
            email_reply_to=os.getenv("EMAIL_REPLY_TO", "").strip(),
            sendgrid_api_key=os.getenv("SENDGRID_API_KEY", "").strip(),
            email_user=email_user,
            email_pass=os.getenv("EMAIL_PASS", "").strip(),
            smtp_host=os.getenv("SMTP_HOST", "smtp.gmail.com").strip(),
            smtp_port=_env_int("SMTP_PORT", 587),
            smtp_timeout=_env_float("SMTP_TIMEOUT", 20.0),
            twilio_account_sid=os.getenv("TWILIO_ACCOUNT_SID", "").strip(),
            twilio_auth_token=os.getenv("TWILIO_AUTH_TOKEN", "").strip(),
            twilio_phone_number=os.getenv("TWILIO_PHONE_NUMBER", "").strip(),
            twilio_whatsapp_number=os.getenv("TWILIO_WHATSAPP_NUMBER", "whatsapp:+14155238886").strip(),
            twilio_status_callback=_env_bool("TWILIO_WEBHOOK_ENABLED", "0"),
            twilio_timeout=_env_float("TWILIO_TIMEOUT", 15.0),
            send_retries=max(1, _env_int("SEND_RETRIES", 3)),
            retry_delay_seconds=_env_float("RETRY_DELAY_SECONDS", 1.0),
            alert_webhook_url=os.getenv("ALERT_WEBHOOK_URL", "").strip(),
            admin_alert_email=os.getenv("ADMIN_ALERT_EMAIL", "").strip(),
            jwt_secret=os.getenv("SECRET_KEY", "dev_secret"),
            jwt_algorithm=os.getenv("ALGORITHM", "HS256"),
            access_token_expire_minutes=_env_int("ACCESS_TOKEN_EXPIRE_MINUTES", 1440),
        )

    def validate_for_sending(self) -> list[str]:
        """Devuelve la lista de credenciales que faltan para envíos reales (vacía en DRY_RUN)."""
        if self.dry_run:
            return []
        missing = []
        if self.email_provider == "sendgrid" and not self.sendgrid_api_key:
            missing.append("SENDGRID_API_KEY")
        if self.email_provider == "gmail" and not (self.email_user and self.email_pass):
            missing.append("EMAIL_USER/EMAIL_PASS")
        if not self.email_from:
            missing.append("EMAIL_FROM")
        if not (self.twilio_account_sid and self.twilio_auth_token):
            missing.append("TWILIO_ACCOUNT_SID/TWILIO_AUTH_TOKEN")
        return missing


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Dependencia de FastAPI: una única configuración por proceso."""
    return Settings.from_env()
