# nupci/main.py                                                                                 # Ruta y nombre del archivo principal de la API.

# =================================================================================             # Separador visual de sección.
# 🧠 NÚCLEO DE LA APLICACIÓN API (FastAPI)                                                      # Título de la sección principal.
# ---------------------------------------------------------------------------------             # Separador de sección.
# - Crea la instancia de FastAPI y registra los handlers del sobre de error                      # Lista responsabilidades del módulo.
# - Configura CORS desde CORS_ORIGINS                                                            # Continua la lista.
# - Registra routers de administración y el webhook de estados de Twilio                # Continua la lista.
# =================================================================================             # Fin del encabezado.

from fastapi import FastAPI                                                                     # Framework web.
from fastapi.middleware.cors import CORSMiddleware                                              # Orígenes permitidos.
from loguru import logger                                                                       # Trazas de arranque.

from nupci.config import get_settings                                                           # Configuración del proceso.
from nupci.db import log_db_path_on_startup                                                     # Traza del motor de BD.
from nupci.errors import register_exception_handlers                                            # Sobre de error común.
from nupci.routers import payments, reminders, templates, webhooks                                     # Routers de la API.


def create_app() -> FastAPI:
    """Construye la app con la configuración actual del entorno."""
    settings = get_settings()
    logger.info(                                                                                # Log de variables clave.
        "[BOOT] DRY_RUN={} | EMAIL_PROVIDER={} | APP_URL={} | TWILIO_SET={}",
        settings.dry_run,
        settings.email_provider,
        settings.app_url,
        "yes" if settings.twilio_account_sid else "no",
    )
    missing = settings.validate_for_sending()
    if missing:                                                                                 # Envíos reales sin credenciales.
        logger.warning("Faltan credenciales para envíos reales: {}", ", ".join(missing))

    app = FastAPI(
        title=f"{settings.commercial_name} Notifications API",
        description="Recordatorios RSVP, plantillas de mensaje y conciliación de pagos",
        version="1.0.0",
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)

    @app.on_event("startup")
    def _startup_db_trace() -> None:
        log_db_path_on_startup()

    @app.get("/health", tags=["meta"])
    def health() -> dict:
        return {"status": "ok"}

    app.include_router(reminders.router)
    app.include_router(templates.router)
    app.include_router(payments.router)
    app.include_router(webhooks.router)
    return app


app = create_app()                                                                              # Instancia usada por uvicorn.

if __name__ == "__main__":
    import uvicorn                                                                              # Servidor ASGI local.

    uvicorn.run("nupci.main:app", host="0.0.0.0", port=8000, reload=True)
