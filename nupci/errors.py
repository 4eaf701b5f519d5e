# nupci/errors.py                                                               # Ruta del módulo de errores.

# =================================================================================
# 🚨 TAXONOMÍA DE ERRORES + HANDLERS DE FASTAPI
# ---------------------------------------------------------------------------------
# Todas las respuestas de error comparten el sobre:
#   {"success": false, "error": {"code": "...", "message": "...", "details": ...}}
# TransportError nunca llega a HTTP: el dispatcher lo convierte en un fallo
# por familia y sigue con el lote.
# =================================================================================

from typing import Any                                                           # Tipado de detalles libres.

from fastapi import FastAPI, Request, status                                     # App, request y códigos HTTP.
from fastapi.exceptions import RequestValidationError                            # Error de validación de pydantic en FastAPI.
from fastapi.responses import JSONResponse                                       # Respuesta JSON con status propio.
from loguru import logger                                                        # Trazas.


class ErrorCode:
    UNAUTHORIZED = "UNAUTHORIZED"
    FORBIDDEN = "FORBIDDEN"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    NOT_FOUND = "NOT_FOUND"
    CONFLICT = "CONFLICT"
    RSVP_CUTOFF_PASSED = "RSVP_CUTOFF_PASSED"
    INTERNAL_ERROR = "INTERNAL_ERROR"


class NupciError(Exception):
    """Error de dominio con código estable y status HTTP asociado."""

    code = ErrorCode.INTERNAL_ERROR
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Unexpected error"

    def __init__(self, message: str | None = None, details: Any = None):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)

    def to_payload(self) -> dict:
        error: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.details is not None:
            error["details"] = self.details
        return {"success": False, "error": error}


class AuthError(NupciError):
    code = ErrorCode.UNAUTHORIZED
    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Authentication required"


class ForbiddenError(NupciError):
    code = ErrorCode.FORBIDDEN
    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Wedding admin role required"


class ValidationError(NupciError):
    code = ErrorCode.VALIDATION_ERROR
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request data"


class RsvpCutoffPassedError(NupciError):
    code = ErrorCode.RSVP_CUTOFF_PASSED
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "RSVP cutoff date has passed. Cannot send reminders."


class NotFoundError(NupciError):
    code = ErrorCode.NOT_FOUND
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Resource not found"


class ConflictError(NupciError):
    code = ErrorCode.CONFLICT
    status_code = status.HTTP_409_CONFLICT
    default_message = "Resource already exists"


class UnexpectedError(NupciError):
    default_message = "An unexpected error occurred"


class TransportError(Exception):
    """Fallo de envío para una familia concreta (email/SMS/WhatsApp)."""

    def __init__(self, channel: str, error: str | None = None):
        self.channel = channel
        self.error = error or "send_failed"
        super().__init__(f"{channel}: {self.error}")


# =================================================================================
# 🧯 Handlers
# =================================================================================
async def _nupci_error_handler(request: Request, exc: NupciError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("[{}] {} {} → {}", exc.code, request.method, request.url.path, exc.message)
    else:
        logger.info("[{}] {} {} → {}", exc.code, request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload())


async def _validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = [
        {"field": ".".join(str(p) for p in err.get("loc", ()) if p != "body"), "message": err.get("msg", "")}
        for err in exc.errors()
    ]
    logger.info("[VALIDATION_ERROR] {} {} → {}", request.method, request.url.path, details)
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=ValidationError(details=details).to_payload(),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Registra los handlers que producen el sobre de error común."""
    app.add_exception_handler(NupciError, _nupci_error_handler)
    app.add_exception_handler(RequestValidationError, _validation_error_handler)
