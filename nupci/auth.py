# nupci/auth.py  # Ruta y nombre del archivo del módulo de autenticación.

# =================================================================================
# 🔐 MÓDULO DE AUTENTICACIÓN (JWT)                                               # Describe el propósito del módulo.
# ---------------------------------------------------------------------------------
# - Emite y verifica el access token de sesión del panel de administración.      # Tokens de admins/planners.
# - Claims: sub (id del admin), wedding_id, role, type='access'.                  # Contrato con require_wedding_admin.
# - Usa python-jose (jose.jwt) para firmar/decodificar.                          # Librería usada.
# =================================================================================

from datetime import datetime, timedelta, timezone            # Emisión/expiración.
from typing import Any, Dict, Optional                        # Tipos para payloads.

from jose import jwt, JWTError                                # Implementación de JWT (python-jose).

from nupci.config import Settings                             # Secreto/algoritmo/expiración.

ROLE_WEDDING_ADMIN = "wedding_admin"                          # Único rol que puede disparar recordatorios.
ROLE_PLANNER = "planner"


def create_access_token(
    settings: Settings,
    *,
    subject: str,                                             # Id del usuario admin.
    role: str,                                                # Rol de sesión.
    wedding_id: Optional[str] = None,                         # Boda asociada (wedding_admin).
    expires_minutes: Optional[int] = None,
) -> str:
    """Crea un token de acceso (tipo 'access') para el panel."""
    now = datetime.now(timezone.utc)                          # Hora actual UTC.
    minutes = expires_minutes if expires_minutes is not None else settings.access_token_expire_minutes
    payload: Dict[str, Any] = {
        "sub": subject,                                       # Sujeto del token.
        "role": role,                                         # Rol para autorización.
        "type": "access",                                     # Tipo de token.
        "iat": int(now.timestamp()),                          # Emitido en.
        "exp": int((now + timedelta(minutes=minutes)).timestamp()),  # Expira en.
    }
    if wedding_id:                                            # Solo admins de boda llevan wedding_id.
        payload["wedding_id"] = wedding_id
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def decode_access_token(settings: Settings, token: str) -> Dict[str, Any]:
    """Decodifica y verifica un access token. Lanza JWTError/ValueError si no es válido."""
    data = jwt.decode(token, settings.jwt_secret, algorithms=[settings.jwt_algorithm])  # Firma + expiración.
    if data.get("type") != "access":                          # Comprueba claim de tipo.
        raise ValueError("Invalid token type for access token")
    if not data.get("sub"):                                   # Sin sujeto no hay sesión.
        raise ValueError("Token without subject")
    return data


def verify_access_token(settings: Settings, token: str) -> dict | None:
    """Devuelve el payload si el token es válido o None si la validación falla."""
    try:
        return decode_access_token(settings, token)
    except (JWTError, ValueError):
        return None
