# nupci/core/security.py
from dataclasses import dataclass

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from nupci.auth import ROLE_WEDDING_ADMIN, verify_access_token
from nupci.config import Settings, get_settings
from nupci.errors import AuthError, ForbiddenError

_bearer = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class AdminContext:
    id: str
    wedding_id: str
    role: str


def require_wedding_admin(
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer),
    settings: Settings = Depends(get_settings),
) -> AdminContext:
    """Exige un access token válido de rol wedding_admin con boda asociada."""
    if credentials is None or not credentials.credentials:
        raise AuthError()
    payload = verify_access_token(settings, credentials.credentials)
    if payload is None:
        raise AuthError("Invalid or expired token")
    if payload.get("role") != ROLE_WEDDING_ADMIN:
        raise ForbiddenError()
    wedding_id = payload.get("wedding_id")
    if not wedding_id:
        raise ForbiddenError("Wedding ID not found in session")
    return AdminContext(id=str(payload["sub"]), wedding_id=str(wedding_id), role=payload["role"])
