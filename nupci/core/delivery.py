# nupci/core/delivery.py
# =================================================================================
# 📦 Resultado común de los transportes + enmascarado de PII para logs.
# =================================================================================

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class SendResult:
    success: bool
    message_id: Optional[str] = None
    error: Optional[str] = None

    @classmethod
    def ok(cls, message_id: Optional[str] = None) -> "SendResult":
        return cls(success=True, message_id=message_id)

    @classmethod
    def fail(cls, error: str) -> "SendResult":
        return cls(success=False, error=error)


def mask_email(email: Optional[str]) -> str:
    """'test@example.com' -> 'te**@example.com'."""
    if not email:
        return "<empty>"
    if "@" not in email:
        return f"{email[:2]}***"
    user, domain = email.split("@", 1)
    return f"{user[:2]}{'*' * max(len(user) - 2, 0)}@{domain}"


def mask_phone(phone: Optional[str]) -> str:
    """'+34600111222' -> '+34*****1222'."""
    if not phone:
        return "<empty>"
    raw = phone.replace("whatsapp:", "")
    if len(raw) <= 6:
        return "***"
    return f"{raw[:3]}{'*' * (len(raw) - 7)}{raw[-4:]}"
