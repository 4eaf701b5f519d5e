# nupci/services/payments.py                                                     # Ruta del módulo.

# =================================================================================
# 💶 PAGOS / REGALOS Y CÓDIGOS DE REFERENCIA
# ---------------------------------------------------------------------------------
# - Modo AUTOMATED: cada familia recibe un código corto para el concepto de la
#   transferencia; match_payment() concilia un movimiento bancario con él.
# - record_manual_payment(): alta manual por el admin (fecha no futura y como
#   mucho de hace un año).
# - Ambos caminos escriben un TrackingEvent PAYMENT_RECEIVED.
# =================================================================================

import secrets                                                                     # Generación segura de códigos.
from datetime import datetime, timedelta                                           # Validación de fechas.
from decimal import Decimal                                                        # Importes exactos.
from typing import Optional                                                        # Tipado.

from loguru import logger                                                          # Trazas.
from sqlalchemy.orm import Session                                                 # Sesión de BD.

from nupci.crud import families_crud, tracking_crud                                # Lecturas y bitácora.
from nupci.errors import NotFoundError, ValidationError                            # Errores de dominio.
from nupci.models import EventType, Family, Gift, GiftStatus, PaymentTrackingMode, Wedding
from nupci.utils.dates import to_naive_utc, utcnow                                 # Fechas en UTC naive.

REFERENCE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"                            # Sin 0/O/1/I para evitar confusiones.
REFERENCE_LENGTH = 6
_MAX_GENERATION_ATTEMPTS = 20


def generate_reference_code(length: int = REFERENCE_LENGTH) -> str:
    """Código aleatorio legible por humanos (p. ej. 'K7PX2M')."""
    return "".join(secrets.choice(REFERENCE_ALPHABET) for _ in range(length))


def normalize_reference(raw: Optional[str]) -> str:
    """Normaliza lo escrito en el concepto bancario: mayúsculas, sin espacios ni guiones."""
    return "".join(ch for ch in (raw or "").upper() if ch.isalnum())


def assign_reference_codes(db: Session, wedding: Wedding) -> int:
    """Genera códigos para las familias que no tienen (solo en modo AUTOMATED). Devuelve cuántos."""
    if wedding.payment_tracking_mode is not PaymentTrackingMode.AUTOMATED:
        return 0
    assigned = 0
    taken: set[str] = set()
    for family in families_crud.list_families(db, wedding.id):
        if family.reference_code:
            continue
        for _ in range(_MAX_GENERATION_ATTEMPTS):
            code = generate_reference_code()
            if code not in taken and not families_crud.reference_code_exists(db, code):
                break
        else:
            raise RuntimeError("No se pudo generar un código de referencia único")
        family.reference_code = code
        taken.add(code)
        assigned += 1
    db.commit()
    logger.info("Códigos de referencia asignados: {} (wedding={})", assigned, wedding.id)
    return assigned


def validate_transaction_date(transaction_date: datetime, now: Optional[datetime] = None) -> datetime:
    """Fecha de la transacción en UTC naive; ValidationError si es futura o de hace más de un año."""
    now = to_naive_utc(now or utcnow())
    value = to_naive_utc(transaction_date)
    if value > now:
        raise ValidationError("Transaction date cannot be in the future")
    if value < now - timedelta(days=365):
        raise ValidationError("Transaction date cannot be more than 1 year in the past")
    return value


def _create_gift(
    db: Session,
    family: Family,
    *,
    amount: Decimal,
    transaction_date: datetime,
    reference_code_used: Optional[str],
    auto_matched: bool,
    admin_id: Optional[str],
) -> Gift:
    if amount <= 0:
        raise ValidationError("Amount must be positive")
    gift = Gift(
        family_id=family.id,
        wedding_id=family.wedding_id,
        amount=amount,
        reference_code_used=reference_code_used,
        auto_matched=auto_matched,
        status=GiftStatus.RECEIVED,
        transaction_date=transaction_date,
    )
    db.add(gift)
    db.flush()                                                                     # Necesitamos gift.id para el evento.
    tracking_crud.add_event(
        db,
        family_id=family.id,
        wedding_id=family.wedding_id,
        event_type=EventType.PAYMENT_RECEIVED,
        metadata={
            "gift_id": gift.id,
            "amount": str(amount),
            "reference_code_used": reference_code_used,
            "auto_matched": auto_matched,
            "admin_id": admin_id,
        },
        admin_triggered=admin_id is not None,
    )
    db.commit()
    db.refresh(gift)
    return gift


def match_payment(
    db: Session,
    wedding_id: str,
    reference_code: str,
    amount: Decimal,
    transaction_date: datetime,
    admin_id: Optional[str] = None,
) -> Optional[Gift]:
    """Concilia un movimiento con la familia dueña del código; None si no hay coincidencia."""
    code = normalize_reference(reference_code)
    family = families_crud.get_by_reference_code(db, wedding_id, code) if code else None
    if family is None:
        logger.info("Pago sin coincidencia de referencia (wedding={}, ref={!r})", wedding_id, reference_code)
        return None
    gift = _create_gift(
        db,
        family,
        amount=amount,
        transaction_date=validate_transaction_date(transaction_date),
        reference_code_used=code,
        auto_matched=True,
        admin_id=admin_id,
    )
    logger.info("Pago conciliado automáticamente: familia={} importe={}", family.id, amount)
    return gift


def record_manual_payment(
    db: Session,
    wedding_id: str,
    family_id: str,
    amount: Decimal,
    transaction_date: datetime,
    reference_code_used: Optional[str] = None,
    admin_id: Optional[str] = None,
) -> Gift:
    """Alta manual de un pago por el admin."""
    family = families_crud.get_family(db, wedding_id, family_id)
    if family is None:
        raise NotFoundError("Family not found")
    gift = _create_gift(
        db,
        family,
        amount=amount,
        transaction_date=validate_transaction_date(transaction_date),
        reference_code_used=reference_code_used,
        auto_matched=False,
        admin_id=admin_id,
    )
    logger.info("Pago manual registrado: familia={} importe={}", family.id, amount)
    return gift


def list_gifts(db: Session, wedding_id: str, status: Optional[GiftStatus] = None) -> list[Gift]:
    query = db.query(Gift).filter(Gift.wedding_id == wedding_id)
    if status is not None:
        query = query.filter(Gift.status == status)
    return query.order_by(Gift.transaction_date.desc()).all()
