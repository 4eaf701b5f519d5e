# nupci/routers/payments.py
# =============================================================================
# 💶 Rutas de administración: pagos / regalos
# - GET  /api/admin/payments        → listado (filtro opcional por estado)
# - POST /api/admin/payments        → alta manual
# - POST /api/admin/payments/match  → conciliación por código de referencia
# - POST /api/admin/payments/reference-codes → genera códigos (modo AUTOMATED)
# =============================================================================

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

import nupci.schemas as schemas
from nupci.core.security import AdminContext, require_wedding_admin
from nupci.crud import families_crud
from nupci.db import get_db
from nupci.errors import NotFoundError
from nupci.models import GiftStatus
from nupci.services import payments

router = APIRouter(prefix="/api/admin/payments", tags=["payments"])


@router.get("", response_model=schemas.ApiResponse[list[schemas.GiftOut]])
def list_payments(
    status_filter: Optional[GiftStatus] = Query(None, alias="status"),
    admin: AdminContext = Depends(require_wedding_admin),
    db: Session = Depends(get_db),
):
    gifts = payments.list_gifts(db, admin.wedding_id, status_filter)
    return {"success": True, "data": [schemas.GiftOut.model_validate(g) for g in gifts]}


@router.post("", response_model=schemas.ApiResponse[schemas.GiftOut], status_code=status.HTTP_201_CREATED)
def record_payment(
    payload: schemas.PaymentCreate,
    admin: AdminContext = Depends(require_wedding_admin),
    db: Session = Depends(get_db),
):
    gift = payments.record_manual_payment(
        db,
        admin.wedding_id,
        payload.family_id,
        payload.amount,
        payload.transaction_date,
        reference_code_used=payload.reference_code_used,
        admin_id=admin.id,
    )
    return {"success": True, "data": schemas.GiftOut.model_validate(gift)}


@router.post("/match", response_model=schemas.ApiResponse[schemas.PaymentMatchData])
def match_payment(
    payload: schemas.PaymentMatchRequest,
    admin: AdminContext = Depends(require_wedding_admin),
    db: Session = Depends(get_db),
):
    gift = payments.match_payment(
        db, admin.wedding_id, payload.reference_code, payload.amount, payload.transaction_date, admin_id=admin.id
    )
    data = {"matched": gift is not None, "gift": schemas.GiftOut.model_validate(gift) if gift else None}
    return {"success": True, "data": data}


@router.post("/reference-codes", response_model=schemas.ApiResponse[dict])
def assign_reference_codes(
    admin: AdminContext = Depends(require_wedding_admin),
    db: Session = Depends(get_db),
):
    """Genera códigos de referencia para las familias que no tienen (modo AUTOMATED)."""
    wedding = families_crud.get_wedding(db, admin.wedding_id)
    if wedding is None:
        raise NotFoundError("Wedding not found")
    return {"success": True, "data": {"assigned": payments.assign_reference_codes(db, wedding)}}
