# nupci/routers/templates.py
# =============================================================================
# ✉️ Rutas de administración: plantillas de mensaje
# - GET    /api/admin/templates            → listado paginado con filtros
# - POST   /api/admin/templates            → alta (409 si la clave ya existe)
# - PATCH  /api/admin/templates/{id}       → cambios parciales
# - DELETE /api/admin/templates/{id}
# - POST   /api/admin/templates/preview    → render con datos de ejemplo
# =============================================================================

import math
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

import nupci.schemas as schemas
from nupci.core.security import AdminContext, require_wedding_admin
from nupci.crud import templates_crud
from nupci.db import get_db
from nupci.errors import ValidationError
from nupci.models import Channel, Language, TemplateType
from nupci.templates.renderer import get_placeholders, render, unknown_placeholders

router = APIRouter(prefix="/api/admin/templates", tags=["templates"])


@router.get("", response_model=schemas.ApiResponse[schemas.TemplateListData])
def list_templates(
    type: Optional[TemplateType] = None,
    language: Optional[Language] = None,
    channel: Optional[Channel] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=100),
    admin: AdminContext = Depends(require_wedding_admin),
    db: Session = Depends(get_db),
):
    items, total = templates_crud.list_templates(
        db, admin.wedding_id, template_type=type, language=language, channel=channel, page=page, limit=limit
    )
    return {
        "success": True,
        "data": {
            "items": [schemas.TemplateOut.model_validate(t) for t in items],
            "pagination": {"page": page, "limit": limit, "total": total, "total_pages": math.ceil(total / limit)},
        },
    }


@router.post(
    "",
    response_model=schemas.ApiResponse[schemas.TemplateOut],
    status_code=status.HTTP_201_CREATED,
)
def create_template(
    payload: schemas.TemplateCreate,
    admin: AdminContext = Depends(require_wedding_admin),
    db: Session = Depends(get_db),
):
    template = templates_crud.create_template(db, admin.wedding_id, payload.model_dump())
    return {"success": True, "data": schemas.TemplateOut.model_validate(template)}


@router.patch("/{template_id}", response_model=schemas.ApiResponse[schemas.TemplateOut])
def update_template(
    template_id: str,
    payload: schemas.TemplateUpdate,
    admin: AdminContext = Depends(require_wedding_admin),
    db: Session = Depends(get_db),
):
    changes = payload.model_dump(exclude_unset=True)                # Solo lo que vino en el body.
    for field in ("subject", "body"):
        if field in changes and changes[field] is None:             # No se pueden vaciar.
            raise ValidationError(f"{field} cannot be null")
    template = templates_crud.update_template(db, admin.wedding_id, template_id, changes)
    return {"success": True, "data": schemas.TemplateOut.model_validate(template)}


@router.delete("/{template_id}", response_model=schemas.ApiResponse[dict])
def delete_template(
    template_id: str,
    admin: AdminContext = Depends(require_wedding_admin),
    db: Session = Depends(get_db),
):
    templates_crud.delete_template(db, admin.wedding_id, template_id)
    return {"success": True, "data": {"id": template_id, "deleted": True}}


@router.post("/preview", response_model=schemas.ApiResponse[schemas.TemplatePreviewData])
def preview_template(
    payload: schemas.TemplatePreviewRequest,
    admin: AdminContext = Depends(require_wedding_admin),
    db: Session = Depends(get_db),
):
    """Renderiza una plantilla guardada (template_id) o un texto libre con datos de ejemplo."""
    if payload.template_id:
        stored = templates_crud.get_owned(db, admin.wedding_id, payload.template_id)
        subject, body = stored.subject, stored.body
    elif payload.body is not None:
        subject, body = payload.subject or "", payload.body
    else:
        raise ValidationError("Either template_id or body is required")

    variables = payload.sample_data.model_dump()
    return {
        "success": True,
        "data": {
            "subject": render(subject, variables),
            "body": render(body, variables),
            "placeholders": get_placeholders(subject + "\n" + body),
            "unknown_placeholders": unknown_placeholders(subject + "\n" + body),
        },
    }
