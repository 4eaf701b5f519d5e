# nupci/crud/families_crud.py                                                   # Indica la ruta del archivo dentro del proyecto.

# =================================================================================
# 🧩 CRUD de bodas y familias (solo lectura) usado por el motor de recordatorios.
# - Toda consulta de familias se acota a la boda de la sesión (aislamiento tenant).
# - El orden de listado (created_at, id) es el orden de envío del lote.
# =================================================================================

from typing import Iterable, Optional                              # Tipado.

from sqlalchemy import func                                        # lower() para búsquedas case-insensitive.
from sqlalchemy.orm import Session, selectinload                   # Sesión y carga anticipada de miembros.

from nupci.models import Family, Wedding                           # Modelos ORM.


def get_wedding(db: Session, wedding_id: str) -> Optional[Wedding]:
    """Devuelve la boda (no borrada) o None."""
    return (
        db.query(Wedding)
        .filter(Wedding.id == wedding_id, Wedding.is_deleted.is_(False))
        .first()
    )


def _families_query(db: Session, wedding_id: str):
    return (
        db.query(Family)
        .options(selectinload(Family.members))                     # Evita N+1 al evaluar has_rsvp.
        .filter(Family.wedding_id == wedding_id)
        .order_by(Family.created_at.asc(), Family.id.asc())        # Orden estable de listado.
    )


def list_families(db: Session, wedding_id: str) -> list[Family]:
    """Todas las familias de la boda en orden de listado."""
    return _families_query(db, wedding_id).all()


def get_families_by_ids(db: Session, wedding_id: str, family_ids: Iterable[str]) -> list[Family]:
    """Familias pedidas explícitamente (ids de otras bodas o inexistentes se ignoran)."""
    ids = list(dict.fromkeys(fid for fid in family_ids if fid))    # Quita duplicados conservando orden.
    if not ids:
        return []
    return _families_query(db, wedding_id).filter(Family.id.in_(ids)).all()


def get_family(db: Session, wedding_id: str, family_id: str) -> Optional[Family]:
    return (
        db.query(Family)
        .filter(Family.id == family_id, Family.wedding_id == wedding_id)
        .first()
    )


def get_by_reference_code(db: Session, wedding_id: str, reference_code: str) -> Optional[Family]:
    """Busca la familia por código de referencia (case-insensitive, sin espacios)."""
    norm = (reference_code or "").strip().upper()                  # Los códigos se generan en mayúsculas.
    if not norm:
        return None
    return (
        db.query(Family)
        .filter(Family.wedding_id == wedding_id, func.upper(Family.reference_code) == norm)
        .first()
    )


def reference_code_exists(db: Session, reference_code: str) -> bool:
    return db.query(Family.id).filter(Family.reference_code == reference_code).first() is not None
