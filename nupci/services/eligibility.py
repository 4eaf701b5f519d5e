# nupci/services/eligibility.py
# =================================================================================
# 🎯 Selección de familias elegibles para un lote de recordatorios.
# =================================================================================

from datetime import datetime
from typing import Optional, Sequence

from loguru import logger
from sqlalchemy.orm import Session

from nupci.crud import families_crud
from nupci.errors import RsvpCutoffPassedError
from nupci.models import Family, Wedding
from nupci.utils.dates import to_naive_utc, utcnow


def is_cutoff_passed(wedding: Wedding, now: datetime) -> bool:
    return to_naive_utc(now) > to_naive_utc(wedding.rsvp_cutoff_date)


def select_eligible_families(
    db: Session,
    wedding: Wedding,
    family_ids: Optional[Sequence[str]] = None,
    now: Optional[datetime] = None,
) -> list[Family]:
    """
    Familias a las que se intentará enviar, en orden de listado.

    - Pasada la fecha límite de RSVP se lanza RsvpCutoffPassedError antes de leer familias.
    - Con family_ids explícitos se devuelven esas familias sin mirar su RSVP.
    - Sin filtro, solo las familias en las que ningún miembro ha respondido.
    """
    now = now or utcnow()
    if is_cutoff_passed(wedding, now):
        logger.info("Lote rechazado: cutoff {} superado (wedding={})", wedding.rsvp_cutoff_date, wedding.id)
        raise RsvpCutoffPassedError()

    if family_ids:
        families = families_crud.get_families_by_ids(db, wedding.id, family_ids)
        if len(families) != len(set(family_ids)):
            logger.warning(
                "{} ids de familia ignorados (inexistentes o de otra boda)",
                len(set(family_ids)) - len(families),
            )
        return families

    return [family for family in families_crud.list_families(db, wedding.id) if not family.has_rsvp]
