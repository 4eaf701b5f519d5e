# nupci/utils/dates.py
# =================================================================================
# 🕒 Helpers de tiempo: todo se persiste y compara como UTC "naive".
# =================================================================================

from datetime import date, datetime, timezone


def utcnow() -> datetime:
    """Hora actual en UTC sin tzinfo (formato en que se guardan las columnas DateTime)."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_naive_utc(value: datetime | date) -> datetime:
    """Normaliza datetimes con zona horaria (o fechas sueltas) a UTC naive."""
    if not isinstance(value, datetime):
        return datetime(value.year, value.month, value.day)
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value
