# nupci/utils/i18n.py                                                            # Ubicación del módulo central de i18n.

from __future__ import annotations                                                # Anotaciones pospuestas.

from datetime import date, datetime                                               # Tipos de fecha a formatear.

from nupci.models import Language                                                 # Idiomas soportados (ES/EN/FR/IT/DE).

# =================================================================================
# 🔤 Resolución de idioma: familia > boda > ES
# =================================================================================

def _coerce_language(code: Language | str | None) -> Language | None:            # Normaliza un código potencialmente regional.
    """Convierte 'es-ES', 'en', Language.FR... en Language; None si no está soportado."""
    if code is None:                                                              # Sin valor...
        return None                                                               # ...sin candidato.
    if isinstance(code, Language):                                                # Ya es enum...
        return code                                                               # ...se devuelve tal cual.
    primary = str(code).strip().split(",")[0].split(";")[0].split("-")[0].upper()  # 'fr-CA;q=0.8' → 'FR'.
    try:
        return Language(primary)                                                  # Valida contra el enum.
    except ValueError:
        return None                                                               # Idioma no soportado.


def resolve_language(
    family_lang: Language | str | None,                                           # Idioma preferido de la familia.
    wedding_lang: Language | str | None = None,                                   # Idioma por defecto de la boda.
    default: Language = Language.ES,                                              # Fallback estable del proyecto.
) -> Language:
    """Resuelve y devuelve siempre un idioma soportado."""
    return _coerce_language(family_lang) or _coerce_language(wedding_lang) or default


# =================================================================================
# 🗓️ Fechas localizadas (sin depender del locale del sistema)
# =================================================================================
_MONTHS: dict[Language, tuple[str, ...]] = {
    Language.ES: ("enero", "febrero", "marzo", "abril", "mayo", "junio", "julio",
                  "agosto", "septiembre", "octubre", "noviembre", "diciembre"),
    Language.EN: ("January", "February", "March", "April", "May", "June", "July",
                  "August", "September", "October", "November", "December"),
    Language.FR: ("janvier", "février", "mars", "avril", "mai", "juin", "juillet",
                  "août", "septembre", "octobre", "novembre", "décembre"),
    Language.IT: ("gennaio", "febbraio", "marzo", "aprile", "maggio", "giugno", "luglio",
                  "agosto", "settembre", "ottobre", "novembre", "dicembre"),
    Language.DE: ("Januar", "Februar", "März", "April", "Mai", "Juni", "Juli",
                  "August", "September", "Oktober", "November", "Dezember"),
}


def format_date(value: date | datetime | None, language: Language) -> str:      # Formatea una fecha por idioma.
    """Devuelve la fecha en texto legible según idioma ('1 de diciembre de 2025', 'December 1, 2025'...)."""
    if value is None:                                                             # Fechas opcionales...
        return ""                                                                 # ...se renderizan vacías.
    month = _MONTHS[language][value.month - 1]                                    # Nombre del mes.
    d, y = value.day, value.year                                                  # Día y año.
    if language is Language.ES:
        return f"{d} de {month} de {y}"                                           # '1 de diciembre de 2025'.
    if language is Language.EN:
        return f"{month} {d}, {y}"                                                # 'December 1, 2025'.
    if language is Language.DE:
        return f"{d}. {month} {y}"                                                # '1. Dezember 2025'.
    return f"{d} {month} {y}"                                                     # FR/IT: '1 décembre 2025'.
