# nupci/templates/renderer.py
# =================================================================================
# 🧩 Sustitución de placeholders {{nombre}} en asuntos y cuerpos de mensaje.
# ---------------------------------------------------------------------------------
# Una sola pasada: los valores insertados no se vuelven a escanear, y los
# tokens desconocidos se dejan tal cual.
# =================================================================================

import re
from typing import Iterable, Mapping

PLACEHOLDER_RE = re.compile(r"\{\{(\w+)\}\}")

AVAILABLE_PLACEHOLDERS = (
    "familyName",
    "coupleNames",
    "weddingDate",
    "weddingTime",
    "location",
    "magicLink",
    "rsvpCutoffDate",
    "referenceCode",
)


def render(template: str, variables: Mapping[str, str | None]) -> str:
    """Reemplaza cada {{clave}} conocida por su valor; el resto queda intacto."""
    if not template:
        return ""

    def _sub(match: re.Match) -> str:
        value = variables.get(match.group(1))
        return match.group(0) if value is None else str(value)

    return PLACEHOLDER_RE.sub(_sub, template)


def get_placeholders(template: str) -> list[str]:
    """Placeholders presentes en la plantilla, sin duplicados y en orden de aparición."""
    seen: list[str] = []
    for name in PLACEHOLDER_RE.findall(template or ""):
        if name not in seen:
            seen.append(name)
    return seen


def has_all_placeholders(template: str, required: Iterable[str]) -> bool:
    present = set(get_placeholders(template))
    return all(name in present for name in required)


def unknown_placeholders(template: str) -> list[str]:
    """Placeholders que el motor no sabe rellenar (útil para validar plantillas del admin)."""
    return [name for name in get_placeholders(template) if name not in AVAILABLE_PLACEHOLDERS]
