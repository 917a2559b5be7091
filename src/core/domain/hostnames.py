"""Normalización de hostnames.

Cada fuente scrapea strings con formatos distintos (URLs completas, `host:puerto`,
mayúsculas, prefijo `www.`). Este módulo los reduce a un hostname canónico o
los rechaza devolviendo "".
"""

from __future__ import annotations

import re

_SCHEME_RE = re.compile(r"^https?://")
_INVALID_CHARS_RE = re.compile(r"[^a-z0-9.-]")


def normalize_domain(raw: str) -> str:
    """Devuelve el hostname canónico de `raw` o "" si no parece un dominio."""

    if not raw:
        return ""

    value = raw.strip().lower()
    value = _SCHEME_RE.sub("", value)
    value = value.split("/", 1)[0]
    value = value.split(":", 1)[0]
    value = value.removeprefix("www.")
    value = _INVALID_CHARS_RE.sub("", value).strip(".")

    if "." not in value:
        return ""
    return value
