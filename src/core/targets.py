"""Carga y validación de IPs objetivo.

Formatos soportados:
- Una IP suelta (`-d`): si no es válida, error fatal.
- Un fichero (`-l`): una IP por línea; se ignoran líneas vacías y comentarios
  (`#`, `//`); las líneas inválidas se saltan y se reportan como aviso.
"""

from __future__ import annotations

import ipaddress
from dataclasses import dataclass, field
from pathlib import Path

from core.errors import InvalidTargetError, NoTargetsError, TargetFileError

_COMMENT_PREFIXES = ("#", "//")


@dataclass
class TargetFile:
    """IPs aceptadas de un fichero más las líneas descartadas (nº de línea, texto)."""

    targets: list[str] = field(default_factory=list)
    skipped: list[tuple[int, str]] = field(default_factory=list)


def is_valid_ip(value: str) -> bool:
    if not value:
        return False
    try:
        ipaddress.ip_address(value)
    except ValueError:
        return False
    return True


def parse_single_target(raw: str) -> str:
    value = raw.strip()
    if not is_valid_ip(value):
        raise InvalidTargetError(value)
    return value


def load_targets_file(path: Path) -> TargetFile:
    """Lee `path` y devuelve las IPs válidas en orden (duplicados incluidos)."""

    try:
        text = path.read_text(encoding="utf-8", errors="replace")
    except OSError as exc:
        raise TargetFileError(path, exc.strerror or str(exc)) from exc

    result = TargetFile()
    for lineno, raw_line in enumerate(text.splitlines(), start=1):
        line = raw_line.strip()
        if not line or line.startswith(_COMMENT_PREFIXES):
            continue
        if not is_valid_ip(line):
            result.skipped.append((lineno, line))
            continue
        result.targets.append(line)

    if not result.targets:
        raise NoTargetsError(path)
    return result
