"""Taxonomía de errores.

Dos familias con tratamiento distinto:
- Fatales (entrada/salida): abortan antes de escanear; la CLI los traduce a exit 1.
- Aislados (`SourceError`): se quedan en el par (IP, fuente) que los produjo.
"""

from __future__ import annotations

from pathlib import Path


class IPFinderError(Exception):
    """Base de todos los errores propios."""


class TargetError(IPFinderError):
    """Problemas con la lista de IPs de entrada."""


class InvalidTargetError(TargetError):
    def __init__(self, value: str) -> None:
        super().__init__(f"Invalid IP address: {value}")
        self.value = value


class TargetFileError(TargetError):
    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"Cannot read {path}: {reason}")
        self.path = path


class NoTargetsError(TargetError):
    def __init__(self, path: Path) -> None:
        super().__init__(f"No valid IPs found in {path}")
        self.path = path


class SinkError(IPFinderError):
    """Problemas con el fichero de resultados."""


class SinkOpenError(SinkError):
    def __init__(self, path: Path, reason: str) -> None:
        super().__init__(f"Cannot open output file {path}: {reason}")
        self.path = path


class SinkClosedError(SinkError):
    """Se intentó escribir después de `close()`."""


class SourceError(IPFinderError):
    """Fallo de una fuente para una IP (status != 200, respuesta ilegible)."""

    def __init__(self, source: str, message: str) -> None:
        super().__init__(f"{source}: {message}")
        self.source = source
