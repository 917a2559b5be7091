"""Modelos del dominio (Pydantic v2).

Por qué Pydantic en el dominio:
- Nos da validación estricta y documentación autocontenida (Field) sin acoplar
  el Core a librerías de I/O.
- El resumen de un escaneo se puede serializar tal cual (CLI, logs, tests).

Nota:
- Los dominios descubiertos no se modelan como entidad: viven solo en el sink.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ScanStatus(str, Enum):
    """Resultado global de `ScanOrchestrator.run()`.

    Los errores fatales no son un estado: se propagan como excepción.
    """

    SUCCESS = "success"
    CANCELLED = "cancelled"


class ScanResult(BaseModel):
    """Resumen de un escaneo completo (o interrumpido)."""

    status: ScanStatus = Field(
        ...,
        description="SUCCESS si se procesaron todas las IPs; CANCELLED si se interrumpió.",
    )
    output_path: Path = Field(
        ...,
        description="Fichero donde se persistieron los dominios.",
    )
    targets_total: int = Field(
        ...,
        ge=0,
        description="IPs en la lista de trabajo (duplicados incluidos).",
    )
    targets_processed: int = Field(
        default=0,
        ge=0,
        description="IPs cuyas fuentes se consultaron todas.",
    )
    domains_found: int = Field(
        default=0,
        ge=0,
        description="Dominios distintos aceptados por el sink (= líneas escritas).",
    )
    source_failures: int = Field(
        default=0,
        ge=0,
        description="Pares (IP, fuente) que fallaron y se aislaron.",
    )
    started_at: datetime = Field(
        default_factory=_utcnow,
        description="Inicio del escaneo (UTC).",
    )
    finished_at: datetime | None = Field(
        default=None,
        description="Fin del escaneo (UTC).",
    )

    @property
    def cancelled(self) -> bool:
        return self.status is ScanStatus.CANCELLED

    @property
    def elapsed_seconds(self) -> float:
        if self.finished_at is None:
            return 0.0
        return (self.finished_at - self.started_at).total_seconds()
