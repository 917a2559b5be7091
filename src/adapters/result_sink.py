"""Sink de resultados: fichero de texto deduplicado, un dominio por línea.

Por qué un lock y no un actor:
- Comprobar pertenencia, escribir la línea y contar tienen que ser una sola
  sección crítica; un `threading.Lock` lo garantiza tanto para workers asyncio
  como para hilos.

Por qué sin buffer:
- Cada línea llega al disco dentro de `accept`, así un fallo de escritura
  (disco lleno, fichero revocado) se detecta en el dominio que lo provoca y
  no en el `close()` final. El contador solo sube cuando la línea se escribió.
"""

from __future__ import annotations

import threading
from pathlib import Path
from types import TracebackType

from loguru import logger

from core.errors import SinkClosedError, SinkOpenError


class ResultSink:
    """Acumulador concurrente y deduplicado de dominios."""

    def __init__(self, path: Path) -> None:
        self._path = Path(path)
        self._lock = threading.Lock()
        self._seen: set[str] = set()
        self._count = 0
        self._closed = False

        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            # Se sobrescribe en cada escaneo.
            self._handle = self._path.open("wb", buffering=0)
        except OSError as exc:
            raise SinkOpenError(self._path, exc.strerror or str(exc)) from exc

        logger.debug("Result sink opened at {}", self._path)

    @property
    def path(self) -> Path:
        return self._path

    @property
    def count(self) -> int:
        return self.final_count()

    @property
    def closed(self) -> bool:
        return self._closed

    def accept(self, domain: str) -> bool:
        """Registra `domain` si es nuevo.

        Devuelve True solo para quien lo persiste por primera vez; duplicados,
        valores vacíos y escrituras fallidas devuelven False.
        """

        value = domain.strip()
        if not value:
            return False

        with self._lock:
            if self._closed:
                raise SinkClosedError(f"sink for {self._path} is closed")
            if value in self._seen:
                return False
            try:
                self._write_line(value)
            except OSError as exc:
                # No se marca como visto: otra fuente puede volver a intentarlo.
                logger.warning("Could not write {} to {}: {}", value, self._path, exc)
                return False
            self._seen.add(value)
            self._count += 1
            return True

    def _write_line(self, value: str) -> None:
        pending = memoryview((value + "\n").encode("utf-8"))
        while pending:
            written = self._handle.write(pending)
            pending = pending[written:]

    def final_count(self) -> int:
        with self._lock:
            return self._count

    def close(self) -> None:
        with self._lock:
            if self._closed:
                return
            self._closed = True
            try:
                self._handle.close()
            except OSError as exc:
                logger.error("Could not close {}: {}", self._path, exc)
        logger.debug("Result sink closed with {} domains", self._count)

    def __enter__(self) -> "ResultSink":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()
