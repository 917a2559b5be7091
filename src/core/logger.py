"""Logging centralizado (loguru).

Reglas:
- stderr: nivel configurable; DEBUG en verbose, solo errores en silent.
- Fichero opcional con rotación.
- La salida para el usuario (dominios, resumen) va por rich, no por aquí.
"""

from __future__ import annotations

import sys
from pathlib import Path

from loguru import logger

_FORMAT = "<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | {name}:{function} - {message}"


def setup_logger(
    *,
    verbose: bool = False,
    silent: bool = False,
    level: str = "WARNING",
    log_file: Path | None = None,
    colorize: bool = True,
) -> None:
    """Configura los sinks de loguru para una ejecución de la CLI."""

    logger.remove()

    if verbose:
        console_level = "DEBUG"
    elif silent:
        console_level = "ERROR"
    else:
        console_level = level.upper()

    logger.add(sys.stderr, level=console_level, format=_FORMAT, colorize=colorize)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_file,
            level="DEBUG",
            rotation="10 MB",
            retention=3,
            encoding="utf-8",
            enqueue=True,
        )
