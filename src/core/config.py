"""Configuración del Core.

Por qué aquí:
- Centraliza variables de entorno (pydantic-settings) sin contaminar la CLI.
- Permite que adaptadores (HTTP/fuentes/sink) lean config de forma consistente.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def get_user_config_dir() -> Path:
    """Directorio de configuración por usuario (cross-platform, sin dependencias)."""

    if sys.platform.startswith("win"):
        base = Path(os.environ.get("APPDATA", str(Path.home())))
        return base / "ipfinder"
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / "ipfinder"

    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "ipfinder"
    return Path.home() / ".config" / "ipfinder"


def get_user_env_file() -> Path:
    return get_user_config_dir() / ".env"


class AppSettings(BaseSettings):
    """Configuración central de la aplicación.

    Por qué pydantic-settings:
    - Tipado + validación en el borde (env vars) sin ensuciar el Core con lógica.
    - Un único contrato de configuración para CLI/adapters.
    """

    model_config = SettingsConfigDict(
        env_prefix="IPFINDER_",
        extra="ignore",
        case_sensitive=False,
        # Orden: proyecto primero (dev), luego config global de usuario.
        env_file=(".env", str(get_user_env_file())),
        env_file_encoding="utf-8",
    )

    http_timeout_seconds: float = Field(
        default=15.0,
        gt=0,
        description="Timeout por request HTTP (segundos).",
    )
    user_agent: str = Field(
        default="ipfinder/0.1 (+https://local)",
        min_length=1,
        description="User-Agent fijo cuando la aleatorización está desactivada.",
    )
    randomize_user_agent: bool = Field(
        default=True,
        description="Elegir un User-Agent de navegador distinto en cada request.",
    )

    threads: int = Field(
        default=30,
        ge=1,
        le=1000,
        description="Workers concurrentes por defecto (IPs en vuelo).",
    )
    output_path: Path = Field(
        default=Path("results/domains.txt"),
        description="Fichero de salida por defecto (un dominio por línea).",
    )

    request_jitter_min_ms: int = Field(
        default=0,
        ge=0,
        description="Pausa aleatoria mínima antes de cada consulta a una fuente (ms).",
    )
    request_jitter_max_ms: int = Field(
        default=0,
        ge=0,
        description="Pausa aleatoria máxima antes de cada consulta a una fuente (ms). 0 = sin pausa.",
    )

    # thc.org pagina sus resultados; el resto de fuentes hace un único request.
    thc_max_pages: int = Field(
        default=20,
        ge=1,
        le=100,
        description="Máximo de páginas a seguir por IP en ip.thc.org.",
    )
    thc_page_delay_seconds: float = Field(
        default=0.1,
        ge=0,
        description="Pausa entre páginas consecutivas de ip.thc.org (segundos).",
    )

    log_level: str = Field(
        default="WARNING",
        description="Nivel de log en stderr (loguru) fuera de modo verbose.",
    )
    log_file: Path | None = Field(
        default=None,
        description="Fichero de log opcional (rotado).",
    )

    @model_validator(mode="after")
    def _check_jitter_range(self) -> "AppSettings":
        if self.request_jitter_max_ms and self.request_jitter_max_ms < self.request_jitter_min_ms:
            raise ValueError("request_jitter_max_ms must be >= request_jitter_min_ms")
        return self
