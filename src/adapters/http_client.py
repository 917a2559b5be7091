"""Wrapper de httpx.

Por qué un wrapper:
- Estandariza timeouts, headers y límites de conexión del cliente compartido.
- Facilita testeo: se puede inyectar un `httpx.MockTransport`.
- Agrupa los helpers por-request (User-Agent aleatorio, jitter) que usan
  todas las fuentes.
"""

from __future__ import annotations

import asyncio
import random

import httpx

from core.config import AppSettings
from core.errors import SourceError

HTML_ACCEPT = "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8"

_BROWSERS = ("chrome", "firefox", "safari", "edge", "opera")

_PLATFORMS = (
    "Windows NT 10.0",
    "Windows NT 6.3",
    "Windows NT 6.2",
    "Windows NT 6.1",
    "Macintosh; Intel Mac OS X 10_15",
    "Macintosh; Intel Mac OS X 10_14",
    "Macintosh; Intel Mac OS X 10_13",
    "X11; Linux x86_64",
    "X11; Ubuntu; Linux x86_64",
)

_CHROME_VERSIONS = tuple(f"{major}.0.0.0" for major in range(101, 121))
_FIREFOX_VERSIONS = tuple(f"{major}.0" for major in range(101, 121))


def random_user_agent() -> str:
    """User-Agent de navegador elegido al azar para un único request.

    Sin estado global: cada llamada elige de nuevo, así que no necesita locks.
    """

    browser = random.choice(_BROWSERS)
    platform = random.choice(_PLATFORMS)
    windows = "Windows" in platform

    if browser == "firefox":
        version = random.choice(_FIREFOX_VERSIONS)
        if windows:
            return f"Mozilla/5.0 ({platform}; Win64; x64; rv:{version}) Gecko/20100101 Firefox/{version}"
        return f"Mozilla/5.0 ({platform}; rv:{version}) Gecko/20100101 Firefox/{version}"

    version = random.choice(_CHROME_VERSIONS)
    if browser == "chrome" and not windows:
        return (
            f"Mozilla/5.0 ({platform}) AppleWebKit/537.36 (KHTML, like Gecko) "
            f"Chrome/{version} Safari/537.36"
        )
    # El resto se presenta como Chrome de escritorio en Windows.
    return (
        f"Mozilla/5.0 ({platform}; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) "
        f"Chrome/{version} Safari/537.36"
    )


async def jitter(min_ms: int, max_ms: int) -> None:
    """Pausa aleatoria entre `min_ms` y `max_ms`; no hace nada si `max_ms` es 0."""

    if max_ms <= 0:
        return
    delay_ms = random.randint(min(min_ms, max_ms), max_ms)
    await asyncio.sleep(delay_ms / 1000)


def build_async_client(
    settings: AppSettings | None = None,
    *,
    max_connections: int | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Crea el `httpx.AsyncClient` compartido por todos los workers de un escaneo.

    Por qué un builder:
    - Centraliza timeouts/headers para que todas las fuentes se comporten igual.
    - El timeout por request evita que un servicio colgado bloquee un worker.
    """

    settings = settings or AppSettings()
    headers: dict[str, str] = {
        "User-Agent": settings.user_agent,
        "Accept": HTML_ACCEPT,
    }
    limits = httpx.Limits(
        max_connections=max_connections or 100,
        max_keepalive_connections=20,
    )
    return httpx.AsyncClient(
        timeout=httpx.Timeout(settings.http_timeout_seconds),
        follow_redirects=True,
        headers=headers,
        limits=limits,
        transport=transport,
    )


def request_headers(
    settings: AppSettings,
    *,
    accept: str = HTML_ACCEPT,
    extra_headers: dict[str, str] | None = None,
) -> dict[str, str]:
    headers = {"Accept": accept}
    if settings.randomize_user_agent:
        headers["User-Agent"] = random_user_agent()
    if extra_headers:
        headers.update(extra_headers)
    return headers


async def fetch_text(
    client: httpx.AsyncClient,
    url: str,
    *,
    source: str,
    settings: AppSettings,
    accept: str = HTML_ACCEPT,
    extra_headers: dict[str, str] | None = None,
) -> str:
    """GET de `url` que exige HTTP 200 y devuelve el cuerpo como texto.

    Errores de transporte (`httpx.HTTPError`) se propagan tal cual; un status
    distinto de 200 se convierte en `SourceError`.
    """

    response = await client.get(
        url,
        headers=request_headers(settings, accept=accept, extra_headers=extra_headers),
    )
    if response.status_code != 200:
        raise SourceError(source, f"status {response.status_code}")
    return response.text or ""
