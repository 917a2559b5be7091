"""Fuente reverse-IP: ip.thc.org (texto plano paginado).

Consulta:
- `https://ip.thc.org/<ip>`

Formato:
- Un hostname por línea, comentarios con `;`, colores ANSI opcionales.
- Si hay más resultados, una línea `Next Page: <url>` apunta a la siguiente.

Es la única fuente que hace más de un request por IP: sigue la cadena de
páginas en orden, con tope `thc_max_pages` y una pausa corta entre páginas.
"""

from __future__ import annotations

import asyncio
import re
from urllib.parse import urljoin

import httpx
from loguru import logger

from adapters.http_client import request_headers
from core.config import AppSettings
from core.domain.hostnames import normalize_domain
from core.errors import SourceError
from core.interfaces.source import ReverseIPSource

_ANSI_RE = re.compile(r"\x1b\[[0-9;]*[a-zA-Z]")
_NEXT_PAGE_MARKER = "Next Page:"


class THCOrgSource(ReverseIPSource):
    name = "thc-org"
    base_url = "https://ip.thc.org"

    def __init__(self, settings: AppSettings | None = None) -> None:
        self._settings = settings or AppSettings()

    async def query(self, ip: str, client: httpx.AsyncClient) -> set[str]:
        domains: set[str] = set()
        next_url: str | None = f"{self.base_url}/{ip}"
        pages = 0

        while next_url and pages < self._settings.thc_max_pages:
            if pages:
                await asyncio.sleep(self._settings.thc_page_delay_seconds)

            current = next_url
            try:
                response = await client.get(
                    current,
                    headers=request_headers(self._settings, accept="text/plain"),
                )
            except httpx.HTTPError as exc:
                if not pages:
                    raise
                logger.debug("{}: page {} failed ({!r}), stopping", self.name, pages + 1, exc)
                break
            if response.status_code != 200:
                if not pages:
                    raise SourceError(self.name, f"status {response.status_code}")
                logger.debug("{}: page {} returned {}, stopping", self.name, pages + 1, response.status_code)
                break

            page_domains, next_link = parse_thc_page(response.text or "")
            domains.update(page_domains)
            pages += 1

            next_url = urljoin(current, next_link) if next_link else None
            if next_url == current:
                break

        return domains


def parse_thc_page(body: str) -> tuple[list[str], str | None]:
    """Devuelve (dominios de la página, enlace a la siguiente o None)."""

    cleaned = _ANSI_RE.sub("", body)
    domains: list[str] = []
    next_link: str | None = None

    for raw_line in cleaned.splitlines():
        line = raw_line.strip()
        if _NEXT_PAGE_MARKER in line:
            candidate = line.split(_NEXT_PAGE_MARKER, 1)[1].strip()
            if candidate:
                next_link = candidate
            continue
        if not line or line.startswith(";"):
            continue
        if "." in line and " " not in line:
            domain = normalize_domain(line)
            if domain:
                domains.append(domain)

    return domains, next_link
