"""Fuente reverse-IP: TNTcode.

Consulta:
- `https://domains.tntcode.com/ip/<ip>`

Los dominios vienen en `<textarea>`, uno por línea.
"""

from __future__ import annotations

import httpx
from bs4 import BeautifulSoup

from adapters.http_client import fetch_text
from core.config import AppSettings
from core.domain.hostnames import normalize_domain
from core.interfaces.source import ReverseIPSource


class TNTcodeSource(ReverseIPSource):
    name = "tntcode"
    base_url = "https://domains.tntcode.com"

    def __init__(self, settings: AppSettings | None = None) -> None:
        self._settings = settings or AppSettings()

    async def query(self, ip: str, client: httpx.AsyncClient) -> set[str]:
        html = await fetch_text(
            client,
            f"{self.base_url}/ip/{ip}",
            source=self.name,
            settings=self._settings,
        )
        return parse_tntcode(html)


def parse_tntcode(html: str) -> set[str]:
    soup = BeautifulSoup(html, "html.parser")
    domains: set[str] = set()
    for area in soup.find_all("textarea"):
        for line in area.get_text().splitlines():
            domain = normalize_domain(line)
            if domain and "tntcode" not in domain:
                domains.add(domain)
    return domains
