"""Fuente reverse-IP: RapidDNS.

Consulta:
- `https://rapiddns.io/sameip/<ip>?full=1`

La tabla de resultados lista un hostname por celda `<td>`.
"""

from __future__ import annotations

import re

import httpx
from bs4 import BeautifulSoup

from adapters.http_client import fetch_text
from core.config import AppSettings
from core.domain.hostnames import normalize_domain
from core.interfaces.source import ReverseIPSource

_CELL_DOMAIN_RE = re.compile(r"^[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")


class RapidDNSSource(ReverseIPSource):
    name = "rapiddns"
    base_url = "https://rapiddns.io"

    def __init__(self, settings: AppSettings | None = None) -> None:
        self._settings = settings or AppSettings()

    async def query(self, ip: str, client: httpx.AsyncClient) -> set[str]:
        url = f"{self.base_url}/sameip/{ip}?full=1"
        html = await fetch_text(
            client,
            url,
            source=self.name,
            settings=self._settings,
            extra_headers={
                "Accept-Language": "en-US,en;q=0.9",
                "Referer": f"{self.base_url}/",
            },
        )
        return parse_rapiddns(html)


def parse_rapiddns(html: str) -> set[str]:
    soup = BeautifulSoup(html, "html.parser")
    domains: set[str] = set()
    for cell in soup.find_all("td"):
        text = cell.get_text(strip=True)
        if not _CELL_DOMAIN_RE.match(text):
            continue
        domain = normalize_domain(text)
        if domain and "rapiddns" not in domain:
            domains.add(domain)
    return domains
