"""Fuente reverse-IP: NetworksDB.

Consulta:
- `https://networksdb.io/domains-on-ip/<ip>`

El listado se renderiza en bloques `<pre class="threecols">`.
"""

from __future__ import annotations

import httpx
from bs4 import BeautifulSoup

from adapters.http_client import fetch_text
from core.config import AppSettings
from core.domain.hostnames import normalize_domain
from core.interfaces.source import ReverseIPSource


class NetworksDBSource(ReverseIPSource):
    name = "networksdb"
    base_url = "https://networksdb.io"

    def __init__(self, settings: AppSettings | None = None) -> None:
        self._settings = settings or AppSettings()

    async def query(self, ip: str, client: httpx.AsyncClient) -> set[str]:
        html = await fetch_text(
            client,
            f"{self.base_url}/domains-on-ip/{ip}",
            source=self.name,
            settings=self._settings,
        )
        return parse_networksdb(html)


def parse_networksdb(html: str) -> set[str]:
    soup = BeautifulSoup(html, "html.parser")
    domains: set[str] = set()
    for block in soup.find_all("pre", class_="threecols"):
        for line in block.get_text().splitlines():
            domain = normalize_domain(line)
            if domain and "networksdb" not in domain:
                domains.add(domain)
    return domains
