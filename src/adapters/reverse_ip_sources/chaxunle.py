"""Fuente reverse-IP: chaxunle.cn.

Consulta:
- `https://www.chaxunle.cn/ip/<ip>.html`

La página no tiene una estructura estable, así que se extrae cualquier token
con forma de dominio y se filtra el ruido conocido (enlaces propios, CDNs).
"""

from __future__ import annotations

import re

import httpx

from adapters.http_client import fetch_text
from core.config import AppSettings
from core.domain.hostnames import normalize_domain
from core.interfaces.source import ReverseIPSource

_DOMAIN_TOKEN_RE = re.compile(r"[a-zA-Z0-9][a-zA-Z0-9.-]+\.[a-zA-Z]{2,}")

_NOISE = ("chaxunle", "baidu", "qq.com")


class ChaxunleSource(ReverseIPSource):
    name = "chaxunle"
    base_url = "https://www.chaxunle.cn"

    def __init__(self, settings: AppSettings | None = None) -> None:
        self._settings = settings or AppSettings()

    async def query(self, ip: str, client: httpx.AsyncClient) -> set[str]:
        html = await fetch_text(
            client,
            f"{self.base_url}/ip/{ip}.html",
            source=self.name,
            settings=self._settings,
            extra_headers={"Accept-Language": "en-US,en;q=0.9"},
        )
        return parse_chaxunle(html)


def parse_chaxunle(html: str) -> set[str]:
    domains: set[str] = set()
    for token in _DOMAIN_TOKEN_RE.findall(html):
        domain = normalize_domain(token)
        if domain and not any(noise in domain for noise in _NOISE):
            domains.add(domain)
    return domains
