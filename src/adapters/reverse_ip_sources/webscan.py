"""Fuente reverse-IP: webscan.cc (API JSON).

Consulta:
- `https://api.webscan.cc/?action=query&ip=<ip>`

Responde un array JSON de objetos con campo `domain`.
"""

from __future__ import annotations

import json
from typing import Any

import httpx

from adapters.http_client import fetch_text
from core.config import AppSettings
from core.domain.hostnames import normalize_domain
from core.errors import SourceError
from core.interfaces.source import ReverseIPSource


class WebScanSource(ReverseIPSource):
    name = "webscan"
    base_url = "https://api.webscan.cc"

    def __init__(self, settings: AppSettings | None = None) -> None:
        self._settings = settings or AppSettings()

    async def query(self, ip: str, client: httpx.AsyncClient) -> set[str]:
        url = f"{self.base_url}/?action=query&ip={ip}"
        body = await fetch_text(
            client,
            url,
            source=self.name,
            settings=self._settings,
            accept="application/json",
        )
        try:
            payload = json.loads(body)
        except ValueError as exc:
            raise SourceError(self.name, f"invalid JSON: {exc}") from exc
        return parse_webscan(payload, source=self.name)


def parse_webscan(payload: Any, *, source: str = "webscan") -> set[str]:
    if not isinstance(payload, list):
        raise SourceError(source, f"unexpected payload type {type(payload).__name__}")

    domains: set[str] = set()
    for item in payload:
        if not isinstance(item, dict):
            continue
        raw = item.get("domain")
        if not isinstance(raw, str):
            continue
        domain = normalize_domain(raw)
        if domain:
            domains.add(domain)
    return domains
