"""Fuentes de reverse-IP (proveedores concretos).

Por qué un paquete:
- Agrupa un módulo por proveedor.
- Cada módulo implementa `core.interfaces.source.ReverseIPSource`.

Para añadir una fuente: crear el módulo, exportarlo aquí y añadir la clase a
`DEFAULT_SOURCES` (el orden de la tupla es el orden de consulta por IP).
"""

from __future__ import annotations

from adapters.reverse_ip_sources.chaxunle import ChaxunleSource
from adapters.reverse_ip_sources.networksdb import NetworksDBSource
from adapters.reverse_ip_sources.rapiddns import RapidDNSSource
from adapters.reverse_ip_sources.thc_org import THCOrgSource
from adapters.reverse_ip_sources.tntcode import TNTcodeSource
from adapters.reverse_ip_sources.webscan import WebScanSource
from core.config import AppSettings
from core.interfaces.source import ReverseIPSource

DEFAULT_SOURCES = (
	RapidDNSSource,
	WebScanSource,
	TNTcodeSource,
	NetworksDBSource,
	ChaxunleSource,
	THCOrgSource,
)


def build_default_sources(settings: AppSettings | None = None) -> tuple[ReverseIPSource, ...]:
	settings = settings or AppSettings()
	return tuple(source(settings) for source in DEFAULT_SOURCES)


__all__ = [
	"DEFAULT_SOURCES",
	"ChaxunleSource",
	"NetworksDBSource",
	"RapidDNSSource",
	"THCOrgSource",
	"TNTcodeSource",
	"WebScanSource",
	"build_default_sources",
]
