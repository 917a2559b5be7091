"""Contrato de fuentes de reverse-IP.

Por qué Protocol:
- Define un contrato estructural (duck typing) sin herencia rígida.
- Añadir un proveedor nuevo = implementar `name` + `query` y registrarlo en
  `adapters.reverse_ip_sources.DEFAULT_SOURCES`.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

import httpx


@runtime_checkable
class ReverseIPSource(Protocol):
    """Contrato mínimo para un proveedor de reverse-IP.

    Reglas de diseño:
    - `query` es asíncrono porque hace I/O (HTTP) con el cliente compartido.
    - Un único intento lógico por llamada; sin reintentos internos.
    - Devuelve hostnames ya normalizados y sin duplicados.
    - Falla (excepción) solo ante problemas de transporte o de la respuesta
      completa; un registro malformado dentro de un lote se ignora.
    """

    name: str

    async def query(self, ip: str, client: httpx.AsyncClient) -> set[str]:
        """Consulta la fuente para `ip` y devuelve los hostnames alojados."""

        ...
