"""Adaptadores de I/O: HTTP, fuentes de reverse-IP y sink de resultados."""
