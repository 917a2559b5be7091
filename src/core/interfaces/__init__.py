"""Contratos del Core.

Por qué:
- Define el Protocol que implementan las fuentes de reverse-IP concretas.
- El orquestador depende de la abstracción, nunca de una fuente concreta.
"""
