"""Modelos del dominio y helpers puros sobre hostnames.

Aquí no hay HTTP ni ficheros: solo conceptos del problema (estado de un
escaneo, forma canónica de un dominio).
"""
