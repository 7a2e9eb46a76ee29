# -*- coding: utf-8 -*-
"""
backend/app/modules/billing/providers/errors.py

Errores de normalización de payloads de pasarelas.

Autor: Equipo Billing
Fecha: 2026-09-08
"""


class ProviderPayloadError(ValueError):
    """
    El payload no trae un campo obligatorio.

    `reason` es el texto corto que se devuelve a la pasarela con HTTP 400
    (p. ej. "Missing externalId").
    """

    def __init__(self, reason: str, provider: str | None = None):
        self.reason = reason
        self.provider = provider
        super().__init__(reason)


__all__ = ["ProviderPayloadError"]

# Fin del archivo backend/app/modules/billing/providers/errors.py
