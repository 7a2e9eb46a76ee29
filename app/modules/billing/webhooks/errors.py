# -*- coding: utf-8 -*-
"""
backend/app/modules/billing/webhooks/errors.py

Rechazos de la conciliación de webhooks.

Cada excepción lleva el status HTTP y el texto corto que se devuelve a la
pasarela en {"error": ...}. Ninguno es un 5xx: un webhook malformado o
duplicado nunca debe hacer que la pasarela reintente indefinidamente.

Autor: Equipo Billing
Fecha: 2026-09-10
"""

from typing import Optional


class WebhookError(Exception):
    """Base de los rechazos de webhook."""

    status_code = 400
    default_error = "Bad request"

    def __init__(self, error: Optional[str] = None):
        self.error = error or self.default_error
        super().__init__(self.error)


class InvalidSignatureError(WebhookError):
    status_code = 401
    default_error = "Invalid signature"


class InvalidPayloadError(WebhookError):
    """JSON inválido, payload que no es objeto o campo obligatorio ausente."""

    status_code = 400
    default_error = "Invalid payload"


class ProviderMismatchError(WebhookError):
    status_code = 400
    default_error = "Provider mismatch"


class SessionNotFoundError(WebhookError):
    status_code = 404
    default_error = "Session not found"


class PriceNotFoundError(WebhookError):
    status_code = 404
    default_error = "Price not found"


class UnknownProviderError(WebhookError):
    status_code = 404
    default_error = "Unknown provider"


__all__ = [
    "WebhookError",
    "InvalidSignatureError",
    "InvalidPayloadError",
    "ProviderMismatchError",
    "SessionNotFoundError",
    "PriceNotFoundError",
    "UnknownProviderError",
]

# Fin del archivo backend/app/modules/billing/webhooks/errors.py
