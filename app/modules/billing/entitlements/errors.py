# -*- coding: utf-8 -*-
"""
backend/app/modules/billing/entitlements/errors.py

Excepciones de dominio del ledger de entitlements.

Cada excepción expone un `code` estable (para la UI y para métricas) y un
mensaje apto para el usuario final.

Autor: Equipo Billing
Fecha: 2026-09-05
"""

from typing import Optional


class EntitlementError(Exception):
    """Base de los errores del ledger."""

    code = "ENTITLEMENT_ERROR"
    default_message = "No fue posible usar tus créditos."

    def __init__(self, message: Optional[str] = None, *, user_id: Optional[str] = None):
        self.user_id = user_id
        super().__init__(message or self.default_message)


class NoEntitlementError(EntitlementError):
    """El usuario nunca tuvo créditos del tipo solicitado."""

    code = "NO_ENTITLEMENT"
    default_message = "No tienes un plan activo para esta acción."


class InsufficientCreditsError(EntitlementError):
    """Hay bolsas vigentes pero todas están en cero."""

    code = "INSUFFICIENT_CREDITS"
    default_message = "Tus créditos se agotaron. Compra un nuevo paquete para continuar."


class ExpiredCreditsError(EntitlementError):
    """Todas las bolsas del usuario vencieron."""

    code = "EXPIRED_CREDITS"
    default_message = "Tus créditos vencieron. Compra un nuevo paquete para continuar."


class TransientConcurrencyError(EntitlementError):
    """
    Otra transacción consumió la bolsa elegida entre la lectura y el
    decremento condicional. Quien llama decide si reintenta.
    """

    code = "TRANSIENT_CONCURRENCY"
    default_message = "Tu solicitud chocó con otra operación. Intenta de nuevo."

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        user_id: Optional[str] = None,
        entitlement_id: Optional[str] = None,
    ):
        self.entitlement_id = entitlement_id
        super().__init__(message, user_id=user_id)


__all__ = [
    "EntitlementError",
    "NoEntitlementError",
    "InsufficientCreditsError",
    "ExpiredCreditsError",
    "TransientConcurrencyError",
]

# Fin del archivo backend/app/modules/billing/entitlements/errors.py
