# -*- coding: utf-8 -*-
"""
backend/app/modules/billing/enums/checkout_status_enum.py

Estados de una sesión de checkout y su mapa de transiciones.

Reglas de transición:
- STARTED → PENDING | SUCCESS | FAILED
- PENDING → SUCCESS | FAILED
- FAILED  → SUCCESS   (llegó el pago tarde: el dinero no se descarta)
- SUCCESS → (terminal: un callback no pagado nunca lo degrada)

Autor: Equipo Billing
Fecha: 2026-09-03
"""

from enum import StrEnum
from typing import Dict, Set


class CheckoutStatus(StrEnum):
    """Estado de la sesión de checkout."""

    STARTED = "STARTED"
    PENDING = "PENDING"
    SUCCESS = "SUCCESS"
    FAILED = "FAILED"

    __pg_enum_name__ = "checkout_status_enum"


VALID_CHECKOUT_TRANSITIONS: Dict[CheckoutStatus, Set[CheckoutStatus]] = {
    CheckoutStatus.STARTED: {
        CheckoutStatus.PENDING,
        CheckoutStatus.SUCCESS,
        CheckoutStatus.FAILED,
    },
    CheckoutStatus.PENDING: {
        CheckoutStatus.SUCCESS,
        CheckoutStatus.FAILED,
    },
    CheckoutStatus.FAILED: {
        CheckoutStatus.SUCCESS,
    },
    CheckoutStatus.SUCCESS: set(),
}


def can_transition(from_status: CheckoutStatus, to_status: CheckoutStatus) -> bool:
    """
    Valida si una transición de estado es permitida.

    Reescribir el mismo estado (p. ej. SUCCESS → SUCCESS en un webhook
    duplicado) se considera válido.

    Args:
        from_status: Estado actual.
        to_status: Estado destino.

    Returns:
        True si la transición es válida.
    """
    if from_status == to_status:
        return True
    return to_status in VALID_CHECKOUT_TRANSITIONS.get(from_status, set())


__all__ = ["CheckoutStatus", "VALID_CHECKOUT_TRANSITIONS", "can_transition"]

# Fin del archivo backend/app/modules/billing/enums/checkout_status_enum.py
