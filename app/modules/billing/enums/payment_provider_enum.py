# -*- coding: utf-8 -*-
"""
backend/app/modules/billing/enums/payment_provider_enum.py

Pasarelas de pago soportadas por la conciliación de webhooks.
Conjunto cerrado: agregar una pasarela implica agregar su adapter.

Autor: Equipo Billing
Fecha: 2026-09-03
"""

from enum import StrEnum
from typing import Optional


class PaymentProvider(StrEnum):
    """Pasarela que originó un checkout o un webhook."""

    ZARINPAL = "zarinpal"
    IDPAY = "idpay"
    NEXTPAY = "nextpay"

    __pg_enum_name__ = "payment_provider_enum"

    @classmethod
    def parse(cls, raw: object) -> Optional["PaymentProvider"]:
        """Devuelve la pasarela para un nombre (sin distinguir mayúsculas) o None."""
        if not isinstance(raw, str):
            return None
        try:
            return cls(raw.strip().lower())
        except ValueError:
            return None


__all__ = ["PaymentProvider"]

# Fin del archivo backend/app/modules/billing/enums/payment_provider_enum.py
