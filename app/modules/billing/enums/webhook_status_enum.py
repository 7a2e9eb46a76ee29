# -*- coding: utf-8 -*-
"""
backend/app/modules/billing/enums/webhook_status_enum.py

Estados normalizados de un webhook de pasarela y estados del
registro de auditoría de webhooks.

Autor: Equipo Billing
Fecha: 2026-09-03
"""

from enum import StrEnum


class WebhookStatus(StrEnum):
    """Resultado del pago según la pasarela, ya normalizado."""

    PAID = "PAID"
    PENDING = "PENDING"
    FAILED = "FAILED"
    REFUNDED = "REFUNDED"


class WebhookLogStatus(StrEnum):
    """Estado de procesamiento de una entrega registrada."""

    RECEIVED = "received"
    HANDLED = "handled"
    INVALID = "invalid"

    __pg_enum_name__ = "webhook_log_status_enum"


__all__ = ["WebhookStatus", "WebhookLogStatus"]

# Fin del archivo backend/app/modules/billing/enums/webhook_status_enum.py
