# -*- coding: utf-8 -*-
"""
backend/app/modules/billing/enums/payment_status_enum.py

Enums de estado de pagos y facturas.
Sincronizados con los tipos ENUM de PostgreSQL:
payment_status_enum, invoice_status_enum.

Autor: Equipo Billing
Fecha: 2026-09-03
"""

from enum import StrEnum


class PaymentStatus(StrEnum):
    """Estado del registro financiero de un pago."""

    PAID = "PAID"
    PENDING = "PENDING"
    FAILED = "FAILED"
    REFUNDED = "REFUNDED"
    REFUNDED_PARTIAL = "REFUNDED_PARTIAL"

    __pg_enum_name__ = "payment_status_enum"


class InvoiceStatus(StrEnum):
    """Estado de la factura emitida por un pago."""

    PAID = "PAID"
    VOID = "VOID"

    __pg_enum_name__ = "invoice_status_enum"


__all__ = ["PaymentStatus", "InvoiceStatus"]

# Fin del archivo backend/app/modules/billing/enums/payment_status_enum.py
