# -*- coding: utf-8 -*-
"""
backend/app/modules/billing/enums/__init__.py

Enums del módulo de billing.

Autor: Equipo Billing
Fecha: 2026-09-03
"""

from .checkout_status_enum import (
    CheckoutStatus,
    VALID_CHECKOUT_TRANSITIONS,
    can_transition,
)
from .entitlement_kind_enum import EntitlementKind
from .payment_provider_enum import PaymentProvider
from .payment_status_enum import InvoiceStatus, PaymentStatus
from .webhook_status_enum import WebhookLogStatus, WebhookStatus

__all__ = [
    "CheckoutStatus",
    "VALID_CHECKOUT_TRANSITIONS",
    "can_transition",
    "EntitlementKind",
    "PaymentProvider",
    "InvoiceStatus",
    "PaymentStatus",
    "WebhookLogStatus",
    "WebhookStatus",
]
