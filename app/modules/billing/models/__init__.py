# -*- coding: utf-8 -*-
"""
backend/app/modules/billing/models/__init__.py

Modelos ORM de billing (checkout, precios, pagos, facturas, auditoría
de webhooks). Los modelos del ledger viven en
app.modules.billing.entitlements.models.

Este módulo NO importa services ni routers para evitar imports circulares.

Autor: Equipo Billing
Fecha: 2026-09-04
"""

from .checkout_session import CheckoutSession
from .invoice import Invoice
from .payment import Payment
from .price import FALLBACK_CURRENCY, Price
from .webhook_log import PaymentWebhookLog

__all__ = [
    "CheckoutSession",
    "Invoice",
    "Payment",
    "PaymentWebhookLog",
    "Price",
    "FALLBACK_CURRENCY",
]
