# -*- coding: utf-8 -*-
"""
backend/app/modules/billing/providers/nextpay.py

Adapter de NextPay. Los códigos de resultado siguen la convención de la
pasarela: 0 es éxito, 20 reembolso, positivos en curso, negativos error.

- externalId: trans_id / transaction_id / transId / externalId
- providerRef: order_id / orderId / providerRef
- estado numérico (code / status / result):
    0 → PAID, 20 → REFUNDED, > 0 → PENDING, < 0 → FAILED
  sin número, textual (status / result / state) como IDPay

Autor: Equipo Billing
Fecha: 2026-09-08
"""

from __future__ import annotations

from app.modules.billing.enums import PaymentProvider, WebhookStatus

from .base import (
    Payload,
    ProviderAdapter,
    normalize_status,
    pick_number,
    pick_string,
    status_from_text,
)


class NextpayAdapter(ProviderAdapter):
    provider = PaymentProvider.NEXTPAY
    external_id_keys = ("trans_id", "transaction_id", "transId", "externalId")
    provider_ref_keys = ("order_id", "orderId", "providerRef")

    def map_status(self, payload: Payload) -> WebhookStatus:
        code = pick_number(payload, ("code", "status", "result"))
        if code is not None:
            if code == 0:
                return WebhookStatus.PAID
            if code == 20:
                return WebhookStatus.REFUNDED
            if code > 0:
                return WebhookStatus.PENDING
            return WebhookStatus.FAILED

        return status_from_text(normalize_status(pick_string(payload, ("status", "result", "state"))))


__all__ = ["NextpayAdapter"]
