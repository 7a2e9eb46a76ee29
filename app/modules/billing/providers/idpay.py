# -*- coding: utf-8 -*-
"""
backend/app/modules/billing/providers/idpay.py

Adapter de IDPay.

- externalId: id / ID / payment_id
- providerRef: track_id / order_id / providerRef
- estado numérico (status / Status / state) por rangos:
    >= 200 → REFUNDED, >= 100 → PAID, >= 0 → PENDING, < 0 → FAILED
  sin número, textual (status / state): paid|ok, refunded|refund, pending;
  el resto → FAILED

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


class IdpayAdapter(ProviderAdapter):
    provider = PaymentProvider.IDPAY
    external_id_keys = ("id", "ID", "payment_id")
    provider_ref_keys = ("track_id", "order_id", "providerRef")

    def map_status(self, payload: Payload) -> WebhookStatus:
        numeric = pick_number(payload, ("status", "Status", "state"))
        if numeric is not None:
            if numeric >= 200:
                return WebhookStatus.REFUNDED
            if numeric >= 100:
                return WebhookStatus.PAID
            if numeric >= 0:
                return WebhookStatus.PENDING
            return WebhookStatus.FAILED

        return status_from_text(normalize_status(pick_string(payload, ("status", "state"))))


__all__ = ["IdpayAdapter"]
