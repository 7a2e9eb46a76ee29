# -*- coding: utf-8 -*-
"""
backend/app/modules/billing/providers/zarinpal.py

Adapter de Zarinpal.

- externalId: authority / Authority / externalId
- providerRef: ref_id / refId / providerRef
- estado (status / Status / code), textual o numérico:
    ok | paid | 100          → PAID
    pending | 0              → PENDING
    refunded | refund | 200  → REFUNDED
    cualquier otro           → FAILED

Autor: Equipo Billing
Fecha: 2026-09-08
"""

from __future__ import annotations

from app.modules.billing.enums import PaymentProvider, WebhookStatus

from .base import Payload, ProviderAdapter, normalize_status, pick_scalar

STATUS_KEYS = ("status", "Status", "code")

_STATUS_MAP = {
    "ok": WebhookStatus.PAID,
    "paid": WebhookStatus.PAID,
    "100": WebhookStatus.PAID,
    "pending": WebhookStatus.PENDING,
    "0": WebhookStatus.PENDING,
    "refunded": WebhookStatus.REFUNDED,
    "refund": WebhookStatus.REFUNDED,
    "200": WebhookStatus.REFUNDED,
}


class ZarinpalAdapter(ProviderAdapter):
    provider = PaymentProvider.ZARINPAL
    external_id_keys = ("authority", "Authority", "externalId")
    provider_ref_keys = ("ref_id", "refId", "providerRef")

    def map_status(self, payload: Payload) -> WebhookStatus:
        token = normalize_status(pick_scalar(payload, STATUS_KEYS))
        return _STATUS_MAP.get(token, WebhookStatus.FAILED)


__all__ = ["ZarinpalAdapter"]
