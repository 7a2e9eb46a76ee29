# -*- coding: utf-8 -*-
"""
backend/app/modules/billing/providers/__init__.py

Registro cerrado de adapters de pasarela y fachada de funciones por
pasarela (extract_external_id, extract_provider_ref,
extract_amount_currency, map_provider_status, parse_webhook).

Uso:
    from app.modules.billing.providers import parse_webhook

    parsed = parse_webhook(PaymentProvider.IDPAY, payload)

Autor: Equipo Billing
Fecha: 2026-09-08
"""

from __future__ import annotations

from typing import Dict, Tuple

from app.modules.billing.enums import PaymentProvider, WebhookStatus

from .base import ParsedWebhook, Payload, ProviderAdapter
from .errors import ProviderPayloadError
from .idpay import IdpayAdapter
from .nextpay import NextpayAdapter
from .signature import compute_hmac_signature, verify_signature
from .zarinpal import ZarinpalAdapter

ADAPTERS: Dict[PaymentProvider, ProviderAdapter] = {
    PaymentProvider.ZARINPAL: ZarinpalAdapter(),
    PaymentProvider.IDPAY: IdpayAdapter(),
    PaymentProvider.NEXTPAY: NextpayAdapter(),
}


def get_adapter(provider: PaymentProvider) -> ProviderAdapter:
    return ADAPTERS[PaymentProvider(provider)]


def extract_external_id(provider: PaymentProvider, payload: Payload) -> str:
    return get_adapter(provider).extract_external_id(payload)


def extract_provider_ref(provider: PaymentProvider, payload: Payload) -> str:
    return get_adapter(provider).extract_provider_ref(payload)


def extract_amount_currency(provider: PaymentProvider, payload: Payload) -> Tuple[int, str]:
    return get_adapter(provider).extract_amount_currency(payload)


def map_provider_status(provider: PaymentProvider, payload: Payload) -> WebhookStatus:
    return get_adapter(provider).map_status(payload)


def parse_webhook(provider: PaymentProvider, payload: Payload) -> ParsedWebhook:
    return get_adapter(provider).parse(payload)


__all__ = [
    "ADAPTERS",
    "IdpayAdapter",
    "NextpayAdapter",
    "ParsedWebhook",
    "ProviderAdapter",
    "ProviderPayloadError",
    "ZarinpalAdapter",
    "compute_hmac_signature",
    "extract_amount_currency",
    "extract_external_id",
    "extract_provider_ref",
    "get_adapter",
    "map_provider_status",
    "parse_webhook",
    "verify_signature",
]
