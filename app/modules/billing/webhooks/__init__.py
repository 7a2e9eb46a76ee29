# -*- coding: utf-8 -*-
"""
backend/app/modules/billing/webhooks/__init__.py

Conciliación de webhooks de pasarelas.

Autor: Equipo Billing
Fecha: 2026-09-10
"""

from .errors import (
    InvalidPayloadError,
    InvalidSignatureError,
    PriceNotFoundError,
    ProviderMismatchError,
    SessionNotFoundError,
    UnknownProviderError,
    WebhookError,
)
from .reconciler import WebhookOutcome, WebhookReconciler
from .schemas import WebhookAck, WebhookErrorBody

__all__ = [
    "InvalidPayloadError",
    "InvalidSignatureError",
    "PriceNotFoundError",
    "ProviderMismatchError",
    "SessionNotFoundError",
    "UnknownProviderError",
    "WebhookAck",
    "WebhookError",
    "WebhookErrorBody",
    "WebhookOutcome",
    "WebhookReconciler",
]
