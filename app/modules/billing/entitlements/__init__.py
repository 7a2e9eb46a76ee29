# -*- coding: utf-8 -*-
"""
backend/app/modules/billing/entitlements/__init__.py

Ledger de entitlements (créditos comprables) y su otorgamiento por pago.

Uso:
    from app.modules.billing.entitlements import EntitlementLedger

    async with session.begin():
        await ledger.consume(session, user_id)
        ...  # crear la publicación en la misma transacción

Autor: Equipo Billing
Fecha: 2026-09-05
"""

from .errors import (
    EntitlementError,
    ExpiredCreditsError,
    InsufficientCreditsError,
    NoEntitlementError,
    TransientConcurrencyError,
)
from .grants import (
    ApplyEntitlements,
    ApplyEntitlementsRequest,
    EntitlementGrantService,
    GrantResult,
)
from .ledger import ConsumeResult, CreditSummary, EntitlementLedger
from .models import Entitlement, EntitlementGrant
from .repository import EntitlementRepository

__all__ = [
    "ApplyEntitlements",
    "ApplyEntitlementsRequest",
    "ConsumeResult",
    "CreditSummary",
    "Entitlement",
    "EntitlementError",
    "EntitlementGrant",
    "EntitlementGrantService",
    "EntitlementLedger",
    "EntitlementRepository",
    "ExpiredCreditsError",
    "GrantResult",
    "InsufficientCreditsError",
    "NoEntitlementError",
    "TransientConcurrencyError",
]
