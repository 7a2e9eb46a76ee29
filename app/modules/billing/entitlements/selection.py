# -*- coding: utf-8 -*-
"""
backend/app/modules/billing/entitlements/selection.py

Reglas puras de clasificación y orden de bolsas de créditos.

- Ventana activa: expires_at es NULL o posterior a `now`.
- Con créditos: remaining_credits > 0.
- Vencida: expires_at no NULL y <= now.
- Orden de consumo: vence antes primero; sin vencimiento al final;
  empates por updated_at más antiguo.

Autor: Equipo Billing
Fecha: 2026-09-05
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Iterable, List, Optional, Sequence, Tuple

from app.shared.utils.datetime_helpers import ensure_utc

from .models import Entitlement


def is_within_window(bundle: Entitlement, now: datetime) -> bool:
    expires_at = ensure_utc(bundle.expires_at)
    return expires_at is None or expires_at > now


def has_remaining_credits(bundle: Entitlement) -> bool:
    return (bundle.remaining_credits or 0) > 0


@dataclass
class BundleTriage:
    """Bolsas de un usuario clasificadas respecto a `now`."""

    within_window: List[Entitlement] = field(default_factory=list)
    with_credits: List[Entitlement] = field(default_factory=list)
    expired: List[Entitlement] = field(default_factory=list)


def evaluate_bundles(bundles: Iterable[Entitlement], now: datetime) -> BundleTriage:
    triage = BundleTriage()
    for bundle in bundles:
        if is_within_window(bundle, now):
            triage.within_window.append(bundle)
            if has_remaining_credits(bundle):
                triage.with_credits.append(bundle)
        else:
            triage.expired.append(bundle)
    return triage


def _consumption_key(bundle: Entitlement) -> Tuple[bool, datetime, datetime]:
    expires_at = ensure_utc(bundle.expires_at)
    updated_at = ensure_utc(bundle.updated_at)
    # Sin vencimiento ordena al final; el segundo campo solo desempata fechas
    return (expires_at is None, expires_at or updated_at, updated_at)


def sort_for_consumption(bundles: Sequence[Entitlement]) -> List[Entitlement]:
    """Orden estable en que se consumen las bolsas."""
    return sorted(bundles, key=_consumption_key)


def summary_expiry(bundles: Sequence[Entitlement]) -> Optional[datetime]:
    """
    Vencimiento que se reporta al usuario.

    None si alguna bolsa nunca vence; si no, el vencimiento más próximo.
    """
    if not bundles or any(b.expires_at is None for b in bundles):
        return None
    return ensure_utc(sort_for_consumption(bundles)[0].expires_at)


__all__ = [
    "BundleTriage",
    "evaluate_bundles",
    "has_remaining_credits",
    "is_within_window",
    "sort_for_consumption",
    "summary_expiry",
]
