# -*- coding: utf-8 -*-
"""
backend/app/modules/billing/entitlements/ledger.py

Ledger de entitlements: consulta y consumo de créditos.

Operaciones:
- has_credit: ¿existe una bolsa vigente con saldo?
- summarize: total/restante/vencimiento de las bolsas vigentes
- assert_has_credit_or_throw: clasifica por qué el usuario no puede consumir
- consume: descuenta un crédito dentro de la transacción de quien llama

Garantías de consume:
- Nunca deja remaining_credits negativo ni consume una bolsa vencida,
  aunque otra transacción haya cambiado la fila después de leerla.
- No hace commit ni reintenta: si el decremento condicional no afecta
  filas lanza TransientConcurrencyError y la transacción de quien llama
  debe abortarse.

Autor: Equipo Billing
Fecha: 2026-09-06
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.shared.utils.datetime_helpers import ensure_utc, utcnow
from app.modules.billing.enums import EntitlementKind

from .errors import (
    ExpiredCreditsError,
    InsufficientCreditsError,
    NoEntitlementError,
    TransientConcurrencyError,
)
from .repository import EntitlementRepository
from .selection import BundleTriage, evaluate_bundles, sort_for_consumption, summary_expiry

logger = logging.getLogger(__name__)

DEFAULT_KIND = EntitlementKind.JOB_POST_CREDIT


@dataclass(frozen=True)
class CreditSummary:
    """Resumen de créditos vigentes. total == remaining por ahora."""

    total: int
    remaining: int
    expires_at: Optional[datetime]


@dataclass(frozen=True)
class ConsumeResult:
    """Bolsa de la que se descontó el crédito y su saldo resultante."""

    entitlement_id: str
    remaining: int


class EntitlementLedger:
    """
    Ledger de créditos por tipo de entitlement.

    Todas las operaciones reciben la sesión explícitamente; el ledger no
    abre transacciones propias.
    """

    def __init__(
        self,
        repository: Optional[EntitlementRepository] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.repository = repository or EntitlementRepository()
        self._clock = clock

    def _now(self) -> datetime:
        return ensure_utc(self._clock())

    async def has_credit(
        self,
        session: AsyncSession,
        user_id: str,
        kind: EntitlementKind = DEFAULT_KIND,
    ) -> bool:
        return await self.repository.exists_active_with_credit(
            session, user_id, kind, self._now()
        )

    async def summarize(
        self,
        session: AsyncSession,
        user_id: str,
        kind: EntitlementKind = DEFAULT_KIND,
    ) -> Optional[CreditSummary]:
        """
        Resume las bolsas dentro de su ventana de vigencia.

        Returns:
            None si ninguna bolsa está vigente (incluye usuarios con solo
            bolsas vencidas); si hay bolsas vigentes en cero, un resumen
            con total 0.
        """
        bundles = await self.repository.list_bundles(session, user_id, kind)
        triage = evaluate_bundles(bundles, self._now())
        if not triage.within_window:
            return None

        total = sum(b.remaining_credits or 0 for b in triage.within_window)
        return CreditSummary(
            total=total,
            remaining=total,
            expires_at=summary_expiry(triage.within_window),
        )

    async def assert_has_credit_or_throw(
        self,
        session: AsyncSession,
        user_id: str,
        kind: EntitlementKind = DEFAULT_KIND,
    ) -> None:
        """
        Raises:
            NoEntitlementError: el usuario no tiene bolsas
            InsufficientCreditsError: hay bolsas vigentes, todas en cero
            ExpiredCreditsError: todas las bolsas vencieron
        """
        bundles = await self.repository.list_bundles(session, user_id, kind)
        if not bundles:
            raise NoEntitlementError(user_id=user_id)

        triage = evaluate_bundles(bundles, self._now())
        if triage.with_credits:
            return
        self._raise_for_triage(triage, user_id)

    async def consume(
        self,
        session: AsyncSession,
        user_id: str,
        kind: EntitlementKind = DEFAULT_KIND,
    ) -> ConsumeResult:
        """
        Descuenta un crédito de la bolsa que vence antes.

        Debe llamarse dentro de la transacción de negocio de quien llama
        (p. ej. la que crea la publicación que gasta el crédito).

        Raises:
            NoEntitlementError | InsufficientCreditsError | ExpiredCreditsError
            TransientConcurrencyError: la bolsa elegida cambió antes del UPDATE
        """
        now = self._now()
        bundles = await self.repository.list_bundles(session, user_id, kind)

        if not bundles:
            logger.debug("no_entitlement user_id=%s kind=%s", user_id, kind)
            raise NoEntitlementError(user_id=user_id)

        triage = evaluate_bundles(bundles, now)
        if not triage.with_credits:
            logger.debug(
                "no_active_credit user_id=%s kind=%s reason=%s",
                user_id,
                kind,
                "insufficient" if triage.within_window else "expired",
            )
            self._raise_for_triage(triage, user_id)

        target = sort_for_consumption(triage.with_credits)[0]
        affected = await self.repository.decrement_if_available(
            session,
            entitlement_id=target.id,
            user_id=user_id,
            kind=kind,
            now=now,
        )

        if affected == 0:
            logger.debug(
                "concurrency_conflict user_id=%s entitlement_id=%s",
                user_id,
                target.id,
            )
            raise TransientConcurrencyError(user_id=user_id, entitlement_id=target.id)

        # El UPDATE no sincroniza la identidad en sesión
        await session.refresh(target, attribute_names=["remaining_credits", "updated_at"])
        remaining = max(target.remaining_credits, 0)

        logger.debug(
            "credit_consumed user_id=%s entitlement_id=%s remaining=%d",
            user_id,
            target.id,
            remaining,
        )
        return ConsumeResult(entitlement_id=target.id, remaining=remaining)

    @staticmethod
    def _raise_for_triage(triage: BundleTriage, user_id: str) -> None:
        if triage.within_window:
            raise InsufficientCreditsError(user_id=user_id)
        if triage.expired:
            raise ExpiredCreditsError(user_id=user_id)
        raise NoEntitlementError(user_id=user_id)


__all__ = ["ConsumeResult", "CreditSummary", "EntitlementLedger"]

# Fin del archivo backend/app/modules/billing/entitlements/ledger.py
