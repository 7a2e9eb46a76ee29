# -*- coding: utf-8 -*-
"""
backend/app/modules/billing/entitlements/grants.py

Otorgamiento de créditos por pago confirmado (applyEntitlements).

Es la implementación por defecto del colaborador que la conciliación de
webhooks invoca después del commit. Es idempotente por pago: la fila de
entitlement_grants con payment_id UNIQUE se inserta en el mismo SAVEPOINT
que la bolsa de créditos, así que un segundo intento (reentrega, barrido
del job o carrera entre procesos) no otorga de nuevo.

Resultados (reason):
- PAYMENT_NOT_FOUND / PAYMENT_NOT_PAID
- PAYMENT_USER_MISMATCH
- PRICE_NOT_AVAILABLE (no existe o inactivo)
- UNSUPPORTED_PRICE_INTENT (el precio no otorga entitlements)
- ALREADY_GRANTED

Autor: Equipo Billing
Fecha: 2026-09-07
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Awaitable, Callable, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.shared.utils.datetime_helpers import utcnow
from app.modules.billing.enums import PaymentStatus
from app.modules.billing.models import Payment, Price

from .repository import EntitlementRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ApplyEntitlementsRequest:
    """Pago confirmado cuyos entitlements deben aplicarse."""

    user_id: str
    price_id: str
    payment_id: str


@dataclass(frozen=True)
class GrantResult:
    applied: bool
    reason: Optional[str] = None
    entitlement_id: Optional[str] = None
    credits: int = 0


# Firma del colaborador que invoca el reconciliador
ApplyEntitlements = Callable[[ApplyEntitlementsRequest], Awaitable[object]]


class EntitlementGrantService:
    """Convierte pagos PAID en bolsas de créditos, una vez por pago."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        repository: Optional[EntitlementRepository] = None,
        clock: Callable[[], datetime] = utcnow,
    ):
        self._session_factory = session_factory
        self.repository = repository or EntitlementRepository()
        self._clock = clock

    async def apply_entitlements(self, request: ApplyEntitlementsRequest) -> GrantResult:
        """
        Aplica los entitlements del pago en una transacción propia.

        Args:
            request: usuario, precio y pago a aplicar

        Returns:
            GrantResult con applied=True si se creó una bolsa nueva
        """
        async with self._session_factory() as session:
            async with session.begin():
                result = await self._apply(session, request)

        if result.applied:
            logger.info(
                "entitlement_granted payment_id=%s user_id=%s entitlement_id=%s credits=%d",
                request.payment_id,
                request.user_id,
                result.entitlement_id,
                result.credits,
            )
        else:
            logger.info(
                "entitlement_not_granted payment_id=%s reason=%s",
                request.payment_id,
                result.reason,
            )
        return result

    # Alias para usar la instancia como colaborador ApplyEntitlements
    __call__ = apply_entitlements

    async def _apply(self, session: AsyncSession, request: ApplyEntitlementsRequest) -> GrantResult:
        payment = await session.get(Payment, request.payment_id)
        if payment is None:
            return GrantResult(applied=False, reason="PAYMENT_NOT_FOUND")
        if payment.status != PaymentStatus.PAID:
            return GrantResult(applied=False, reason="PAYMENT_NOT_PAID")
        if payment.user_id != request.user_id:
            logger.warning(
                "entitlement_user_mismatch payment_id=%s payment_user=%s request_user=%s",
                payment.id,
                payment.user_id,
                request.user_id,
            )
            return GrantResult(applied=False, reason="PAYMENT_USER_MISMATCH")

        price = await session.get(Price, request.price_id)
        if price is None or not price.active:
            return GrantResult(applied=False, reason="PRICE_NOT_AVAILABLE")
        if price.entitlement_kind is None:
            return GrantResult(applied=False, reason="UNSUPPORTED_PRICE_INTENT")

        if await self.repository.get_grant_by_payment(session, payment.id) is not None:
            return GrantResult(applied=False, reason="ALREADY_GRANTED")

        credits = price.credits if price.credits and price.credits > 0 else 1
        expires_at = None
        if price.validity_days:
            expires_at = self._clock() + timedelta(days=price.validity_days)

        try:
            async with session.begin_nested():
                bundle = await self.repository.create_bundle(
                    session,
                    user_id=payment.user_id,
                    kind=price.entitlement_kind,
                    credits=credits,
                    expires_at=expires_at,
                )
                await self.repository.create_grant(
                    session,
                    payment_id=payment.id,
                    user_id=payment.user_id,
                    price_id=price.id,
                    entitlement_id=bundle.id,
                    credits=credits,
                )
        except IntegrityError:
            # Otro proceso otorgó este pago entre la lectura y el insert
            return GrantResult(applied=False, reason="ALREADY_GRANTED")

        return GrantResult(
            applied=True,
            entitlement_id=bundle.id,
            credits=credits,
        )


__all__ = [
    "ApplyEntitlements",
    "ApplyEntitlementsRequest",
    "EntitlementGrantService",
    "GrantResult",
]

# Fin del archivo backend/app/modules/billing/entitlements/grants.py
