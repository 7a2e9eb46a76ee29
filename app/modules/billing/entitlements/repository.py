# -*- coding: utf-8 -*-
"""
backend/app/modules/billing/entitlements/repository.py

Repositorio del ledger de entitlements.

El decremento de créditos es un UPDATE condicional: solo afecta la fila
si sigue teniendo créditos y sigue vigente al momento de escribir. Quien
llama interpreta rowcount == 0 como conflicto de concurrencia.

Autor: Equipo Billing
Fecha: 2026-09-05
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from sqlalchemy import or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.modules.billing.enums import EntitlementKind

from .models import Entitlement, EntitlementGrant


def _active_window(now: datetime):
    return or_(Entitlement.expires_at.is_(None), Entitlement.expires_at > now)


class EntitlementRepository:
    """Acceso a user_entitlements y entitlement_grants."""

    async def list_bundles(
        self,
        session: AsyncSession,
        user_id: str,
        kind: EntitlementKind,
    ) -> List[Entitlement]:
        """Todas las bolsas del usuario para el tipo, vigentes o no."""
        stmt = select(Entitlement).where(
            Entitlement.user_id == user_id,
            Entitlement.kind == kind,
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())

    async def exists_active_with_credit(
        self,
        session: AsyncSession,
        user_id: str,
        kind: EntitlementKind,
        now: datetime,
    ) -> bool:
        stmt = (
            select(Entitlement.id)
            .where(
                Entitlement.user_id == user_id,
                Entitlement.kind == kind,
                Entitlement.remaining_credits > 0,
                _active_window(now),
            )
            .limit(1)
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none() is not None

    async def decrement_if_available(
        self,
        session: AsyncSession,
        *,
        entitlement_id: str,
        user_id: str,
        kind: EntitlementKind,
        now: datetime,
    ) -> int:
        """
        Resta un crédito a la bolsa si aún tiene saldo y está vigente.

        Returns:
            Filas afectadas (0 o 1)
        """
        stmt = (
            update(Entitlement)
            .where(
                Entitlement.id == entitlement_id,
                Entitlement.user_id == user_id,
                Entitlement.kind == kind,
                Entitlement.remaining_credits > 0,
                _active_window(now),
            )
            .values(
                remaining_credits=Entitlement.remaining_credits - 1,
                updated_at=now,
            )
            .execution_options(synchronize_session=False)
        )
        result = await session.execute(stmt)
        return result.rowcount

    async def create_bundle(
        self,
        session: AsyncSession,
        *,
        user_id: str,
        kind: EntitlementKind,
        credits: int,
        expires_at: Optional[datetime],
    ) -> Entitlement:
        bundle = Entitlement(
            user_id=user_id,
            kind=kind,
            remaining_credits=credits,
            expires_at=expires_at,
        )
        session.add(bundle)
        await session.flush()
        return bundle

    async def get_grant_by_payment(
        self,
        session: AsyncSession,
        payment_id: str,
    ) -> Optional[EntitlementGrant]:
        stmt = select(EntitlementGrant).where(EntitlementGrant.payment_id == payment_id)
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def create_grant(
        self,
        session: AsyncSession,
        *,
        payment_id: str,
        user_id: str,
        price_id: str,
        entitlement_id: str,
        credits: int,
    ) -> EntitlementGrant:
        """
        Inserta la marca de otorgamiento del pago.

        Raises:
            IntegrityError: si el pago ya tiene un grant (payment_id UNIQUE)
        """
        grant = EntitlementGrant(
            payment_id=payment_id,
            user_id=user_id,
            price_id=price_id,
            entitlement_id=entitlement_id,
            credits=credits,
        )
        session.add(grant)
        await session.flush()
        return grant


__all__ = ["EntitlementRepository"]

# Fin del archivo backend/app/modules/billing/entitlements/repository.py
