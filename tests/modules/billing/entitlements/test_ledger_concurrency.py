# -*- coding: utf-8 -*-
"""
backend/tests/modules/billing/entitlements/test_ledger_concurrency.py

Decremento condicional: de dos consumos sobre el último crédito, uno
gana y el otro recibe TransientConcurrencyError sin dejar saldo negativo.

Autor: Equipo Billing
Fecha: 2026-09-16
"""

from datetime import timedelta
from unittest.mock import AsyncMock, MagicMock

import pytest

from app.shared.utils.datetime_helpers import utcnow
from app.modules.billing.enums import EntitlementKind
from app.modules.billing.entitlements import (
    Entitlement,
    EntitlementLedger,
    EntitlementRepository,
    TransientConcurrencyError,
)


class StaleSnapshotRepository(EntitlementRepository):
    """
    Lee las bolsas en una sesión aparte y, antes de devolverlas, deja que
    un consumidor competidor gaste y confirme. El UPDATE condicional del
    perdedor se ejecuta sobre una fila que ya cambió.
    """

    def __init__(self, session_factory, competitor):
        self._session_factory = session_factory
        self._competitor = competitor

    async def list_bundles(self, session, user_id, kind):
        async with self._session_factory() as snapshot:
            bundles = await super().list_bundles(snapshot, user_id, kind)
        await self._competitor()
        return bundles


@pytest.mark.asyncio
async def test_lost_race_raises_transient_error(session_factory, make_bundle):
    bundle = await make_bundle(remaining=1)
    winners = []

    async def competitor():
        async with session_factory() as other:
            async with other.begin():
                winners.append(await EntitlementLedger().consume(other, "user_1"))

    racing = EntitlementLedger(repository=StaleSnapshotRepository(session_factory, competitor))

    async with session_factory() as session:
        with pytest.raises(TransientConcurrencyError) as exc:
            async with session.begin():
                await racing.consume(session, "user_1")

    assert exc.value.code == "TRANSIENT_CONCURRENCY"
    assert exc.value.entitlement_id == bundle.id
    assert len(winners) == 1
    assert winners[0].remaining == 0

    async with session_factory() as session:
        stored = await session.get(Entitlement, bundle.id)
    assert stored.remaining_credits == 0


@pytest.mark.asyncio
async def test_zero_affected_rows_is_not_retried():
    bundle = Entitlement(id="ent_1", user_id="user_1", remaining_credits=1, expires_at=None)
    repository = MagicMock(spec=EntitlementRepository)
    repository.list_bundles = AsyncMock(return_value=[bundle])
    repository.decrement_if_available = AsyncMock(return_value=0)
    session = MagicMock()
    session.refresh = AsyncMock()

    ledger = EntitlementLedger(repository=repository)

    with pytest.raises(TransientConcurrencyError) as exc:
        await ledger.consume(session, "user_1")

    assert exc.value.entitlement_id == "ent_1"
    repository.decrement_if_available.assert_awaited_once()
    session.refresh.assert_not_awaited()


@pytest.mark.asyncio
async def test_conditional_update_guards_expiry(session_factory, make_bundle):
    """Una bolsa que vence entre la lectura y el UPDATE no se descuenta."""
    bundle = await make_bundle(remaining=3, expires_at=utcnow() + timedelta(minutes=5))

    async with session_factory() as session:
        async with session.begin():
            affected = await EntitlementRepository().decrement_if_available(
                session,
                entitlement_id=bundle.id,
                user_id="user_1",
                kind=EntitlementKind.JOB_POST_CREDIT,
                now=utcnow() + timedelta(minutes=10),
            )

    assert affected == 0
    async with session_factory() as session:
        stored = await session.get(Entitlement, bundle.id)
    assert stored.remaining_credits == 3

# Fin del archivo backend/tests/modules/billing/entitlements/test_ledger_concurrency.py
