# -*- coding: utf-8 -*-
"""
backend/tests/modules/billing/entitlements/test_grants.py

Otorgamiento de créditos por pago PAID (idempotente por pago).

Autor: Equipo Billing
Fecha: 2026-09-16
"""

from datetime import timedelta

import pytest
from sqlalchemy import func, select

from app.shared.utils.datetime_helpers import ensure_utc, utcnow
from app.modules.billing.enums import EntitlementKind, PaymentProvider, PaymentStatus
from app.modules.billing.entitlements import (
    ApplyEntitlementsRequest,
    Entitlement,
    EntitlementGrant,
    EntitlementGrantService,
    EntitlementRepository,
)


async def _count(session_factory, model) -> int:
    async with session_factory() as session:
        return await session.scalar(select(func.count()).select_from(model))


async def _bundles(session_factory):
    async with session_factory() as session:
        return list((await session.execute(select(Entitlement))).scalars().all())


@pytest.fixture
async def paid(make_price, make_checkout, make_payment):
    """Pago PAID de user_1 por un precio de 3 créditos con 30 días."""
    await make_price(credits=3, validity_days=30)
    checkout = await make_checkout(provider=PaymentProvider.IDPAY)
    payment = await make_payment(checkout, status=PaymentStatus.PAID)
    return ApplyEntitlementsRequest(user_id="user_1", price_id="price_basic", payment_id=payment.id)


@pytest.mark.asyncio
async def test_grants_bundle_for_paid_payment(session_factory, paid):
    fixed_now = utcnow()
    service = EntitlementGrantService(session_factory, clock=lambda: fixed_now)

    result = await service.apply_entitlements(paid)

    assert result.applied is True
    assert result.credits == 3
    bundles = await _bundles(session_factory)
    assert len(bundles) == 1
    bundle = bundles[0]
    assert bundle.id == result.entitlement_id
    assert bundle.user_id == "user_1"
    assert bundle.kind == EntitlementKind.JOB_POST_CREDIT
    assert bundle.remaining_credits == 3
    assert ensure_utc(bundle.expires_at) == fixed_now + timedelta(days=30)

    async with session_factory() as session:
        grant = await session.scalar(select(EntitlementGrant))
    assert grant.payment_id == paid.payment_id
    assert grant.entitlement_id == bundle.id
    assert grant.credits == 3


@pytest.mark.asyncio
async def test_second_application_is_noop(session_factory, paid):
    service = EntitlementGrantService(session_factory)

    first = await service(paid)
    second = await service(paid)

    assert first.applied is True
    assert second.applied is False
    assert second.reason == "ALREADY_GRANTED"
    assert await _count(session_factory, Entitlement) == 1
    assert await _count(session_factory, EntitlementGrant) == 1


@pytest.mark.asyncio
async def test_concurrent_grant_loses_on_unique_payment(session_factory, paid):
    class BlindRepository(EntitlementRepository):
        """No ve el grant existente: el INSERT choca con payment_id UNIQUE."""

        async def get_grant_by_payment(self, session, payment_id):
            return None

    await EntitlementGrantService(session_factory).apply_entitlements(paid)

    result = await EntitlementGrantService(session_factory, repository=BlindRepository()).apply_entitlements(paid)

    assert result.applied is False
    assert result.reason == "ALREADY_GRANTED"
    # La bolsa del intento perdedor se descarta con su SAVEPOINT
    assert await _count(session_factory, Entitlement) == 1
    assert await _count(session_factory, EntitlementGrant) == 1


@pytest.mark.asyncio
async def test_price_without_validity_never_expires(session_factory, make_price, make_checkout, make_payment):
    await make_price(price_id="price_forever", validity_days=None, credits=1)
    checkout = await make_checkout(price_id="price_forever")
    payment = await make_payment(checkout)

    result = await EntitlementGrantService(session_factory).apply_entitlements(
        ApplyEntitlementsRequest(user_id="user_1", price_id="price_forever", payment_id=payment.id)
    )

    assert result.applied is True
    bundle = (await _bundles(session_factory))[0]
    assert bundle.expires_at is None


@pytest.mark.asyncio
async def test_non_positive_credits_grant_one(session_factory, make_price, make_checkout, make_payment):
    await make_price(price_id="price_zero", credits=0)
    checkout = await make_checkout(price_id="price_zero")
    payment = await make_payment(checkout)

    result = await EntitlementGrantService(session_factory).apply_entitlements(
        ApplyEntitlementsRequest(user_id="user_1", price_id="price_zero", payment_id=payment.id)
    )

    assert result.credits == 1


@pytest.mark.asyncio
async def test_unknown_payment(session_factory):
    result = await EntitlementGrantService(session_factory).apply_entitlements(
        ApplyEntitlementsRequest(user_id="user_1", price_id="price_basic", payment_id="nope")
    )
    assert (result.applied, result.reason) == (False, "PAYMENT_NOT_FOUND")


@pytest.mark.asyncio
async def test_pending_payment_is_not_granted(session_factory, make_price, make_checkout, make_payment):
    await make_price()
    checkout = await make_checkout()
    payment = await make_payment(checkout, status=PaymentStatus.PENDING)

    result = await EntitlementGrantService(session_factory).apply_entitlements(
        ApplyEntitlementsRequest(user_id="user_1", price_id="price_basic", payment_id=payment.id)
    )

    assert result.reason == "PAYMENT_NOT_PAID"
    assert await _count(session_factory, Entitlement) == 0


@pytest.mark.asyncio
async def test_user_mismatch_is_refused(session_factory, paid):
    request = ApplyEntitlementsRequest(user_id="intruder", price_id=paid.price_id, payment_id=paid.payment_id)

    result = await EntitlementGrantService(session_factory).apply_entitlements(request)

    assert result.reason == "PAYMENT_USER_MISMATCH"
    assert await _count(session_factory, Entitlement) == 0


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "price_kwargs,reason",
    [
        ({"active": False}, "PRICE_NOT_AVAILABLE"),
        ({"entitlement_kind": None}, "UNSUPPORTED_PRICE_INTENT"),
    ],
)
async def test_price_must_grant_entitlements(
    session_factory, make_price, make_checkout, make_payment, price_kwargs, reason
):
    await make_price(**price_kwargs)
    checkout = await make_checkout()
    payment = await make_payment(checkout)

    result = await EntitlementGrantService(session_factory).apply_entitlements(
        ApplyEntitlementsRequest(user_id="user_1", price_id="price_basic", payment_id=payment.id)
    )

    assert result.applied is False
    assert result.reason == reason


@pytest.mark.asyncio
async def test_missing_price(session_factory, paid):
    request = ApplyEntitlementsRequest(user_id="user_1", price_id="deleted", payment_id=paid.payment_id)

    result = await EntitlementGrantService(session_factory).apply_entitlements(request)

    assert result.reason == "PRICE_NOT_AVAILABLE"

# Fin del archivo backend/tests/modules/billing/entitlements/test_grants.py
