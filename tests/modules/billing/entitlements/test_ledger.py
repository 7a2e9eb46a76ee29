# -*- coding: utf-8 -*-
"""
backend/tests/modules/billing/entitlements/test_ledger.py

Ledger de créditos: consulta, clasificación de errores y consumo.

Autor: Equipo Billing
Fecha: 2026-09-16
"""

from datetime import timedelta

import pytest

from app.shared.utils.datetime_helpers import ensure_utc, utcnow
from app.modules.billing.entitlements import (
    ConsumeResult,
    CreditSummary,
    Entitlement,
    EntitlementLedger,
    ExpiredCreditsError,
    InsufficientCreditsError,
    NoEntitlementError,
)


@pytest.fixture
def ledger():
    return EntitlementLedger()


async def _remaining(session_factory, bundle_id) -> int:
    async with session_factory() as session:
        bundle = await session.get(Entitlement, bundle_id)
        return bundle.remaining_credits


# -----------------------------------------------------------------------------
# Usuario sin compras
# -----------------------------------------------------------------------------
class TestNoBundles:

    @pytest.mark.asyncio
    async def test_has_credit_false(self, ledger, db):
        assert await ledger.has_credit(db, "user_1") is False

    @pytest.mark.asyncio
    async def test_summarize_is_none(self, ledger, db):
        assert await ledger.summarize(db, "user_1") is None

    @pytest.mark.asyncio
    async def test_assert_raises_no_entitlement(self, ledger, db):
        with pytest.raises(NoEntitlementError) as exc:
            await ledger.assert_has_credit_or_throw(db, "user_1")
        assert exc.value.code == "NO_ENTITLEMENT"
        assert exc.value.user_id == "user_1"

    @pytest.mark.asyncio
    async def test_consume_raises_no_entitlement(self, ledger, db):
        with pytest.raises(NoEntitlementError):
            async with db.begin():
                await ledger.consume(db, "user_1")

    @pytest.mark.asyncio
    async def test_other_users_bundles_do_not_count(self, ledger, db, make_bundle):
        await make_bundle(user_id="someone_else", remaining=5)

        assert await ledger.has_credit(db, "user_1") is False
        with pytest.raises(NoEntitlementError):
            await ledger.assert_has_credit_or_throw(db, "user_1")


# -----------------------------------------------------------------------------
# Clasificación
# -----------------------------------------------------------------------------
class TestTriage:

    @pytest.mark.asyncio
    async def test_expired_with_credits_reports_expired(self, ledger, db, make_bundle):
        await make_bundle(remaining=2, expires_at=utcnow() - timedelta(days=1))

        with pytest.raises(ExpiredCreditsError) as exc:
            await ledger.assert_has_credit_or_throw(db, "user_1")
        assert exc.value.code == "EXPIRED_CREDITS"

    @pytest.mark.asyncio
    async def test_exhausted_within_window_reports_insufficient(self, ledger, db, make_bundle):
        await make_bundle(remaining=0, expires_at=utcnow() + timedelta(days=3))
        await make_bundle(remaining=0, expires_at=None)

        with pytest.raises(InsufficientCreditsError) as exc:
            await ledger.assert_has_credit_or_throw(db, "user_1")
        assert exc.value.code == "INSUFFICIENT_CREDITS"

    @pytest.mark.asyncio
    async def test_exhausted_active_plus_expired_reports_insufficient(self, ledger, db, make_bundle):
        await make_bundle(remaining=0, expires_at=None)
        await make_bundle(remaining=4, expires_at=utcnow() - timedelta(hours=1))

        with pytest.raises(InsufficientCreditsError):
            await ledger.assert_has_credit_or_throw(db, "user_1")

    @pytest.mark.asyncio
    async def test_usable_bundle_passes(self, ledger, db, make_bundle):
        await make_bundle(remaining=0, expires_at=None)
        await make_bundle(remaining=1, expires_at=utcnow() + timedelta(days=1))

        await ledger.assert_has_credit_or_throw(db, "user_1")
        assert await ledger.has_credit(db, "user_1") is True

    @pytest.mark.asyncio
    async def test_injected_clock_drives_expiry(self, db, make_bundle):
        await make_bundle(remaining=1, expires_at=utcnow() + timedelta(hours=1))
        later = EntitlementLedger(clock=lambda: utcnow() + timedelta(hours=2))

        assert await later.has_credit(db, "user_1") is False
        with pytest.raises(ExpiredCreditsError):
            await later.assert_has_credit_or_throw(db, "user_1")


# -----------------------------------------------------------------------------
# Resumen
# -----------------------------------------------------------------------------
class TestSummarize:

    @pytest.mark.asyncio
    async def test_only_expired_bundle_is_none(self, ledger, db, make_bundle):
        await make_bundle(remaining=5, expires_at=utcnow() - timedelta(minutes=1))

        assert await ledger.summarize(db, "user_1") is None

    @pytest.mark.asyncio
    async def test_exhausted_bundle_is_zero_not_none(self, ledger, db, make_bundle):
        expires = utcnow() + timedelta(days=2)
        await make_bundle(remaining=0, expires_at=expires)

        summary = await ledger.summarize(db, "user_1")

        assert summary == CreditSummary(total=0, remaining=0, expires_at=expires)

    @pytest.mark.asyncio
    async def test_aggregates_active_bundles_and_soonest_expiry(self, ledger, db, make_bundle):
        soon = utcnow() + timedelta(days=1)
        await make_bundle(remaining=3, expires_at=soon)
        await make_bundle(remaining=2, expires_at=utcnow() + timedelta(days=10))
        await make_bundle(remaining=7, expires_at=utcnow() - timedelta(days=1))

        summary = await ledger.summarize(db, "user_1")

        assert summary.total == 5
        assert summary.remaining == 5
        assert ensure_utc(summary.expires_at) == soon

    @pytest.mark.asyncio
    async def test_never_expiring_bundle_clears_expiry(self, ledger, db, make_bundle):
        await make_bundle(remaining=1, expires_at=utcnow() + timedelta(days=1))
        await make_bundle(remaining=1, expires_at=None)

        summary = await ledger.summarize(db, "user_1")

        assert summary.total == 2
        assert summary.expires_at is None


# -----------------------------------------------------------------------------
# Consumo
# -----------------------------------------------------------------------------
class TestConsume:

    @pytest.mark.asyncio
    async def test_soonest_expiring_bundle_first(self, ledger, session_factory, make_bundle):
        expiring = await make_bundle(remaining=1, expires_at=utcnow() + timedelta(days=1))
        forever = await make_bundle(remaining=1, expires_at=None)

        async with session_factory() as session:
            async with session.begin():
                result = await ledger.consume(session, "user_1")

        assert result == ConsumeResult(entitlement_id=expiring.id, remaining=0)
        assert await _remaining(session_factory, expiring.id) == 0
        assert await _remaining(session_factory, forever.id) == 1

        async with session_factory() as session:
            async with session.begin():
                second = await ledger.consume(session, "user_1")
        assert second.entitlement_id == forever.id

        async with session_factory() as session:
            with pytest.raises(InsufficientCreditsError):
                async with session.begin():
                    await ledger.consume(session, "user_1")

    @pytest.mark.asyncio
    async def test_tie_broken_by_oldest_update(self, ledger, session_factory, make_bundle):
        expires = utcnow() + timedelta(days=5)
        newer = await make_bundle(remaining=1, expires_at=expires, updated_at=utcnow() - timedelta(hours=1))
        older = await make_bundle(remaining=1, expires_at=expires, updated_at=utcnow() - timedelta(days=3))

        async with session_factory() as session:
            async with session.begin():
                result = await ledger.consume(session, "user_1")

        assert result.entitlement_id == older.id
        assert await _remaining(session_factory, newer.id) == 1

    @pytest.mark.asyncio
    async def test_skips_expired_and_empty_bundles(self, ledger, session_factory, make_bundle):
        await make_bundle(remaining=9, expires_at=utcnow() - timedelta(days=1))
        await make_bundle(remaining=0, expires_at=utcnow() + timedelta(hours=1))
        usable = await make_bundle(remaining=4, expires_at=utcnow() + timedelta(days=30))

        async with session_factory() as session:
            async with session.begin():
                result = await ledger.consume(session, "user_1")

        assert result == ConsumeResult(entitlement_id=usable.id, remaining=3)

    @pytest.mark.asyncio
    async def test_expired_only_raises_without_writes(self, ledger, session_factory, make_bundle):
        stale = await make_bundle(remaining=2, expires_at=utcnow() - timedelta(days=1))

        async with session_factory() as session:
            with pytest.raises(ExpiredCreditsError):
                async with session.begin():
                    await ledger.consume(session, "user_1")

        assert await _remaining(session_factory, stale.id) == 2

    @pytest.mark.asyncio
    async def test_caller_rollback_restores_credit(self, ledger, session_factory, make_bundle):
        bundle = await make_bundle(remaining=1)

        class PublishFailed(Exception):
            pass

        async with session_factory() as session:
            with pytest.raises(PublishFailed):
                async with session.begin():
                    await ledger.consume(session, "user_1")
                    raise PublishFailed()

        assert await _remaining(session_factory, bundle.id) == 1

    @pytest.mark.asyncio
    async def test_remaining_never_negative(self, ledger, session_factory, make_bundle):
        bundle = await make_bundle(remaining=2)

        for expected in (1, 0):
            async with session_factory() as session:
                async with session.begin():
                    result = await ledger.consume(session, "user_1")
            assert result.remaining == expected

        async with session_factory() as session:
            with pytest.raises(InsufficientCreditsError):
                async with session.begin():
                    await ledger.consume(session, "user_1")

        assert await _remaining(session_factory, bundle.id) == 0

# Fin del archivo backend/tests/modules/billing/entitlements/test_ledger.py
