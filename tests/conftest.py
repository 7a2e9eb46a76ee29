# backend/tests/conftest.py
# -*- coding: utf-8 -*-
"""
Config global de tests de billing.

- SQLite en archivo (aiosqlite) por test: varias sesiones ven los mismos
  datos, igual que en PostgreSQL.
- BEGIN explícito y SAVEPOINT funcional en SQLite (receta de SQLAlchemy
  para pysqlite/aiosqlite).
- Fábricas de precios, sesiones de checkout, pagos y bolsas de créditos.
"""

import os
from datetime import datetime
from typing import Optional

import pytest
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

# Sin .env ni scheduler durante la suite
os.environ.setdefault("ENVIRONMENT", "testing")
os.environ.setdefault("BILLING_SCHEDULER_ENABLED", "false")

from app.shared.config.settings_billing import BillingSettings
from app.shared.database.base import Base
from app.shared.utils.datetime_helpers import utcnow
from app.modules.billing.enums import (
    CheckoutStatus,
    EntitlementKind,
    PaymentProvider,
    PaymentStatus,
)
from app.modules.billing.models import CheckoutSession, Payment, Price
from app.modules.billing.entitlements.models import Entitlement


# -----------------------------------------------------------------------------
# Base de datos
# -----------------------------------------------------------------------------
@pytest.fixture
async def engine(tmp_path):
    eng = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'billing.db'}")

    @event.listens_for(eng.sync_engine, "connect")
    def _no_implicit_tx(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(eng.sync_engine, "begin")
    def _explicit_begin(conn):
        conn.exec_driver_sql("BEGIN")

    async with eng.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield eng
    await eng.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession, autoflush=False)


@pytest.fixture
async def db(session_factory):
    """Sesión suelta para sembrar y verificar datos."""
    async with session_factory() as session:
        yield session


# -----------------------------------------------------------------------------
# Configuración
# -----------------------------------------------------------------------------
@pytest.fixture
def settings():
    """Sandbox: sin secretos configurados, firma no exigida."""
    return BillingSettings(
        _env_file=None,
        environment="testing",
        database_url="sqlite+aiosqlite://",
        zarinpal_webhook_secret=None,
        idpay_webhook_secret=None,
        nextpay_webhook_secret=None,
        webhook_shared_secret=None,
        scheduler_enabled=False,
    )


@pytest.fixture
def secured_settings():
    return BillingSettings(
        _env_file=None,
        environment="testing",
        database_url="sqlite+aiosqlite://",
        idpay_webhook_secret="idpay-secret",
        webhook_shared_secret="shared-secret",
        scheduler_enabled=False,
    )


# -----------------------------------------------------------------------------
# Fábricas de datos
# -----------------------------------------------------------------------------
@pytest.fixture
def make_price(session_factory):
    async def _make(
        price_id: str = "price_basic",
        amount: int = 100000,
        currency: str = "IRR",
        active: bool = True,
        entitlement_kind: Optional[EntitlementKind] = EntitlementKind.JOB_POST_CREDIT,
        credits: int = 1,
        validity_days: Optional[int] = 30,
    ) -> Price:
        price = Price(
            id=price_id,
            title=f"Plan {price_id}",
            amount=amount,
            currency=currency,
            active=active,
            entitlement_kind=entitlement_kind,
            credits=credits,
            validity_days=validity_days,
        )
        async with session_factory() as session:
            async with session.begin():
                session.add(price)
        return price

    return _make


@pytest.fixture
def make_checkout(session_factory):
    async def _make(
        session_id: str = "S1",
        user_id: str = "user_1",
        price_id: str = "price_basic",
        provider: PaymentProvider = PaymentProvider.IDPAY,
        status: CheckoutStatus = CheckoutStatus.PENDING,
    ) -> CheckoutSession:
        checkout = CheckoutSession(
            id=session_id,
            user_id=user_id,
            price_id=price_id,
            provider=provider,
            status=status,
        )
        async with session_factory() as session:
            async with session.begin():
                session.add(checkout)
        return checkout

    return _make


@pytest.fixture
def make_payment(session_factory):
    async def _make(
        checkout: CheckoutSession,
        provider_ref: str = "trk_1",
        amount: int = 100000,
        status: PaymentStatus = PaymentStatus.PAID,
    ) -> Payment:
        payment = Payment(
            user_id=checkout.user_id,
            checkout_session_id=checkout.id,
            provider=checkout.provider,
            provider_ref=provider_ref,
            amount=amount,
            currency="IRR",
            status=status,
            paid_at=utcnow() if status == PaymentStatus.PAID else None,
        )
        async with session_factory() as session:
            async with session.begin():
                session.add(payment)
        return payment

    return _make


@pytest.fixture
def make_bundle(session_factory):
    async def _make(
        user_id: str = "user_1",
        remaining: int = 1,
        expires_at: Optional[datetime] = None,
        updated_at: Optional[datetime] = None,
        kind: EntitlementKind = EntitlementKind.JOB_POST_CREDIT,
    ) -> Entitlement:
        bundle = Entitlement(
            user_id=user_id,
            kind=kind,
            remaining_credits=remaining,
            expires_at=expires_at,
        )
        if updated_at is not None:
            bundle.updated_at = updated_at
        async with session_factory() as session:
            async with session.begin():
                session.add(bundle)
        return bundle

    return _make

# Fin del archivo backend/tests/conftest.py
