# -*- coding: utf-8 -*-
"""
backend/app/modules/billing/repository.py

Repositorios de billing: sesiones de checkout, precios, pagos, facturas
y auditoría de webhooks.

Los upserts de pagos y facturas toleran inserciones concurrentes: el
INSERT va dentro de un SAVEPOINT y, si pierde la carrera contra la llave
única, se relee la fila ganadora y se actualiza.

Autor: Equipo Billing
Fecha: 2026-09-09
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, List, Optional, Tuple

from sqlalchemy import and_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.shared.utils.datetime_helpers import utcnow
from app.modules.billing.enums import (
    CheckoutStatus,
    InvoiceStatus,
    PaymentProvider,
    PaymentStatus,
    WebhookLogStatus,
)
from app.modules.billing.entitlements.models import EntitlementGrant

from .models import CheckoutSession, Invoice, Payment, PaymentWebhookLog, Price

logger = logging.getLogger(__name__)


class CheckoutSessionRepository:
    """Lectura y cambio de estado de checkout_sessions."""

    async def find_by_id(
        self,
        session: AsyncSession,
        checkout_id: str,
    ) -> Optional[CheckoutSession]:
        return await session.get(CheckoutSession, checkout_id)

    async def update_status(
        self,
        session: AsyncSession,
        checkout: CheckoutSession,
        status: CheckoutStatus,
        payload: Optional[dict[str, Any]] = None,
    ) -> CheckoutSession:
        """
        Cambia el estado y guarda el payload crudo del callback.

        Args:
            session: Sesión de base de datos
            checkout: Sesión de checkout ya cargada
            status: Nuevo estado
            payload: Payload de la pasarela (se guarda tal cual)
        """
        checkout.status = status
        if payload is not None:
            checkout.provider_callback_payload = payload
        await session.flush()
        return checkout


class PriceRepository:

    async def find_by_id(self, session: AsyncSession, price_id: str) -> Optional[Price]:
        return await session.get(Price, price_id)


@dataclass(frozen=True)
class PaymentUpsert:
    """Pago resultante y el estado que tenía antes (None si es nuevo)."""

    payment: Payment
    previous_status: Optional[PaymentStatus]

    @property
    def created(self) -> bool:
        return self.previous_status is None


class PaymentRepository:
    """Pagos por llave natural (provider, provider_ref)."""

    async def find_by_provider_ref(
        self,
        session: AsyncSession,
        provider: PaymentProvider,
        provider_ref: str,
    ) -> Optional[Payment]:
        stmt = select(Payment).where(
            Payment.provider == provider,
            Payment.provider_ref == provider_ref,
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def upsert_paid(
        self,
        session: AsyncSession,
        *,
        checkout: CheckoutSession,
        provider_ref: str,
        amount: int,
        currency: str,
    ) -> PaymentUpsert:
        """
        Crea o actualiza el pago como PAID.

        Si otro proceso insertó la misma llave entre la lectura y el
        INSERT, la fila existente se trata como ya registrada.

        Returns:
            PaymentUpsert con el estado previo del pago
        """
        existing = await self.find_by_provider_ref(session, checkout.provider, provider_ref)

        if existing is None:
            payment = Payment(
                user_id=checkout.user_id,
                checkout_session_id=checkout.id,
                provider=checkout.provider,
                provider_ref=provider_ref,
                amount=amount,
                currency=currency,
                status=PaymentStatus.PAID,
                paid_at=utcnow(),
            )
            try:
                async with session.begin_nested():
                    session.add(payment)
                    await session.flush()
                return PaymentUpsert(payment=payment, previous_status=None)
            except IntegrityError:
                logger.info(
                    "payment_insert_race provider=%s provider_ref=%s",
                    checkout.provider,
                    provider_ref,
                )
                existing = await self.find_by_provider_ref(session, checkout.provider, provider_ref)
                if existing is None:
                    raise

        previous_status = existing.status
        if existing.checkout_session_id != checkout.id:
            logger.warning(
                "payment_session_reassigned payment_id=%s provider_ref=%s from_session=%s to_session=%s",
                existing.id,
                provider_ref,
                existing.checkout_session_id,
                checkout.id,
            )
        existing.user_id = checkout.user_id
        existing.checkout_session_id = checkout.id
        existing.amount = amount
        existing.currency = currency
        existing.status = PaymentStatus.PAID
        if existing.paid_at is None:
            existing.paid_at = utcnow()
        await session.flush()
        return PaymentUpsert(payment=existing, previous_status=previous_status)

    async def list_paid_without_grant(
        self,
        session: AsyncSession,
        limit: int = 100,
    ) -> List[Tuple[Payment, CheckoutSession]]:
        """
        Pagos PAID cuyo precio otorga entitlements y que no tienen grant.

        Returns:
            Lista de (pago, sesión de checkout), los más antiguos primero
        """
        stmt = (
            select(Payment, CheckoutSession)
            .join(CheckoutSession, CheckoutSession.id == Payment.checkout_session_id)
            .join(Price, Price.id == CheckoutSession.price_id)
            .outerjoin(EntitlementGrant, EntitlementGrant.payment_id == Payment.id)
            .where(
                and_(
                    Payment.status == PaymentStatus.PAID,
                    Price.active.is_(True),
                    Price.entitlement_kind.is_not(None),
                    EntitlementGrant.id.is_(None),
                )
            )
            .order_by(Payment.created_at.asc())
            .limit(limit)
        )
        result = await session.execute(stmt)
        return [(row[0], row[1]) for row in result.all()]


class InvoiceRepository:

    async def find_by_payment_id(self, session: AsyncSession, payment_id: str) -> Optional[Invoice]:
        stmt = select(Invoice).where(Invoice.payment_id == payment_id)
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def upsert_paid(
        self,
        session: AsyncSession,
        *,
        payment: Payment,
        total: int,
        currency: str,
    ) -> Invoice:
        """Una factura PAID por pago; reentregas actualizan la misma."""
        invoice = await self.find_by_payment_id(session, payment.id)

        if invoice is None:
            invoice = Invoice(
                payment_id=payment.id,
                user_id=payment.user_id,
                total=total,
                currency=currency,
                status=InvoiceStatus.PAID,
            )
            try:
                async with session.begin_nested():
                    session.add(invoice)
                    await session.flush()
                return invoice
            except IntegrityError:
                invoice = await self.find_by_payment_id(session, payment.id)
                if invoice is None:
                    raise

        invoice.user_id = payment.user_id
        invoice.total = total
        invoice.currency = currency
        invoice.status = InvoiceStatus.PAID
        await session.flush()
        return invoice


class WebhookLogRepository:
    """Auditoría de entregas por (provider, external_id)."""

    async def find(
        self,
        session: AsyncSession,
        provider: PaymentProvider,
        external_id: str,
    ) -> Optional[PaymentWebhookLog]:
        stmt = select(PaymentWebhookLog).where(
            PaymentWebhookLog.provider == provider,
            PaymentWebhookLog.external_id == external_id,
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def record_received(
        self,
        session: AsyncSession,
        *,
        provider: PaymentProvider,
        external_id: str,
        payload: Optional[dict[str, Any]],
        signature_present: bool,
    ) -> PaymentWebhookLog:
        """Registra (o re-registra) una entrega como received."""
        log = await self.find(session, provider, external_id)
        if log is None:
            log = PaymentWebhookLog(
                provider=provider,
                external_id=external_id,
                payload=payload,
                signature_present=signature_present,
                status=WebhookLogStatus.RECEIVED,
            )
            try:
                async with session.begin_nested():
                    session.add(log)
                    await session.flush()
                return log
            except IntegrityError:
                log = await self.find(session, provider, external_id)
                if log is None:
                    raise

        log.payload = payload
        log.signature_present = signature_present
        log.status = WebhookLogStatus.RECEIVED
        log.error = None
        await session.flush()
        return log

    async def mark(
        self,
        session: AsyncSession,
        *,
        provider: PaymentProvider,
        external_id: str,
        status: WebhookLogStatus,
        payment_id: Optional[str] = None,
        error: Optional[str] = None,
    ) -> Optional[PaymentWebhookLog]:
        log = await self.find(session, provider, external_id)
        if log is None:
            return None
        log.status = status
        log.error = error
        if payment_id is not None:
            log.payment_id = payment_id
        if status == WebhookLogStatus.HANDLED:
            log.handled_at = utcnow()
        await session.flush()
        return log


__all__ = [
    "CheckoutSessionRepository",
    "InvoiceRepository",
    "PaymentRepository",
    "PaymentUpsert",
    "PriceRepository",
    "WebhookLogRepository",
]

# Fin del archivo backend/app/modules/billing/repository.py
