# -*- coding: utf-8 -*-
"""
backend/app/modules/billing/jobs/reconcile_grants_job.py

Job programado que reintenta entitlements no aplicados.

La conciliación aplica entitlements después del commit del pago; si ese
paso falla (caída del proceso, error de BD) el pago queda PAID sin grant.
Este barrido busca esos pagos y vuelve a invocar el otorgamiento, que es
idempotente por pago.

Autor: Equipo Billing
Fecha: 2026-09-12
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.shared.scheduler import SchedulerService
from app.modules.billing.entitlements.grants import (
    ApplyEntitlementsRequest,
    EntitlementGrantService,
)
from app.modules.billing.repository import PaymentRepository

logger = logging.getLogger(__name__)

RECONCILE_GRANTS_JOB_ID = "billing_reconcile_entitlement_grants"

DEFAULT_BATCH = 100


@dataclass
class GrantSweepReport:
    scanned: int = 0
    applied: int = 0
    skipped: int = 0
    failed: int = 0


async def reconcile_pending_grants(
    session_factory: async_sessionmaker[AsyncSession],
    grant_service: EntitlementGrantService,
    limit: int = DEFAULT_BATCH,
) -> GrantSweepReport:
    """
    Aplica entitlements de pagos PAID que no tienen grant.

    Args:
        session_factory: Fábrica de sesiones async
        grant_service: Servicio de otorgamiento
        limit: Máximo de pagos por corrida

    Returns:
        GrantSweepReport con conteos de la corrida
    """
    repository = PaymentRepository()
    async with session_factory() as session:
        pending = await repository.list_paid_without_grant(session, limit=limit)
        requests = [
            ApplyEntitlementsRequest(
                user_id=payment.user_id,
                price_id=checkout.price_id,
                payment_id=payment.id,
            )
            for payment, checkout in pending
        ]

    report = GrantSweepReport(scanned=len(requests))
    for request in requests:
        try:
            result = await grant_service.apply_entitlements(request)
        except Exception:
            # Un pago problemático no detiene el resto del lote
            report.failed += 1
            logger.exception("grant_sweep_failed payment_id=%s", request.payment_id)
            continue
        if result.applied:
            report.applied += 1
        else:
            report.skipped += 1

    if report.scanned:
        logger.info(
            "grant_sweep_done scanned=%d applied=%d skipped=%d failed=%d",
            report.scanned,
            report.applied,
            report.skipped,
            report.failed,
        )
    else:
        logger.debug("grant_sweep_done scanned=0")

    return report


def register_reconcile_grants_job(
    scheduler: SchedulerService,
    session_factory: async_sessionmaker[AsyncSession],
    grant_service: EntitlementGrantService,
    interval_minutes: int = 10,
    limit: int = DEFAULT_BATCH,
) -> str:
    """
    Registra el barrido en el scheduler.

    Returns:
        ID del job registrado
    """
    job_id = scheduler.add_interval_job(
        func=reconcile_pending_grants,
        job_id=RECONCILE_GRANTS_JOB_ID,
        minutes=interval_minutes,
        session_factory=session_factory,
        grant_service=grant_service,
        limit=limit,
    )
    logger.info(
        "grant_sweep_registered id=%s interval=%dm batch=%d",
        job_id,
        interval_minutes,
        limit,
    )
    return job_id


__all__ = [
    "GrantSweepReport",
    "RECONCILE_GRANTS_JOB_ID",
    "reconcile_pending_grants",
    "register_reconcile_grants_job",
]
