# -*- coding: utf-8 -*-
"""
backend/app/modules/billing/jobs/__init__.py

Jobs programados de billing.

Autor: Equipo Billing
Fecha: 2026-09-12
"""

from .reconcile_grants_job import (
    GrantSweepReport,
    RECONCILE_GRANTS_JOB_ID,
    reconcile_pending_grants,
    register_reconcile_grants_job,
)

__all__ = [
    "GrantSweepReport",
    "RECONCILE_GRANTS_JOB_ID",
    "reconcile_pending_grants",
    "register_reconcile_grants_job",
]
