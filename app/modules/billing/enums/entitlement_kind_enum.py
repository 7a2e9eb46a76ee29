# -*- coding: utf-8 -*-
"""
backend/app/modules/billing/enums/entitlement_kind_enum.py

Tipos de entitlement (créditos comprables) que maneja el ledger.

Autor: Equipo Billing
Fecha: 2026-09-03
"""

from enum import StrEnum


class EntitlementKind(StrEnum):
    """Tipo de crédito. Cada consumo descuenta una unidad del tipo."""

    JOB_POST_CREDIT = "JOB_POST_CREDIT"

    __pg_enum_name__ = "entitlement_kind_enum"


__all__ = ["EntitlementKind"]

# Fin del archivo backend/app/modules/billing/enums/entitlement_kind_enum.py
