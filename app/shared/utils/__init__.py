# -*- coding: utf-8 -*-
"""
backend/app/shared/utils/__init__.py

Utilidades comunes.

Autor: Equipo Billing
Fecha: 2026-09-03
"""

from .datetime_helpers import ensure_utc, utcnow

__all__ = ["ensure_utc", "utcnow"]
