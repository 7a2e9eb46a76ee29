# -*- coding: utf-8 -*-
"""
backend/app/shared/utils/datetime_helpers.py

Utilidades para manejo consistente de timestamps UTC.

SQLite (tests) devuelve datetimes naive aunque la columna sea
DateTime(timezone=True); todo lo leído de BD pasa por ensure_utc antes
de compararse con utcnow().

Autor: Equipo Billing
Fecha: 2026-09-03
"""

from datetime import datetime, timezone
from typing import Optional


def utcnow() -> datetime:
    """
    Retorna el timestamp UTC actual (timezone-aware).

    Examples:
        >>> utcnow().tzinfo == timezone.utc
        True
    """
    return datetime.now(timezone.utc)


def ensure_utc(dt: Optional[datetime]) -> Optional[datetime]:
    """
    Asegura que un datetime sea UTC timezone-aware.

    - None se devuelve tal cual (p. ej. expires_at "nunca expira").
    - Un naive se interpreta como UTC.
    - Un aware en otra zona se convierte a UTC.
    """
    if dt is None:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


__all__ = ["utcnow", "ensure_utc"]
