# -*- coding: utf-8 -*-
"""
backend/app/shared/database/__init__.py

Re-exporta utilidades comunes de base de datos.

Autor: Equipo Billing
Fecha: 2026-09-02
"""

from __future__ import annotations

from .base import Base, NAMING_CONVENTION, as_db_enum, generate_id, id_type, json_type
from .database import (
    build_engine,
    build_session_factory,
    check_database_health,
)

__all__ = [
    "Base",
    "NAMING_CONVENTION",
    "as_db_enum",
    "generate_id",
    "id_type",
    "json_type",
    "build_engine",
    "build_session_factory",
    "check_database_health",
]

# Fin del archivo backend/app/shared/database/__init__.py
