# -*- coding: utf-8 -*-
"""
backend/app/shared/database/database.py

SQLAlchemy async (asyncpg en producción, aiosqlite en tests).

Provee:
- build_engine(settings): engine async a partir de BillingSettings
- build_session_factory(engine): async_sessionmaker con expire_on_commit=False
- check_database_health(engine)

Notas:
- El engine no se crea en import-time: la configuración se construye una
  vez al arrancar y se pasa explícitamente.
- Con asyncpg detrás de PgBouncer se desactiva el cache de statements.

Autor: Equipo Billing
Fecha: 2026-09-02
"""

from __future__ import annotations

import asyncio
import logging
from uuid import uuid4

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

from app.shared.config.settings_billing import BillingSettings

logger = logging.getLogger(__name__)


def _prepared_statement_name_func() -> str:
    return f"__asyncpg_{uuid4().hex[:8]}__"


def build_engine(settings: BillingSettings) -> AsyncEngine:
    """
    Crea el engine async según el DSN configurado.

    Args:
        settings: Configuración de billing

    Returns:
        AsyncEngine listo para usar
    """
    url = settings.database_url
    kwargs: dict = {"echo": settings.db_echo_sql}

    if url.startswith("postgresql+asyncpg"):
        # Pooling delegado a PgBouncer
        kwargs["poolclass"] = NullPool
        kwargs["connect_args"] = {
            "statement_cache_size": 0,
            "prepared_statement_cache_size": 0,
            "prepared_statement_name_func": _prepared_statement_name_func,
        }

    logger.info(
        "db_engine_created dialect=%s echo=%s",
        url.split(":", 1)[0],
        settings.db_echo_sql,
    )
    return create_async_engine(url, **kwargs)


def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory estándar del proyecto."""
    return async_sessionmaker(
        bind=engine,
        expire_on_commit=False,
        class_=AsyncSession,
        autoflush=False,
    )


# ── Health check
async def check_database_health(
    engine: AsyncEngine,
    timeout_s: float = 3.0,
) -> bool:
    """
    Verifica conectividad a la base de datos.

    Args:
        engine: Engine a verificar
        timeout_s: Tiempo máximo de espera

    Returns:
        True si SELECT 1 responde dentro del timeout
    """
    try:
        async with asyncio.timeout(timeout_s):
            async with engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
        return True
    except (SQLAlchemyError, OSError, TimeoutError) as e:
        logger.warning("db_health_failed error=%s", e)
        return False


__all__ = [
    "build_engine",
    "build_session_factory",
    "check_database_health",
]
# Fin del archivo backend/app/shared/database/database.py
