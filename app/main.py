# -*- coding: utf-8 -*-
"""
backend/app/main.py

Punto de entrada del backend de billing.

Ajustes clave:
- .env cargado con python-dotenv ANTES de construir settings.
- BillingSettings se construye una vez y se pasa explícitamente al
  reconciliador y a la verificación de firma.
- Lifespan: engine/sesiones, servicio de otorgamiento, reconciliador,
  scheduler con el barrido de entitlements pendientes.
- create_app acepta settings y session_factory para tests.

Autor: Equipo Billing
Fecha: 2026-09-12
"""

import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

# ---------------------------------------------------------------------------
# Cargar .env ANTES de leer configuración
# En DEV: override=True para que .env mande sobre variables del entorno
# En PROD: override=False para respetar variables del entorno
# ---------------------------------------------------------------------------
from dotenv import load_dotenv

_ENV_PATH = Path(__file__).resolve().parents[1] / ".env"
_ENVIRONMENT = os.getenv("ENVIRONMENT", "development").strip().strip('"').strip("'").lower()
load_dotenv(dotenv_path=_ENV_PATH, override=_ENVIRONMENT != "production")

import anyio
import uvicorn
from fastapi import FastAPI, Request
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.shared.config import BillingSettings, get_billing_settings, setup_logging
from app.shared.database import (
    build_engine,
    build_session_factory,
    check_database_health,
)
from app.shared.middleware import JSONExceptionMiddleware, RequestLoggingMiddleware
from app.shared.scheduler import SchedulerService
from app.modules.billing.entitlements import EntitlementGrantService
from app.modules.billing.jobs import register_reconcile_grants_job
from app.modules.billing.webhook_routes import router as billing_webhook_router
from app.modules.billing.webhooks import WebhookReconciler

logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[BillingSettings] = None,
    session_factory: Optional[async_sessionmaker[AsyncSession]] = None,
    scheduler: Optional[SchedulerService] = None,
) -> FastAPI:
    """
    Construye la aplicación FastAPI.

    Args:
        settings: Configuración; por defecto la del proceso
        session_factory: Fábrica de sesiones; por defecto se crea desde
            settings.database_url
        scheduler: Scheduler a usar; por defecto uno nuevo

    Returns:
        FastAPI lista para servir
    """
    settings = settings or get_billing_settings()
    setup_logging(settings.log_level, settings.log_format)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # ────────── STARTUP ──────────
        engine = None
        factory = session_factory
        if factory is None:
            engine = build_engine(settings)
            factory = build_session_factory(engine)

        grant_service = EntitlementGrantService(factory)
        app.state.settings = settings
        app.state.db_engine = engine or factory.kw.get("bind")
        app.state.session_factory = factory
        app.state.grant_service = grant_service
        app.state.webhook_reconciler = WebhookReconciler(
            settings=settings,
            session_factory=factory,
            apply_entitlements=grant_service.apply_entitlements,
        )

        jobs = scheduler or SchedulerService()
        app.state.scheduler = jobs
        if settings.scheduler_enabled:
            register_reconcile_grants_job(
                jobs,
                factory,
                grant_service,
                interval_minutes=settings.grant_reconcile_interval_minutes,
                limit=settings.grant_reconcile_batch,
            )
            jobs.start()

        logger.info(
            "billing_backend_started env=%s scheduler=%s signature_mode=%s",
            settings.environment,
            settings.scheduler_enabled,
            settings.webhook_signature_mode,
        )
        try:
            yield
        finally:
            # ────────── SHUTDOWN ──────────
            with anyio.CancelScope(shield=True):
                jobs.shutdown(wait=True)
                if engine is not None:
                    await engine.dispose()
            logger.info("billing_backend_stopped")

    app = FastAPI(
        title="Billing API",
        description="Conciliación de webhooks de pasarelas y ledger de créditos",
        version="1.0.0",
        lifespan=lifespan,
    )

    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(JSONExceptionMiddleware)
    app.include_router(billing_webhook_router)

    @app.get("/health", tags=["health"])
    async def health(request: Request):
        db_ok = await check_database_health(request.app.state.db_engine)
        return {"status": "ok" if db_ok else "degraded", "database": db_ok}

    return app


if __name__ == "__main__":
    uvicorn.run(
        "app.main:create_app",
        factory=True,
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8000")),
    )

# Fin del archivo backend/app/main.py
