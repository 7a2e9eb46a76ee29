# -*- coding: utf-8 -*-
"""
backend/app/shared/config/__init__.py

Punto único de acceso a la configuración:
    from app.shared.config import get_billing_settings

No inicializa settings en import-time para evitar efectos colaterales
durante la recolección de tests.
"""

from .logging_config import setup_logging
from .settings_billing import (
    BillingSettings,
    get_billing_settings,
    reset_billing_settings,
)

__all__ = [
    "BillingSettings",
    "get_billing_settings",
    "reset_billing_settings",
    "setup_logging",
]
# Fin del archivo backend/app/shared/config/__init__.py
