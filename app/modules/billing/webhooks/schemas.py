# -*- coding: utf-8 -*-
"""
backend/app/modules/billing/webhooks/schemas.py

Cuerpos de respuesta del endpoint de webhooks.

Autor: Equipo Billing
Fecha: 2026-09-10
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field


class WebhookAck(BaseModel):
    """Respuesta 200: el webhook quedó conciliado."""

    ok: bool = Field(default=True)
    status: Literal["PAID", "FAILED"] = Field(description="Resultado normalizado del pago")


class WebhookErrorBody(BaseModel):
    """Respuesta 4xx."""

    error: str = Field(description="Código corto del rechazo")


__all__ = ["WebhookAck", "WebhookErrorBody"]
