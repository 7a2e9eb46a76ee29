# -*- coding: utf-8 -*-
"""
backend/app/modules/billing/models/webhook_log.py

Modelo ORM para la tabla payment_webhook_logs (auditoría de entregas).

Una fila por (provider, external_id). Las reentregas actualizan la misma
fila. No participa en la idempotencia: esa la garantiza la llave única de
payments.

Autor: Equipo Billing
Fecha: 2026-09-04
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from sqlalchemy import Boolean, DateTime, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from app.shared.database.base import Base, as_db_enum, id_type, json_type
from app.shared.utils.datetime_helpers import utcnow
from app.modules.billing.enums import PaymentProvider, WebhookLogStatus


class PaymentWebhookLog(Base):
    """Entrega de webhook registrada."""

    __tablename__ = "payment_webhook_logs"
    __table_args__ = (
        UniqueConstraint(
            "provider",
            "external_id",
            name="uq_payment_webhook_logs_provider_external_id",
        ),
    )

    id: Mapped[int] = mapped_column(id_type, primary_key=True, autoincrement=True)

    provider: Mapped[PaymentProvider] = mapped_column(
        as_db_enum(PaymentProvider),
        nullable=False,
    )

    external_id: Mapped[str] = mapped_column(Text, nullable=False)

    status: Mapped[WebhookLogStatus] = mapped_column(
        as_db_enum(WebhookLogStatus),
        nullable=False,
        default=WebhookLogStatus.RECEIVED,
    )

    payload: Mapped[Optional[dict[str, Any]]] = mapped_column(json_type, nullable=True)

    signature_present: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    payment_id: Mapped[Optional[str]] = mapped_column(String(64), nullable=True)

    error: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )

    handled_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )


__all__ = ["PaymentWebhookLog"]

# Fin del archivo backend/app/modules/billing/models/webhook_log.py
