# -*- coding: utf-8 -*-
"""
backend/app/modules/billing/models/checkout_session.py

Modelo ORM para la tabla checkout_sessions.

Una sesión se crea al iniciar el checkout (fuera de este módulo) y la
conciliación de webhooks la lleva a SUCCESS o FAILED, guardando el
payload crudo del callback para auditoría.

Autor: Equipo Billing
Fecha: 2026-09-04
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from sqlalchemy import DateTime, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from app.shared.database.base import Base, as_db_enum, generate_id, json_type
from app.shared.utils.datetime_helpers import utcnow
from app.modules.billing.enums import CheckoutStatus, PaymentProvider


class CheckoutSession(Base):
    """Sesión de checkout de un usuario contra una pasarela."""

    __tablename__ = "checkout_sessions"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=generate_id)

    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)

    price_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("prices.id"),
        nullable=False,
    )

    provider: Mapped[PaymentProvider] = mapped_column(
        as_db_enum(PaymentProvider),
        nullable=False,
    )

    status: Mapped[CheckoutStatus] = mapped_column(
        as_db_enum(CheckoutStatus),
        nullable=False,
        default=CheckoutStatus.STARTED,
    )

    provider_callback_payload: Mapped[Optional[dict[str, Any]]] = mapped_column(
        json_type,
        nullable=True,
        doc="Último payload recibido de la pasarela.",
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
        onupdate=utcnow,
    )

    def __repr__(self) -> str:
        return f"<CheckoutSession id={self.id} provider={self.provider} status={self.status}>"


__all__ = ["CheckoutSession"]

# Fin del archivo backend/app/modules/billing/models/checkout_session.py
