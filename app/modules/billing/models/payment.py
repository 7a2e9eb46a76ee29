# -*- coding: utf-8 -*-
"""
backend/app/modules/billing/models/payment.py

Modelo ORM para la tabla payments (registro financiero por pago).

La llave natural (provider, provider_ref) es única: es lo que hace
idempotente la conciliación de webhooks duplicados o concurrentes.

Autor: Equipo Billing
Fecha: 2026-09-04
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import BigInteger, DateTime, ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from app.shared.database.base import Base, as_db_enum, generate_id
from app.shared.utils.datetime_helpers import utcnow
from app.modules.billing.enums import PaymentProvider, PaymentStatus


class Payment(Base):
    """
    Pago conciliado.

    Constraints:
    - uq_payments_provider_provider_ref: UNIQUE (provider, provider_ref)
    """

    __tablename__ = "payments"
    __table_args__ = (
        UniqueConstraint(
            "provider",
            "provider_ref",
            name="uq_payments_provider_provider_ref",
        ),
    )

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=generate_id)

    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)

    checkout_session_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("checkout_sessions.id"),
        nullable=False,
        index=True,
    )

    provider: Mapped[PaymentProvider] = mapped_column(
        as_db_enum(PaymentProvider),
        nullable=False,
    )

    provider_ref: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        doc="Referencia de la transacción en la pasarela.",
    )

    amount: Mapped[int] = mapped_column(BigInteger, nullable=False)

    currency: Mapped[str] = mapped_column(String(8), nullable=False)

    status: Mapped[PaymentStatus] = mapped_column(
        as_db_enum(PaymentStatus),
        nullable=False,
        default=PaymentStatus.PENDING,
    )

    paid_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
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
        return (
            f"<Payment id={self.id} provider={self.provider} "
            f"ref={self.provider_ref} status={self.status}>"
        )


__all__ = ["Payment"]

# Fin del archivo backend/app/modules/billing/models/payment.py
