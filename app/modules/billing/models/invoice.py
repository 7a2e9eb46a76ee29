# -*- coding: utf-8 -*-
"""
backend/app/modules/billing/models/invoice.py

Modelo ORM para la tabla invoices. A lo sumo una factura por pago.

Autor: Equipo Billing
Fecha: 2026-09-04
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import BigInteger, DateTime, ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column

from app.shared.database.base import Base, as_db_enum, generate_id
from app.shared.utils.datetime_helpers import utcnow
from app.modules.billing.enums import InvoiceStatus


class Invoice(Base):
    """Factura emitida por un pago conciliado."""

    __tablename__ = "invoices"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=generate_id)

    payment_id: Mapped[str] = mapped_column(
        String(64),
        ForeignKey("payments.id"),
        nullable=False,
        unique=True,
    )

    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)

    total: Mapped[int] = mapped_column(BigInteger, nullable=False)

    currency: Mapped[str] = mapped_column(String(8), nullable=False)

    status: Mapped[InvoiceStatus] = mapped_column(
        as_db_enum(InvoiceStatus),
        nullable=False,
        default=InvoiceStatus.PAID,
    )

    issued_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )


__all__ = ["Invoice"]

# Fin del archivo backend/app/modules/billing/models/invoice.py
