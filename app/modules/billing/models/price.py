# -*- coding: utf-8 -*-
"""
backend/app/modules/billing/models/price.py

Modelo ORM para la tabla prices (catálogo de precios).

El monto del precio es la fuente de verdad del cobro: el monto que
reporta la pasarela solo se usa para detectar inconsistencias.
Los campos entitlement_kind/credits/validity_days describen qué otorga
el precio una vez pagado.

Autor: Equipo Billing
Fecha: 2026-09-04
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import BigInteger, Boolean, DateTime, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from app.shared.database.base import Base, as_db_enum, generate_id
from app.shared.utils.datetime_helpers import utcnow
from app.modules.billing.enums import EntitlementKind

FALLBACK_CURRENCY = "IRR"


class Price(Base):
    """
    Precio comprable.

    Columnas DB:
    - id: TEXT PRIMARY KEY
    - amount: BIGINT NOT NULL (unidad mínima de la moneda)
    - currency: TEXT NOT NULL DEFAULT 'IRR'
    - active: BOOLEAN NOT NULL DEFAULT true
    - entitlement_kind: entitlement_kind_enum NULL (NULL = no otorga créditos)
    - credits: INTEGER NOT NULL DEFAULT 1
    - validity_days: INTEGER NULL (NULL = créditos sin vencimiento)
    """

    __tablename__ = "prices"

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=generate_id)

    title: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    amount: Mapped[int] = mapped_column(BigInteger, nullable=False)

    currency: Mapped[str] = mapped_column(
        String(8),
        nullable=False,
        default=FALLBACK_CURRENCY,
    )

    active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    entitlement_kind: Mapped[Optional[EntitlementKind]] = mapped_column(
        as_db_enum(EntitlementKind),
        nullable=True,
        doc="Tipo de crédito que otorga el precio.",
    )

    credits: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=1,
        doc="Créditos otorgados por compra.",
    )

    validity_days: Mapped[Optional[int]] = mapped_column(
        Integer,
        nullable=True,
        doc="Vigencia de los créditos en días desde la compra.",
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )

    def __repr__(self) -> str:
        return f"<Price id={self.id} amount={self.amount} {self.currency}>"


__all__ = ["Price", "FALLBACK_CURRENCY"]

# Fin del archivo backend/app/modules/billing/models/price.py
