# -*- coding: utf-8 -*-
"""
backend/app/modules/billing/entitlements/models.py

Modelos ORM del ledger de entitlements.

- Entitlement (user_entitlements): bolsa de créditos de un tipo para un
  usuario, con vencimiento opcional. Un usuario puede tener varias bolsas
  del mismo tipo.
- EntitlementGrant (entitlement_grants): marca única por pago de que los
  créditos de ese pago ya se otorgaron.

Columnas DB (user_entitlements):
- id: TEXT PRIMARY KEY
- user_id: TEXT NOT NULL
- kind: entitlement_kind_enum NOT NULL
- remaining_credits: INTEGER NOT NULL CHECK (remaining_credits >= 0)
- expires_at: TIMESTAMPTZ NULL (NULL = nunca vence)
- created_at / updated_at: TIMESTAMPTZ NOT NULL

Autor: Equipo Billing
Fecha: 2026-09-05
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlalchemy import CheckConstraint, DateTime, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from app.shared.database.base import Base, as_db_enum, generate_id, id_type
from app.shared.utils.datetime_helpers import utcnow
from app.modules.billing.enums import EntitlementKind


class Entitlement(Base):
    """Bolsa de créditos consumibles."""

    __tablename__ = "user_entitlements"
    __table_args__ = (
        CheckConstraint("remaining_credits >= 0", name="remaining_non_negative"),
        Index("ix_user_entitlements_user_kind", "user_id", "kind"),
    )

    id: Mapped[str] = mapped_column(String(64), primary_key=True, default=generate_id)

    user_id: Mapped[str] = mapped_column(String(64), nullable=False)

    kind: Mapped[EntitlementKind] = mapped_column(
        as_db_enum(EntitlementKind),
        nullable=False,
    )

    remaining_credits: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    expires_at: Mapped[Optional[datetime]] = mapped_column(
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
            f"<Entitlement id={self.id} user={self.user_id} kind={self.kind} "
            f"remaining={self.remaining_credits} expires_at={self.expires_at}>"
        )


class EntitlementGrant(Base):
    """
    Otorgamiento de créditos por pago.

    payment_id UNIQUE: un pago otorga créditos una sola vez aunque el
    otorgamiento se invoque varias veces.
    """

    __tablename__ = "entitlement_grants"

    id: Mapped[int] = mapped_column(id_type, primary_key=True, autoincrement=True)

    payment_id: Mapped[str] = mapped_column(String(64), nullable=False, unique=True)

    user_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)

    price_id: Mapped[str] = mapped_column(String(64), nullable=False)

    entitlement_id: Mapped[str] = mapped_column(String(64), nullable=False)

    credits: Mapped[int] = mapped_column(Integer, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=utcnow,
    )


__all__ = ["Entitlement", "EntitlementGrant"]

# Fin del archivo backend/app/modules/billing/entitlements/models.py
