# -*- coding: utf-8 -*-
"""
backend/app/shared/database/base.py

Base declarativa y convención de nombres para modelos ORM.

Este módulo proporciona:
- Base: clase base declarativa de SQLAlchemy
- NAMING_CONVENTION: convención de nombres para constraints
- as_db_enum: mapea enums Python a ENUM nativo en PostgreSQL y a
  VARCHAR con CHECK en otros dialectos (SQLite en tests)
- json_type: JSONB en PostgreSQL, JSON genérico en otros dialectos
- id_type: BIGINT en PostgreSQL, INTEGER en SQLite (autoincrement real)

Autor: Equipo Billing
Fecha: 2026-09-02
"""

from __future__ import annotations

from enum import Enum
from typing import Type
from uuid import uuid4

from sqlalchemy import JSON, BigInteger, Integer, MetaData
from sqlalchemy import Enum as SQLEnum
from sqlalchemy.dialects.postgresql import ENUM as PG_ENUM
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.types import TypeEngine

# ===== NAMING CONVENTION =====
NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


# ===== BASE DECLARATIVA =====
class Base(DeclarativeBase):
    """
    Base declarativa para todos los modelos ORM de billing.
    Incluye convención de nombres para constraints.
    """
    metadata = MetaData(naming_convention=NAMING_CONVENTION)


# ===== TIPOS PORTABLES =====
id_type: TypeEngine = BigInteger().with_variant(Integer(), "sqlite")
json_type: TypeEngine = JSON().with_variant(JSONB(), "postgresql")


def generate_id() -> str:
    """Identificador opaco (UUID4 hex) para llaves primarias de texto."""
    return uuid4().hex


def as_db_enum(enum_cls: Type[Enum], name: str | None = None) -> TypeEngine:
    """
    Devuelve un tipo ENUM portable basado en un Enum de Python.

    Uso típico:

        class Payment(Base):
            status: Mapped[PaymentStatus] = mapped_column(
                as_db_enum(PaymentStatus, name="payment_status_enum"),
                nullable=False,
            )

    - En PostgreSQL usa ENUM nativo sin crearlo (create_type=False): se
      asume que el tipo ya existe creado vía scripts SQL.
    - En cualquier otro dialecto se guarda como VARCHAR con los valores
      (no los nombres) del enum.
    - Si no se pasa `name`, usa `__pg_enum_name__` del enum o el nombre de
      la clase en minúsculas.
    """
    enum_name = name or getattr(enum_cls, "__pg_enum_name__", enum_cls.__name__.lower())

    def _values(_: object) -> list[str]:
        return [e.value for e in enum_cls]  # type: ignore[arg-type]

    generic = SQLEnum(
        enum_cls,
        name=enum_name,
        native_enum=False,
        create_constraint=False,
        length=32,
        values_callable=_values,
        validate_strings=True,
    )
    native = PG_ENUM(
        enum_cls,
        name=enum_name,
        create_type=False,
        values_callable=_values,
    )
    return generic.with_variant(native, "postgresql")


__all__ = [
    "Base",
    "NAMING_CONVENTION",
    "as_db_enum",
    "generate_id",
    "id_type",
    "json_type",
]

# Fin del archivo backend/app/shared/database/base.py
