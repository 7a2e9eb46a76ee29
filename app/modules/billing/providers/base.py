# -*- coding: utf-8 -*-
"""
backend/app/modules/billing/providers/base.py

Contrato común de los adapters de pasarela y helpers de extracción.

Cada pasarela nombra distinto sus campos (authority / trans_id / id,
ref_id / track_id / order_id, status numérico o textual...). Los adapters
declaran qué llaves leer y cómo mapear el estado; la lectura tolerante
(llave exacta primero, luego sin distinguir mayúsculas) vive aquí.

Reglas de lectura:
- pick_string: solo strings no vacíos (tras strip); devuelve el valor crudo.
- pick_number: números finitos o strings numéricos; booleanos no cuentan.
- coerce_amount: positivo → truncado a entero; cualquier otro caso → 0.

Autor: Equipo Billing
Fecha: 2026-09-08
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from typing import Any, ClassVar, Dict, Mapping, Optional, Sequence, Tuple

from pydantic import BaseModel, Field

from app.modules.billing.enums import PaymentProvider, WebhookStatus
from app.modules.billing.models.price import FALLBACK_CURRENCY

from .errors import ProviderPayloadError

Payload = Mapping[str, Any]

AMOUNT_KEYS = ("amount", "Amount", "price", "Price")
CURRENCY_KEYS = ("currency", "Currency", "curr", "Curr")
FALLBACK_REF_KEYS = ("providerRef", "ref_id", "refId", "track_id", "order_id")
SESSION_ID_KEYS = ("sessionId", "session_id")


# ===== HELPERS DE EXTRACCIÓN =====

def _lowercase_view(payload: Payload) -> Dict[str, Any]:
    return {str(key).lower(): value for key, value in payload.items()}


def _as_string(value: Any) -> Optional[str]:
    if isinstance(value, str) and value.strip():
        return value
    return None


def _as_number(value: Any) -> Optional[float]:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        return float(value) if math.isfinite(value) else None
    if isinstance(value, str) and value.strip():
        try:
            parsed = float(value.strip())
        except ValueError:
            return None
        return parsed if math.isfinite(parsed) else None
    return None


def pick_string(payload: Payload, keys: Sequence[str]) -> Optional[str]:
    """Primer string no vacío entre `keys` (exacta, luego case-insensitive)."""
    lowered = _lowercase_view(payload)
    for key in keys:
        found = _as_string(payload.get(key))
        if found is None:
            found = _as_string(lowered.get(key.lower()))
        if found is not None:
            return found
    return None


def pick_number(payload: Payload, keys: Sequence[str]) -> Optional[float]:
    """Primer valor numérico finito entre `keys` (exacta, luego case-insensitive)."""
    lowered = _lowercase_view(payload)
    for key in keys:
        found = _as_number(payload.get(key))
        if found is None:
            found = _as_number(lowered.get(key.lower()))
        if found is not None:
            return found
    return None


def pick_scalar(payload: Payload, keys: Sequence[str]) -> Any:
    """Primer string no vacío o número finito entre `keys`; None si no hay."""
    lowered = _lowercase_view(payload)
    for key in keys:
        for candidate in (payload.get(key), lowered.get(key.lower())):
            if _as_string(candidate) is not None:
                return candidate
            if not isinstance(candidate, str) and _as_number(candidate) is not None:
                return candidate
    return None


def coerce_amount(value: Optional[float]) -> int:
    if value is not None and math.isfinite(value) and value > 0:
        return math.trunc(value)
    return 0


def normalize_status(value: Any) -> str:
    """Token de estado comparable: entero o texto en minúsculas. Un número no entero da ""."""
    number = None if isinstance(value, str) else _as_number(value)
    if number is not None:
        return str(int(number)) if number.is_integer() else ""
    if isinstance(value, str):
        return value.strip().lower()
    return ""


def status_from_text(raw: str) -> WebhookStatus:
    """Mapeo textual compartido por idpay y nextpay."""
    if raw in ("paid", "ok"):
        return WebhookStatus.PAID
    if raw in ("refunded", "refund"):
        return WebhookStatus.REFUNDED
    if raw == "pending":
        return WebhookStatus.PENDING
    return WebhookStatus.FAILED


# ===== DTO NORMALIZADO =====

class ParsedWebhook(BaseModel):
    """Webhook de pasarela ya normalizado."""

    provider: PaymentProvider = Field(description="Pasarela origen")
    external_id: str = Field(description="ID de la entrega/transacción en la pasarela")
    provider_ref: str = Field(description="Referencia de pago (llave de idempotencia)")
    amount: int = Field(default=0, description="Monto reportado (0 si falta o no es válido)")
    currency: str = Field(default=FALLBACK_CURRENCY, description="Moneda reportada")
    status: WebhookStatus = Field(description="Estado normalizado")
    session_id: Optional[str] = Field(default=None, description="Sesión de checkout")

    @property
    def paid(self) -> bool:
        return self.status == WebhookStatus.PAID


# ===== CONTRATO DE ADAPTER =====

class ProviderAdapter(ABC):
    """
    Adapter de una pasarela. Sin estado; una instancia por pasarela.

    Las subclases definen provider, external_id_keys, provider_ref_keys y
    map_status.
    """

    provider: ClassVar[PaymentProvider]
    external_id_keys: ClassVar[Tuple[str, ...]]
    provider_ref_keys: ClassVar[Tuple[str, ...]]

    def extract_external_id(self, payload: Payload) -> str:
        """
        Raises:
            ProviderPayloadError("Missing externalId")
        """
        external_id = pick_string(payload, self.external_id_keys)
        if external_id is not None:
            return external_id

        provider_ref = pick_string(payload, FALLBACK_REF_KEYS)
        session_id = pick_string(payload, SESSION_ID_KEYS)
        if provider_ref and session_id:
            return f"{session_id}:{provider_ref}"

        raise ProviderPayloadError("Missing externalId", provider=self.provider)

    def extract_provider_ref(self, payload: Payload) -> str:
        """
        Raises:
            ProviderPayloadError("Missing providerRef")
        """
        ref = pick_string(payload, self.provider_ref_keys) or pick_string(payload, ("providerRef",))
        if ref is None:
            raise ProviderPayloadError("Missing providerRef", provider=self.provider)
        return ref

    def extract_amount_currency(self, payload: Payload) -> Tuple[int, str]:
        """Monto y moneda reportados. Nunca falla."""
        amount = coerce_amount(pick_number(payload, AMOUNT_KEYS))
        currency = pick_string(payload, CURRENCY_KEYS) or FALLBACK_CURRENCY
        return amount, currency

    @abstractmethod
    def map_status(self, payload: Payload) -> WebhookStatus:
        """Estado normalizado. Lo desconocido es FAILED, nunca PAID."""

    def parse(self, payload: Payload) -> ParsedWebhook:
        """
        Normaliza un payload completo.

        Raises:
            ProviderPayloadError: falta externalId o providerRef
        """
        amount, currency = self.extract_amount_currency(payload)
        return ParsedWebhook(
            provider=self.provider,
            external_id=self.extract_external_id(payload),
            provider_ref=self.extract_provider_ref(payload),
            amount=amount,
            currency=currency,
            status=self.map_status(payload),
            session_id=pick_string(payload, SESSION_ID_KEYS),
        )


__all__ = [
    "AMOUNT_KEYS",
    "CURRENCY_KEYS",
    "SESSION_ID_KEYS",
    "ParsedWebhook",
    "Payload",
    "ProviderAdapter",
    "coerce_amount",
    "normalize_status",
    "pick_number",
    "pick_scalar",
    "pick_string",
    "status_from_text",
]

# Fin del archivo backend/app/modules/billing/providers/base.py
