# -*- coding: utf-8 -*-
"""
backend/app/modules/billing/webhooks/reconciler.py

Conciliación exactly-once de webhooks de pasarelas.

Flujo:
1. Verificar firma → 401 "Invalid signature".
2. Decodificar JSON → 400 "Invalid JSON" / "Invalid payload" /
   "Missing sessionId".
3. Normalizar con el adapter de la pasarela → 400 con la razón.
4. Cargar la sesión → 404 "Session not found"; pasarela distinta a la
   de la sesión → 400 "Provider mismatch".
5. Pago confirmado, en UNA transacción: upsert del pago por
   (provider, provider_ref), upsert de la factura por pago, sesión a
   SUCCESS con el payload crudo. Tras el commit, si el pago no estaba ya
   PAID, se aplican entitlements.
6. Pago no confirmado: sesión a FAILED con el payload crudo.

Garantías:
- Reentregas y entregas concurrentes de la misma transacción producen a
  lo sumo un pago, una factura y una aplicación de entitlements.
- Un fallo al aplicar entitlements después del commit se loguea como
  entitlement_apply_failed y no cambia la respuesta; el job de barrido
  lo reintenta.
- El registro de auditoría (payment_webhook_logs) es best-effort y nunca
  bloquea la conciliación.

Autor: Equipo Billing
Fecha: 2026-09-10
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Literal, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.shared.config.settings_billing import BillingSettings
from app.modules.billing.entitlements.grants import ApplyEntitlements, ApplyEntitlementsRequest
from app.modules.billing.enums import (
    CheckoutStatus,
    PaymentProvider,
    PaymentStatus,
    WebhookLogStatus,
    can_transition,
)
from app.modules.billing.models import CheckoutSession, Price
from app.modules.billing.providers import ParsedWebhook, ProviderPayloadError, get_adapter
from app.modules.billing.providers.base import SESSION_ID_KEYS, pick_string
from app.modules.billing.providers.signature import verify_signature
from app.modules.billing.repository import (
    CheckoutSessionRepository,
    InvoiceRepository,
    PaymentRepository,
    PriceRepository,
    WebhookLogRepository,
)

from .errors import (
    InvalidPayloadError,
    InvalidSignatureError,
    PriceNotFoundError,
    ProviderMismatchError,
    SessionNotFoundError,
    UnknownProviderError,
    WebhookError,
)
from .schemas import WebhookAck

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WebhookOutcome:
    """Resultado de conciliar una entrega."""

    status: Literal["PAID", "FAILED"]
    checkout_session_id: str
    payment_id: Optional[str] = None
    should_apply: bool = False
    user_id: Optional[str] = None
    price_id: Optional[str] = None

    def to_ack(self) -> WebhookAck:
        return WebhookAck(ok=True, status=self.status)


class WebhookReconciler:
    """
    Orquesta verificación, normalización y persistencia de un webhook.

    Args:
        settings: Configuración de billing (secretos y modo de firma)
        session_factory: Fábrica de sesiones async
        apply_entitlements: Colaborador invocado después del commit
    """

    def __init__(
        self,
        *,
        settings: BillingSettings,
        session_factory: async_sessionmaker[AsyncSession],
        apply_entitlements: ApplyEntitlements,
        sessions: Optional[CheckoutSessionRepository] = None,
        prices: Optional[PriceRepository] = None,
        payments: Optional[PaymentRepository] = None,
        invoices: Optional[InvoiceRepository] = None,
        webhook_logs: Optional[WebhookLogRepository] = None,
    ):
        self._settings = settings
        self._session_factory = session_factory
        self._apply_entitlements = apply_entitlements
        self.sessions = sessions or CheckoutSessionRepository()
        self.prices = prices or PriceRepository()
        self.payments = payments or PaymentRepository()
        self.invoices = invoices or InvoiceRepository()
        self.webhook_logs = webhook_logs or WebhookLogRepository()

    # =========================================================================
    # ENTRADA PRINCIPAL
    # =========================================================================

    async def handle(
        self,
        provider: PaymentProvider | str,
        raw_body: bytes,
        signature: Optional[str],
    ) -> WebhookOutcome:
        """
        Concilia una entrega de webhook.

        Args:
            provider: Pasarela de la ruta (/billing/webhooks/{provider})
            raw_body: Cuerpo crudo del request
            signature: Header X-Webhook-Signature

        Returns:
            WebhookOutcome con status PAID o FAILED

        Raises:
            WebhookError: rechazo con su status HTTP (401/400/404)
        """
        resolved = PaymentProvider.parse(provider) if isinstance(provider, str) else provider
        if resolved is None:
            raise UnknownProviderError()

        if not verify_signature(resolved, signature, self._settings, raw_body):
            raise InvalidSignatureError()

        payload = self._decode(raw_body)

        session_id = pick_string(payload, SESSION_ID_KEYS)
        if session_id is None:
            raise InvalidPayloadError("Missing sessionId")

        adapter = get_adapter(resolved)
        try:
            parsed = adapter.parse(payload)
        except ProviderPayloadError as exc:
            logger.warning(
                "webhook_payload_rejected provider=%s session_id=%s reason=%s",
                resolved.value,
                session_id,
                exc.reason,
            )
            raise InvalidPayloadError(exc.reason) from exc

        signature_present = bool(signature)
        await self._audit_received(resolved, parsed.external_id, payload, signature_present)

        try:
            outcome = await self._reconcile(resolved, session_id, parsed, payload)
        except WebhookError as exc:
            logger.warning(
                "webhook_rejected provider=%s session_id=%s external_id=%s error=%s",
                resolved.value,
                session_id,
                parsed.external_id,
                exc.error,
            )
            await self._audit_mark(resolved, parsed.external_id, WebhookLogStatus.INVALID, error=exc.error)
            raise

        await self._audit_mark(
            resolved,
            parsed.external_id,
            WebhookLogStatus.HANDLED,
            payment_id=outcome.payment_id,
        )

        logger.info(
            "webhook_reconciled provider=%s session_id=%s provider_ref=%s status=%s should_apply=%s",
            resolved.value,
            session_id,
            parsed.provider_ref,
            outcome.status,
            outcome.should_apply,
        )

        if outcome.should_apply:
            await self._apply_after_commit(outcome)

        return outcome

    # =========================================================================
    # PASOS
    # =========================================================================

    @staticmethod
    def _decode(raw_body: bytes) -> Dict[str, Any]:
        try:
            payload = json.loads(raw_body)
        except (ValueError, RecursionError) as exc:
            raise InvalidPayloadError("Invalid JSON") from exc
        if not isinstance(payload, dict):
            raise InvalidPayloadError("Invalid payload")
        return payload

    async def _reconcile(
        self,
        provider: PaymentProvider,
        session_id: str,
        parsed: ParsedWebhook,
        payload: Dict[str, Any],
    ) -> WebhookOutcome:
        async with self._session_factory() as db:
            async with db.begin():
                checkout = await self.sessions.find_by_id(db, session_id)
                if checkout is None:
                    raise SessionNotFoundError()
                if checkout.provider != provider:
                    raise ProviderMismatchError()

                if parsed.paid:
                    return await self._reconcile_paid(db, checkout, parsed, payload)
                return await self._reconcile_not_paid(db, checkout, parsed, payload)

    async def _reconcile_paid(
        self,
        db: AsyncSession,
        checkout: CheckoutSession,
        parsed: ParsedWebhook,
        payload: Dict[str, Any],
    ) -> WebhookOutcome:
        price = await self.prices.find_by_id(db, checkout.price_id)
        if price is None:
            raise PriceNotFoundError()

        self._check_reported_amount(checkout, parsed, price)

        upsert = await self.payments.upsert_paid(
            db,
            checkout=checkout,
            provider_ref=parsed.provider_ref,
            amount=price.amount,
            currency=price.currency,
        )
        await self.invoices.upsert_paid(
            db,
            payment=upsert.payment,
            total=price.amount,
            currency=price.currency,
        )

        if checkout.status == CheckoutStatus.FAILED:
            logger.warning(
                "webhook_paid_after_failed session_id=%s provider_ref=%s",
                checkout.id,
                parsed.provider_ref,
            )
        await self.sessions.update_status(db, checkout, CheckoutStatus.SUCCESS, payload)

        return WebhookOutcome(
            status="PAID",
            checkout_session_id=checkout.id,
            payment_id=upsert.payment.id,
            should_apply=upsert.previous_status != PaymentStatus.PAID,
            user_id=checkout.user_id,
            price_id=checkout.price_id,
        )

    async def _reconcile_not_paid(
        self,
        db: AsyncSession,
        checkout: CheckoutSession,
        parsed: ParsedWebhook,
        payload: Dict[str, Any],
    ) -> WebhookOutcome:
        if not can_transition(checkout.status, CheckoutStatus.FAILED):
            # Una sesión cobrada no se degrada; solo se guarda el callback
            logger.warning(
                "webhook_not_paid_after_success session_id=%s provider_ref=%s reported=%s",
                checkout.id,
                parsed.provider_ref,
                parsed.status,
            )
            await self.sessions.update_status(db, checkout, checkout.status, payload)
        else:
            await self.sessions.update_status(db, checkout, CheckoutStatus.FAILED, payload)

        return WebhookOutcome(
            status="FAILED",
            checkout_session_id=checkout.id,
            user_id=checkout.user_id,
            price_id=checkout.price_id,
        )

    @staticmethod
    def _check_reported_amount(checkout: CheckoutSession, parsed: ParsedWebhook, price: Price) -> None:
        """El monto del precio manda; el reportado solo se audita."""
        if parsed.amount == 0 or parsed.amount != price.amount:
            logger.warning(
                "webhook_amount_suspicious session_id=%s provider=%s reported=%d %s expected=%d %s",
                checkout.id,
                parsed.provider.value,
                parsed.amount,
                parsed.currency,
                price.amount,
                price.currency,
            )

    async def _apply_after_commit(self, outcome: WebhookOutcome) -> None:
        request = ApplyEntitlementsRequest(
            user_id=outcome.user_id or "",
            price_id=outcome.price_id or "",
            payment_id=outcome.payment_id or "",
        )
        try:
            await self._apply_entitlements(request)
        except Exception:
            # El pago ya está confirmado; el job de barrido reintenta
            logger.exception(
                "entitlement_apply_failed payment_id=%s user_id=%s price_id=%s",
                request.payment_id,
                request.user_id,
                request.price_id,
            )

    # =========================================================================
    # AUDITORÍA (best-effort)
    # =========================================================================

    async def _run_audit(self, action: Callable[[AsyncSession], Awaitable[Any]], external_id: str) -> None:
        try:
            async with self._session_factory() as db:
                async with db.begin():
                    await action(db)
        except SQLAlchemyError:
            logger.exception("webhook_log_failed external_id=%s", external_id)

    async def _audit_received(
        self,
        provider: PaymentProvider,
        external_id: str,
        payload: Dict[str, Any],
        signature_present: bool,
    ) -> None:
        async def _action(db: AsyncSession) -> None:
            await self.webhook_logs.record_received(
                db,
                provider=provider,
                external_id=external_id,
                payload=payload,
                signature_present=signature_present,
            )

        await self._run_audit(_action, external_id)

    async def _audit_mark(
        self,
        provider: PaymentProvider,
        external_id: str,
        status: WebhookLogStatus,
        payment_id: Optional[str] = None,
        error: Optional[str] = None,
    ) -> None:
        async def _action(db: AsyncSession) -> None:
            await self.webhook_logs.mark(
                db,
                provider=provider,
                external_id=external_id,
                status=status,
                payment_id=payment_id,
                error=error,
            )

        await self._run_audit(_action, external_id)


__all__ = ["WebhookOutcome", "WebhookReconciler"]

# Fin del archivo backend/app/modules/billing/webhooks/reconciler.py
