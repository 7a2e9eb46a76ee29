# -*- coding: utf-8 -*-
"""
backend/app/modules/billing/providers/signature.py

Verificación de firma de webhooks de pasarelas.

El secreto de cada pasarela es <PROVIDER>_WEBHOOK_SECRET, con
WEBHOOK_SHARED_SECRET como respaldo.

Modos (BILLING_WEBHOOK_SIGNATURE_MODE):
- shared_secret (default): el header X-Webhook-Signature debe ser
  idéntico al secreto.
- hmac_sha256: el header es el HMAC-SHA256 (hex) del cuerpo crudo con
  el secreto como llave.

Sin secreto configurado (sandbox) el webhook se acepta y se loguea un
warning; con BILLING_REQUIRE_WEBHOOK_SIGNATURE=true se rechaza.

IMPORTANTE:
- Se comparan longitudes antes de comparar bytes; con la misma longitud
  la comparación es de tiempo constante (hmac.compare_digest).

Autor: Equipo Billing
Fecha: 2026-09-08
"""
from __future__ import annotations

import hashlib
import hmac
import logging
from typing import Optional

from app.shared.config.settings_billing import BillingSettings
from app.modules.billing.enums import PaymentProvider

logger = logging.getLogger(__name__)


def compute_hmac_signature(secret: str, raw_body: bytes) -> str:
    """HMAC-SHA256 hex del cuerpo crudo."""
    return hmac.new(secret.encode("utf-8"), raw_body, hashlib.sha256).hexdigest()


def _constant_time_equals(expected: str, provided: str) -> bool:
    expected_bytes = expected.encode("utf-8")
    provided_bytes = provided.encode("utf-8")
    if len(expected_bytes) != len(provided_bytes):
        return False
    return hmac.compare_digest(expected_bytes, provided_bytes)


def verify_signature(
    provider: PaymentProvider,
    signature: Optional[str],
    settings: BillingSettings,
    raw_body: bytes = b"",
) -> bool:
    """
    Verifica la firma de un webhook.

    Args:
        provider: Pasarela que envía el webhook
        signature: Valor del header X-Webhook-Signature (puede faltar)
        settings: Configuración de billing (secretos y modo)
        raw_body: Cuerpo crudo del request (solo modo hmac_sha256)

    Returns:
        True si la firma es válida o la pasarela está en modo sandbox
    """
    secret = settings.secret_for(provider.value)

    if not secret:
        if settings.require_webhook_signature:
            logger.error(
                "webhook_signature_rejected provider=%s reason=secret_not_configured",
                provider.value,
            )
            return False
        if settings.is_production:
            logger.error(
                "webhook_signature_skipped provider=%s reason=no_secret env=production",
                provider.value,
            )
        else:
            logger.warning(
                "webhook_signature_skipped provider=%s reason=no_secret env=%s",
                provider.value,
                settings.environment,
            )
        return True

    if not signature:
        logger.warning("webhook_signature_rejected provider=%s reason=missing_header", provider.value)
        return False

    if settings.webhook_signature_mode == "hmac_sha256":
        expected = compute_hmac_signature(secret, raw_body)
        provided = signature.strip().lower()
    else:
        expected = secret
        provided = signature

    if not _constant_time_equals(expected, provided):
        logger.warning(
            "webhook_signature_rejected provider=%s reason=mismatch mode=%s",
            provider.value,
            settings.webhook_signature_mode,
        )
        return False

    return True


__all__ = ["compute_hmac_signature", "verify_signature"]

# Fin del archivo backend/app/modules/billing/providers/signature.py
