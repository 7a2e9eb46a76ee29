# -*- coding: utf-8 -*-
"""
backend/app/modules/billing/webhook_routes.py

Rutas de webhooks de pasarelas.

Endpoint:
- POST /billing/webhooks/{provider}   (zarinpal | idpay | nextpay)

Respuestas:
- 200 {"ok": true, "status": "PAID" | "FAILED"}
- 4xx {"error": "<código corto>"}

El reconciliador se construye al arrancar la app y se guarda en
app.state.webhook_reconciler.

Autor: Equipo Billing
Fecha: 2026-09-11
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request, status
from fastapi.responses import JSONResponse

from .webhooks import WebhookAck, WebhookError, WebhookErrorBody, WebhookReconciler

logger = logging.getLogger(__name__)

SIGNATURE_HEADER = "X-Webhook-Signature"

router = APIRouter(
    prefix="/billing/webhooks",
    tags=["billing:webhooks"],
)


def get_webhook_reconciler(request: Request) -> WebhookReconciler:
    return request.app.state.webhook_reconciler


@router.post(
    "/{provider}",
    status_code=status.HTTP_200_OK,
    response_model=WebhookAck,
    responses={
        400: {"model": WebhookErrorBody},
        401: {"model": WebhookErrorBody},
        404: {"model": WebhookErrorBody},
    },
)
async def provider_webhook(
    provider: str,
    request: Request,
    reconciler: WebhookReconciler = Depends(get_webhook_reconciler),
):
    """
    Webhook de pasarela de pago.

    Requiere header X-Webhook-Signature salvo en pasarelas sin secreto
    configurado (sandbox).
    """
    raw_body = await request.body()
    signature = request.headers.get(SIGNATURE_HEADER)

    try:
        outcome = await reconciler.handle(provider, raw_body, signature)
    except WebhookError as exc:
        return JSONResponse(
            status_code=exc.status_code,
            content=WebhookErrorBody(error=exc.error).model_dump(),
        )

    return outcome.to_ack()


__all__ = ["router", "get_webhook_reconciler", "SIGNATURE_HEADER"]
