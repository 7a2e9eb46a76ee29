# -*- coding: utf-8 -*-
"""
backend/app/modules/billing/__init__.py

Módulo de billing: conciliación de webhooks de pasarelas (zarinpal,
idpay, nextpay) y ledger de créditos.

Submódulos:
- providers: normalización de payloads y verificación de firma
- webhooks: reconciliador exactly-once de pagos/facturas
- entitlements: ledger de créditos y otorgamiento por pago
- jobs: barrido periódico de otorgamientos pendientes

El router HTTP se importa desde app.modules.billing.webhook_routes para
no cargar FastAPI al importar solo modelos.

Autor: Equipo Billing
Fecha: 2026-09-03
"""
