# -*- coding: utf-8 -*-
"""
backend/tests/modules/billing/webhooks/test_webhook_routes.py

Endpoint POST /billing/webhooks/{provider} sobre la app completa
(httpx + ASGITransport, lifespan real).

Autor: Equipo Billing
Fecha: 2026-09-15
"""

import json

import pytest
from asgi_lifespan import LifespanManager
from httpx import ASGITransport, AsyncClient
from sqlalchemy import func, select

from app.main import create_app
from app.modules.billing.enums import PaymentProvider
from app.modules.billing.models import Payment
from app.modules.billing.webhook_routes import SIGNATURE_HEADER

IDPAY_PAID = json.dumps(
    {"sessionId": "S1", "id": "idp_1", "track_id": "trk_1", "status": 100}
).encode("utf-8")


@pytest.fixture
async def seeded(make_price, make_checkout):
    await make_price(amount=100000)
    await make_checkout(session_id="S1", provider=PaymentProvider.IDPAY)


def _client(app) -> AsyncClient:
    return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")


@pytest.fixture
def app(settings, session_factory, seeded):
    return create_app(settings=settings, session_factory=session_factory)


@pytest.fixture
async def client(app):
    async with LifespanManager(app):
        async with _client(app) as ac:
            yield ac


@pytest.fixture
async def secured_client(secured_settings, session_factory, seeded):
    secured_app = create_app(settings=secured_settings, session_factory=session_factory)
    async with LifespanManager(secured_app):
        async with _client(secured_app) as ac:
            yield ac


@pytest.mark.asyncio
async def test_paid_webhook_returns_ack(client, session_factory):
    resp = await client.post("/billing/webhooks/idpay", content=IDPAY_PAID)

    assert resp.status_code == 200
    assert resp.json() == {"ok": True, "status": "PAID"}

    again = await client.post("/billing/webhooks/idpay", content=IDPAY_PAID)
    assert again.status_code == 200

    async with session_factory() as session:
        count = await session.scalar(select(func.count()).select_from(Payment))
    assert count == 1


@pytest.mark.asyncio
async def test_failed_payment_is_still_200(client):
    body = json.dumps({"sessionId": "S1", "id": "idp_1", "track_id": "trk_1", "status": -1})

    resp = await client.post("/billing/webhooks/idpay", content=body)

    assert resp.status_code == 200
    assert resp.json() == {"ok": True, "status": "FAILED"}


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "path,body,status,error",
    [
        ("/billing/webhooks/idpay", b"{oops", 400, "Invalid JSON"),
        ("/billing/webhooks/idpay", b'{"id": "idp_1"}', 400, "Missing sessionId"),
        ("/billing/webhooks/idpay", b'{"sessionId": "S1", "status": 100}', 400, "Missing externalId"),
        ("/billing/webhooks/zarinpal", b'{"sessionId": "S1", "authority": "A1", "ref_id": "R1", "status": "OK"}', 400, "Provider mismatch"),
        ("/billing/webhooks/idpay", b'{"sessionId": "nope", "id": "i", "track_id": "t", "status": 100}', 404, "Session not found"),
        ("/billing/webhooks/paypal", IDPAY_PAID, 404, "Unknown provider"),
    ],
)
async def test_rejections_use_4xx_and_short_error(client, path, body, status, error):
    resp = await client.post(path, content=body)

    assert resp.status_code == status
    assert resp.json() == {"error": error}


@pytest.mark.asyncio
async def test_deeply_nested_json_is_400(client):
    body = b"[" * 100000 + b"]" * 100000

    resp = await client.post("/billing/webhooks/idpay", content=body)

    assert resp.status_code == 400
    assert resp.json() == {"error": "Invalid JSON"}


@pytest.mark.asyncio
async def test_signature_header_is_checked(secured_client):
    missing = await secured_client.post("/billing/webhooks/idpay", content=IDPAY_PAID)
    assert missing.status_code == 401
    assert missing.json() == {"error": "Invalid signature"}

    wrong = await secured_client.post(
        "/billing/webhooks/idpay",
        content=IDPAY_PAID,
        headers={SIGNATURE_HEADER: "nope"},
    )
    assert wrong.status_code == 401

    ok = await secured_client.post(
        "/billing/webhooks/idpay",
        content=IDPAY_PAID,
        headers={SIGNATURE_HEADER: "idpay-secret"},
    )
    assert ok.status_code == 200


@pytest.mark.asyncio
async def test_unexpected_error_is_json_500(app, client):
    class Exploding:
        async def handle(self, provider, raw_body, signature):
            raise RuntimeError("database unreachable")

    app.state.webhook_reconciler = Exploding()

    resp = await client.post(
        "/billing/webhooks/idpay",
        content=IDPAY_PAID,
        headers={"X-Request-ID": "req-123"},
    )

    assert resp.status_code == 500
    assert resp.json() == {"error": "Internal server error", "request_id": "req-123"}


@pytest.mark.asyncio
async def test_health_reports_database(client):
    resp = await client.get("/health")

    assert resp.status_code == 200
    assert resp.json() == {"status": "ok", "database": True}

# Fin del archivo backend/tests/modules/billing/webhooks/test_webhook_routes.py
