# -*- coding: utf-8 -*-
"""
backend/tests/modules/billing/entitlements/test_selection.py

Reglas puras de clasificación y orden de bolsas.
"""

from datetime import datetime, timedelta, timezone

from app.modules.billing.entitlements.models import Entitlement
from app.modules.billing.entitlements.selection import (
    evaluate_bundles,
    is_within_window,
    sort_for_consumption,
    summary_expiry,
)

NOW = datetime(2026, 9, 1, 12, 0, tzinfo=timezone.utc)


def _bundle(name, remaining=1, expires_at=None, updated_at=NOW - timedelta(days=1)):
    return Entitlement(id=name, user_id="u", remaining_credits=remaining, expires_at=expires_at, updated_at=updated_at)


def test_window_boundary_is_exclusive():
    assert is_within_window(_bundle("a", expires_at=NOW + timedelta(seconds=1)), NOW) is True
    assert is_within_window(_bundle("b", expires_at=NOW), NOW) is False
    assert is_within_window(_bundle("c", expires_at=None), NOW) is True


def test_naive_expiry_is_read_as_utc():
    naive = (NOW + timedelta(hours=1)).replace(tzinfo=None)
    assert is_within_window(_bundle("a", expires_at=naive), NOW) is True


def test_evaluate_bundles_triage():
    active = _bundle("active", remaining=2, expires_at=NOW + timedelta(days=1))
    empty = _bundle("empty", remaining=0)
    expired = _bundle("expired", remaining=5, expires_at=NOW - timedelta(days=1))

    triage = evaluate_bundles([active, empty, expired], NOW)

    assert triage.within_window == [active, empty]
    assert triage.with_credits == [active]
    assert triage.expired == [expired]


def test_consumption_order():
    forever_old = _bundle("forever_old", updated_at=NOW - timedelta(days=9))
    forever_new = _bundle("forever_new", updated_at=NOW - timedelta(days=1))
    late = _bundle("late", expires_at=NOW + timedelta(days=20))
    soon_new = _bundle("soon_new", expires_at=NOW + timedelta(days=2), updated_at=NOW - timedelta(hours=1))
    soon_old = _bundle("soon_old", expires_at=NOW + timedelta(days=2), updated_at=NOW - timedelta(days=4))

    ordered = sort_for_consumption([forever_new, late, soon_new, forever_old, soon_old])

    assert [b.id for b in ordered] == ["soon_old", "soon_new", "late", "forever_old", "forever_new"]


def test_summary_expiry():
    soon = NOW + timedelta(days=1)
    assert summary_expiry([]) is None
    assert summary_expiry([_bundle("a", expires_at=soon), _bundle("b", expires_at=NOW + timedelta(days=3))]) == soon
    assert summary_expiry([_bundle("a", expires_at=soon), _bundle("b")]) is None
