"""Tests for parking status resolution."""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from parking_pay.domain import VerdictType
from parking_pay.errors import ValidationError

from .conftest import T0

JUNE_1 = datetime(2025, 6, 1, tzinfo=timezone.utc)
JUNE_30 = datetime(2025, 6, 30, tzinfo=timezone.utc)


async def _paid(ledger, plate, duration_type="2_hours"):
    registration = await ledger.create_registration(plate, duration_type)
    return await ledger.mark_paid(registration.id, f"pi_{registration.id}")


class TestPrecedence:

    async def test_unknown_plate(self, resolver):
        verdict = await resolver.check_status("NOPE42")

        assert verdict.is_legal is False
        assert verdict.type == VerdictType.NOT_FOUND
        assert verdict.valid_until is None
        assert "validUntil" not in verdict.model_dump(by_alias=True, exclude_none=True)

    async def test_staff_beats_paid(self, resolver, ledger, exemptions):
        await _paid(ledger, "ST001")
        await exemptions.create("ST001", "Pat Doe", JUNE_1, JUNE_30)

        verdict = await resolver.check_status("st-001")

        assert verdict.is_legal is True
        assert verdict.type == VerdictType.STAFF
        assert verdict.valid_until == JUNE_30
        assert verdict.amount is None

    async def test_inactive_exemption_falls_through(self, resolver, ledger, exemptions):
        paid = await _paid(ledger, "ST001")
        await exemptions.create("ST001", "Pat Doe", JUNE_1, JUNE_30, is_active=False)

        verdict = await resolver.check_status("ST001")

        assert verdict.type == VerdictType.PAID
        assert verdict.valid_until == paid.end_time

    async def test_pending_registration_is_not_found(self, resolver, ledger):
        await ledger.create_registration("XY99", "2_hours")

        verdict = await resolver.check_status("XY99")

        assert verdict.type == VerdictType.NOT_FOUND

    async def test_empty_plate(self, resolver):
        with pytest.raises(ValidationError):
            await resolver.check_status("--")


class TestPaidWindow:

    async def test_paid_and_valid(self, resolver, ledger):
        paid = await _paid(ledger, "XY99")

        verdict = await resolver.check_status("xy-99")

        assert verdict.is_legal is True
        assert verdict.type == VerdictType.PAID
        assert verdict.status == "Valid paid parking"
        assert verdict.valid_until == T0 + timedelta(hours=2)
        assert verdict.amount == Decimal("4.00")
        assert verdict.payment_method == paid.payment_method

    async def test_expired_after_end_time(self, resolver, ledger, clock):
        paid = await _paid(ledger, "XY99")
        clock.advance(hours=3)

        verdict = await resolver.check_status("XY99")

        assert verdict.is_legal is False
        assert verdict.type == VerdictType.EXPIRED
        assert verdict.valid_until == paid.end_time
        assert verdict.amount == Decimal("4.00")

    async def test_expired_exactly_at_end_time(self, resolver, ledger, clock):
        await _paid(ledger, "XY99")
        clock.advance(hours=2)

        verdict = await resolver.check_status("XY99")

        assert verdict.type == VerdictType.EXPIRED

    async def test_expiry_does_not_touch_stored_status(self, resolver, ledger, clock, store):
        paid = await _paid(ledger, "XY99")
        clock.advance(days=1)

        await resolver.check_status("XY99")

        row = await store.get(store.tables.registrations, paid.id)
        assert row["status"] == "paid"

    async def test_latest_end_time_wins(self, resolver, ledger, clock):
        await _paid(ledger, "XY99", "24_hours")
        clock.advance(hours=1)
        await _paid(ledger, "XY99", "1_hour")
        clock.advance(hours=3)

        verdict = await resolver.check_status("XY99")

        assert verdict.type == VerdictType.PAID
        assert verdict.valid_until == T0 + timedelta(hours=24)


async def test_checkout_scenario(resolver, ledger, orchestrator, clock):
    registration = await ledger.create_registration("abc-123", "2_hours")
    assert registration.amount == Decimal("4.00")
    assert registration.end_time == T0 + timedelta(hours=2)

    intent = await orchestrator.create_payment_intent(registration.id, registration.amount)
    await orchestrator.confirm_payment(registration.id, "pi_abc")

    clock.advance(hours=1, minutes=59)
    verdict = await resolver.check_status("ABC123")

    assert intent.client_secret.startswith("pi_mock_")
    assert verdict.is_legal is True
    assert verdict.type == VerdictType.PAID
