"""Tests for payment processors and the payment orchestrator."""

import time
from decimal import Decimal
from types import SimpleNamespace

import pytest
import stripe

from parking_pay.domain import RegistrationStatus
from parking_pay.errors import (
    NotFoundError,
    PaymentProcessorError,
    PaymentProcessorTimeoutError,
    ValidationError,
)
from parking_pay.payments import PlaceholderPaymentProcessor, StripePaymentProcessor
from parking_pay.services import PaymentOrchestrator


class TestPlaceholderProcessor:

    async def test_secret_is_local_placeholder(self):
        intent = await PlaceholderPaymentProcessor().create_intent(Decimal("4.00"), "rec1")

        assert intent.processor == "placeholder"
        assert intent.client_secret.startswith("pi_mock_")
        assert intent.intent_id is None

    async def test_secrets_differ(self):
        processor = PlaceholderPaymentProcessor()

        first = await processor.create_intent(Decimal("4.00"))
        second = await processor.create_intent(Decimal("4.00"))

        assert first.client_secret != second.client_secret


@pytest.fixture
def calls(monkeypatch):
    """Replace Stripe's PaymentIntent.create and record its arguments."""
    calls = []

    def fake_create(**kwargs):
        calls.append(kwargs)
        return SimpleNamespace(id="pi_123", client_secret="pi_123_secret_abc")

    monkeypatch.setattr(stripe.PaymentIntent, "create", fake_create)
    return calls


class TestStripeProcessor:

    async def test_creates_intent_in_minor_units(self, calls):
        processor = StripePaymentProcessor("sk_test_key", currency="gbp")

        intent = await processor.create_intent(Decimal("4.00"), "rec42")

        assert intent.client_secret == "pi_123_secret_abc"
        assert intent.intent_id == "pi_123"
        assert calls == [
            {
                "api_key": "sk_test_key",
                "amount": 400,
                "currency": "gbp",
                "metadata": {"registrationId": "rec42"},
            }
        ]

    @pytest.mark.parametrize(
        "amount, minor",
        [(Decimal("2.50"), 250), (Decimal("32.00"), 3200), (Decimal("0.01"), 1)],
    )
    def test_minor_units(self, amount, minor):
        assert StripePaymentProcessor.to_minor_units(amount) == minor

    async def test_stripe_error_is_wrapped(self, monkeypatch):
        def fake_create(**kwargs):
            raise stripe.StripeError("Invalid API Key provided")

        monkeypatch.setattr(stripe.PaymentIntent, "create", fake_create)

        with pytest.raises(PaymentProcessorError) as exc_info:
            await StripePaymentProcessor("sk_bad").create_intent(Decimal("4.00"))

        assert exc_info.value.status_code == 502

    async def test_slow_stripe_times_out(self, monkeypatch):
        def slow_create(**kwargs):
            time.sleep(0.5)

        monkeypatch.setattr(stripe.PaymentIntent, "create", slow_create)
        processor = StripePaymentProcessor("sk_test_key", timeout_seconds=0.05)

        with pytest.raises(PaymentProcessorTimeoutError):
            await processor.create_intent(Decimal("4.00"))


class TestOrchestrator:

    async def test_payment_intent_for_registration(self, orchestrator, ledger):
        registration = await ledger.create_registration("XY99", "2_hours")

        intent = await orchestrator.create_payment_intent(registration.id, "4.00")

        assert intent.client_secret.startswith("pi_mock_")

    @pytest.mark.parametrize("amount", ["-4.00", "four", None])
    async def test_invalid_amount(self, orchestrator, amount):
        with pytest.raises(ValidationError):
            await orchestrator.create_payment_intent("rec1", amount)

    async def test_confirm_payment(self, orchestrator, ledger):
        registration = await ledger.create_registration("XY99", "2_hours")

        paid = await orchestrator.confirm_payment(registration.id, "pi_123")

        assert paid.status == RegistrationStatus.PAID
        assert paid.payment_intent_id == "pi_123"

    async def test_confirm_unknown_registration(self, orchestrator):
        with pytest.raises(NotFoundError):
            await orchestrator.confirm_payment("recMissing", "pi_123")

    async def test_stripe_amount_passes_through(self, ledger, calls):
        orchestrator = PaymentOrchestrator(ledger, StripePaymentProcessor("sk_test_key"))

        await orchestrator.create_payment_intent("rec1", 15)

        assert calls[0]["amount"] == 1500
