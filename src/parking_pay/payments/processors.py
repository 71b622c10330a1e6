"""Payment processor abstraction (Stripe, with a development placeholder)."""

import logging
import secrets
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

import stripe

from ..errors import PaymentProcessorError, PaymentProcessorTimeoutError
from ..timeouts import call_blocking

logger = logging.getLogger(__name__)


@dataclass
class PaymentIntent:
    processor: str
    client_secret: str
    intent_id: Optional[str] = None


class PaymentProcessor:
    name = "abstract"

    async def create_intent(
        self, amount: Decimal, registration_id: Optional[str] = None
    ) -> PaymentIntent:
        raise NotImplementedError


class PlaceholderPaymentProcessor(PaymentProcessor):
    """
    Stand-in used when no Stripe key is configured.

    Returns a locally generated "pi_mock_" secret. Nothing is charged.
    """

    name = "placeholder"

    async def create_intent(
        self, amount: Decimal, registration_id: Optional[str] = None
    ) -> PaymentIntent:
        secret = f"pi_mock_{secrets.token_hex(6)}"
        logger.warning(
            f"Placeholder payment intent for registration {registration_id} "
            f"({amount}); no charge will be made"
        )
        return PaymentIntent(processor=self.name, client_secret=secret)


class StripePaymentProcessor(PaymentProcessor):
    """Creates Stripe PaymentIntents for the client-side card element."""

    name = "stripe"

    def __init__(self, secret_key: str, currency: str = "gbp", timeout_seconds: float = 15.0):
        """
        Args:
            secret_key: Stripe secret API key
            currency: ISO currency code used for every intent
            timeout_seconds: Deadline for each API call
        """
        self.secret_key = secret_key
        self.currency = currency
        self.timeout_seconds = timeout_seconds

    @staticmethod
    def to_minor_units(amount: Decimal) -> int:
        """Convert 4.00 to 400 (pence/cents)."""
        return int((amount * 100).to_integral_value())

    async def create_intent(
        self, amount: Decimal, registration_id: Optional[str] = None
    ) -> PaymentIntent:
        """
        Raises:
            PaymentProcessorTimeoutError: If Stripe does not answer in time
            PaymentProcessorError: If Stripe rejects the request
        """
        try:
            intent = await call_blocking(
                stripe.PaymentIntent.create,
                api_key=self.secret_key,
                amount=self.to_minor_units(amount),
                currency=self.currency,
                metadata={"registrationId": registration_id or ""},
                timeout=self.timeout_seconds,
                timeout_error=PaymentProcessorTimeoutError,
                call_name="Stripe payment intent creation",
            )
        except PaymentProcessorTimeoutError:
            logger.error("Stripe payment intent creation timed out")
            raise
        except stripe.StripeError as e:
            logger.error(f"Stripe payment intent creation failed: {e}")
            raise PaymentProcessorError(f"Error creating payment intent: {e}") from e

        logger.info(f"Created Stripe payment intent {intent.id} for registration {registration_id}")
        return PaymentIntent(
            processor=self.name, client_secret=intent.client_secret, intent_id=intent.id
        )
