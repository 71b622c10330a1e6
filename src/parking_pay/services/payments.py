"""Payment orchestration between the ledger and the payment processor."""

import logging
from typing import Any, Optional

from ..domain.models import ParkingRegistration, parse_money
from ..metrics import record_payment_intent
from ..payments.processors import PaymentIntent, PaymentProcessor
from .registrations import RegistrationLedger

logger = logging.getLogger(__name__)


class PaymentOrchestrator:
    """Requests payment intents and confirms paid registrations."""

    def __init__(self, ledger: RegistrationLedger, processor: PaymentProcessor):
        self._ledger = ledger
        self.processor = processor

    async def create_payment_intent(
        self, registration_id: Optional[str], amount: Any
    ) -> PaymentIntent:
        """
        Ask the processor for a payment intent.

        Raises:
            ValidationError: If the amount is not a non-negative decimal
            PaymentProcessorError: If the processor fails
        """
        value = parse_money(amount)
        intent = await self.processor.create_intent(value, registration_id)
        record_payment_intent(intent.processor)
        return intent

    async def confirm_payment(
        self, registration_id: str, payment_intent_id: Optional[str]
    ) -> ParkingRegistration:
        """
        Mark a registration paid after the processor confirmed the charge.

        Raises:
            NotFoundError: If the registration does not exist
            ConflictError: If it was paid under another payment intent
        """
        return await self._ledger.mark_paid(registration_id, payment_intent_id)
