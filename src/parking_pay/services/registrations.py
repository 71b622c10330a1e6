"""Registration ledger: append-only record of parking payment attempts."""

import logging
from datetime import date, datetime
from typing import Callable, Optional

from pydantic import ValidationError as SchemaError

from ..domain.models import ParkingRegistration, RegistrationStatus, utcnow
from ..domain.plates import normalize_plate
from ..errors import (
    BackingStoreError,
    ConflictError,
    InvalidDurationError,
    NotFoundError,
    ValidationError,
)
from ..metrics import record_payment_confirmed, record_registration_created
from ..storage.base import RowStore
from .rates import RateCatalog

logger = logging.getLogger(__name__)


class RegistrationLedger:
    """
    Creates registrations and applies the pending -> paid transition.

    Rows are never deleted. Expiry is not stored; callers compare
    end_time with the current time.
    """

    def __init__(self, store: RowStore, rates: RateCatalog, clock: Callable = utcnow):
        self._store = store
        self._table = store.tables.registrations
        self._rates = rates
        self._clock = clock

    def _parse_rows(self, rows: list[dict]) -> list[ParkingRegistration]:
        registrations = []
        for row in rows:
            try:
                registrations.append(ParkingRegistration.from_row(row))
            except SchemaError as e:
                logger.warning(f"Skipping malformed registration row {row.get('id')}: {e}")
        return registrations

    async def create_registration(
        self,
        license_plate: str,
        duration_type: str,
        email: Optional[str] = None,
        start_time: Optional[datetime] = None,
        idempotency_key: Optional[str] = None,
    ) -> ParkingRegistration:
        """
        Create a pending registration for a plate and duration tier.

        The amount is a snapshot of the tier price; later price edits do
        not affect it. A repeated idempotency key returns the registration
        created by the first request.

        Args:
            license_plate: Raw plate as typed by the visitor
            duration_type: Tier key such as "2_hours"
            email: Optional receipt address
            start_time: Start of the window (defaults to now)
            idempotency_key: Client-supplied key for safe retries

        Raises:
            ValidationError: If the plate is empty after normalization
            InvalidDurationError: If the tier does not exist
        """
        plate = normalize_plate(license_plate)
        if not plate:
            raise ValidationError("License plate is required")

        if idempotency_key:
            try:
                existing = await self._store.all(
                    self._table, match={"idempotencyKey": idempotency_key}
                )
            except BackingStoreError as e:
                logger.error(
                    f"Idempotent registration lookup failed; the '{self._table}' table "
                    f"needs a single line text field named 'idempotencyKey': {e}"
                )
                raise
            if existing:
                logger.info(f"Idempotent replay of registration {existing[0]['id']}")
                return ParkingRegistration.from_row(existing[0])

        rate = await self._rates.get_rate_by_type(duration_type)
        if rate is None:
            raise InvalidDurationError(duration_type)

        now = self._clock()
        start = start_time or now
        try:
            draft = ParkingRegistration(
                id="",
                license_plate=plate,
                email=email or None,
                duration_type=rate.duration_type,
                amount=rate.price,
                status=RegistrationStatus.PENDING,
                start_time=start,
                end_time=start + rate.duration,
                created_at=now,
                idempotency_key=idempotency_key,
            )
        except SchemaError as e:
            raise ValidationError(f"Invalid registration: {e}") from e

        row = await self._store.create(self._table, draft.to_fields())
        registration = ParkingRegistration.from_row(row)
        record_registration_created(rate.duration_type)
        logger.info(
            f"Registration {registration.id} created for {plate} "
            f"({rate.duration_type}, {registration.amount}) until {registration.end_time}"
        )
        return registration

    async def get_registration(self, registration_id: str) -> ParkingRegistration:
        """
        Raises:
            NotFoundError: If the id is unknown
        """
        row = await self._store.get(self._table, registration_id)
        if row is None:
            raise NotFoundError(f"Registration '{registration_id}' not found")
        return ParkingRegistration.from_row(row)

    async def mark_paid(
        self, registration_id: str, payment_intent_id: Optional[str]
    ) -> ParkingRegistration:
        """
        Apply the pending -> paid transition.

        Re-confirming with the same payment intent is a no-op.

        Raises:
            NotFoundError: If the id is unknown
            ConflictError: If already paid under a different payment intent
        """
        registration = await self.get_registration(registration_id)

        if registration.is_paid:
            if registration.payment_intent_id == payment_intent_id:
                logger.info(f"Registration {registration_id} already paid, nothing to do")
                return registration
            raise ConflictError(
                f"Registration '{registration_id}' was already paid "
                f"with a different payment intent"
            )

        fields = {"status": RegistrationStatus.PAID.value}
        if payment_intent_id:
            fields["paymentIntentId"] = payment_intent_id
        row = await self._store.update(self._table, registration_id, fields)

        record_payment_confirmed()
        logger.info(f"Registration {registration_id} changed: pending -> paid")
        return ParkingRegistration.from_row(row)

    async def latest_paid_for_plate(self, plate: str) -> Optional[ParkingRegistration]:
        """Paid registration with the latest end time for a normalized plate."""
        rows = await self._store.all(
            self._table,
            match={"licensePlate": plate, "status": RegistrationStatus.PAID.value},
        )
        paid = [r for r in self._parse_rows(rows) if r.is_paid]
        return max(paid, key=lambda r: r.end_time, default=None)

    async def list_registrations(
        self,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None,
    ) -> list[ParkingRegistration]:
        """
        List registrations, newest start time first.

        When both dates are given, only registrations whose start time
        falls on a day between them (inclusive) are returned.
        """
        registrations = self._parse_rows(await self._store.all(self._table))

        if start_date is not None and end_date is not None:
            registrations = [
                r
                for r in registrations
                if start_date <= r.start_time.date() <= end_date
            ]

        return sorted(registrations, key=lambda r: r.start_time, reverse=True)
