"""Parking legality resolution for a license plate."""

import logging
from typing import Callable

from ..domain.models import StatusVerdict, VerdictType, utcnow
from ..domain.plates import normalize_plate
from ..errors import ValidationError
from ..metrics import record_status_check
from .exemptions import StaffExemptionList
from .registrations import RegistrationLedger

logger = logging.getLogger(__name__)


class StatusResolver:
    """
    Combines staff exemptions and paid registrations into one verdict.

    Precedence, first match wins:
    1. Active staff exemption -> legal ("staff")
    2. Latest paid registration -> legal while its window is open
       ("paid"), otherwise not legal ("expired")
    3. Nothing found -> not legal ("not_found")

    Read-only: stored state is never modified.
    """

    def __init__(
        self,
        exemptions: StaffExemptionList,
        ledger: RegistrationLedger,
        clock: Callable = utcnow,
    ):
        self._exemptions = exemptions
        self._ledger = ledger
        self._clock = clock

    async def check_status(self, license_plate: str) -> StatusVerdict:
        """
        Resolve the legality verdict for a plate.

        Raises:
            ValidationError: If the plate is empty after normalization
        """
        plate = normalize_plate(license_plate)
        if not plate:
            raise ValidationError("License plate is required")

        now = self._clock()
        verdict = await self._resolve(plate, now)

        record_status_check(verdict.type.value)
        logger.info(f"Status check for {plate}: {verdict.type.value}")
        return verdict

    async def _resolve(self, plate: str, now) -> StatusVerdict:
        exemption = await self._exemptions.find_active_for_plate(plate, as_of=now)
        if exemption is not None:
            return StatusVerdict(
                is_legal=True,
                status="Staff parking - valid exemption",
                type=VerdictType.STAFF,
                valid_until=exemption.end_date,
            )

        registration = await self._ledger.latest_paid_for_plate(plate)
        if registration is not None:
            is_valid = registration.is_valid_at(now)
            return StatusVerdict(
                is_legal=is_valid,
                status="Valid paid parking" if is_valid else "Parking expired",
                type=VerdictType.PAID if is_valid else VerdictType.EXPIRED,
                valid_until=registration.end_time,
                amount=registration.amount,
                payment_method=registration.payment_method,
            )

        return StatusVerdict(
            is_legal=False,
            status="No valid parking found",
            type=VerdictType.NOT_FOUND,
        )
