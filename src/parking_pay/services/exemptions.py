"""Staff exemption list managed from the admin console."""

import logging
from datetime import datetime
from typing import Callable, Optional

from pydantic import ValidationError as SchemaError

from ..domain.models import StaffExemption, utcnow
from ..domain.plates import normalize_plate
from ..errors import NotFoundError, ValidationError
from ..storage.base import RowStore

logger = logging.getLogger(__name__)


class StaffExemptionList:
    """CRUD over staff exemptions plus the active-exemption lookup."""

    def __init__(self, store: RowStore, clock: Callable = utcnow):
        self._store = store
        self._table = store.tables.exemptions
        self._clock = clock

    def _parse_rows(self, rows: list[dict]) -> list[StaffExemption]:
        exemptions = []
        for row in rows:
            try:
                exemptions.append(StaffExemption.from_row(row))
            except SchemaError as e:
                logger.warning(f"Skipping malformed exemption row {row.get('id')}: {e}")
        return exemptions

    @staticmethod
    def _normalized_plate(license_plate: str) -> str:
        plate = normalize_plate(license_plate)
        if not plate:
            raise ValidationError("License plate is required")
        return plate

    async def create(
        self,
        license_plate: str,
        staff_name: str,
        start_date: datetime,
        end_date: datetime,
        is_active: bool = True,
    ) -> StaffExemption:
        """
        Raises:
            ValidationError: If the plate is empty or startDate >= endDate
        """
        try:
            draft = StaffExemption(
                id="",
                license_plate=self._normalized_plate(license_plate),
                staff_name=staff_name,
                start_date=start_date,
                end_date=end_date,
                is_active=is_active,
                created_at=self._clock(),
            )
        except SchemaError as e:
            raise ValidationError(f"Invalid exemption: {e}") from e

        row = await self._store.create(self._table, draft.to_fields())
        exemption = StaffExemption.from_row(row)
        logger.info(
            f"Staff exemption {exemption.id} created for {exemption.license_plate} "
            f"({exemption.staff_name})"
        )
        return exemption

    async def list_exemptions(self) -> list[StaffExemption]:
        """All exemptions, ascending by start date."""
        exemptions = self._parse_rows(await self._store.all(self._table))
        return sorted(exemptions, key=lambda e: e.start_date)

    async def get(self, exemption_id: str) -> StaffExemption:
        row = await self._store.get(self._table, exemption_id)
        if row is None:
            raise NotFoundError(f"Exemption '{exemption_id}' not found")
        return StaffExemption.from_row(row)

    async def update(self, exemption_id: str, changes: dict) -> StaffExemption:
        """
        Apply a partial update.

        Args:
            changes: Snake_case field names mapped to new values

        Raises:
            NotFoundError: If the id is unknown
            ValidationError: If the merged exemption is invalid
        """
        existing = await self.get(exemption_id)
        changes = {k: v for k, v in changes.items() if k not in ("id", "created_at")}
        if not changes:
            return existing

        if "license_plate" in changes:
            changes["license_plate"] = self._normalized_plate(changes["license_plate"])

        try:
            merged = StaffExemption.model_validate({**existing.model_dump(), **changes})
        except SchemaError as e:
            raise ValidationError(f"Invalid exemption: {e}") from e

        fields = merged.model_dump(mode="json", by_alias=True, include=set(changes))
        row = await self._store.update(self._table, exemption_id, fields)
        logger.info(f"Staff exemption {exemption_id} updated: {sorted(fields)}")
        return StaffExemption.from_row(row)

    async def delete(self, exemption_id: str) -> None:
        await self._store.delete(self._table, exemption_id)
        logger.info(f"Staff exemption {exemption_id} deleted")

    async def find_active_for_plate(
        self, license_plate: str, as_of: Optional[datetime] = None
    ) -> Optional[StaffExemption]:
        """
        Find the exemption covering a plate at a point in time.

        Overlapping exemptions resolve to the one ending last, then the
        one that started first.
        """
        plate = normalize_plate(license_plate)
        as_of = as_of or self._clock()
        rows = await self._store.all(self._table, match={"licensePlate": plate})
        active = [e for e in self._parse_rows(rows) if e.applies_at(as_of)]
        if not active:
            return None
        return max(active, key=lambda e: (e.end_date, -e.start_date.timestamp()))
