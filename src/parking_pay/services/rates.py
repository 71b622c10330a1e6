"""Rate catalog with default seeding and degraded-mode fallback."""

import asyncio
import logging
from typing import Any, Callable, Optional

from pydantic import ValidationError as SchemaError

from ..domain.models import ParkingRate, parse_money, utcnow
from ..errors import BackingStoreError
from ..metrics import record_rate_fallback
from ..storage.base import RowStore

logger = logging.getLogger(__name__)

DEFAULT_RATES: list[dict] = [
    {"durationType": "1_hour", "price": "2.50", "durationHours": 1, "description": "1 Hour"},
    {"durationType": "2_hours", "price": "4.00", "durationHours": 2, "description": "2 Hours"},
    {"durationType": "4_hours", "price": "8.00", "durationHours": 4, "description": "4 Hours"},
    {"durationType": "8_hours", "price": "15.00", "durationHours": 8, "description": "8 Hours"},
    {"durationType": "12_hours", "price": "20.00", "durationHours": 12, "description": "12 Hours"},
    {"durationType": "24_hours", "price": "32.00", "durationHours": 24, "description": "24 Hours"},
]


class RateCatalog:
    """
    Read-mostly catalog of duration tiers.

    Any default tier missing from the store (all six, for an empty store)
    is written on read, so a seed interrupted by a store failure completes
    on a later read. If the store cannot be reached, the defaults are
    served instead and the catalog reports that it is running in
    degraded mode.
    """

    def __init__(self, store: RowStore, clock: Callable = utcnow):
        self._store = store
        self._table = store.tables.rates
        self._clock = clock
        # Held while missing default tiers are written
        self._seed_lock = asyncio.Lock()

    def default_rates(self) -> list[ParkingRate]:
        """Built-in tiers, numbered 1..6 like the seeded rows."""
        now = self._clock()
        return [
            ParkingRate.from_row({"id": str(i), "updatedAt": now, **rate})
            for i, rate in enumerate(DEFAULT_RATES, start=1)
        ]

    @staticmethod
    def _sorted(rows: list[dict]) -> list[ParkingRate]:
        rates = []
        for row in rows:
            try:
                rates.append(ParkingRate.from_row(row))
            except SchemaError as e:
                logger.warning(f"Skipping malformed rate row {row.get('id')}: {e}")
        return sorted(rates, key=lambda r: r.duration_hours)

    @staticmethod
    def _missing_defaults(rows: list[dict]) -> list[dict]:
        present = {row.get("durationType") for row in rows}
        return [rate for rate in DEFAULT_RATES if rate["durationType"] not in present]

    async def _seed_missing(self) -> tuple[int, list[dict]]:
        """
        Write the default tiers the store does not hold yet.

        Returns:
            (number of tiers written, all rate rows afterwards)
        """
        async with self._seed_lock:
            rows = await self._store.all(self._table)
            missing = self._missing_defaults(rows)
            if not missing:
                return 0, rows

            now = self._clock().isoformat()
            for rate in missing:
                rows.append(await self._store.create(self._table, {**rate, "updatedAt": now}))
            logger.info(
                f"Seeded {len(missing)} default parking rates: "
                f"{', '.join(r['durationType'] for r in missing)}"
            )
            return len(missing), rows

    async def load(self) -> tuple[list[ParkingRate], bool]:
        """
        Load rates ascending by duration.

        Returns:
            (rates, degraded) where degraded is True when the defaults
            were served because the store failed
        """
        try:
            rows = await self._store.all(self._table)
            if self._missing_defaults(rows):
                logger.info("Rate catalog is missing default tiers, seeding")
                _, rows = await self._seed_missing()
            return self._sorted(rows), False
        except BackingStoreError as e:
            logger.warning(f"Rate catalog in degraded mode, serving default rates: {e}")
            record_rate_fallback()
            return self.default_rates(), True

    async def list_rates(self) -> list[ParkingRate]:
        rates, _ = await self.load()
        return rates

    async def get_rate_by_type(self, duration_type: str) -> Optional[ParkingRate]:
        for rate in await self.list_rates():
            if rate.duration_type == duration_type:
                return rate
        return None

    async def update_rate(self, rate_id: str, new_price: Any) -> ParkingRate:
        """
        Change the price of a tier.

        Raises:
            ValidationError: If the price is not a non-negative decimal
            NotFoundError: If the rate id is unknown
        """
        price = parse_money(new_price, "price")
        row = await self._store.update(
            self._table,
            rate_id,
            {"price": str(price), "updatedAt": self._clock().isoformat()},
        )
        logger.info(f"Rate {rate_id} ({row.get('durationType')}) price set to {price}")
        return ParkingRate.from_row(row)

    async def initialize_defaults(self) -> tuple[bool, list[ParkingRate]]:
        """
        Seed whichever default tiers the catalog is missing.

        Unlike load(), store failures propagate.

        Returns:
            (created, rates) where created is True if any tier was written
        """
        written, rows = await self._seed_missing()
        return written > 0, self._sorted(rows)
