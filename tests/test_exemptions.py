"""Tests for the staff exemption list."""

from datetime import datetime, timedelta, timezone

import pytest

from parking_pay.domain import StaffExemption
from parking_pay.errors import NotFoundError, ValidationError

from .conftest import T0

JUNE_1 = datetime(2025, 6, 1, tzinfo=timezone.utc)
JUNE_30 = datetime(2025, 6, 30, tzinfo=timezone.utc)


class TestExemptionCrud:

    async def test_create_normalizes_plate(self, exemptions):
        exemption = await exemptions.create("st-001", "Pat Doe", JUNE_1, JUNE_30)

        assert exemption.license_plate == "ST001"
        assert exemption.staff_name == "Pat Doe"
        assert exemption.is_active is True
        assert exemption.created_at == T0

    async def test_start_must_precede_end(self, exemptions):
        with pytest.raises(ValidationError):
            await exemptions.create("ST001", "Pat Doe", JUNE_30, JUNE_1)
        with pytest.raises(ValidationError):
            await exemptions.create("ST001", "Pat Doe", JUNE_1, JUNE_1)

    async def test_list_ascending_by_start(self, exemptions):
        later = await exemptions.create("B2", "B", JUNE_1 + timedelta(days=5), JUNE_30)
        earlier = await exemptions.create("A1", "A", JUNE_1, JUNE_30)

        result = await exemptions.list_exemptions()

        assert [e.id for e in result] == [earlier.id, later.id]

    async def test_partial_update(self, exemptions):
        exemption = await exemptions.create("ST001", "Pat Doe", JUNE_1, JUNE_30)

        updated = await exemptions.update(
            exemption.id, {"staff_name": "Pat Smith", "license_plate": "st 002"}
        )

        assert updated.staff_name == "Pat Smith"
        assert updated.license_plate == "ST002"
        assert updated.start_date == JUNE_1

    async def test_deactivate(self, exemptions):
        exemption = await exemptions.create("ST001", "Pat Doe", JUNE_1, JUNE_30)

        updated = await exemptions.update(exemption.id, {"is_active": False})

        assert updated.is_active is False
        assert (await exemptions.get(exemption.id)).is_active is False

    async def test_update_checks_merged_range(self, exemptions):
        exemption = await exemptions.create("ST001", "Pat Doe", JUNE_1, JUNE_30)

        with pytest.raises(ValidationError):
            await exemptions.update(
                exemption.id, {"end_date": JUNE_1 - timedelta(days=1)}
            )

    async def test_update_unknown(self, exemptions):
        with pytest.raises(NotFoundError):
            await exemptions.update("recMissing", {"staff_name": "X"})

    async def test_delete_is_hard(self, exemptions, store):
        exemption = await exemptions.create("ST001", "Pat Doe", JUNE_1, JUNE_30)

        await exemptions.delete(exemption.id)

        assert await store.all(store.tables.exemptions) == []
        with pytest.raises(NotFoundError):
            await exemptions.get(exemption.id)

    async def test_delete_unknown(self, exemptions):
        with pytest.raises(NotFoundError):
            await exemptions.delete("recMissing")


class TestFindActive:

    async def test_active_match(self, exemptions):
        exemption = await exemptions.create("ST001", "Pat Doe", JUNE_1, JUNE_30)

        found = await exemptions.find_active_for_plate("st-001")

        assert found.id == exemption.id

    async def test_window_bounds_are_exclusive(self, exemptions):
        await exemptions.create("ST001", "Pat Doe", JUNE_1, JUNE_30)

        assert await exemptions.find_active_for_plate("ST001", as_of=JUNE_1) is None
        assert await exemptions.find_active_for_plate("ST001", as_of=JUNE_30) is None
        assert await exemptions.find_active_for_plate(
            "ST001", as_of=JUNE_30 - timedelta(seconds=1)
        )

    async def test_inactive_is_ignored(self, exemptions):
        await exemptions.create("ST001", "Pat Doe", JUNE_1, JUNE_30, is_active=False)

        assert await exemptions.find_active_for_plate("ST001") is None

    async def test_other_plate_is_ignored(self, exemptions):
        await exemptions.create("ST001", "Pat Doe", JUNE_1, JUNE_30)

        assert await exemptions.find_active_for_plate("ST002") is None

    async def test_overlap_resolves_to_latest_end(self, exemptions):
        await exemptions.create("ST001", "Short", JUNE_1, JUNE_1 + timedelta(days=10))
        longest = await exemptions.create("ST001", "Long", JUNE_1, JUNE_30)
        await exemptions.create("ST001", "Middle", JUNE_1 - timedelta(days=3), JUNE_30 - timedelta(days=2))

        found = await exemptions.find_active_for_plate("ST001")

        assert found.id == longest.id

    async def test_overlap_tie_resolves_to_earliest_start(self, exemptions):
        await exemptions.create("ST001", "Late start", JUNE_1, JUNE_30)
        early = await exemptions.create("ST001", "Early start", JUNE_1 - timedelta(days=7), JUNE_30)

        found = await exemptions.find_active_for_plate("ST001")

        assert found.id == early.id


def test_missing_checkbox_reads_as_inactive():
    row = {
        "id": "rec1",
        "licensePlate": "ST001",
        "staffName": "Pat Doe",
        "startDate": "2025-06-01",
        "endDate": "2025-06-30",
    }

    exemption = StaffExemption.from_row(row)

    assert exemption.is_active is False
    assert exemption.start_date == JUNE_1
