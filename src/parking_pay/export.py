"""CSV export of registrations."""

import csv
import io
from typing import Iterable

from .domain.models import ParkingRegistration

CSV_HEADER = [
    "License Plate",
    "Duration",
    "Amount",
    "Payment Method",
    "Date & Time",
    "Status",
    "Valid Until",
]


def registrations_to_csv(registrations: Iterable[ParkingRegistration]) -> str:
    """Render registrations as CSV text, one row per registration."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    for reg in registrations:
        writer.writerow(
            [
                reg.license_plate,
                reg.duration_type,
                str(reg.amount),
                reg.payment_method,
                reg.created_at.isoformat(),
                reg.status.value,
                reg.end_time.isoformat(),
            ]
        )
    return buffer.getvalue()
