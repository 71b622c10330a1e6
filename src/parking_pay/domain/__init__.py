"""Domain models module."""

from .models import (
    ParkingRate,
    ParkingRegistration,
    RegistrationStatus,
    StaffExemption,
    StatusVerdict,
    VerdictType,
    parse_money,
    utcnow,
)
from .plates import normalize_plate

__all__ = [
    "ParkingRate",
    "ParkingRegistration",
    "RegistrationStatus",
    "StaffExemption",
    "StatusVerdict",
    "VerdictType",
    "normalize_plate",
    "parse_money",
    "utcnow",
]
