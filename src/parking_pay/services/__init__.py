"""Application services module."""

from .exemptions import StaffExemptionList
from .payments import PaymentOrchestrator
from .rates import DEFAULT_RATES, RateCatalog
from .registrations import RegistrationLedger
from .status import StatusResolver

__all__ = [
    "DEFAULT_RATES",
    "PaymentOrchestrator",
    "RateCatalog",
    "RegistrationLedger",
    "StaffExemptionList",
    "StatusResolver",
]
