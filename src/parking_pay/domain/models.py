"""Domain models for rates, registrations, exemptions and status verdicts."""

from datetime import date, datetime, time, timedelta, timezone
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from enum import Enum
from typing import Annotated, Any, Optional

from pydantic import (
    AfterValidator,
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    model_validator,
)
from pydantic.alias_generators import to_camel

from ..errors import ValidationError

CENTS = Decimal("0.01")


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


def _parse_date_only(value: Any) -> Any:
    # Airtable date fields come back as bare "YYYY-MM-DD"
    if isinstance(value, str) and len(value) == 10:
        return datetime.combine(date.fromisoformat(value), time.min)
    return value


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _to_cents(value: Decimal) -> Decimal:
    return value.quantize(CENTS, rounding=ROUND_HALF_UP)


def parse_money(value: Any, field: str = "amount") -> Decimal:
    """
    Parse a non-negative decimal amount rounded to two places.

    Raises:
        ValidationError: If the value is not a finite, non-negative number
    """
    if isinstance(value, bool) or value is None:
        raise ValidationError(f"Invalid {field}: {value!r}")
    try:
        amount = Decimal(str(value).strip())
    except InvalidOperation as e:
        raise ValidationError(f"Invalid {field}: {value!r}") from e
    if not amount.is_finite() or amount < 0:
        raise ValidationError(f"Invalid {field}: {value!r}")
    return _to_cents(amount)


UtcDateTime = Annotated[
    datetime, BeforeValidator(_parse_date_only), AfterValidator(_as_utc)
]
Money = Annotated[Decimal, Field(ge=0), AfterValidator(_to_cents)]


class RegistrationStatus(str, Enum):
    """Stored payment status of a registration."""

    PENDING = "pending"
    PAID = "paid"


class VerdictType(str, Enum):
    """Classification returned by a parking status check."""

    STAFF = "staff"
    PAID = "paid"
    EXPIRED = "expired"
    NOT_FOUND = "not_found"


class RowModel(BaseModel):
    """Base model mapping snake_case attributes to camelCase row fields."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    @classmethod
    def from_row(cls, row: dict):
        return cls.model_validate(row)

    def to_fields(self) -> dict:
        """Serialize to row fields, without the store-assigned id."""
        return self.model_dump(
            mode="json", by_alias=True, exclude={"id"}, exclude_none=True
        )


class ParkingRate(RowModel):
    """A duration tier with its price."""

    id: str
    duration_type: str
    price: Money
    duration_hours: int = Field(gt=0)
    description: str = ""
    updated_at: UtcDateTime = Field(default_factory=utcnow)

    @property
    def duration(self) -> timedelta:
        return timedelta(hours=self.duration_hours)


class ParkingRegistration(RowModel):
    """One parking payment attempt tied to a plate and a time window."""

    id: str
    license_plate: str
    email: Optional[str] = None
    duration_type: str
    amount: Money
    payment_intent_id: Optional[str] = None
    payment_method: str = "stripe"
    status: RegistrationStatus = RegistrationStatus.PENDING
    start_time: UtcDateTime
    end_time: UtcDateTime
    created_at: UtcDateTime = Field(default_factory=utcnow)
    receipt_sent: bool = False
    idempotency_key: Optional[str] = None

    @model_validator(mode="after")
    def _check_window(self) -> "ParkingRegistration":
        if self.end_time <= self.start_time:
            raise ValueError("endTime must be after startTime")
        return self

    @property
    def is_paid(self) -> bool:
        return self.status == RegistrationStatus.PAID

    def is_valid_at(self, now: datetime) -> bool:
        """True while the paid window is still open."""
        return self.end_time > now


class StaffExemption(RowModel):
    """Admin-granted waiver for a plate over a date range."""

    id: str
    license_plate: str
    staff_name: str
    start_date: UtcDateTime
    end_date: UtcDateTime
    is_active: bool = True
    created_at: UtcDateTime = Field(default_factory=utcnow)

    @model_validator(mode="after")
    def _check_range(self) -> "StaffExemption":
        if self.start_date >= self.end_date:
            raise ValueError("startDate must be before endDate")
        return self

    @classmethod
    def from_row(cls, row: dict) -> "StaffExemption":
        # Airtable omits unchecked checkbox fields entirely
        return cls.model_validate({"isActive": False, **row})

    def applies_at(self, as_of: datetime) -> bool:
        return self.is_active and self.start_date < as_of < self.end_date


class StatusVerdict(RowModel):
    """Legality verdict for a license plate."""

    is_legal: bool
    status: str
    type: VerdictType
    valid_until: Optional[UtcDateTime] = None
    amount: Optional[Money] = None
    payment_method: Optional[str] = None
