"""API request and response schemas."""

from datetime import datetime
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from ..domain.models import ParkingRate


class ApiModel(BaseModel):
    """camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class MessageResponse(ApiModel):
    message: str


class RateUpdateRequest(ApiModel):
    """Admin price edit for one tier."""

    price: Union[str, int, float]


class InitRatesResponse(ApiModel):
    message: str
    rates: list[ParkingRate]


class RegistrationRequest(ApiModel):
    """Checkout start: plate and chosen duration tier."""

    license_plate: str = Field(min_length=1, max_length=20)
    duration_type: str = Field(min_length=1)
    email: Optional[str] = None
    start_time: Optional[datetime] = None


class PaymentIntentRequest(ApiModel):
    amount: Union[str, int, float]
    registration_id: Optional[str] = None

    @field_validator("registration_id", mode="before")
    @classmethod
    def coerce_id(cls, v):
        """Accept numeric ids from older clients."""
        return str(v) if isinstance(v, int) else v


class PaymentIntentResponse(ApiModel):
    client_secret: str


class ConfirmPaymentRequest(ApiModel):
    registration_id: str = Field(min_length=1)
    payment_intent_id: Optional[str] = None

    @field_validator("registration_id", mode="before")
    @classmethod
    def coerce_id(cls, v):
        return str(v) if isinstance(v, int) else v


class SearchRequest(ApiModel):
    """Plate lookup by staff or enforcement."""

    license_plate: str = Field(min_length=1, max_length=20)


class ExemptionCreateRequest(ApiModel):
    license_plate: str = Field(min_length=1, max_length=20)
    staff_name: str = Field(min_length=1)
    start_date: datetime
    end_date: datetime
    is_active: bool = True


class ExemptionUpdateRequest(ApiModel):
    license_plate: Optional[str] = Field(default=None, min_length=1, max_length=20)
    staff_name: Optional[str] = Field(default=None, min_length=1)
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    is_active: Optional[bool] = None


class QRCodeResponse(ApiModel):
    qr_code: str  # data:image/png;base64,...
    payment_url: str
    location: str


class LoginRequest(ApiModel):
    username: str
    password: str


class LoginResponse(ApiModel):
    token: str
    expires_in: int


class HealthResponse(ApiModel):
    """Health check response."""

    status: str
    environment: str
    store: str
    payment_processor: str
    uptime_seconds: float
