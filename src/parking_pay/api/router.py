"""FastAPI route definitions."""

import logging
from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Query, Request, Response
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from ..auth import AdminAuthenticator
from ..config import AppConfig
from ..domain.models import ParkingRate, ParkingRegistration, StaffExemption, StatusVerdict
from ..errors import AuthenticationError
from ..export import registrations_to_csv
from ..metrics import get_metrics
from ..qr import build_payment_url, qr_data_uri
from ..services import (
    PaymentOrchestrator,
    RateCatalog,
    RegistrationLedger,
    StaffExemptionList,
    StatusResolver,
)
from .schemas import (
    ConfirmPaymentRequest,
    ExemptionCreateRequest,
    ExemptionUpdateRequest,
    HealthResponse,
    InitRatesResponse,
    LoginRequest,
    LoginResponse,
    MessageResponse,
    PaymentIntentRequest,
    PaymentIntentResponse,
    QRCodeResponse,
    RateUpdateRequest,
    RegistrationRequest,
    SearchRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter()

DEGRADED_HEADER = "X-Degraded-Mode"
DEV_BASE_URL = "http://localhost:5000"


@dataclass
class Services:
    """Service objects wired at startup."""

    config: AppConfig
    rates: RateCatalog
    ledger: RegistrationLedger
    exemptions: StaffExemptionList
    resolver: StatusResolver
    payments: PaymentOrchestrator
    authenticator: AdminAuthenticator
    store_name: str


# Dependencies injected at startup
_services: Optional[Services] = None
_start_time: datetime = datetime.now()

_bearer = HTTPBearer(auto_error=False)


def init_router(services: Services) -> None:
    """
    Initialize router with dependencies.

    Args:
        services: Wired service objects
    """
    global _services, _start_time

    _services = services
    _start_time = datetime.now()

    logger.info("API router initialized")


def get_services() -> Services:
    if _services is None:
        raise HTTPException(status_code=503, detail="Service not initialized")
    return _services


async def require_admin(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer),
    services: Services = Depends(get_services),
) -> str:
    """Resolve the admin username from the bearer token."""
    if credentials is None:
        raise AuthenticationError("Admin login required")
    return services.authenticator.verify(credentials.credentials)


@router.get("/health", response_model=HealthResponse)
async def health_check(services: Services = Depends(get_services)) -> HealthResponse:
    """
    Health check endpoint.

    Reports which row store and payment processor are in use.
    """
    return HealthResponse(
        status="healthy",
        environment=services.config.environment,
        store=services.store_name,
        payment_processor=services.payments.processor.name,
        uptime_seconds=(datetime.now() - _start_time).total_seconds(),
    )


@router.post("/admin/login", response_model=LoginResponse)
async def admin_login(
    body: LoginRequest, services: Services = Depends(get_services)
) -> LoginResponse:
    """Exchange the admin credential for a signed session token."""
    token = services.authenticator.login(body.username, body.password)
    return LoginResponse(token=token, expires_in=services.authenticator.max_age_seconds)


# Rates


@router.get("/parking-rates", response_model=list[ParkingRate])
async def list_rates(
    response: Response, services: Services = Depends(get_services)
) -> list[ParkingRate]:
    """
    List duration tiers ascending by hours.

    Seeds defaults into an empty catalog. If the row store is down the
    defaults are returned with an X-Degraded-Mode header.
    """
    rates, degraded = await services.rates.load()
    if degraded:
        response.headers[DEGRADED_HEADER] = "rate-catalog-fallback"
    return rates


@router.patch("/parking-rates/{rate_id}", response_model=ParkingRate)
async def update_rate(
    rate_id: str,
    body: RateUpdateRequest,
    services: Services = Depends(get_services),
    admin: str = Depends(require_admin),
) -> ParkingRate:
    return await services.rates.update_rate(rate_id, body.price)


@router.get("/init-rates", response_model=InitRatesResponse)
async def init_rates(
    services: Services = Depends(get_services),
    admin: str = Depends(require_admin),
) -> InitRatesResponse:
    """Seed the default tiers if the catalog is empty."""
    created, rates = await services.rates.initialize_defaults()
    message = "Default rates initialized" if created else "Rates already exist"
    return InitRatesResponse(message=message, rates=rates)


# Registrations and payments


@router.post("/parking-registration", response_model=ParkingRegistration)
async def create_registration(
    body: RegistrationRequest,
    services: Services = Depends(get_services),
    idempotency_key: Optional[str] = Header(default=None, alias="Idempotency-Key"),
) -> ParkingRegistration:
    """Start checkout: create a pending registration."""
    return await services.ledger.create_registration(
        license_plate=body.license_plate,
        duration_type=body.duration_type,
        email=body.email,
        start_time=body.start_time,
        idempotency_key=idempotency_key,
    )


@router.post("/create-payment-intent", response_model=PaymentIntentResponse)
async def create_payment_intent(
    body: PaymentIntentRequest, services: Services = Depends(get_services)
) -> PaymentIntentResponse:
    intent = await services.payments.create_payment_intent(
        body.registration_id, body.amount
    )
    return PaymentIntentResponse(client_secret=intent.client_secret)


@router.post("/confirm-payment", response_model=ParkingRegistration)
async def confirm_payment(
    body: ConfirmPaymentRequest, services: Services = Depends(get_services)
) -> ParkingRegistration:
    """Mark a registration paid once the card payment succeeded."""
    return await services.payments.confirm_payment(
        body.registration_id, body.payment_intent_id
    )


@router.get("/parking-registrations", response_model=list[ParkingRegistration])
async def list_registrations(
    start_date: Optional[date] = Query(default=None, alias="startDate"),
    end_date: Optional[date] = Query(default=None, alias="endDate"),
    services: Services = Depends(get_services),
    admin: str = Depends(require_admin),
) -> list[ParkingRegistration]:
    """
    List registrations, newest first.

    With both startDate and endDate, filters inclusively on the start
    time's date.
    """
    return await services.ledger.list_registrations(start_date, end_date)


@router.get("/export-registrations")
async def export_registrations(
    start_date: Optional[date] = Query(default=None, alias="startDate"),
    end_date: Optional[date] = Query(default=None, alias="endDate"),
    services: Services = Depends(get_services),
    admin: str = Depends(require_admin),
) -> Response:
    """Download registrations as a CSV attachment."""
    registrations = await services.ledger.list_registrations(start_date, end_date)
    return Response(
        content=registrations_to_csv(registrations),
        media_type="text/csv",
        headers={
            "Content-Disposition": "attachment; filename=parking-registrations.csv"
        },
    )


@router.post(
    "/search-registration",
    response_model=StatusVerdict,
    response_model_exclude_none=True,
)
async def search_registration(
    body: SearchRequest, services: Services = Depends(get_services)
) -> StatusVerdict:
    """
    Check whether a plate is parked legally.

    Returns the staff / paid / expired / not_found verdict.
    """
    return await services.resolver.check_status(body.license_plate)


# Staff exemptions


@router.get("/staff-exemptions", response_model=list[StaffExemption])
async def list_exemptions(
    services: Services = Depends(get_services),
    admin: str = Depends(require_admin),
) -> list[StaffExemption]:
    return await services.exemptions.list_exemptions()


@router.post("/staff-exemptions", response_model=StaffExemption)
async def create_exemption(
    body: ExemptionCreateRequest,
    services: Services = Depends(get_services),
    admin: str = Depends(require_admin),
) -> StaffExemption:
    return await services.exemptions.create(
        license_plate=body.license_plate,
        staff_name=body.staff_name,
        start_date=body.start_date,
        end_date=body.end_date,
        is_active=body.is_active,
    )


@router.patch("/staff-exemptions/{exemption_id}", response_model=StaffExemption)
async def update_exemption(
    exemption_id: str,
    body: ExemptionUpdateRequest,
    services: Services = Depends(get_services),
    admin: str = Depends(require_admin),
) -> StaffExemption:
    return await services.exemptions.update(
        exemption_id, body.model_dump(exclude_unset=True)
    )


@router.delete("/staff-exemptions/{exemption_id}", response_model=MessageResponse)
async def delete_exemption(
    exemption_id: str,
    services: Services = Depends(get_services),
    admin: str = Depends(require_admin),
) -> MessageResponse:
    await services.exemptions.delete(exemption_id)
    return MessageResponse(message="Exemption deleted successfully")


# QR codes


def _base_url(request: Request, config: AppConfig) -> str:
    if config.api.public_base_url:
        return config.api.public_base_url
    if not config.is_production:
        return DEV_BASE_URL
    host = request.headers.get("host", request.url.netloc)
    return f"https://{host}"


@router.get("/generate-qr", response_model=QRCodeResponse)
async def generate_qr(
    request: Request,
    location: str = Query(default="default"),
    services: Services = Depends(get_services),
    admin: str = Depends(require_admin),
) -> QRCodeResponse:
    """QR code pointing visitors at the payment page for a location."""
    payment_url = build_payment_url(_base_url(request, services.config), location)
    return QRCodeResponse(
        qr_code=qr_data_uri(payment_url),
        payment_url=payment_url,
        location=location,
    )


@router.get("/metrics")
async def prometheus_metrics() -> Response:
    """
    Prometheus metrics endpoint.

    Returns metrics in Prometheus text format including:
    - parking_registrations_created_total: Registrations by duration tier
    - parking_payments_confirmed_total: Pending -> paid transitions
    - parking_payment_intents_total: Payment intents by processor
    - parking_status_checks_total: Plate lookups by verdict
    - parking_rate_catalog_fallbacks_total: Degraded-mode rate responses
    - parking_store_latency_seconds: Row store call latency
    - parking_store_errors_total: Failed row store calls
    """
    return Response(
        content=get_metrics(),
        media_type="text/plain; version=0.0.4; charset=utf-8",
    )
