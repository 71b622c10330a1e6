"""Main application entry point."""

import logging
from contextlib import asynccontextmanager
from typing import Callable, Optional

import uvicorn
from fastapi import FastAPI

from .api.handlers import register_exception_handlers
from .api.router import Services, init_router, router
from .auth import AdminAuthenticator
from .config import AppConfig, check_credentials, load_app_config
from .domain.models import utcnow
from .errors import ConfigError
from .payments import PaymentProcessor, PlaceholderPaymentProcessor, StripePaymentProcessor
from .services import (
    PaymentOrchestrator,
    RateCatalog,
    RegistrationLedger,
    StaffExemptionList,
    StatusResolver,
)
from .storage import AirtableRowStore, InMemoryRowStore, RowStore, Tables

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def build_store(config: AppConfig) -> RowStore:
    """Airtable when credentials are present, otherwise an in-memory store."""
    tables = Tables(
        rates=config.airtable.rates_table,
        registrations=config.airtable.registrations_table,
        exemptions=config.airtable.exemptions_table,
    )

    if config.airtable.configured:
        logger.info(f"Using Airtable base {config.airtable.base_id}")
        return AirtableRowStore(
            api_key=config.airtable.api_key,
            base_id=config.airtable.base_id,
            tables=tables,
            timeout_seconds=config.airtable.timeout_seconds,
        )

    logger.warning(
        "Running with an in-memory row store; data is lost on restart. "
        "Set AIRTABLE_API_KEY and AIRTABLE_BASE_ID for full functionality."
    )
    return InMemoryRowStore(tables)


def build_payment_processor(config: AppConfig) -> PaymentProcessor:
    """Stripe when a secret key is present, otherwise the placeholder."""
    if config.stripe.configured:
        logger.info("Stripe is configured and ready for real payments")
        return StripePaymentProcessor(
            secret_key=config.stripe.secret_key,
            currency=config.stripe.currency,
            timeout_seconds=config.stripe.timeout_seconds,
        )

    logger.warning(
        "Running with placeholder payments. Set STRIPE_SECRET_KEY for payment functionality."
    )
    return PlaceholderPaymentProcessor()


def build_services(
    config: AppConfig,
    store: RowStore,
    processor: PaymentProcessor,
    clock: Callable = utcnow,
) -> Services:
    """Wire the service graph over one row store."""
    rates = RateCatalog(store, clock=clock)
    ledger = RegistrationLedger(store, rates, clock=clock)
    exemptions = StaffExemptionList(store, clock=clock)

    return Services(
        config=config,
        rates=rates,
        ledger=ledger,
        exemptions=exemptions,
        resolver=StatusResolver(exemptions, ledger, clock=clock),
        payments=PaymentOrchestrator(ledger, processor),
        authenticator=AdminAuthenticator(
            username=config.admin.username,
            password=config.admin.password,
            secret_key=config.admin.secret_key,
            max_age_seconds=config.admin.token_max_age_seconds,
        ),
        store_name=store.name,
    )


def create_app(
    config: Optional[AppConfig] = None,
    store: Optional[RowStore] = None,
    payment_processor: Optional[PaymentProcessor] = None,
    clock: Callable = utcnow,
) -> FastAPI:
    """
    Create the FastAPI application.

    Anything not injected is built from configuration at startup.

    Args:
        config: Application config (default: config file or environment)
        store: Row store (default: Airtable or in-memory)
        payment_processor: Payment processor (default: Stripe or placeholder)
        clock: Source of the current UTC time
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan manager."""
        logger.info("Starting Parking Pay...")

        try:
            app_config = check_credentials(config or load_app_config())
        except ConfigError as e:
            logger.error(f"Invalid configuration: {e}")
            raise

        row_store = store or build_store(app_config)
        processor = payment_processor or build_payment_processor(app_config)
        init_router(build_services(app_config, row_store, processor, clock=clock))

        logger.info(
            f"Parking Pay ready on http://{app_config.api.host}:{app_config.api.port} "
            f"({app_config.environment})"
        )

        yield  # Application runs here

        # Shutdown
        logger.info("Shutting down...")
        await row_store.close()
        logger.info("Shutdown complete")

    app = FastAPI(
        title="Parking Pay",
        description="Pay-and-display parking: QR checkout, card payments and plate lookups",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.include_router(router, prefix="/api")
    register_exception_handlers(app)
    return app


app = create_app()


def main():
    """Run the application."""
    # Load config just to get API settings
    cfg = load_app_config()

    uvicorn.run(
        "parking_pay.main:app",
        host=cfg.api.host,
        port=cfg.api.port,
        reload=False,
    )


if __name__ == "__main__":
    main()
