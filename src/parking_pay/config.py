"""Configuration models and loading utilities."""

import logging
import os
from pathlib import Path
from typing import Optional

import yaml
from pydantic import BaseModel, Field, field_validator

from .errors import ConfigError

logger = logging.getLogger(__name__)

DEV_ADMIN_PASSWORD = "admin"
DEV_SESSION_SECRET = "parking-pay-development-secret"


def resolve_env_reference(v):
    """Resolve environment variable references like ${VAR_NAME}."""
    if isinstance(v, str) and v.startswith("${") and v.endswith("}"):
        env_var = v[2:-1]
        return os.environ.get(env_var, "")
    return v


class APIConfig(BaseModel):
    """API server configuration."""

    host: str = "0.0.0.0"
    port: int = 5000
    public_base_url: Optional[str] = None  # Base of QR payment links


class AirtableConfig(BaseModel):
    """Airtable row store configuration."""

    api_key: str = Field(default="${AIRTABLE_API_KEY}", validate_default=True)
    base_id: str = Field(default="${AIRTABLE_BASE_ID}", validate_default=True)
    rates_table: str = "Parking Rates"
    registrations_table: str = "Parking Registrations"
    exemptions_table: str = "Staff Exemptions"
    timeout_seconds: float = 10.0

    @field_validator("api_key", "base_id", mode="before")
    @classmethod
    def resolve_env_var(cls, v: str) -> str:
        """Resolve environment variable references like ${VAR_NAME}."""
        return resolve_env_reference(v)

    @property
    def configured(self) -> bool:
        return bool(self.api_key and self.base_id)


class StripeConfig(BaseModel):
    """Stripe payment processor configuration."""

    secret_key: str = Field(default="${STRIPE_SECRET_KEY}", validate_default=True)
    currency: str = "gbp"
    timeout_seconds: float = 15.0

    @field_validator("secret_key", mode="before")
    @classmethod
    def resolve_env_var(cls, v: str) -> str:
        return resolve_env_reference(v)

    @property
    def configured(self) -> bool:
        return bool(self.secret_key)


class AdminConfig(BaseModel):
    """Admin console credentials and session tokens."""

    username: str = "admin"
    password: str = Field(default="${ADMIN_PASSWORD}", validate_default=True)
    secret_key: str = Field(default="${SESSION_SECRET}", validate_default=True)
    token_max_age_seconds: int = 12 * 60 * 60

    @field_validator("password", "secret_key", mode="before")
    @classmethod
    def resolve_env_var(cls, v: str) -> str:
        return resolve_env_reference(v)


class AppConfig(BaseModel):
    """Main application configuration."""

    environment: str = Field(default="${APP_ENV}", validate_default=True)
    api: APIConfig = APIConfig()
    # Sections holding ${VAR} references resolve when the config is built
    airtable: AirtableConfig = Field(default_factory=AirtableConfig)
    stripe: StripeConfig = Field(default_factory=StripeConfig)
    admin: AdminConfig = Field(default_factory=AdminConfig)

    @field_validator("environment", mode="before")
    @classmethod
    def resolve_environment(cls, v: str) -> str:
        return (resolve_env_reference(v) or "development").lower()

    @property
    def is_production(self) -> bool:
        return self.environment == "production"


def load_config(path: str | Path) -> AppConfig:
    """
    Load configuration from a YAML file.

    Args:
        path: Path to the configuration file

    Returns:
        Validated AppConfig instance

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValueError: If config is invalid
    """
    config_path = Path(path)

    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    with open(config_path) as f:
        data = yaml.safe_load(f) or {}

    return AppConfig(**data)


def get_config_path() -> Path:
    """Get the default configuration file path."""
    env_path = os.environ.get("PARKING_PAY_CONFIG")
    if env_path:
        return Path(env_path)

    # Check for config in current directory first
    local_config = Path("config/config.yaml")
    if local_config.exists():
        return local_config

    # Check for config in parent directory (for Docker)
    parent_config = Path("/app/config/config.yaml")
    if parent_config.exists():
        return parent_config

    return local_config  # Return default even if doesn't exist


def load_app_config() -> AppConfig:
    """Load the config file if present, otherwise defaults resolved from the environment."""
    config_path = get_config_path()
    if config_path.exists():
        logger.info(f"Loaded configuration from {config_path}")
        return load_config(config_path)

    logger.info(f"No configuration file at {config_path}, using environment defaults")
    return AppConfig()


def check_credentials(config: AppConfig) -> AppConfig:
    """
    Validate credentials for the configured environment.

    Production refuses to start without every credential. Development
    fills in deterministic admin values and leaves Airtable/Stripe unset,
    which makes the app use its in-memory store and placeholder payments.

    Raises:
        ConfigError: If a production credential is missing
    """
    missing = []
    if not config.airtable.api_key:
        missing.append("AIRTABLE_API_KEY")
    if not config.airtable.base_id:
        missing.append("AIRTABLE_BASE_ID")
    if not config.stripe.secret_key:
        missing.append("STRIPE_SECRET_KEY")
    if not config.admin.password:
        missing.append("ADMIN_PASSWORD")
    if not config.admin.secret_key:
        missing.append("SESSION_SECRET")

    if not missing:
        return config

    if config.is_production:
        raise ConfigError(f"Missing required credentials: {', '.join(missing)}")

    logger.warning(
        f"Running in {config.environment} mode without: {', '.join(missing)}"
    )
    admin = config.admin.model_copy(
        update={
            "password": config.admin.password or DEV_ADMIN_PASSWORD,
            "secret_key": config.admin.secret_key or DEV_SESSION_SECRET,
        }
    )
    return config.model_copy(update={"admin": admin})
