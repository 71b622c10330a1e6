"""Error taxonomy shared by services, storage and the HTTP layer."""


class ParkingPayError(Exception):
    """Base class for all application errors."""

    status_code: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(ParkingPayError):
    """Malformed input (bad duration type, negative price, empty plate...)."""

    status_code = 400


class InvalidDurationError(ValidationError):
    """Requested duration tier does not exist in the rate catalog."""

    def __init__(self, duration_type: str):
        super().__init__(f"Invalid duration type: {duration_type}")
        self.duration_type = duration_type


class AuthenticationError(ParkingPayError):
    """Missing, invalid or expired admin credentials."""

    status_code = 401


class NotFoundError(ParkingPayError):
    """Unknown record id."""

    status_code = 404


class ConflictError(ParkingPayError):
    """Request conflicts with already-applied state."""

    status_code = 409


class BackingStoreError(ParkingPayError):
    """Row store unreachable or misconfigured."""

    status_code = 500


class BackingStoreTimeoutError(BackingStoreError):
    """Row store call exceeded its timeout."""

    status_code = 504


class PaymentProcessorError(ParkingPayError):
    """Payment processor rejected or failed a request."""

    status_code = 502


class PaymentProcessorTimeoutError(PaymentProcessorError):
    """Payment processor call exceeded its timeout."""

    status_code = 504


class ConfigError(Exception):
    """Invalid or incomplete configuration detected at startup."""
