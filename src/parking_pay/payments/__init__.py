"""Payment processor module."""

from .processors import (
    PaymentIntent,
    PaymentProcessor,
    PlaceholderPaymentProcessor,
    StripePaymentProcessor,
)

__all__ = [
    "PaymentIntent",
    "PaymentProcessor",
    "PlaceholderPaymentProcessor",
    "StripePaymentProcessor",
]
