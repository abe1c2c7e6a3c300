"""
Servicios de negocio del servicio de checkout.
"""

from paydemo.services.checkout_service import CheckoutService
from paydemo.services.checkout_sessions import CheckoutSessionStore, get_session_store
from paydemo.services.payment_service import PaymentService
from paydemo.services.shipping_service import (
    CheckoutState,
    ShippingSelection,
    ShippingService,
    resolve_shipping_options,
    start_checkout,
)

__all__ = [
    "CheckoutService",
    "CheckoutSessionStore",
    "get_session_store",
    "PaymentService",
    "CheckoutState",
    "ShippingSelection",
    "ShippingService",
    "resolve_shipping_options",
    "start_checkout",
]
