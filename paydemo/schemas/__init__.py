"""
Schemas del servicio de checkout.
Exporta todos los schemas para fácil acceso.
"""

# Common
from paydemo.schemas.common import (
    APIResponse,
    BaseSchema,
    WidgetSchema,
)

# Payment
from paydemo.schemas.payment import (
    PAYTRAIL_REQUIRED_FIELDS,
    KlarnaConfigResponse,
    KlarnaPaymentRequestCreate,
    KlarnaPaymentRequestResponse,
    RedirectVerificationResponse,
)

# Shipping
from paydemo.schemas.shipping import (
    CheckoutSessionCreateRequest,
    CheckoutSessionResponse,
    LineItem,
    ShippingAddress,
    ShippingAddressChangeRequest,
    ShippingOption,
    ShippingOptionSelectRequest,
    ShippingOptionsResponse,
    ShippingSelectionResponse,
    coerce_amount,
)

__all__ = [
    # Common
    "APIResponse",
    "BaseSchema",
    "WidgetSchema",
    # Payment
    "PAYTRAIL_REQUIRED_FIELDS",
    "KlarnaConfigResponse",
    "KlarnaPaymentRequestCreate",
    "KlarnaPaymentRequestResponse",
    "RedirectVerificationResponse",
    # Shipping
    "CheckoutSessionCreateRequest",
    "CheckoutSessionResponse",
    "LineItem",
    "ShippingAddress",
    "ShippingAddressChangeRequest",
    "ShippingOption",
    "ShippingOptionSelectRequest",
    "ShippingOptionsResponse",
    "ShippingSelectionResponse",
    "coerce_amount",
]
