"""
Schemas para pagos de Paytrail y payment requests de Klarna.
"""

from pydantic import Field

from paydemo.schemas.common import WidgetSchema


# Campos que la API de Paytrail exige al crear un pago
PAYTRAIL_REQUIRED_FIELDS = (
    "stamp",
    "reference",
    "amount",
    "currency",
    "items",
    "customer",
    "redirectUrls",
)


class KlarnaPaymentRequestCreate(WidgetSchema):
    """Request del frontend para crear un payment request de Klarna."""
    
    currency: str | None = None
    amount: int | None = Field(None, description="Importe en céntimos")


class KlarnaPaymentRequestResponse(WidgetSchema):
    """Respuesta con el ID del payment request creado."""
    
    payment_request_id: str | None = None


class KlarnaConfigResponse(WidgetSchema):
    """Client ID del Web SDK de Klarna."""
    
    client_id: str


class RedirectVerificationResponse(WidgetSchema):
    """Resultado de verificar la firma de una redirección de Paytrail."""
    
    valid: bool
    transaction_id: str | None = None
    status: str | None = None
    reference: str | None = None

