"""
Endpoints proxy hacia la API de Paytrail.
"""

from typing import Any

import structlog
from fastapi import APIRouter, Body, Depends, HTTPException, Request, status

from paydemo.adapters import PaytrailAdapter, get_paytrail_adapter
from paydemo.schemas import RedirectVerificationResponse
from paydemo.services import PaymentService
from paydemo.utils.exceptions import MissingFieldsError, PaymentProviderError


logger = structlog.get_logger(__name__)

router = APIRouter()


def get_payment_service(
    paytrail: PaytrailAdapter = Depends(get_paytrail_adapter),
) -> PaymentService:
    """Dependency para obtener PaymentService."""
    return PaymentService(paytrail)


def provider_http_error(error: PaymentProviderError, summary: str) -> HTTPException:
    """Propaga el error de Paytrail con su mismo código de estado."""
    status_code = error.status_code or status.HTTP_502_BAD_GATEWAY
    return HTTPException(
        status_code=status_code,
        detail={
            "error": summary,
            "message": error.message,
            "status": status_code,
            "details": error.details,
        },
    )


@router.get(
    "/merchants/payment-providers",
    summary="Métodos de pago de Paytrail",
)
async def get_payment_providers(
    service: PaymentService = Depends(get_payment_service),
):
    """Obtiene los métodos de pago disponibles desde Paytrail."""
    try:
        return await service.list_payment_providers()
    except PaymentProviderError as e:
        raise provider_http_error(e, "Failed to fetch payment providers from Paytrail API")


@router.get(
    "/merchants/grouped-payment-providers",
    summary="Métodos de pago de Paytrail agrupados",
)
async def get_grouped_payment_providers(
    service: PaymentService = Depends(get_payment_service),
):
    """Obtiene los métodos de pago agrupados desde Paytrail."""
    try:
        return await service.list_payment_providers(grouped=True)
    except PaymentProviderError as e:
        raise provider_http_error(
            e, "Failed to fetch grouped payment providers from Paytrail API"
        )


@router.post(
    "/payments",
    status_code=status.HTTP_201_CREATED,
    summary="Crear un pago en Paytrail",
    description="""
    Reenvía el pago a Paytrail (POST /payments) firmado con HMAC-SHA256.
    
    - Requiere `stamp`, `reference`, `amount`, `currency`, `items`,
      `customer` y `redirectUrls`
    - Los errores de Paytrail se devuelven con el mismo código de estado
    """,
)
async def create_payment(
    payment_data: dict[str, Any] = Body(...),
    service: PaymentService = Depends(get_payment_service),
):
    """Crea un pago."""
    try:
        return await service.create_payment(payment_data)
    except MissingFieldsError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail={"error": "Missing required fields", "missing": e.missing},
        )
    except PaymentProviderError as e:
        raise provider_http_error(e, "Failed to create payment with Paytrail API")


@router.get(
    "/payments/verify-redirect",
    response_model=RedirectVerificationResponse,
    summary="Verificar una redirección de Paytrail",
)
async def verify_redirect(
    request: Request,
    service: PaymentService = Depends(get_payment_service),
):
    """Comprueba la firma de los parámetros checkout-* de la redirección."""
    return service.verify_redirect(dict(request.query_params))
