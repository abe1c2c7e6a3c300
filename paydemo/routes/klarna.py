"""
Endpoints para el Web SDK y los payment requests de Klarna.
"""

import structlog
from fastapi import APIRouter, Depends, HTTPException, Request, status

from paydemo.adapters import KlarnaAdapter, get_klarna_adapter, resolve_return_host
from paydemo.config import settings
from paydemo.schemas import (
    KlarnaConfigResponse,
    KlarnaPaymentRequestCreate,
    KlarnaPaymentRequestResponse,
)
from paydemo.utils.exceptions import ConfigurationError, PaymentProviderError


logger = structlog.get_logger(__name__)

router = APIRouter()


@router.get(
    "/config",
    response_model=KlarnaConfigResponse,
    summary="Client ID del Web SDK de Klarna",
)
async def get_klarna_config():
    """Retorna el client ID con el que el frontend inicializa el SDK."""
    if not settings.KLARNA_WEBSDK_CLIENT_ID:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Please set KLARNA_WEBSDK_CLIENT_ID environment variable",
        )
    return KlarnaConfigResponse(client_id=settings.KLARNA_WEBSDK_CLIENT_ID)


@router.post(
    "/payment-request",
    response_model=KlarnaPaymentRequestResponse,
    summary="Crear un payment request de Klarna",
)
async def create_payment_request(
    data: KlarnaPaymentRequestCreate,
    request: Request,
    klarna: KlarnaAdapter = Depends(get_klarna_adapter),
):
    """Crea el payment request y retorna su ID al frontend."""
    return_host = resolve_return_host(
        request.headers.get("x-forwarded-host"),
        request.headers.get("host"),
    )
    
    try:
        result = await klarna.create_payment_request(data, return_host)
    except ConfigurationError as e:
        logger.error("Klarna is not configured", setting=e.setting)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": "Failed to create payment request", "details": e.message},
        )
    except PaymentProviderError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={"error": "Failed to create payment request", "details": e.details or e.message},
        )
    
    return KlarnaPaymentRequestResponse(
        payment_request_id=result.get("payment_request_id"),
    )
