"""
Endpoints de checkout exprés.

El script del navegador reenvía aquí los eventos shippingaddresschange y
shippingoptionselect del widget de Klarna y devuelve la respuesta tal cual
al SDK.
"""

import structlog
from fastapi import APIRouter, Depends, HTTPException, status

from paydemo.schemas import (
    APIResponse,
    CheckoutSessionCreateRequest,
    CheckoutSessionResponse,
    ShippingAddressChangeRequest,
    ShippingOptionSelectRequest,
    ShippingOptionsResponse,
    ShippingSelectionResponse,
)
from paydemo.services import CheckoutService, get_session_store
from paydemo.services.checkout_sessions import CheckoutSessionStore
from paydemo.utils.exceptions import CheckoutSessionNotFoundError


logger = structlog.get_logger(__name__)

router = APIRouter()


def get_checkout_service(
    store: CheckoutSessionStore = Depends(get_session_store),
) -> CheckoutService:
    """Dependency para obtener CheckoutService."""
    return CheckoutService(store)


def session_not_found(session_id: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=f"Checkout session not found: {session_id}",
    )


@router.post(
    "/sessions",
    response_model=APIResponse[CheckoutSessionResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Iniciar una sesión de checkout",
)
async def start_session(
    request: CheckoutSessionCreateRequest,
    service: CheckoutService = Depends(get_checkout_service),
):
    """Crea la sesión al montar el botón de pago."""
    session = service.start_session(request)
    return APIResponse(
        success=True,
        message="Checkout session started",
        data=session,
    )


@router.post(
    "/sessions/{session_id}/shipping-address",
    response_model=ShippingOptionsResponse,
    summary="Cambio de dirección de envío",
)
async def change_shipping_address(
    session_id: str,
    request: ShippingAddressChangeRequest,
    service: CheckoutService = Depends(get_checkout_service),
):
    """Retorna las opciones de envío para la nueva dirección."""
    try:
        return service.change_shipping_address(session_id, request.shipping_address)
    except CheckoutSessionNotFoundError:
        raise session_not_found(session_id)


@router.post(
    "/sessions/{session_id}/shipping-option",
    response_model=ShippingSelectionResponse,
    summary="Selección de opción de envío",
)
async def select_shipping_option(
    session_id: str,
    request: ShippingOptionSelectRequest,
    service: CheckoutService = Depends(get_checkout_service),
):
    """Retorna el total y las líneas del pedido con el envío elegido."""
    try:
        return service.select_shipping_option(
            session_id, request.shipping_option_reference
        )
    except CheckoutSessionNotFoundError:
        raise session_not_found(session_id)


@router.delete(
    "/sessions/{session_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Terminar una sesión de checkout",
)
async def end_session(
    session_id: str,
    service: CheckoutService = Depends(get_checkout_service),
):
    """Descarta el estado de la sesión."""
    if not service.end_session(session_id):
        raise session_not_found(session_id)
