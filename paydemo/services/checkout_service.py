"""
Servicio que conecta las sesiones de checkout con el recálculo de envío.
"""

import structlog

from paydemo.schemas.shipping import (
    CheckoutSessionCreateRequest,
    CheckoutSessionResponse,
    ShippingAddress,
    ShippingOptionsResponse,
    ShippingSelectionResponse,
)
from paydemo.services.checkout_sessions import CheckoutSessionStore
from paydemo.services.shipping_service import ShippingService, start_checkout


logger = structlog.get_logger(__name__)


class CheckoutService:
    """
    Servicio de checkout exprés.
    
    Traduce los eventos del widget (llegados por HTTP) a llamadas sobre el
    CheckoutState de cada sesión.
    """
    
    def __init__(
        self,
        store: CheckoutSessionStore,
        shipping: ShippingService | None = None,
    ):
        self.store = store
        self.shipping = shipping or ShippingService()
    
    def start_session(
        self,
        request: CheckoutSessionCreateRequest,
    ) -> CheckoutSessionResponse:
        """Crea una sesión nueva con el producto y su importe base."""
        state = start_checkout(
            request.base_amount,
            request.product_name,
            request.quantity,
        )
        session_id = self.store.create(state)
        
        return CheckoutSessionResponse(
            session_id=session_id,
            amount=state.base_amount,
            line_items=self.shipping.build_line_items(state, None),
        )
    
    def change_shipping_address(
        self,
        session_id: str,
        shipping_address: ShippingAddress | None,
    ) -> ShippingOptionsResponse:
        """Evento shippingaddresschange."""
        state = self.store.get(session_id)
        options = self.shipping.on_shipping_address_change(state, shipping_address)
        return ShippingOptionsResponse(shipping_options=options)
    
    def select_shipping_option(
        self,
        session_id: str,
        reference: str | None,
    ) -> ShippingSelectionResponse:
        """Evento shippingoptionselect."""
        state = self.store.get(session_id)
        selection = self.shipping.on_shipping_option_selected(state, reference)
        return ShippingSelectionResponse(
            amount=selection.amount,
            line_items=selection.line_items,
        )
    
    def end_session(self, session_id: str) -> bool:
        return self.store.discard(session_id)
