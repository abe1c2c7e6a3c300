"""
Rutas/Endpoints del servicio de checkout.
"""

from paydemo.routes.payments import router as payments_router
from paydemo.routes.klarna import router as klarna_router
from paydemo.routes.checkout import router as checkout_router

__all__ = [
    "payments_router",
    "klarna_router",
    "checkout_router",
]
