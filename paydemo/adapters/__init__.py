"""
Adapters para proveedores de pago.
Implementación del patrón Adapter para Paytrail y Klarna.
"""

from paydemo.adapters.base import PaymentProvider
from paydemo.adapters.paytrail_adapter import PaytrailAdapter
from paydemo.adapters.klarna_adapter import KlarnaAdapter, resolve_return_host
from paydemo.adapters.factory import (
    get_klarna_adapter,
    get_paytrail_adapter,
    get_signer,
)

__all__ = [
    "PaymentProvider",
    "PaytrailAdapter",
    "KlarnaAdapter",
    "resolve_return_host",
    "get_klarna_adapter",
    "get_paytrail_adapter",
    "get_signer",
]
