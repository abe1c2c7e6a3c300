"""
Servicio de pagos de Paytrail.
"""

from typing import Any, Mapping

import structlog

from paydemo.adapters.paytrail_adapter import PaytrailAdapter
from paydemo.schemas.payment import PAYTRAIL_REQUIRED_FIELDS, RedirectVerificationResponse
from paydemo.utils.exceptions import MissingFieldsError


logger = structlog.get_logger(__name__)


class PaymentService:
    """
    Servicio de pagos.
    
    Valida las peticiones del frontend antes de reenviarlas a Paytrail y
    verifica las redirecciones de vuelta.
    """
    
    def __init__(self, paytrail: PaytrailAdapter):
        self.paytrail = paytrail
    
    @staticmethod
    def missing_fields(payment_data: Mapping[str, Any]) -> list[str]:
        """Campos obligatorios ausentes o vacíos."""
        return [name for name in PAYTRAIL_REQUIRED_FIELDS if not payment_data.get(name)]
    
    async def create_payment(self, payment_data: dict[str, Any]) -> Any:
        """
        Crea un pago en Paytrail.
        
        Raises:
            MissingFieldsError: Si faltan campos obligatorios
            PaymentProviderError: Si Paytrail rechaza la petición
        """
        missing = self.missing_fields(payment_data)
        if missing:
            logger.warning("Payment request rejected", missing=missing)
            raise MissingFieldsError(missing)
        
        return await self.paytrail.create_payment(payment_data)
    
    async def list_payment_providers(self, grouped: bool = False) -> Any:
        """Métodos de pago disponibles para el comercio."""
        if grouped:
            return await self.paytrail.list_grouped_payment_providers()
        return await self.paytrail.list_payment_providers()
    
    def verify_redirect(self, params: Mapping[str, str]) -> RedirectVerificationResponse:
        """
        Verifica los parámetros de una redirección de éxito/cancelación.
        
        Paytrail firma la query string con el mismo esquema que las
        respuestas de la API, con cuerpo vacío.
        """
        is_valid = self.paytrail.signer.verify(params, "")
        
        logger.info(
            "Paytrail redirect verified",
            valid=is_valid,
            transaction_id=params.get("checkout-transaction-id"),
        )
        
        return RedirectVerificationResponse(
            valid=is_valid,
            transaction_id=params.get("checkout-transaction-id"),
            status=params.get("checkout-status"),
            reference=params.get("checkout-reference"),
        )
