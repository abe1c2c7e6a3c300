"""
Adapter para la API de payment requests de Klarna.
Usa autenticación HTTP Basic con la API key como usuario.
"""

import uuid
from typing import Any

import httpx
import structlog

from paydemo.adapters.base import PaymentProvider
from paydemo.config import settings
from paydemo.schemas.payment import KlarnaPaymentRequestCreate
from paydemo.utils.exceptions import ConfigurationError


logger = structlog.get_logger(__name__)

DEFAULT_CURRENCY = "EUR"
DEFAULT_AMOUNT = 1590

# Klarna sustituye los placeholders {klarna.*} al redirigir
RETURN_PATH = (
    "/payment-success"
    "?payment_request_id={klarna.payment_request.id}"
    "&state={klarna.payment_request.state}"
    "&payment_token={klarna.payment_request.payment_token}"
)


def resolve_return_host(
    forwarded_host: str | None,
    host: str | None,
    fallback: str | None = None,
) -> str:
    """
    Host público para la URL de retorno.
    
    Debe coincidir exactamente con el dominio registrado en el portal de
    Klarna, así que se quitan el puerto y cualquier ruta.
    """
    candidate = (
        forwarded_host
        or host
        or settings.VERCEL_URL
        or fallback
        or settings.PUBLIC_HOST_FALLBACK
    )
    return candidate.split(",")[0].strip().split(":")[0].split("/")[0]


def build_return_url(host: str) -> str:
    # Klarna exige HTTPS
    return f"https://{host}{RETURN_PATH}"


class KlarnaAdapter(PaymentProvider):
    """Adapter para Klarna Payments (API v2 de payment requests)."""
    
    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        super().__init__(
            timeout=timeout or settings.HTTP_TIMEOUT_SECONDS,
            transport=transport,
        )
        self._api_key = api_key if api_key is not None else settings.KLARNA_API_KEY
        self._base_url = (base_url or settings.KLARNA_BASE_URL).rstrip("/")
    
    @property
    def provider_name(self) -> str:
        return "klarna"
    
    def build_payment_request_payload(
        self,
        data: KlarnaPaymentRequestCreate,
        return_host: str,
    ) -> dict[str, Any]:
        """Payload de POST /v2/payment/requests."""
        return {
            "currency": data.currency or DEFAULT_CURRENCY,
            "amount": data.amount or DEFAULT_AMOUNT,
            "payment_request_reference": f"pay-ref-{uuid.uuid4()}",
            "supplementary_purchase_data": {
                "purchase_reference": f"pay-ref-{uuid.uuid4()}",
                "line_items": [],
                "shipping": [],
                "customer": {},
            },
            # Sin "method": el Web SDK gestiona la interacción
            "customer_interaction_config": {
                "return_url": build_return_url(return_host),
            },
        }
    
    async def create_payment_request(
        self,
        data: KlarnaPaymentRequestCreate,
        return_host: str,
    ) -> dict[str, Any]:
        """
        Crea un payment request en Klarna.
        
        Args:
            data: Moneda e importe enviados por el frontend
            return_host: Host público para la URL de retorno
            
        Returns:
            Respuesta de Klarna (payment_request_id, state...)
            
        Raises:
            ConfigurationError: Si KLARNA_API_KEY no está configurada
            PaymentProviderError: Error de red o de Klarna
        """
        if not self._api_key:
            raise ConfigurationError("KLARNA_API_KEY")
        
        payload = self.build_payment_request_payload(data, return_host)
        url = f"{self._base_url}/v2/payment/requests"
        
        logger.info(
            "Creating Klarna payment request",
            amount=payload["amount"],
            currency=payload["currency"],
            return_url=payload["customer_interaction_config"]["return_url"],
        )
        
        try:
            async with self._client() as client:
                response = await client.post(
                    url,
                    json=payload,
                    headers={"Accept": "application/json"},
                    auth=(self._api_key, ""),
                )
        except httpx.HTTPError as e:
            raise self._transport_error(e)
        
        result = self._raise_for_response(response) or {}
        
        logger.info(
            "Klarna payment request created",
            payment_request_id=result.get("payment_request_id"),
            state=result.get("state"),
        )
        
        return result
