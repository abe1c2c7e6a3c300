"""
Adapter para la API REST de Paytrail.
Firma cada petición con HMAC-SHA256 (cabeceras checkout-*).
"""

import json
from typing import Any

import httpx
import structlog

from paydemo.adapters.base import PaymentProvider
from paydemo.config import settings
from paydemo.utils.exceptions import PaymentProviderError
from paydemo.utils.hmac_utils import PaytrailSigner


logger = structlog.get_logger(__name__)


class PaytrailAdapter(PaymentProvider):
    """
    Adapter para Paytrail Payments.
    
    Proxy de las llamadas del frontend: listado de métodos de pago y
    creación de pagos. Si la respuesta viene firmada, se verifica la firma.
    """
    
    def __init__(
        self,
        signer: PaytrailSigner | None = None,
        api_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Inicializa el adapter de Paytrail.
        
        Args:
            signer: Firmador (usa config si no se proporciona)
            api_url: URL base de la API (usa config si no se proporciona)
            timeout: Timeout en segundos de cada llamada
            transport: Transporte httpx alternativo (tests)
        """
        super().__init__(
            timeout=timeout or settings.HTTP_TIMEOUT_SECONDS,
            transport=transport,
        )
        self._signer = signer or PaytrailSigner(
            settings.PAYTRAIL_MERCHANT_ID,
            settings.PAYTRAIL_SECRET_KEY,
        )
        self._api_url = (api_url or settings.PAYTRAIL_API_URL).rstrip("/")
        
        logger.info("PaytrailAdapter initialized", api_url=self._api_url)
    
    @property
    def provider_name(self) -> str:
        return "paytrail"
    
    @property
    def signer(self) -> PaytrailSigner:
        return self._signer
    
    async def request(
        self,
        method: str,
        endpoint: str,
        body: dict[str, Any] | None = None,
    ) -> Any:
        """
        Hace una petición firmada a Paytrail.
        
        Args:
            method: Método HTTP
            endpoint: Ruta relativa, ej. "/payments"
            body: Cuerpo JSON (None para GET)
            
        Returns:
            JSON de la respuesta
            
        Raises:
            PaymentProviderError: Error de red, error de Paytrail o firma inválida
        """
        method = method.upper()
        body_string = json.dumps(body, separators=(",", ":"), ensure_ascii=False) if body else ""
        signed = self._signer.sign(method, endpoint, {}, body_string)
        
        headers = {
            **signed.headers,
            "signature": signed.signature,
            "content-type": "application/json; charset=utf-8",
        }
        url = f"{self._api_url}{endpoint}"
        
        logger.info("Sending Paytrail request", method=method, url=url)
        if method == "POST" and body:
            logger.debug("Paytrail request payload", payload=body)
        
        try:
            async with self._client() as client:
                response = await client.request(
                    method,
                    url,
                    headers=headers,
                    content=body_string.encode("utf-8") if body_string else None,
                )
        except httpx.HTTPError as e:
            raise self._transport_error(e)
        
        data = self._raise_for_response(response)
        
        if "signature" in response.headers and not self._signer.verify(
            response.headers, response.text
        ):
            raise self._invalid_signature(response)
        
        logger.info(
            "Paytrail response received",
            status_code=response.status_code,
            request_id=response.headers.get("request-id"),
        )
        
        return data
    
    async def list_payment_providers(self) -> Any:
        """GET /merchants/payment-providers"""
        return await self.request("GET", "/merchants/payment-providers")
    
    async def list_grouped_payment_providers(self) -> Any:
        """GET /merchants/grouped-payment-providers"""
        return await self.request("GET", "/merchants/grouped-payment-providers")
    
    async def create_payment(self, payment_data: dict[str, Any]) -> Any:
        """
        Crea un pago en Paytrail (POST /payments).
        
        Args:
            payment_data: Payload tal como lo espera Paytrail
            
        Returns:
            Respuesta de Paytrail (transactionId, href, providers...)
        """
        logger.info(
            "Creating Paytrail payment",
            reference=payment_data.get("reference"),
            stamp=payment_data.get("stamp"),
        )
        
        network_token = (
            (payment_data.get("providerDetails") or {}).get("klarna") or {}
        ).get("networkSessionToken")
        if network_token:
            logger.info("Klarna network session token attached to payment")
        
        response = await self.request("POST", "/payments", payment_data)
        
        if isinstance(response, dict):
            logger.info(
                "Paytrail payment created",
                reference=response.get("reference"),
                transaction_id=response.get("transactionId"),
                checkout_reference=response.get("checkoutReference"),
            )
        
        return response
    
    def _invalid_signature(self, response: httpx.Response) -> PaymentProviderError:
        logger.error(
            "Paytrail response signature invalid",
            request_id=response.headers.get("request-id"),
        )
        return PaymentProviderError(
            provider=self.provider_name,
            message="Invalid response signature",
            status_code=502,
            details=None,
        )
