"""
Interfaz base abstracta para proveedores de pago.
Define lo común a los adapters de Paytrail y Klarna.
"""

from abc import ABC, abstractmethod
from typing import Any

import httpx
import structlog

from paydemo.utils.exceptions import PaymentProviderError


logger = structlog.get_logger(__name__)


class PaymentProvider(ABC):
    """
    Interfaz abstracta para proveedores de pago.
    
    Los adapters hacen las llamadas HTTP salientes; los errores de red o
    del proveedor se propagan como PaymentProviderError sin reintentos.
    """
    
    def __init__(
        self,
        timeout: float,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self._timeout = timeout
        self._transport = transport
    
    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Nombre del proveedor (ej: 'paytrail', 'klarna')."""
        pass
    
    def _client(self) -> httpx.AsyncClient:
        """Cliente HTTP para una llamada."""
        return httpx.AsyncClient(timeout=self._timeout, transport=self._transport)
    
    def _raise_for_response(self, response: httpx.Response) -> Any:
        """
        Retorna el JSON de una respuesta exitosa.
        
        Raises:
            PaymentProviderError: Si el proveedor respondió con 4xx/5xx
        """
        data = _json_or_text(response)
        
        if response.is_success:
            return data
        
        message = response.reason_phrase or "Request failed"
        if isinstance(data, dict) and data.get("message"):
            message = str(data["message"])
        
        logger.error(
            "Payment provider returned an error",
            provider=self.provider_name,
            status_code=response.status_code,
            details=data,
        )
        raise PaymentProviderError(
            provider=self.provider_name,
            message=message,
            status_code=response.status_code,
            details=data,
        )
    
    def _transport_error(self, error: httpx.HTTPError) -> PaymentProviderError:
        logger.error(
            "Payment provider request failed",
            provider=self.provider_name,
            error=str(error),
        )
        return PaymentProviderError(
            provider=self.provider_name,
            message=str(error) or error.__class__.__name__,
            status_code=502,
        )


def _json_or_text(response: httpx.Response) -> Any:
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text
