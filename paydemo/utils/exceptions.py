"""
Excepciones personalizadas del servicio de checkout.
"""

from typing import Any


class PaymentServiceError(Exception):
    """Error base del servicio de pagos."""
    
    def __init__(self, message: str, code: str = "PAYMENT_ERROR"):
        self.message = message
        self.code = code
        super().__init__(message)


class ConfigurationError(PaymentServiceError):
    """Falta configuración obligatoria (credenciales, claves)."""
    
    def __init__(self, setting: str):
        super().__init__(
            message=f"{setting} environment variable is not set",
            code="CONFIGURATION_ERROR",
        )
        self.setting = setting


class PaymentProviderError(PaymentServiceError):
    """Error del proveedor de pago externo."""
    
    def __init__(
        self,
        provider: str,
        message: str,
        status_code: int | None = None,
        details: Any = None,
    ):
        super().__init__(
            message=f"Payment provider error ({provider}): {message}",
            code="PROVIDER_ERROR",
        )
        self.provider = provider
        self.status_code = status_code
        self.details = details


class MissingFieldsError(PaymentServiceError):
    """Faltan campos obligatorios en la petición de pago."""
    
    def __init__(self, missing: list[str]):
        super().__init__(
            message=f"Missing required fields: {', '.join(missing)}",
            code="MISSING_FIELDS",
        )
        self.missing = missing


class CheckoutSessionNotFoundError(PaymentServiceError):
    """La sesión de checkout no existe o ya terminó."""
    
    def __init__(self, session_id: str):
        super().__init__(
            message=f"Checkout session not found: {session_id}",
            code="CHECKOUT_SESSION_NOT_FOUND",
        )
        self.session_id = session_id
