"""
Factory para obtener los adapters de proveedores configurados.
"""

from functools import lru_cache

import structlog

from paydemo.adapters.klarna_adapter import KlarnaAdapter
from paydemo.adapters.paytrail_adapter import PaytrailAdapter
from paydemo.config import settings
from paydemo.utils.hmac_utils import PaytrailSigner


logger = structlog.get_logger(__name__)


@lru_cache()
def get_signer() -> PaytrailSigner:
    """
    Firmador de Paytrail con las credenciales de la configuración.
    
    Raises:
        ConfigurationError: Si faltan PAYTRAIL_MERCHANT_ID o PAYTRAIL_SECRET_KEY
    """
    return PaytrailSigner(
        settings.PAYTRAIL_MERCHANT_ID,
        settings.PAYTRAIL_SECRET_KEY,
    )


@lru_cache()
def get_paytrail_adapter() -> PaytrailAdapter:
    """Adapter de Paytrail cacheado para reutilización."""
    adapter = PaytrailAdapter(signer=get_signer())
    logger.info("Payment provider initialized", provider=adapter.provider_name)
    return adapter


@lru_cache()
def get_klarna_adapter() -> KlarnaAdapter:
    """Adapter de Klarna cacheado para reutilización."""
    adapter = KlarnaAdapter()
    logger.info("Payment provider initialized", provider=adapter.provider_name)
    return adapter
