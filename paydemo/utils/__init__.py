"""
Utilidades del servicio de checkout.
"""

from paydemo.utils.hmac_utils import (
    PaytrailSigner,
    SignedRequest,
    build_signature_string,
    generate_signature,
    verify_signature,
)

__all__ = [
    # HMAC
    "PaytrailSigner",
    "SignedRequest",
    "build_signature_string",
    "generate_signature",
    "verify_signature",
]
