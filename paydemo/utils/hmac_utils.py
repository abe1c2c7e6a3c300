"""
Utilidades para firmas HMAC de la API de Paytrail.
Firman las peticiones salientes y verifican respuestas y redirecciones.
"""

import hashlib
import hmac
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable, Mapping

import structlog

from paydemo.utils.exceptions import ConfigurationError


logger = structlog.get_logger(__name__)

# Prefijo de las cabeceras que entran en la firma
HEADER_PREFIX = "checkout-"

# Algoritmo usado para las peticiones salientes
SIGNING_ALGORITHM = "sha256"

# Algoritmos que Paytrail puede usar en respuestas y redirecciones
SUPPORTED_ALGORITHMS = {
    "sha256": hashlib.sha256,
    "sha512": hashlib.sha512,
}

REQUIRED_HEADERS = (
    f"{HEADER_PREFIX}account",
    f"{HEADER_PREFIX}algorithm",
    f"{HEADER_PREFIX}method",
    f"{HEADER_PREFIX}nonce",
    f"{HEADER_PREFIX}timestamp",
)


@dataclass(frozen=True)
class SignedRequest:
    """Cabeceras firmadas y firma para una petición a Paytrail."""
    
    headers: dict[str, str]
    signature: str


def utc_timestamp() -> str:
    """Timestamp ISO-8601 en UTC con milisegundos, ej. 2024-01-01T10:00:00.000Z"""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def generate_signature(
    payload: str | bytes,
    secret: str,
    algorithm: str = SIGNING_ALGORITHM,
) -> str:
    """
    Genera una firma HMAC para un payload.
    
    Args:
        payload: Datos a firmar
        secret: Clave secreta
        algorithm: "sha256" o "sha512"
        
    Returns:
        Firma hexadecimal en minúsculas
    """
    if isinstance(payload, str):
        payload = payload.encode("utf-8")
    
    return hmac.new(
        secret.encode("utf-8"),
        payload,
        SUPPORTED_ALGORITHMS[algorithm],
    ).hexdigest()


def verify_signature(
    payload: str | bytes,
    signature: str,
    secret: str,
    algorithm: str = SIGNING_ALGORITHM,
) -> bool:
    """Verifica una firma HMAC en tiempo constante."""
    expected = generate_signature(payload, secret, algorithm)
    return hmac.compare_digest(
        expected.encode("utf-8"),
        signature.lower().encode("utf-8"),
    )


def build_signature_string(headers: Mapping[str, str], body: str = "") -> str:
    """
    Construye la cadena a firmar según el esquema de Paytrail.
    
    Las claves se ordenan lexicográficamente, cada par se escribe como
    "clave:valor" y se unen con saltos de línea. Después va un salto de
    línea y el cuerpo tal cual (cadena vacía si no hay cuerpo).
    """
    lines = [f"{key}:{headers[key]}" for key in sorted(headers)]
    return "\n".join(lines) + "\n" + (body or "")


class PaytrailSigner:
    """
    Firma peticiones a la API de Paytrail.
    
    Cada llamada a sign() genera un nonce y un timestamp nuevos, por lo que
    dos firmas nunca coinciden aunque la petición sea idéntica.
    """
    
    def __init__(
        self,
        account_id: str,
        secret_key: str,
        clock: Callable[[], str] = utc_timestamp,
        nonce_factory: Callable[[], object] = uuid.uuid4,
    ):
        if not account_id:
            raise ConfigurationError("PAYTRAIL_MERCHANT_ID")
        if not secret_key:
            raise ConfigurationError("PAYTRAIL_SECRET_KEY")
        
        self.account_id = account_id
        self._secret_key = secret_key
        self._clock = clock
        self._nonce_factory = nonce_factory
    
    def sign(
        self,
        method: str,
        uri: str,
        extra_headers: Mapping[str, str] | None = None,
        body: str = "",
    ) -> SignedRequest:
        """
        Firma una petición saliente.
        
        Args:
            method: Método HTTP ("GET", "POST")
            uri: Ruta del endpoint (no forma parte de la firma)
            extra_headers: Cabeceras adicionales a incluir en la firma
            body: Cuerpo serializado exactamente como se enviará
            
        Returns:
            SignedRequest con las cabeceras firmadas y la firma hexadecimal
        """
        headers = {
            f"{HEADER_PREFIX}account": self.account_id,
            f"{HEADER_PREFIX}algorithm": SIGNING_ALGORITHM,
            f"{HEADER_PREFIX}method": method.upper(),
            f"{HEADER_PREFIX}nonce": str(self._nonce_factory()),
            f"{HEADER_PREFIX}timestamp": self._clock(),
        }
        
        for key, value in (extra_headers or {}).items():
            if key in REQUIRED_HEADERS:
                logger.warning("Ignoring override of required signing header", header=key)
                continue
            headers[key] = str(value)
        
        signature = generate_signature(
            build_signature_string(headers, body),
            self._secret_key,
        )
        
        logger.debug(
            "Paytrail request signed",
            method=headers[f"{HEADER_PREFIX}method"],
            uri=uri,
            nonce=headers[f"{HEADER_PREFIX}nonce"],
            body_length=len(body or ""),
        )
        
        return SignedRequest(headers=headers, signature=signature)
    
    def verify(self, params: Mapping[str, str], body: str = "") -> bool:
        """
        Verifica la firma de una respuesta o de una redirección de Paytrail.
        
        Args:
            params: Cabeceras de la respuesta o parámetros de la query string
            body: Cuerpo de la respuesta (vacío para redirecciones)
            
        Returns:
            True si la firma es válida
        """
        lowered = {key.lower(): value for key, value in params.items()}
        signature = lowered.get("signature")
        algorithm = lowered.get(f"{HEADER_PREFIX}algorithm", "")
        
        if not signature:
            logger.warning("Paytrail signature missing")
            return False
        
        if algorithm not in SUPPORTED_ALGORITHMS:
            logger.warning("Unsupported Paytrail signature algorithm", algorithm=algorithm)
            return False
        
        signed_headers = {
            key: value
            for key, value in lowered.items()
            if key.startswith(HEADER_PREFIX)
        }
        
        is_valid = verify_signature(
            build_signature_string(signed_headers, body),
            signature,
            self._secret_key,
            algorithm,
        )
        
        if not is_valid:
            logger.error(
                "Paytrail signature verification FAILED",
                transaction_id=signed_headers.get(f"{HEADER_PREFIX}transaction-id"),
            )
        
        return is_valid
