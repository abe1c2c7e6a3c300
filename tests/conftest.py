"""
Configuración de tests y fixtures compartidos.
"""

import json
from typing import AsyncGenerator, Callable

import httpx
import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

from paydemo.adapters import (
    KlarnaAdapter,
    PaytrailAdapter,
    get_klarna_adapter,
    get_paytrail_adapter,
)
from paydemo.main import app
from paydemo.services import get_session_store
from paydemo.utils.hmac_utils import PaytrailSigner, build_signature_string, generate_signature


TEST_ACCOUNT = "375917"
TEST_SECRET = "SAIPPUAKAUPPIAS"


def signed_response(
    status_code: int,
    data: object,
    secret: str = TEST_SECRET,
) -> httpx.Response:
    """Respuesta firmada como las que devuelve Paytrail."""
    body = json.dumps(data)
    headers = {
        "checkout-account": TEST_ACCOUNT,
        "checkout-algorithm": "sha256",
        "checkout-method": "POST",
        "checkout-nonce": "response-nonce",
        "checkout-timestamp": "2024-01-01T10:00:00.000Z",
    }
    headers["signature"] = generate_signature(build_signature_string(headers, body), secret)
    headers["content-type"] = "application/json"
    return httpx.Response(status_code, content=body.encode("utf-8"), headers=headers)


class RecordingTransport(httpx.MockTransport):
    """MockTransport que guarda las peticiones recibidas."""
    
    def __init__(self, handler: Callable[[httpx.Request], httpx.Response]):
        self.requests: list[httpx.Request] = []
        
        def record(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return handler(request)
        
        super().__init__(record)


@pytest.fixture
def signer() -> PaytrailSigner:
    """Firmador con las credenciales de prueba de Paytrail."""
    return PaytrailSigner(TEST_ACCOUNT, TEST_SECRET)


@pytest.fixture
def paytrail_transport() -> RecordingTransport:
    """Paytrail simulado: responde 201 a POST y una lista a GET."""
    
    def handler(request: httpx.Request) -> httpx.Response:
        if request.method == "POST":
            return signed_response(
                201,
                {
                    "transactionId": "a7b9c1d2-0000-4000-8000-000000000001",
                    "href": "https://pay.paytrail.com/pay/a7b9c1d2",
                    "reference": "9187445",
                },
            )
        return httpx.Response(200, json=[{"id": "nordea", "name": "Nordea"}])
    
    return RecordingTransport(handler)


@pytest.fixture
def klarna_transport() -> RecordingTransport:
    """Klarna simulado."""
    
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            201,
            json={"payment_request_id": "krn:payment:eu1:request:1234", "state": "SUBMITTED"},
        )
    
    return RecordingTransport(handler)


@pytest.fixture
def paytrail_adapter(signer, paytrail_transport) -> PaytrailAdapter:
    return PaytrailAdapter(
        signer=signer,
        api_url="https://services.paytrail.test",
        transport=paytrail_transport,
    )


@pytest.fixture
def klarna_adapter(klarna_transport) -> KlarnaAdapter:
    return KlarnaAdapter(
        api_key="klarna_test_api_key",
        base_url="https://api-global.test.klarna.test",
        transport=klarna_transport,
    )


@pytest_asyncio.fixture(scope="function")
async def client(
    paytrail_adapter: PaytrailAdapter,
    klarna_adapter: KlarnaAdapter,
) -> AsyncGenerator[AsyncClient, None]:
    """Cliente HTTP para tests de API."""
    app.dependency_overrides[get_paytrail_adapter] = lambda: paytrail_adapter
    app.dependency_overrides[get_klarna_adapter] = lambda: klarna_adapter
    get_session_store().clear()
    
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    
    app.dependency_overrides.clear()
    get_session_store().clear()


@pytest.fixture
def sample_payment_data():
    """Datos de ejemplo para crear un pago en Paytrail."""
    return {
        "stamp": "order-stamp-0001",
        "reference": "9187445",
        "amount": 15900,
        "currency": "EUR",
        "language": "EN",
        "items": [
            {
                "unitPrice": 15900,
                "units": 1,
                "vatPercentage": 24,
                "productCode": "omega-aqua-terra",
            }
        ],
        "customer": {"email": "test.customer@example.com"},
        "redirectUrls": {
            "success": "https://shop.example.com/payment-success",
            "cancel": "https://shop.example.com/payment-cancel",
        },
    }
