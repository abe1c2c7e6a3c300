"""
Configuración del servicio de checkout.
Carga variables de entorno y define settings globales.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from functools import lru_cache
from typing import Literal


class Settings(BaseSettings):
    """Configuración principal del servicio."""
    
    # Aplicación
    APP_NAME: str = "Paytrail Payment API Demo"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    ENVIRONMENT: Literal["development", "staging", "production"] = "development"
    
    # Paytrail (las credenciales son obligatorias al arrancar)
    PAYTRAIL_API_URL: str = "https://services.paytrail.com"
    PAYTRAIL_MERCHANT_ID: str = ""
    PAYTRAIL_SECRET_KEY: str = ""
    
    # Klarna
    KLARNA_API_KEY: str = ""
    KLARNA_BASE_URL: str = "https://api-global.test.klarna.com"
    KLARNA_WEBSDK_CLIENT_ID: str = ""
    
    # Host público usado para las URLs de retorno de Klarna
    VERCEL_URL: str = ""
    PUBLIC_HOST_FALLBACK: str = "paytrail-payment-api-demo.vercel.app"
    
    # Despliegue
    VERCEL_GIT_COMMIT_SHA: str = ""
    
    # Timeout de las llamadas salientes a los proveedores
    HTTP_TIMEOUT_SECONDS: float = 10.0
    
    # Sesiones de checkout en memoria
    CHECKOUT_SESSION_TTL_SECONDS: float = 1800
    CHECKOUT_SESSION_MAX: int = 10000
    
    # Orígenes CORS; ["*"] acepta cualquiera (modo demo, el Web SDK
    # de Klarna llama desde dominios de prueba variables)
    ALLOWED_ORIGINS: list[str] = ["*"]
    
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
    )


@lru_cache()
def get_settings() -> Settings:
    """Retorna instancia cacheada de settings."""
    return Settings()


settings = get_settings()
