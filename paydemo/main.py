"""
Paytrail Payment API Demo
FastAPI application entry point.
"""

import subprocess
import uuid
from contextlib import asynccontextmanager
from datetime import datetime, timezone

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from paydemo.adapters import get_signer
from paydemo.config import settings
from paydemo.routes import checkout_router, klarna_router, payments_router
from paydemo.utils.exceptions import ConfigurationError


# Configurar logging estructurado
structlog.configure(
    processors=[
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer() if settings.ENVIRONMENT == "production" 
        else structlog.dev.ConsoleRenderer(),
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Gestión del ciclo de vida de la aplicación."""
    # Startup: sin credenciales de Paytrail no se arranca
    try:
        signer = get_signer()
    except ConfigurationError as e:
        logger.critical("Missing required configuration", setting=e.setting)
        raise
    
    logger.info(
        "Starting Payment API Demo",
        app_name=settings.APP_NAME,
        version=settings.APP_VERSION,
        environment=settings.ENVIRONMENT,
        paytrail_account=signer.account_id,
        paytrail_api_url=settings.PAYTRAIL_API_URL,
    )
    
    yield
    
    # Shutdown
    logger.info("Shutting down Payment API Demo")


app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Proxy firmado hacia Paytrail y Klarna con recálculo de envío para el checkout exprés",
    lifespan=lifespan,
)

def cors_origin_options(origins: list[str]) -> dict:
    """
    Opciones de origen para CORSMiddleware.
    
    Con ["*"] se refleja cualquier origen, credenciales incluidas; solo
    apto para la demo. En otro caso se aceptan únicamente los orígenes dados.
    """
    if "*" in origins:
        return {"allow_origin_regex": ".*"}
    return {"allow_origins": origins}


# CORS: el Web SDK de Klarna llama desde el navegador
app.add_middleware(
    CORSMiddleware,
    **cors_origin_options(settings.ALLOWED_ORIGINS),
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization", "X-Requested-With", "Accept", "Origin"],
    expose_headers=["Content-Type", "Authorization"],
)


@app.middleware("http")
async def add_request_id(request: Request, call_next):
    """Añade request_id a cada petición para trazabilidad."""
    request_id = request.headers.get("X-Request-ID", str(uuid.uuid4()))
    
    # Bind request_id al logger
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(request_id=request_id)
    
    response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    return response


@app.exception_handler(ConfigurationError)
async def configuration_error_handler(request: Request, exc: ConfigurationError):
    """Configuración ausente detectada durante una petición."""
    logger.error("Configuration error", setting=exc.setting, path=request.url.path)
    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal server error",
            "message": exc.message,
            "timestamp": _now_iso(),
        },
    )


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def current_commit() -> str:
    """Hash del commit desplegado (Vercel o git local)."""
    if settings.VERCEL_GIT_COMMIT_SHA:
        return settings.VERCEL_GIT_COMMIT_SHA
    
    try:
        result = subprocess.run(
            ["git", "rev-parse", "--short", "HEAD"],
            capture_output=True,
            text=True,
            check=True,
            timeout=5,
        )
        return result.stdout.strip() or "unknown"
    except (OSError, subprocess.SubprocessError) as e:
        logger.warning("Could not get commit hash from git", error=str(e))
        return "unknown"


@app.get("/", tags=["Health"])
async def root():
    """Root endpoint."""
    return {
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "status": "running",
    }


@app.get("/health", tags=["Health"])
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "environment": settings.ENVIRONMENT,
        "version": settings.APP_VERSION,
        "timestamp": _now_iso(),
    }


@app.get("/api/commit", tags=["Health"])
async def get_commit():
    """Commit desplegado, para seguimiento de despliegues."""
    return {
        "commit": current_commit(),
        "timestamp": _now_iso(),
    }


# Incluir routers
app.include_router(payments_router, prefix="/api", tags=["Paytrail"])
app.include_router(klarna_router, prefix="/api/klarna", tags=["Klarna"])
app.include_router(checkout_router, prefix="/api/checkout", tags=["Checkout"])


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("paydemo.main:app", host="0.0.0.0", port=3000, reload=True)
