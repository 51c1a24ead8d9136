"""
Storefront Backend - B2B marketplace storefront with AI negotiation
FastAPI Application Entry Point
"""

import logging
import logging.handlers
import os
import sys
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any, Dict, Optional

import httpx
import structlog
from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .api.v1.account import router as account_router
from .api.v1.cart import router as cart_router
from .api.v1.negotiation import get_wizard_registry_dep, router as negotiation_router
from .api.v1.products import get_catalog_client_dep, get_featured_service_dep, router as products_router
from .database.database import close_redis, init_redis, redis_manager
from .database.session_storage import (
    InMemorySessionStorage,
    get_session_storage,
    init_session_storage,
    shutdown_session_storage,
)
from .middleware import LoggingMiddleware, SessionContextMiddleware
from .services.auth.mock_auth import LOGIN_FIELD_MESSAGES, REGISTRATION_FIELD_MESSAGES
from .services.config.configuration_service import get_config_service
from .services.negotiation.negotiation_service import NegotiationService
from .services.negotiation.registry import WizardRegistry
from .services.negotiation.transcription_service import TranscriptionService
from .services.negotiation.wizard import NegotiationWizard
from .services.products.catalog_client import ProductCatalogClient
from .services.products.featured_products import FeaturedProductService

# Load environment variables
load_dotenv()

CONFIG_FILES = [
    "wizard_config",
    "mock_transcriptions",
    "mock_negotiation_results",
    "contract_positions",
    "fallback_playbook",
    "fallback_products",
    "product_taxonomy",
]


def configure_logging():
    """
    Configure structured logging using structlog.

    - Production (ENV=production): JSON output for log aggregation
    - Development (ENV=development): Human-readable console output
    - Includes automatic context: timestamp, level, logger name, correlation_id, session_id
    """
    env = os.getenv("ENV", "development").lower()
    log_level_str = os.getenv("LOG_LEVEL", "INFO").upper()
    log_level = getattr(logging, log_level_str, logging.INFO)

    timestamper = structlog.processors.TimeStamper(fmt="iso")

    shared_processors = [
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.contextvars.merge_contextvars,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        timestamper,
    ]

    if env == "production":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(
            colors=True,
            exception_formatter=structlog.dev.plain_traceback
        )

    structlog.configure(
        processors=shared_processors + [
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    # Project root is 4 levels up from src/backend/storefront/main.py
    project_root = Path(__file__).resolve().parent.parent.parent.parent
    default_log_path = project_root / "logs" / "storefront.log"
    log_file_path = str(Path(os.getenv("LOG_FILE_PATH", str(default_log_path))).resolve())
    log_dir = os.path.dirname(log_file_path)
    if log_dir:
        os.makedirs(log_dir, exist_ok=True)

    stdout_handler = logging.StreamHandler(sys.stdout)
    stdout_handler.setFormatter(formatter)

    file_handler = logging.handlers.RotatingFileHandler(
        filename=log_file_path,
        maxBytes=10 * 1024 * 1024,  # 10MB per file
        backupCount=5,
        encoding='utf-8'
    )
    file_handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.addHandler(stdout_handler)
    root_logger.addHandler(file_handler)
    root_logger.setLevel(log_level)

    # Reduce noise from verbose libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    return structlog.get_logger(__name__)


# Initialize structured logging
logger = configure_logging()

# Global instances
http_client: Optional[httpx.AsyncClient] = None
catalog_client: Optional[ProductCatalogClient] = None
featured_service: Optional[FeaturedProductService] = None
wizard_registry: Optional[WizardRegistry] = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager - startup and shutdown"""
    global http_client, catalog_client, featured_service, wizard_registry

    logger.info("Starting storefront backend...")

    config_service = get_config_service()
    for config_name in CONFIG_FILES:
        if not config_service.validate_config(config_name):
            raise RuntimeError(f"Invalid configuration: {config_name}")
    logger.info("✓ Configuration validated")

    # Session storage: Redis when enabled and reachable, otherwise in-memory
    session_ttl = config_service.get_session_ttl()
    enable_redis = os.getenv("ENABLE_REDIS_CACHING", "true").lower() == "true"

    if enable_redis:
        try:
            redis_client = await init_redis()
            init_session_storage(redis_client, ttl=session_ttl)
            logger.info("✓ Redis session storage initialized")
        except Exception as e:
            logger.warning(f"Redis initialization failed: {e}. Continuing with in-memory sessions.")
            init_session_storage(redis_client=None, ttl=session_ttl)
    else:
        logger.info("Redis disabled via ENABLE_REDIS_CACHING=false")
        init_session_storage(redis_client=None, ttl=session_ttl)
        logger.info("✓ In-memory session storage initialized (no persistence across restarts)")

    # One shared HTTP client for the product and negotiation APIs
    http_client = httpx.AsyncClient()

    catalog_client = ProductCatalogClient(http_client, config_service)
    featured_service = FeaturedProductService(catalog_client, config_service)
    transcription_service = TranscriptionService(http_client, config_service)
    negotiation_service = NegotiationService(http_client, config_service)

    def wizard_factory(wizard_id: str) -> NegotiationWizard:
        return NegotiationWizard(
            wizard_id,
            transcription_service=transcription_service,
            negotiation_service=negotiation_service,
            config_service=config_service,
        )

    wizard_registry = WizardRegistry(wizard_factory, ttl=config_service.get_wizard_ttl())
    logger.info("✓ Negotiation wizard registry initialized")
    logger.info("All services initialized successfully")

    yield

    logger.info("Shutting down storefront backend...")

    try:
        await wizard_registry.shutdown()
        logger.info("✓ Negotiation wizards closed")
    except Exception as e:
        logger.error(f"Error closing negotiation wizards: {e}")

    try:
        await shutdown_session_storage()
        logger.info("✓ Session storage stopped")
    except Exception as e:
        logger.error(f"Error stopping session storage: {e}")

    try:
        await close_redis()
        logger.info("✓ Redis closed")
    except Exception as e:
        logger.error(f"Error closing Redis: {e}")

    await http_client.aclose()
    logger.info("Shutdown complete")


app = FastAPI(
    title="Storefront Backend",
    description="B2B marketplace storefront with product catalog, cart and AI negotiation wizard",
    version="1.0.0",
    lifespan=lifespan
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=os.getenv("CORS_ORIGINS", "*").split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Session-ID", "X-Correlation-ID"],
)

# Middleware runs in reverse order of addition:
# SessionContextMiddleware runs BEFORE LoggingMiddleware
app.add_middleware(SessionContextMiddleware)
app.add_middleware(LoggingMiddleware)


# Form endpoints (by last path segment) whose validation errors use fixed messages
FORM_FIELD_MESSAGES: Dict[str, Dict[str, str]] = {
    "login": LOGIN_FIELD_MESSAGES,
    "register": REGISTRATION_FIELD_MESSAGES,
}


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Return one message per invalid field; login and registration fields get form-friendly messages."""
    field_messages = FORM_FIELD_MESSAGES.get(request.url.path.rsplit("/", 1)[-1], {})
    errors: Dict[str, str] = {}

    for error in exc.errors():
        loc = [str(part) for part in error.get("loc", ()) if part != "body"]
        field = ".".join(loc) or "body"
        if field in errors:
            continue
        if field in field_messages:
            errors[field] = field_messages[field]
        else:
            errors[field] = error.get("msg", "Invalid value")

    logger.info(f"Validation failed for {request.url.path}: {sorted(errors)}")
    return JSONResponse(status_code=422, content={"detail": "Validation failed", "errors": errors})


# Dependency injection
def get_catalog_client() -> ProductCatalogClient:
    return catalog_client


def get_featured_service() -> FeaturedProductService:
    return featured_service


def get_wizard_registry() -> WizardRegistry:
    return wizard_registry


app.include_router(products_router)
app.include_router(account_router)
app.include_router(cart_router)
app.include_router(negotiation_router)

# Override dependencies in app (not router)
app.dependency_overrides[get_catalog_client_dep] = get_catalog_client
app.dependency_overrides[get_featured_service_dep] = get_featured_service
app.dependency_overrides[get_wizard_registry_dep] = get_wizard_registry


@app.get("/")
async def root():
    """Root endpoint - service information"""
    return {
        "service": "Storefront Backend",
        "version": "1.0.0",
        "description": "B2B marketplace storefront with AI negotiation",
        "endpoints": {
            "products": "/api/products",
            "featured_products": "/api/featured-products",
            "account": "/api/v1/account",
            "cart": "/api/v1/cart",
            "negotiation": "/api/v1/negotiation/sessions",
            "docs": "/docs"
        }
    }


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    session_storage = get_session_storage()
    storage_type = "in-memory" if isinstance(session_storage, InMemorySessionStorage) else "redis"

    health_status: Dict[str, Any] = {
        "status": "healthy",
        "services": {
            "catalog_client": catalog_client is not None,
            "featured_products": featured_service is not None,
            "wizard_registry": wizard_registry is not None,
            "redis": redis_manager.is_connected,
        },
        "session_storage": {
            "type": storage_type,
            "ttl_seconds": get_config_service().get_session_ttl(),
            "persistent": storage_type == "redis",
        },
        "active_wizards": len(wizard_registry) if wizard_registry is not None else 0,
    }

    if not all([catalog_client, featured_service, wizard_registry]):
        health_status["status"] = "unhealthy"

    return health_status


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "storefront.main:app",
        host="0.0.0.0",
        port=int(os.getenv("PORT", "8000")),
        reload=True,
        log_level="info"
    )
