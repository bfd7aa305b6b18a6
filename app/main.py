# app/main.py

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.core import logging_config  # noqa: F401  configures logging on import
from app.core.config import get_settings
from app.core.exceptions import RateLimitExceededError, ShippingValidationError
from app.core.enums import QuoteStage
from app.routes import health, shipping
from app.schemas.base import ErrorResponse

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    logger.info(
        f"Starting shipping service (environment={settings.ENVIRONMENT}, "
        f"correios={settings.CORREIOS_ENVIRONMENT}, origin CEP={settings.CEP_ORIGEM}, "
        f"services={settings.correios_service_codes})"
    )
    if not settings.CORREIOS_USER or not settings.CORREIOS_PASSWORD or not settings.CORREIOS_POSTAGE_CARD:
        logger.warning("Correios credentials not configured, quotes will use the regional table")
    yield


app = FastAPI(
    title="Storefront Shipping API",
    description="Shipping quotes for the storefront checkout",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["authorization", "x-client-info", "apikey", "content-type"],
)


@app.exception_handler(ShippingValidationError)
async def shipping_validation_error_handler(request: Request, exc: ShippingValidationError):
    logger.info(f"[{QuoteStage.REJECTED.value}] {request.url.path}: {exc}")
    return JSONResponse(
        status_code=400,
        content=ErrorResponse(error=str(exc)).model_dump(),
    )


@app.exception_handler(RateLimitExceededError)
async def rate_limit_error_handler(request: Request, exc: RateLimitExceededError):
    logger.info(f"[{QuoteStage.REJECTED.value}] {request.url.path}: rate limited")
    headers = {"Retry-After": str(exc.retry_after)} if exc.retry_after else None
    return JSONResponse(
        status_code=429,
        content=ErrorResponse(error=str(exc)).model_dump(),
        headers=headers,
    )


app.include_router(shipping.router)
app.include_router(health.router)  # Health check should be accessible without auth
