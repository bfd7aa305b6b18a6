import logging

from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import JSONResponse

from app.core.enums import QuoteStage
from app.core.exceptions import BaseServiceError, ShippingValidationError
from app.core.rate_limit import enforce_shipping_rate_limit
from app.schemas.base import ErrorResponse
from app.schemas.shipping import BODY_INVALID_MESSAGE, ShippingRequest, ShippingResponse
from app.services.shipping_service import ShippingQuoteService

logger = logging.getLogger(__name__)

GENERIC_ERROR_MESSAGE = "Erro ao calcular frete"

router = APIRouter(
    tags=["shipping"],
    responses={
        400: {"model": ErrorResponse, "description": "Invalid request"},
        429: {"model": ErrorResponse, "description": "Too many requests"},
    },
)


def get_shipping_quote_service() -> ShippingQuoteService:
    return ShippingQuoteService()


@router.options("/calculate-shipping")
async def calculate_shipping_preflight():
    """Plain OPTIONS requests (CORS preflights are answered by the middleware)"""
    return Response(status_code=200)


@router.post("/calculate-shipping", response_model=ShippingResponse)
async def calculate_shipping(
    request: Request,
    client_id: str = Depends(enforce_shipping_rate_limit),
    service: ShippingQuoteService = Depends(get_shipping_quote_service),
):
    """Quote delivery options for a destination CEP. Carrier failures fall back to regional prices."""
    logger.info(f"[{QuoteStage.RECEIVED.value}] Shipping quote requested by {client_id}")

    try:
        try:
            payload = await request.json()
        except ValueError:
            raise ShippingValidationError(BODY_INVALID_MESSAGE)

        shipping_request = ShippingRequest.from_payload(payload)
        quote = await service.calculate(shipping_request)
    except BaseServiceError:
        raise
    except Exception:
        logger.exception("Unexpected error calculating shipping")
        return JSONResponse(
            status_code=400,
            content=ErrorResponse(error=GENERIC_ERROR_MESSAGE).model_dump(),
        )

    return ShippingResponse(options=quote.options, source=quote.source)
