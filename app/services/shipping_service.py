"""
Shipping quote service.

Resolves the delivery options shown at checkout:
    carrier quote -> (any failure) regional fallback table -> store policy (free shipping, pickup)

Quotes must never hard-fail the checkout, so every carrier failure mode
(missing credentials, auth, network, carrier errors, empty result) collapses
into the fallback branch. Only request validation reaches the caller as an error.
"""

import logging
import math
from dataclasses import dataclass
from decimal import Decimal
from typing import List, Optional

from app.core.config import get_settings
from app.core.enums import QuoteSource, QuoteStage, ShippingService
from app.schemas.shipping import ShippingOption, ShippingRequest
from app.services.shipping.factory import DEFAULT_CARRIER, get_carrier
from app.services.shipping.fallback import fallback_options

logger = logging.getLogger(__name__)

FREE_SUFFIX = " (Grátis)"


@dataclass
class ShippingQuote:
    options: List[ShippingOption]
    source: QuoteSource


def pickup_option() -> ShippingOption:
    return ShippingOption(
        service_code=ShippingService.PICKUP.value,
        display_name="Retirar na Loja",
        price=Decimal("0"),
        delivery_days=0,
        delivery_range_label="Assim que estiver pronto",
    )


def apply_free_shipping(options: List[ShippingOption]) -> List[ShippingOption]:
    """Zero every option's price, marking it as free"""
    return [
        option.model_copy(update={
            "price": Decimal("0.00"),
            "display_name": option.display_name + FREE_SUFFIX,
        })
        for option in options
    ]


class ShippingQuoteService:
    """
    Builds the shipping options for one request.

    Args:
        carrier_code: Which carrier the factory should build
        carrier_kwargs: Extra arguments for the carrier (e.g. an httpx transport)
    """

    def __init__(self, carrier_code: str = DEFAULT_CARRIER, **carrier_kwargs):
        self.carrier_code = carrier_code
        self.carrier_kwargs = carrier_kwargs

    async def calculate(self, request: ShippingRequest) -> ShippingQuote:
        settings = get_settings()
        weight_grams = request.peso if request.peso is not None else settings.DEFAULT_WEIGHT_GRAMS
        logger.info(f"[{QuoteStage.RATE_CHECKED.value}] Calculating shipping for {request.cep_destino} ({weight_grams}g)")

        quote = await self.quote(request.cep_destino, weight_grams)
        options = quote.options

        threshold = settings.free_shipping_threshold
        if threshold is not None and request.valor_itens is not None and request.valor_itens >= Decimal(str(threshold)):
            logger.info(f"Items total {request.valor_itens} reaches free shipping threshold {threshold}")
            options = apply_free_shipping(options)

        if request.incluir_retirada and settings.STORE_PICKUP_ENABLED:
            options = options + [pickup_option()]

        logger.info(f"[{QuoteStage.RESPONDED.value}] {len(options)} option(s) from {quote.source.value}")
        return ShippingQuote(options=options, source=quote.source)

    async def quote(self, cep_destino: str, weight_grams: float) -> ShippingQuote:
        """Carrier options, or the fallback table when the carrier cannot quote"""
        options = await self._quote_with_carrier(cep_destino, weight_grams)
        if options:
            return ShippingQuote(options=options, source=QuoteSource.CARRIER)

        logger.info(f"[{QuoteStage.FALLBACK.value}] Using regional table for {cep_destino}")
        return ShippingQuote(options=fallback_options(cep_destino, weight_grams), source=QuoteSource.FALLBACK)

    async def _quote_with_carrier(self, cep_destino: str, weight_grams: float) -> Optional[List[ShippingOption]]:
        try:
            carrier = get_carrier(self.carrier_code, **self.carrier_kwargs)
            options = await carrier.get_rates(cep_destino, max(1, math.ceil(weight_grams)))
        except Exception as e:
            # Every carrier failure degrades to the fallback table
            logger.warning(f"Carrier quote failed ({type(e).__name__}): {e}")
            return None

        if not options:
            logger.warning("Carrier returned no options")
            return None

        logger.info(f"[{QuoteStage.QUOTED.value}] Carrier quoted {len(options)} option(s)")
        return options
