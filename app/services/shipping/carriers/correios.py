"""
Correios Carrier Implementation

Quotes PAC/SEDEX (or any configured contract service codes) through the
Correios CWS API.

Flow:
 - Bearer token from the in-memory cache, authenticating when needed
 - Price and deadline batches requested concurrently; either failing fails the quote
 - Services the carrier flags with an error are dropped from the result
 - Options sorted by price ascending

Correios API Docs:
 - https://cws.correios.com.br/ajuda
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional

import httpx

from app.core.config import get_settings
from app.core.exceptions import CorreiosAPIError
from app.core.utils import parse_brl_amount
from app.schemas.shipping import ShippingOption
from app.services.correios.auth import CorreiosAuthManager
from app.services.correios.client import CorreiosClient
from app.services.shipping.base import BaseCarrier

logger = logging.getLogger(__name__)

DEFAULT_DELIVERY_DAYS = 10

SERVICE_NAMES = {
    "03298": "PAC - Encomenda Econômica",
    "03220": "SEDEX - Entrega Expressa",
    "04510": "PAC - Encomenda Econômica",
    "04014": "SEDEX - Entrega Expressa",
    "03140": "SEDEX 12",
    "03158": "SEDEX 10",
    "04227": "Mini Envios",
}


def service_display_name(code: str) -> str:
    return SERVICE_NAMES.get(code, f"Serviço {code}")


def delivery_range_label(days: int) -> str:
    if days == 1:
        return "1 dia útil"
    return f"{days} dias úteis"


class CorreiosCarrier(BaseCarrier):
    """Correios (CWS) carrier implementation."""

    carrier_name = "Correios"
    carrier_code = "correios"

    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None):
        """Initialize the Correios carrier.

        Settings are read here, so each request sees the current configuration.
        Missing credentials raise CarrierConfigurationError before any network call.

        Args:
            transport: Optional httpx transport shared by auth and quote calls
        """
        settings = get_settings()
        self.environment = settings.CORREIOS_ENVIRONMENT
        self.cep_origem = settings.CEP_ORIGEM
        self.service_codes = settings.correios_service_codes

        self.auth = CorreiosAuthManager(settings=settings, transport=transport)
        self.client = CorreiosClient(
            base_url=settings.correios_base_url,
            timeout=settings.CORREIOS_TIMEOUT_SECONDS,
            transport=transport,
        )

    async def get_rates(self, cep_destino: str, weight_grams: int) -> List[ShippingOption]:
        """Quote every configured service for the destination

        Raises:
            CorreiosAuthError: If no token could be obtained
            CorreiosAPIError: If either batch fails or no service could be priced
        """
        token = await self.auth.get_access_token()
        logger.debug(f"Quoting services {self.service_codes} from {self.cep_origem} to {cep_destino} ({weight_grams}g)")

        price_task = asyncio.ensure_future(
            self.client.get_prices(token, self.service_codes, self.cep_origem, cep_destino, weight_grams)
        )
        deadline_task = asyncio.ensure_future(
            self.client.get_deadlines(token, self.service_codes, self.cep_origem, cep_destino)
        )
        try:
            prices, deadlines = await asyncio.gather(price_task, deadline_task)
        except Exception:
            # gather leaves the sibling running
            price_task.cancel()
            deadline_task.cancel()
            raise

        options = merge_quotes(prices, deadlines)
        if not options:
            raise CorreiosAPIError("Correios returned no valid prices")

        options.sort(key=lambda option: option.price)
        logger.info(f"Correios quoted {len(options)} service(s) for {cep_destino}")
        return options

    async def check_connectivity(self) -> Dict[str, Any]:
        """Authenticate against the token endpoint without touching the cache reuse path"""
        token = await self.auth.authenticate()
        return {
            "connected": True,
            "environment": self.environment,
            "expires_at": token.expires_at.isoformat(),
        }


def merge_quotes(prices: List[Dict[str, Any]], deadlines: List[Dict[str, Any]]) -> List[ShippingOption]:
    """
    Combine price and deadline entries by service code.

    Price entries with a carrier error (or an unreadable value) are skipped.
    A missing or failed deadline defaults to DEFAULT_DELIVERY_DAYS.
    """
    deadline_by_code = {}
    for entry in deadlines:
        code = entry.get("coProduto")
        if not code or entry.get("txErro"):
            continue
        try:
            deadline_by_code[str(code)] = int(entry.get("prazoEntrega"))
        except (TypeError, ValueError):
            logger.debug(f"Ignoring unreadable deadline for {code}: {entry.get('prazoEntrega')!r}")

    options = []
    for entry in prices:
        code = entry.get("coProduto")
        if not code:
            continue
        code = str(code)
        if entry.get("txErro"):
            logger.info(f"Correios could not quote service {code}: {entry['txErro']}")
            continue
        try:
            price = parse_brl_amount(entry.get("pcFinal"))
        except ValueError:
            logger.warning(f"Ignoring unreadable price for {code}: {entry.get('pcFinal')!r}")
            continue

        days = deadline_by_code.get(code, DEFAULT_DELIVERY_DAYS)
        options.append(
            ShippingOption(
                service_code=code,
                display_name=service_display_name(code),
                price=price,
                delivery_days=days,
                delivery_range_label=delivery_range_label(days),
            )
        )
    return options
