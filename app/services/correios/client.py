import json
import logging
from typing import Any, Dict, List, Optional, Sequence

import httpx

from app.core.config import get_settings
from app.core.exceptions import CorreiosAPIError

logger = logging.getLogger(__name__)


class CorreiosClient:
    """
    Purpose: Asynchronous client for the Correios CWS price ("preço") and deadline ("prazo") APIs.

    Functionality: Both endpoints take a batch ("lote") of per-service parameters and
                answer with one entry per service code. Entries the carrier could not
                quote carry a `txErro` message instead of a value.
                - get_prices: national price per service code (pcFinal, decimal comma)
                - get_deadlines: delivery deadline in business days per service code (prazoEntrega)
                - _make_request: bearer-authenticated POST with error handling (CorreiosAPIError)

    Documentation: https://cws.correios.com.br/ajuda
    """

    PRICE_PATH = "/preco/v1/nacional"
    DEADLINE_PATH = "/prazo/v1/nacional"

    def __init__(
        self,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the Correios client

        Args:
            base_url: API root, defaults to the configured environment
            timeout: Request timeout in seconds
            transport: Optional httpx transport (tests use httpx.MockTransport)
        """
        settings = get_settings()
        self.base_url = (base_url or settings.correios_base_url).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.CORREIOS_TIMEOUT_SECONDS
        self.transport = transport

    def _get_headers(self, token: str) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    async def _make_request(self, endpoint: str, token: str, data: Dict[str, Any]) -> List[Dict[str, Any]]:
        """
        POST a batch to the Correios API

        Returns:
            List of per-service result entries

        Raises:
            CorreiosAPIError: If the request fails or the body is not a list of entries
        """
        url = f"{self.base_url}/{endpoint.lstrip('/')}"
        logger.debug(f"Making POST request to {url}")
        logger.debug(f"Data: {json.dumps(data)[:500]}")

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(url, headers=self._get_headers(token), json=data)
        except httpx.RequestError as e:
            logger.error(f"Network error calling Correios {endpoint}: {str(e)}")
            raise CorreiosAPIError(f"Network error: {str(e)}")

        if response.status_code not in (200, 201):
            logger.error(f"Correios API error on {endpoint} ({response.status_code}): {response.text[:500]}")
            raise CorreiosAPIError(
                f"Request to {endpoint} failed with status {response.status_code}",
                status_code=response.status_code,
            )

        try:
            body = response.json()
        except ValueError:
            raise CorreiosAPIError(f"Non-JSON response from {endpoint}")

        # A single-service batch may come back as a bare object
        if isinstance(body, dict):
            body = [body]
        if not isinstance(body, list):
            raise CorreiosAPIError(f"Unexpected response shape from {endpoint}")
        return [entry for entry in body if isinstance(entry, dict)]

    async def get_prices(
        self,
        token: str,
        service_codes: Sequence[str],
        cep_origem: str,
        cep_destino: str,
        weight_grams: int,
    ) -> List[Dict[str, Any]]:
        """Fetch national prices for each service code"""
        payload = {
            "idLote": "1",
            "parametrosProduto": [
                {
                    "coProduto": code,
                    "nuRequisicao": str(index),
                    "cepOrigem": cep_origem,
                    "cepDestino": cep_destino,
                    "psObjeto": str(int(weight_grams)),
                }
                for index, code in enumerate(service_codes, start=1)
            ],
        }
        return await self._make_request(self.PRICE_PATH, token, payload)

    async def get_deadlines(
        self,
        token: str,
        service_codes: Sequence[str],
        cep_origem: str,
        cep_destino: str,
    ) -> List[Dict[str, Any]]:
        """Fetch delivery deadlines (business days) for each service code"""
        payload = {
            "idLote": "1",
            "parametrosPrazo": [
                {
                    "coProduto": code,
                    "nuRequisicao": str(index),
                    "cepOrigem": cep_origem,
                    "cepDestino": cep_destino,
                }
                for index, code in enumerate(service_codes, start=1)
            ],
        }
        return await self._make_request(self.DEADLINE_PATH, token, payload)
