"""
Correios CWS Authentication Manager using in-memory token storage

Authenticates with the postage card ("cartão de postagem") flow:
Basic auth with the idCorreios user and CWS access code, card number in the body.
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import httpx

from app.core.config import get_settings
from app.core.exceptions import CarrierConfigurationError, CorreiosAuthError
from .token_manager import CarrierTokenManager

logger = logging.getLogger(__name__)

# Correios reports naive timestamps in Brasília time
BRASILIA_TZ = timezone(timedelta(hours=-3))
# Used when the response carries no usable expiry (tokens live ~1h)
DEFAULT_TOKEN_LIFETIME = timedelta(minutes=55)

TOKEN_PATH = "/token/v1/autentica/cartaopostagem"


class CorreiosAuthManager:
    """
    Manages Correios CWS authentication using the process-wide token cache
    """

    def __init__(self, settings=None, transport: Optional[httpx.AsyncBaseTransport] = None):
        """Initialize the Correios authentication manager"""
        self.settings = settings or get_settings()
        self.transport = transport

        self.user = self.settings.CORREIOS_USER
        self.password = self.settings.CORREIOS_PASSWORD
        self.postage_card = self.settings.CORREIOS_POSTAGE_CARD
        self.environment = self.settings.CORREIOS_ENVIRONMENT
        self.timeout = self.settings.CORREIOS_TIMEOUT_SECONDS
        self.token_url = f"{self.settings.correios_base_url}{TOKEN_PATH}"

        # Verify required credentials
        missing = [
            name for name, value in (
                ("CORREIOS_USER", self.user),
                ("CORREIOS_PASSWORD", self.password),
                ("CORREIOS_POSTAGE_CARD", self.postage_card),
            ) if not value
        ]
        if missing:
            raise CarrierConfigurationError(
                f"Missing required Correios credentials: {', '.join(missing)}"
            )

        self.token_manager = CarrierTokenManager()
        logger.debug(f"CorreiosAuthManager initialized. Environment: {self.environment}")

    async def get_access_token(self) -> str:
        """
        Get a valid bearer token, authenticating if necessary
        """
        access_token = self.token_manager.get_access_token()
        if access_token:
            logger.debug("Using cached carrier token from memory")
            return access_token

        logger.info("No valid carrier token in memory, authenticating...")
        token = await self.authenticate()
        return token.token

    async def authenticate(self):
        """
        Perform the Basic-Auth token exchange and overwrite the cached token.

        Raises:
            CorreiosAuthError: On network failure, non-200 status or a response without a token
        """
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                response = await client.post(
                    self.token_url,
                    json={"numero": self.postage_card},
                    auth=httpx.BasicAuth(self.user, self.password),
                    headers={"Accept": "application/json"},
                )
        except httpx.RequestError as e:
            logger.error(f"Network error authenticating with Correios: {str(e)}")
            raise CorreiosAuthError(f"Network error authenticating with Correios: {str(e)}")

        if response.status_code not in (200, 201):
            logger.error(f"Correios authentication failed ({response.status_code}): {response.text[:500]}")
            if response.status_code == 401:
                logger.error(
                    "401 usually means CORREIOS_USER is not the idCorreios login, the CWS access code "
                    f"is wrong, or the credentials belong to another environment ({self.environment})"
                )
            raise CorreiosAuthError(
                f"Correios authentication failed with status {response.status_code}",
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError:
            raise CorreiosAuthError("Correios authentication returned a non-JSON body")

        token = data.get("token") if isinstance(data, dict) else None
        if not token:
            raise CorreiosAuthError("Token not found in Correios authentication response")

        expires_at = parse_token_expiry(data)
        logger.info("Successfully authenticated with Correios")
        return self.token_manager.save_access_token(token, expires_at)


def parse_token_expiry(data: Dict[str, Any], now: Optional[datetime] = None) -> datetime:
    """
    Read `expiraEm` from a token response as an aware datetime.

    Falls back to DEFAULT_TOKEN_LIFETIME from now when the field is absent or unparsable.
    """
    now = now or datetime.now(timezone.utc)
    raw = data.get("expiraEm")
    if raw:
        try:
            expires_at = datetime.fromisoformat(str(raw))
            if expires_at.tzinfo is None:
                expires_at = expires_at.replace(tzinfo=BRASILIA_TZ)
            return expires_at.astimezone(timezone.utc)
        except ValueError:
            logger.warning(f"Invalid expiraEm format: {raw}")
    return now + DEFAULT_TOKEN_LIFETIME
