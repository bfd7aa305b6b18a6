"""
Token management for the Correios CWS API
Stores the bearer token in memory only, never persists to disk
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

logger = logging.getLogger(__name__)

# Reuse a token only while it has more than this left
EXPIRY_BUFFER = timedelta(minutes=5)


@dataclass
class CarrierToken:
    token: str
    expires_at: datetime

    def is_valid(self, now: Optional[datetime] = None) -> bool:
        now = now or datetime.now(timezone.utc)
        return now < (self.expires_at - EXPIRY_BUFFER)


class CarrierTokenManager:
    """
    Single-slot token cache shared by every carrier instance in the process.

    The slot is overwritten on each successful authentication. There is no
    lock: a worker's event loop never awaits between reading and writing it.
    """

    # Class-level storage for the token (shared across instances)
    _token: Optional[CarrierToken] = None

    def get_access_token(self) -> Optional[str]:
        """Get the cached token if it is still outside the expiry buffer"""
        cached = CarrierTokenManager._token
        if cached is None:
            return None

        if cached.is_valid():
            logger.debug(f"Returning valid carrier token from memory (expires: {cached.expires_at})")
            return cached.token

        logger.debug("Carrier token expired or expiring soon")
        return None

    def save_access_token(self, token: str, expires_at: datetime) -> CarrierToken:
        """Save token to memory only"""
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=timezone.utc)
        CarrierTokenManager._token = CarrierToken(token=token, expires_at=expires_at)
        logger.info(f"Saved carrier token to memory (expires: {expires_at})")
        return CarrierTokenManager._token

    def get_cached_token(self) -> Optional[CarrierToken]:
        return CarrierTokenManager._token

    def clear_tokens(self):
        """Clear the token from memory"""
        if CarrierTokenManager._token is not None:
            CarrierTokenManager._token = None
            logger.info("Cleared carrier token from memory")


def clear_all_tokens():
    """Clear all tokens from memory (useful for testing)"""
    CarrierTokenManager().clear_tokens()
