"""
In-memory fixed window rate limiter for the public quote endpoint.

Counters live in a process-wide dict keyed by client identifier. Each worker
handles one request at a time on its event loop and check() never awaits, so
no lock is taken. Running several workers gives each its own counters.
"""

import logging
import math
import random
import time
from dataclasses import dataclass
from typing import Callable, Dict, Optional

from fastapi import Request

from app.core.config import get_settings
from app.core.exceptions import RateLimitExceededError
from app.core.utils import get_client_identifier

logger = logging.getLogger(__name__)


@dataclass
class RateLimitRecord:
    """Request count for one client in the current window."""

    request_count: int
    window_reset_at: float


class RateLimiter:
    """
    Fixed window counter per client.

    Usage:
        limiter = RateLimiter(max_requests=30, window_seconds=60)
        if not limiter.check(client_ip):
            # reject with 429
    """

    def __init__(
        self,
        max_requests: int = 30,
        window_seconds: int = 60,
        cleanup_probability: float = 0.1,
        clock: Callable[[], float] = time.time,
    ):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.cleanup_probability = cleanup_probability
        self._clock = clock
        self._records: Dict[str, RateLimitRecord] = {}

    def check(self, client_id: str) -> bool:
        """Count a request for client_id and return whether it is allowed"""
        now = self._clock()

        if self.cleanup_probability and random.random() < self.cleanup_probability:
            self.cleanup(now)

        record = self._records.get(client_id)
        if record is None or now >= record.window_reset_at:
            self._records[client_id] = RateLimitRecord(
                request_count=1,
                window_reset_at=now + self.window_seconds,
            )
            return True

        if record.request_count >= self.max_requests:
            logger.warning(f"Rate limit exceeded for client {client_id} ({record.request_count} requests)")
            return False

        record.request_count += 1
        return True

    def retry_after(self, client_id: str) -> int:
        """Seconds until the client's current window resets"""
        record = self._records.get(client_id)
        if record is None:
            return 0
        return max(0, math.ceil(record.window_reset_at - self._clock()))

    def cleanup(self, now: Optional[float] = None) -> int:
        """Remove expired entries, returning how many were dropped"""
        now = self._clock() if now is None else now
        expired = [key for key, record in self._records.items() if now >= record.window_reset_at]
        for key in expired:
            del self._records[key]
        if expired:
            logger.debug(f"Rate limiter cleanup removed {len(expired)} expired entries")
        return len(expired)

    def reset(self):
        self._records.clear()

    def __len__(self) -> int:
        return len(self._records)


_shipping_rate_limiter: Optional[RateLimiter] = None


def get_shipping_rate_limiter() -> RateLimiter:
    """Process-wide limiter for the shipping quote endpoint, built from settings on first use"""
    global _shipping_rate_limiter
    if _shipping_rate_limiter is None:
        settings = get_settings()
        _shipping_rate_limiter = RateLimiter(
            max_requests=settings.RATE_LIMIT_MAX_REQUESTS,
            window_seconds=settings.RATE_LIMIT_WINDOW_SECONDS,
            cleanup_probability=settings.RATE_LIMIT_CLEANUP_PROBABILITY,
        )
    return _shipping_rate_limiter


def reset_shipping_rate_limiter():
    """Drop the process-wide limiter (tests, settings changes)"""
    global _shipping_rate_limiter
    _shipping_rate_limiter = None


def check_rate_limit(client_id: str) -> bool:
    return get_shipping_rate_limiter().check(client_id)


async def enforce_shipping_rate_limit(request: Request) -> str:
    """
    Dependency that rejects the request once the caller's quota is used up.

    Returns the client identifier so routes can log it.
    """
    client_id = get_client_identifier(request)
    limiter = get_shipping_rate_limiter()
    if not limiter.check(client_id):
        raise RateLimitExceededError(
            "Muitas requisições. Tente novamente em instantes.",
            retry_after=limiter.retry_after(client_id),
        )
    return client_id
