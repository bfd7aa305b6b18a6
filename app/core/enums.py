"""
Shared enums and constants used across the application.
"""

from enum import Enum


class ShippingRegion(str, Enum):
    """Brazilian macro-regions used by the fallback price table"""
    NORDESTE = "nordeste"
    SUDESTE = "sudeste"
    SUL = "sul"
    NORTE = "norte"
    CENTRO_OESTE = "centro-oeste"


class ShippingService(str, Enum):
    """Service codes emitted by the fallback table and the store policy"""
    PAC = "PAC"
    SEDEX = "SEDEX"
    PICKUP = "pickup"


class QuoteSource(str, Enum):
    """Where the options in a quote came from"""
    CARRIER = "carrier"
    FALLBACK = "fallback"


class QuoteStage(str, Enum):
    """Lifecycle of a single shipping quote request, used for logging"""
    RECEIVED = "RECEIVED"
    RATE_CHECKED = "RATE_CHECKED"
    AUTHENTICATED = "AUTHENTICATED"
    QUOTED = "QUOTED"
    FALLBACK = "FALLBACK"
    RESPONDED = "RESPONDED"
    REJECTED = "REJECTED"


class CorreiosEnvironment(str, Enum):
    PRODUCTION = "production"
    HOMOLOGATION = "homologation"
