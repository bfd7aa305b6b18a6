"""
Base Carrier Interface

This module defines the abstract base class that all shipping carrier
implementations must implement.

A carrier quotes delivery options for a destination CEP and parcel weight.
Carriers raise CarrierServiceError (or a subclass) when they cannot produce a
quote; deciding what to do about it is the caller's job.
"""

from abc import ABC, abstractmethod
from typing import List

from app.schemas.shipping import ShippingOption


class BaseCarrier(ABC):
    """Base class for all shipping carriers"""

    carrier_name = "Generic Carrier"
    carrier_code = "generic"

    @abstractmethod
    async def get_rates(self, cep_destino: str, weight_grams: int) -> List[ShippingOption]:
        """Get shipping rates

        Args:
            cep_destino: Normalized 8-digit destination CEP
            weight_grams: Parcel weight in grams

        Returns:
            Options sorted by ascending price, never empty
        """
        pass

    @abstractmethod
    async def check_connectivity(self) -> dict:
        """Check that the carrier API can be reached with the configured credentials"""
        pass
