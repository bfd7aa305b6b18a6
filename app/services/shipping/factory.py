"""
Shipping carrier factory to make carrier selection easy
"""
from app.services.shipping.base import BaseCarrier
from app.services.shipping.carriers.correios import CorreiosCarrier

DEFAULT_CARRIER = "correios"


def get_carrier(carrier_code: str = DEFAULT_CARRIER, **kwargs) -> BaseCarrier:
    """
    Factory function to get the appropriate carrier by code

    Args:
        carrier_code: The code of the carrier to use
        **kwargs: Passed to the carrier constructor (e.g. transport)

    Returns:
        An instance of the appropriate carrier class

    Raises:
        ValueError: If the carrier code is not supported
    """
    carriers = {
        "correios": CorreiosCarrier,
    }

    if carrier_code not in carriers:
        raise ValueError(f"Carrier '{carrier_code}' is not supported")

    return carriers[carrier_code](**kwargs)
