"""
Schema exports for the application.
"""

# Base schemas
from .base import BaseSchema, ErrorResponse

# Shipping schemas
from .shipping import (
    ShippingRequest,
    ShippingOption,
    ShippingResponse,
    CarrierStatusResponse,
)
