"""
Core module exports.
"""
from .enums import (
    ShippingRegion,
    ShippingService,
    QuoteSource,
    QuoteStage,
    CorreiosEnvironment,
)

from .exceptions import (
    BaseServiceError,
    ShippingValidationError,
    RateLimitExceededError,
    CarrierServiceError,
    CarrierConfigurationError,
    CorreiosAPIError,
    CorreiosAuthError,
)

from .utils import (
    normalize_cep,
    is_valid_cep,
    parse_brl_amount,
)
