class BaseServiceError(Exception):
    """Base exception for all service-related errors."""
    pass

class ShippingValidationError(BaseServiceError):
    """Raised when a shipping request fails validation (missing or invalid CEP, bad weight)."""
    pass

class RateLimitExceededError(BaseServiceError):
    """Raised when a client exceeds the request quota for the current window."""

    def __init__(self, message: str, retry_after: int = 0):
        super().__init__(message)
        self.retry_after = retry_after

class CarrierServiceError(BaseServiceError):
    """Base exception for shipping carrier errors."""
    pass

class CarrierConfigurationError(CarrierServiceError):
    """Raised when carrier credentials or settings are missing."""
    pass

class CorreiosAPIError(CarrierServiceError):
    """Raised when Correios API calls fail."""

    def __init__(self, message: str, status_code: int = None):
        super().__init__(message)
        self.status_code = status_code

class CorreiosAuthError(CorreiosAPIError):
    """Raised when authentication against the Correios token endpoint fails."""
    pass
