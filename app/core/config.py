# app/core/config.py - Consolidated

import os
from functools import lru_cache
from typing import List, Optional
from pydantic import ConfigDict
from pydantic_settings import BaseSettings

from app.core.enums import CorreiosEnvironment


def _parse_code_list(value) -> List[str]:
    if value in (None, "", []):
        return []
    if isinstance(value, str):
        return [code.strip() for code in value.split(",") if code.strip()]
    if isinstance(value, (list, tuple, set)):
        return [str(code).strip() for code in value if str(code).strip()]
    return []


class Settings(BaseSettings):
    """
    Application settings.
    Loads values from environment variables (.env file)
    """
    # Correios (CWS) credentials
    CORREIOS_USER: str = ""
    CORREIOS_PASSWORD: str = ""
    CORREIOS_POSTAGE_CARD: str = ""
    CORREIOS_ENVIRONMENT: str = CorreiosEnvironment.PRODUCTION.value  # or "homologation"
    CORREIOS_TIMEOUT_SECONDS: float = 30.0

    # Quote parameters
    CEP_ORIGEM: str = "60160230"  # Fortaleza-CE
    CORREIOS_SERVICE_CODES: str = "03298,03220"  # PAC, SEDEX (contract codes)
    DEFAULT_WEIGHT_GRAMS: int = 300

    # Rate limiting for the quote endpoint
    RATE_LIMIT_MAX_REQUESTS: int = 30
    RATE_LIMIT_WINDOW_SECONDS: int = 60
    RATE_LIMIT_CLEANUP_PROBABILITY: float = 0.1

    # Store shipping policy
    FREE_SHIPPING_THRESHOLD: float = 0.0  # 0 disables free shipping
    STORE_PICKUP_ENABLED: bool = False

    # Environment
    ENVIRONMENT: str = "development"
    DEBUG: bool = False

    model_config = ConfigDict(
        env_file=os.environ.get('ENV_FILE', '.env') if os.path.exists('.env') else None,
        case_sensitive=True,
        extra="ignore",
    )

    @property
    def correios_service_codes(self) -> List[str]:
        return _parse_code_list(self.CORREIOS_SERVICE_CODES)

    @property
    def correios_base_url(self) -> str:
        if self.CORREIOS_ENVIRONMENT.lower() == CorreiosEnvironment.PRODUCTION.value:
            return "https://api.correios.com.br"
        return "https://apihom.correios.com.br"

    @property
    def free_shipping_threshold(self) -> Optional[float]:
        """Threshold for free shipping, or None when the policy is disabled"""
        return self.FREE_SHIPPING_THRESHOLD if self.FREE_SHIPPING_THRESHOLD > 0 else None


@lru_cache()
def get_settings():
    """Cached settings to avoid loading .env file for every request"""
    return Settings()

def clear_settings_cache():
    """Clear the settings cache - useful when switching between environments"""
    get_settings.cache_clear()
