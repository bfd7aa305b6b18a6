# tests/conftest.py
import pytest
from fastapi.testclient import TestClient

from app.core.config import clear_settings_cache
from app.core.rate_limit import reset_shipping_rate_limiter
from app.main import app
from app.services.correios.token_manager import clear_all_tokens
from mocks.mock_correios import MockCorreios

SETTINGS_ENV_KEYS = (
    "CORREIOS_USER",
    "CORREIOS_PASSWORD",
    "CORREIOS_POSTAGE_CARD",
    "CORREIOS_ENVIRONMENT",
    "CORREIOS_TIMEOUT_SECONDS",
    "CEP_ORIGEM",
    "CORREIOS_SERVICE_CODES",
    "DEFAULT_WEIGHT_GRAMS",
    "RATE_LIMIT_MAX_REQUESTS",
    "RATE_LIMIT_WINDOW_SECONDS",
    "RATE_LIMIT_CLEANUP_PROBABILITY",
    "FREE_SHIPPING_THRESHOLD",
    "STORE_PICKUP_ENABLED",
)


@pytest.fixture(autouse=True)
def isolated_state(monkeypatch):
    """Every test starts without credentials, cached settings, tokens or rate-limit counters"""
    for key in SETTINGS_ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    clear_settings_cache()
    clear_all_tokens()
    reset_shipping_rate_limiter()
    yield
    clear_settings_cache()
    clear_all_tokens()
    reset_shipping_rate_limiter()


@pytest.fixture
def set_settings(monkeypatch):
    """Set environment-backed settings and drop the cached Settings"""
    def _set(**values):
        for key, value in values.items():
            monkeypatch.setenv(key, str(value))
        clear_settings_cache()
    return _set


@pytest.fixture
def correios_credentials(set_settings):
    set_settings(
        CORREIOS_USER="loja-teste",
        CORREIOS_PASSWORD="codigo-acesso",
        CORREIOS_POSTAGE_CARD="0067599079",
        CORREIOS_ENVIRONMENT="production",
    )


@pytest.fixture
def mock_correios():
    """Fake Correios API; pass mock_correios.transport to carriers/clients"""
    return MockCorreios()


@pytest.fixture
def test_client():
    """Provide a test client; dependency overrides are cleared afterwards"""
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()
