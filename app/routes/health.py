import logging

from fastapi import APIRouter

from app.core.config import get_settings
from app.core.exceptions import CarrierConfigurationError, CarrierServiceError
from app.schemas.shipping import CarrierStatusResponse
from app.services.shipping.factory import get_carrier

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check():
    """Basic health check"""
    return {"status": "healthy", "service": "Storefront Shipping"}


@router.get("/health/carrier", response_model=CarrierStatusResponse)
async def carrier_health():
    """Check that the carrier accepts the configured credentials"""
    settings = get_settings()
    environment = settings.CORREIOS_ENVIRONMENT

    try:
        carrier = get_carrier()
        status = await carrier.check_connectivity()
    except CarrierConfigurationError as e:
        return CarrierStatusResponse(
            connected=False,
            carrier="correios",
            environment=environment,
            message=str(e),
        )
    except CarrierServiceError as e:
        logger.warning(f"Carrier connectivity check failed: {e}")
        details = {}
        status_code = getattr(e, "status_code", None)
        if status_code:
            details["http_status"] = status_code
        return CarrierStatusResponse(
            connected=False,
            carrier="correios",
            environment=environment,
            message="Falha na autenticação. Verifique usuário, código de acesso e cartão de postagem.",
            details=details,
        )

    return CarrierStatusResponse(
        connected=True,
        carrier=carrier.carrier_code,
        environment=status.get("environment", environment),
        message="Conexão estabelecida com sucesso!",
        expires_at=status.get("expires_at"),
    )
