"""
Shipping quote request/response schemas.

Field aliases keep the JSON contract the storefront checkout already consumes
(`service`, `name`, `delivery_range`) while the Python side uses descriptive names.
"""
from decimal import Decimal
from typing import Any, Dict, List, Optional

from pydantic import Field, ValidationError, field_serializer, field_validator

from app.core.enums import QuoteSource
from app.core.exceptions import ShippingValidationError
from app.core.utils import is_valid_cep, normalize_cep
from app.schemas.base import BaseSchema

CEP_REQUIRED_MESSAGE = "CEP de destino é obrigatório"
CEP_INVALID_MESSAGE = "CEP inválido. Deve conter 8 dígitos."
WEIGHT_INVALID_MESSAGE = "Peso inválido. Informe o peso em gramas."
ITEMS_TOTAL_INVALID_MESSAGE = "Valor dos itens inválido."
BODY_INVALID_MESSAGE = "Requisição inválida."

_FIELD_MESSAGES = {
    "peso": WEIGHT_INVALID_MESSAGE,
    "valor_itens": ITEMS_TOTAL_INVALID_MESSAGE,
}

CENTS = Decimal("0.01")

# Heaviest parcel Correios accepts for PAC/SEDEX
MAX_WEIGHT_GRAMS = 30000


class ShippingRequest(BaseSchema):
    """Body of POST /calculate-shipping"""
    cep_destino: str
    peso: Optional[float] = Field(
        default=None, gt=0, le=MAX_WEIGHT_GRAMS, allow_inf_nan=False, description="Weight in grams"
    )
    valor_itens: Optional[Decimal] = Field(default=None, ge=0)
    incluir_retirada: bool = False

    @field_validator("cep_destino", mode="before")
    @classmethod
    def normalize_cep_destino(cls, value: Any) -> str:
        if value is None or (isinstance(value, str) and not value.strip()):
            raise ValueError(CEP_REQUIRED_MESSAGE)
        if isinstance(value, bool) or not isinstance(value, (str, int)):
            raise ValueError(CEP_INVALID_MESSAGE)
        if not is_valid_cep(value):
            raise ValueError(CEP_INVALID_MESSAGE)
        return normalize_cep(value)

    @classmethod
    def from_payload(cls, payload: Any) -> "ShippingRequest":
        """
        Validate a decoded JSON body.

        Raises:
            ShippingValidationError: With a message safe to show the customer
        """
        if not isinstance(payload, dict):
            raise ShippingValidationError(BODY_INVALID_MESSAGE)
        try:
            return cls.model_validate(payload)
        except ValidationError as e:
            raise ShippingValidationError(_first_error_message(e)) from e


def _first_error_message(error: ValidationError) -> str:
    first = error.errors()[0]
    field = first["loc"][0] if first.get("loc") else None

    if field == "cep_destino":
        if first["type"] == "missing":
            return CEP_REQUIRED_MESSAGE
        ctx_error = (first.get("ctx") or {}).get("error")
        if ctx_error is not None:
            return str(ctx_error)
        return CEP_INVALID_MESSAGE

    return _FIELD_MESSAGES.get(field, BODY_INVALID_MESSAGE)


class ShippingOption(BaseSchema):
    """A delivery method the customer can pick at checkout"""
    service_code: str = Field(alias="service")
    display_name: str = Field(alias="name")
    price: Decimal
    delivery_days: int
    delivery_range_label: str = Field(alias="delivery_range")

    @field_validator("price")
    @classmethod
    def round_price(cls, value: Decimal) -> Decimal:
        return value.quantize(CENTS)

    @field_serializer("price")
    def serialize_price(self, price: Decimal) -> float:
        return float(price)


class ShippingResponse(BaseSchema):
    success: bool = True
    options: List[ShippingOption]
    source: QuoteSource


class CarrierStatusResponse(BaseSchema):
    connected: bool
    carrier: str
    environment: str
    message: str
    expires_at: Optional[str] = None
    details: Dict[str, Any] = {}
