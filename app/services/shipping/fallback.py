"""
Regional fallback prices, used when the carrier cannot quote.

The region comes from the CEP prefix; prices and delivery windows are static
per region, plus a weight surcharge above the 300g baseline.

CEP prefixes:
    0-3: São Paulo, Rio de Janeiro, Espírito Santo, Minas Gerais (Sudeste)
    4-5: Bahia, Sergipe, Pernambuco, Alagoas, Paraíba, Rio Grande do Norte (Nordeste)
    60-63: Ceará, Piauí, Maranhão (Nordeste)
    64-69: Pará, Amazonas, Acre, Amapá, Roraima (Norte)
    7: Distrito Federal, Goiás, Tocantins, Mato Grosso, Mato Grosso do Sul, Rondônia (Centro-Oeste)
    8-9: Paraná, Santa Catarina, Rio Grande do Sul (Sul)
"""

import math
from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, List, Tuple

from app.core.enums import ShippingRegion, ShippingService
from app.core.utils import normalize_cep
from app.schemas.shipping import ShippingOption

BASE_WEIGHT_GRAMS = 300
WEIGHT_STEP_GRAMS = 500
WEIGHT_STEP_FEE = Decimal("5.00")


@dataclass(frozen=True)
class RegionPricing:
    pac: Decimal
    sedex: Decimal
    pac_days: Tuple[int, int]
    sedex_days: Tuple[int, int]


REGION_PRICES: Dict[ShippingRegion, RegionPricing] = {
    ShippingRegion.NORDESTE: RegionPricing(Decimal("18.90"), Decimal("32.90"), (5, 7), (2, 3)),
    ShippingRegion.SUDESTE: RegionPricing(Decimal("24.90"), Decimal("42.90"), (7, 12), (3, 5)),
    ShippingRegion.SUL: RegionPricing(Decimal("28.90"), Decimal("48.90"), (8, 14), (4, 6)),
    ShippingRegion.NORTE: RegionPricing(Decimal("32.90"), Decimal("54.90"), (10, 18), (5, 8)),
    ShippingRegion.CENTRO_OESTE: RegionPricing(Decimal("26.90"), Decimal("45.90"), (7, 12), (3, 6)),
}

_FIRST_DIGIT_REGIONS = {
    "0": ShippingRegion.SUDESTE,
    "1": ShippingRegion.SUDESTE,
    "2": ShippingRegion.SUDESTE,
    "3": ShippingRegion.SUDESTE,
    "4": ShippingRegion.NORDESTE,
    "5": ShippingRegion.NORDESTE,
    "7": ShippingRegion.CENTRO_OESTE,
    "8": ShippingRegion.SUL,
    "9": ShippingRegion.SUL,
}


def get_region_from_cep(cep: str) -> ShippingRegion:
    """Map a CEP to its macro-region; anything unreadable is treated as Sudeste"""
    digits = normalize_cep(cep)
    if not digits:
        return ShippingRegion.SUDESTE

    first = digits[0]
    if first == "6":
        # 60-63 is Ceará/Piauí/Maranhão, the rest of 6 is the North
        second = int(digits[1]) if len(digits) > 1 else 0
        return ShippingRegion.NORDESTE if second <= 3 else ShippingRegion.NORTE

    return _FIRST_DIGIT_REGIONS.get(first, ShippingRegion.SUDESTE)


def weight_surcharge(weight_grams: float) -> Decimal:
    """R$5 for every started 500g above the 300g baseline"""
    extra = max(0, weight_grams - BASE_WEIGHT_GRAMS)
    steps = math.ceil(extra / WEIGHT_STEP_GRAMS)
    return WEIGHT_STEP_FEE * steps


def _range_label(days: Tuple[int, int]) -> str:
    return f"{days[0]} a {days[1]} dias úteis"


def fallback_options(cep: str, weight_grams: float) -> List[ShippingOption]:
    """Economy then express option for the CEP's region. Never raises for a string CEP."""
    pricing = REGION_PRICES[get_region_from_cep(cep)]
    surcharge = weight_surcharge(weight_grams)

    return [
        ShippingOption(
            service_code=ShippingService.PAC.value,
            display_name="PAC - Encomenda Econômica",
            price=pricing.pac + surcharge,
            delivery_days=pricing.pac_days[1],
            delivery_range_label=_range_label(pricing.pac_days),
        ),
        ShippingOption(
            service_code=ShippingService.SEDEX.value,
            display_name="SEDEX - Entrega Expressa",
            price=pricing.sedex + surcharge,
            delivery_days=pricing.sedex_days[1],
            delivery_range_label=_range_label(pricing.sedex_days),
        ),
    ]
