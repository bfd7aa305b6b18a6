"""
Utility functions for the application.
"""
import re

from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from fastapi import Request

CEP_LENGTH = 8
_NON_DIGITS = re.compile(r"\D")


def normalize_cep(cep: Optional[str]) -> str:
    """
    Strip everything but digits from a CEP.

    Examples:
        "51110-160" -> "51110160"
        " 60.160-230 " -> "60160230"
    """
    if cep is None:
        return ""
    return _NON_DIGITS.sub("", str(cep))


def is_valid_cep(cep: Optional[str]) -> bool:
    return len(normalize_cep(cep)) == CEP_LENGTH


def parse_brl_amount(value: Any) -> Decimal:
    """
    Parse a Brazilian formatted amount into a Decimal.

    Correios returns prices as strings using a decimal comma and dot thousands
    separator ("1.234,56"). Numbers are accepted as-is.

    Raises:
        ValueError: If the value cannot be parsed
    """
    if isinstance(value, bool) or value is None:
        raise ValueError(f"Invalid amount: {value!r}")
    if isinstance(value, (int, float, Decimal)):
        return Decimal(str(value))

    text = str(value).strip().replace("R$", "").strip()
    if "," in text:
        text = text.replace(".", "").replace(",", ".")
    try:
        return Decimal(text)
    except InvalidOperation:
        raise ValueError(f"Invalid amount: {value!r}")


def get_client_identifier(request: Request) -> str:
    """
    Identify the calling client for rate limiting.

    Uses the first address in X-Forwarded-For (we run behind a proxy), then the
    connection peer, then "unknown".
    """
    forwarded_for = request.headers.get("x-forwarded-for")
    if forwarded_for:
        first = forwarded_for.split(",")[0].strip()
        if first:
            return first
    if request.client and request.client.host:
        return request.client.host
    return "unknown"
