"""Values computed from an already decoded or built payload."""
from __future__ import annotations

from decimal import Decimal, InvalidOperation

from ..fields import (
    ADDITIONAL_DATA_FIELDS,
    ID_CONVENIENCE_FEE_FIXED,
    ID_CONVENIENCE_FEE_PERCENTAGE,
    ID_TRANSACTION_AMOUNT,
    PROMPT_VALUE,
    TipIndicator,
)
from ..schemas import Payload
from .errors import err_invalid_value, err_missing_required


def _parse_amount(value: str, field_id: str) -> Decimal:
    try:
        amount = Decimal(value)
    except InvalidOperation as exc:
        raise err_invalid_value(f"Invalid amount {value!r}", field_id=field_id) from exc
    if not amount.is_finite():
        raise err_invalid_value(f"Invalid amount {value!r}", field_id=field_id)
    return amount


def total_amount(payload: Payload) -> Decimal:
    """Return the transaction amount plus any fixed or percentage convenience fee."""

    if not payload.transaction_amount:
        raise err_missing_required("transaction_amount", "Transaction amount not present in payload")
    base = _parse_amount(payload.transaction_amount, ID_TRANSACTION_AMOUNT)

    indicator = payload.tip_or_convenience_indicator
    if indicator == TipIndicator.FIXED_FEE.value:
        if not payload.convenience_fee_fixed:
            return base
        return base + _parse_amount(payload.convenience_fee_fixed, ID_CONVENIENCE_FEE_FIXED)
    if indicator == TipIndicator.PERCENTAGE_FEE.value:
        if not payload.convenience_fee_percentage:
            return base
        percent = _parse_amount(payload.convenience_fee_percentage, ID_CONVENIENCE_FEE_PERCENTAGE)
        return base + base * percent / 100
    return base


def requires_prompt(payload: Payload, field: str) -> bool:
    """Report whether the Additional Data Field ``field`` asks the consumer for input."""

    if field not in ADDITIONAL_DATA_FIELDS.values():
        raise err_invalid_value(f"Unknown additional data field: {field}")
    if payload.additional_data is None:
        return False
    return getattr(payload.additional_data, field) == PROMPT_VALUE


def consumer_prompts(payload: Payload) -> list[str]:
    """Names of every Additional Data Field the consumer must be prompted for."""

    return [name for name in ADDITIONAL_DATA_FIELDS.values() if requires_prompt(payload, name)]


def loyalty_number_required(payload: Payload) -> bool:
    return requires_prompt(payload, "loyalty_number")


def mobile_number_required(payload: Payload) -> bool:
    return requires_prompt(payload, "mobile_number")


def preferred_merchant_name(payload: Payload, language: str) -> str:
    """Localized merchant name for ``language`` (exact tag match), else the default name."""

    template = payload.language_template
    if template is not None and template.merchant_name and template.language_preference == language:
        return template.merchant_name
    return payload.merchant_name


def preferred_merchant_city(payload: Payload, language: str) -> str:
    template = payload.language_template
    if template is not None and template.merchant_city and template.language_preference == language:
        return template.merchant_city
    return payload.merchant_city


def has_multiple_networks(payload: Payload) -> bool:
    return len(payload.merchant_accounts) > 1
