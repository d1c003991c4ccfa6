"""Pre-encode payload validation."""
from __future__ import annotations

from ..fields import ID_TIP_OR_CONVENIENCE_INDICATOR, TIP_INDICATOR_VALUES
from ..schemas import Payload
from .errors import err_invalid_value, err_missing_required

REQUIRED_FIELDS = (
    "merchant_category_code",
    "transaction_currency",
    "country_code",
    "merchant_name",
    "merchant_city",
)


def validate_payload(payload: Payload | None) -> None:
    """Raise on the first missing or inconsistent requirement.

    Fee values are not required by their indicator; the encoder simply
    omits an empty fee.
    """

    if payload is None:
        raise err_missing_required("payload", "Payload is required")
    for name in REQUIRED_FIELDS:
        if not getattr(payload, name):
            raise err_missing_required(name)
    if not payload.merchant_accounts:
        raise err_missing_required("merchant_accounts", "At least one merchant account is required")

    indicator = payload.tip_or_convenience_indicator
    if indicator and indicator not in TIP_INDICATOR_VALUES:
        raise err_invalid_value(
            f"Invalid tip or convenience indicator {indicator!r} (must be 01, 02 or 03)",
            field_id=ID_TIP_OR_CONVENIENCE_INDICATOR,
        )
