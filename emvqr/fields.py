"""Data object identifiers and classification rules for EMV QRCPS Merchant-Presented Mode."""
from __future__ import annotations

import enum
from typing import NamedTuple

ID_PAYLOAD_FORMAT_INDICATOR = "00"
ID_POINT_OF_INITIATION_METHOD = "01"
ID_MERCHANT_CATEGORY_CODE = "52"
ID_TRANSACTION_CURRENCY = "53"
ID_TRANSACTION_AMOUNT = "54"
ID_TIP_OR_CONVENIENCE_INDICATOR = "55"
ID_CONVENIENCE_FEE_FIXED = "56"
ID_CONVENIENCE_FEE_PERCENTAGE = "57"
ID_COUNTRY_CODE = "58"
ID_MERCHANT_NAME = "59"
ID_MERCHANT_CITY = "60"
ID_POSTAL_CODE = "61"
ID_ADDITIONAL_DATA_FIELD = "62"
ID_CRC = "63"
ID_LANGUAGE_TEMPLATE = "64"

PRIMITIVE_ACCOUNT_RANGE = (2, 25)
TEMPLATE_ACCOUNT_RANGE = (26, 51)
UNRESERVED_TEMPLATE_RANGE = (80, 99)

# Sub-ID "00" of a merchant account or unreserved template.
GLOBALLY_UNIQUE_ID = "00"

DEFAULT_PAYLOAD_FORMAT_INDICATOR = "01"

# Additional Data Field values equal to this ask the consumer app to prompt for input.
PROMPT_VALUE = "***"


class TipIndicator(str, enum.Enum):
    PROMPT_CONSUMER = "01"
    FIXED_FEE = "02"
    PERCENTAGE_FEE = "03"


TIP_INDICATOR_VALUES = frozenset(item.value for item in TipIndicator)

# Canonical sub-ID order of the Additional Data Field Template (ID "62").
ADDITIONAL_DATA_FIELDS: dict[str, str] = {
    "01": "bill_number",
    "02": "mobile_number",
    "03": "store_label",
    "04": "loyalty_number",
    "05": "reference_label",
    "06": "customer_label",
    "07": "terminal_label",
    "08": "purpose_of_transaction",
    "09": "additional_consumer_data_request",
}

# Merchant Information - Language Template (ID "64").
LANGUAGE_TEMPLATE_FIELDS: dict[str, str] = {
    "00": "language_preference",
    "01": "merchant_name",
    "02": "merchant_city",
}

# Top-level IDs mapped to Payload attributes.
NAMED_FIELDS: dict[str, str] = {
    ID_PAYLOAD_FORMAT_INDICATOR: "payload_format_indicator",
    ID_POINT_OF_INITIATION_METHOD: "point_of_initiation_method",
    ID_MERCHANT_CATEGORY_CODE: "merchant_category_code",
    ID_TRANSACTION_CURRENCY: "transaction_currency",
    ID_TRANSACTION_AMOUNT: "transaction_amount",
    ID_TIP_OR_CONVENIENCE_INDICATOR: "tip_or_convenience_indicator",
    ID_CONVENIENCE_FEE_FIXED: "convenience_fee_fixed",
    ID_CONVENIENCE_FEE_PERCENTAGE: "convenience_fee_percentage",
    ID_COUNTRY_CODE: "country_code",
    ID_MERCHANT_NAME: "merchant_name",
    ID_MERCHANT_CITY: "merchant_city",
    ID_POSTAL_CODE: "postal_code",
    ID_ADDITIONAL_DATA_FIELD: "additional_data",
    ID_CRC: "crc",
    ID_LANGUAGE_TEMPLATE: "language_template",
}


class FieldKind(str, enum.Enum):
    NAMED = "NAMED"
    PRIMITIVE_ACCOUNT = "PRIMITIVE_ACCOUNT"
    TEMPLATE_ACCOUNT = "TEMPLATE_ACCOUNT"
    UNRESERVED_TEMPLATE = "UNRESERVED_TEMPLATE"
    RFU = "RFU"


class FieldClass(NamedTuple):
    kind: FieldKind
    attribute: str | None = None


def _numeric_id(field_id: str) -> int | None:
    if len(field_id) != 2 or not field_id.isascii() or not field_id.isdigit():
        return None
    return int(field_id)


def _in_range(field_id: str, bounds: tuple[int, int]) -> bool:
    n = _numeric_id(field_id)
    return n is not None and bounds[0] <= n <= bounds[1]


def is_primitive_account(field_id: str) -> bool:
    return _in_range(field_id, PRIMITIVE_ACCOUNT_RANGE)


def is_template_account(field_id: str) -> bool:
    return _in_range(field_id, TEMPLATE_ACCOUNT_RANGE)


def is_merchant_account(field_id: str) -> bool:
    return is_primitive_account(field_id) or is_template_account(field_id)


def is_unreserved_template(field_id: str) -> bool:
    return _in_range(field_id, UNRESERVED_TEMPLATE_RANGE)


def classify(field_id: str) -> FieldClass:
    """Map a top-level data object ID onto the way the payload stores it."""

    if field_id in NAMED_FIELDS:
        return FieldClass(FieldKind.NAMED, NAMED_FIELDS[field_id])
    if is_primitive_account(field_id):
        return FieldClass(FieldKind.PRIMITIVE_ACCOUNT)
    if is_template_account(field_id):
        return FieldClass(FieldKind.TEMPLATE_ACCOUNT)
    if is_unreserved_template(field_id):
        return FieldClass(FieldKind.UNRESERVED_TEMPLATE)
    return FieldClass(FieldKind.RFU)


def format_id(n: int) -> str:
    return f"{n:02d}"
