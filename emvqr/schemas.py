"""Pydantic models for the decoded / constructed EMV QR payload."""
from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field

from .fields import (
    ADDITIONAL_DATA_FIELDS,
    DEFAULT_PAYLOAD_FORMAT_INDICATOR,
    GLOBALLY_UNIQUE_ID,
    ID_POINT_OF_INITIATION_METHOD,
    PRIMITIVE_ACCOUNT_RANGE,
    TEMPLATE_ACCOUNT_RANGE,
    TipIndicator,
    format_id,
    is_primitive_account,
    is_template_account,
    is_unreserved_template,
)
from .services.errors import err_invalid_value


class DataObject(BaseModel):
    """Generic ID/value pair for sub-fields not interpreted by name."""

    id: str
    value: str = ""


class PrimitiveAccount(BaseModel):
    kind: Literal["primitive"] = "primitive"
    id: str
    value: str


class _Template(BaseModel):
    """Template whose sub-objects are kept in wire order, sub-ID "00" included."""

    id: str
    sub_fields: list[DataObject] = Field(default_factory=list)

    @property
    def globally_unique_id(self) -> str:
        return self.sub_field(GLOBALLY_UNIQUE_ID)

    def sub_field(self, sub_id: str) -> str:
        for item in self.sub_fields:
            if item.id == sub_id:
                return item.value
        return ""


def _with_guid(globally_unique_id: str, sub_fields: tuple[DataObject, ...]) -> list[DataObject]:
    head = [DataObject(id=GLOBALLY_UNIQUE_ID, value=globally_unique_id)] if globally_unique_id else []
    return head + list(sub_fields)


class TemplateAccount(_Template):
    kind: Literal["template"] = "template"


MerchantAccount = Annotated[Union[PrimitiveAccount, TemplateAccount], Field(discriminator="kind")]


class AdditionalDataField(BaseModel):
    bill_number: str = ""
    mobile_number: str = ""
    store_label: str = ""
    loyalty_number: str = ""
    reference_label: str = ""
    customer_label: str = ""
    terminal_label: str = ""
    purpose_of_transaction: str = ""
    additional_consumer_data_request: str = ""
    rfu_fields: list[DataObject] = Field(default_factory=list)


class LanguageTemplate(BaseModel):
    language_preference: str = Field(default="", description="Language tag, e.g. 'es' or 'hi'")
    merchant_name: str = ""
    merchant_city: str = ""
    rfu_fields: list[DataObject] = Field(default_factory=list)


class UnreservedTemplate(_Template):
    pass


class Payload(BaseModel):
    """Top-level EMV QR payload, either decoded from a string or built for encoding."""

    payload_format_indicator: str = ""
    point_of_initiation_method: str = ""
    merchant_accounts: list[MerchantAccount] = Field(default_factory=list)

    merchant_category_code: str = ""
    transaction_currency: str = Field(default="", description="ISO 4217 numeric code, e.g. '840'")
    transaction_amount: str = ""

    tip_or_convenience_indicator: str = ""
    convenience_fee_fixed: str = ""
    convenience_fee_percentage: str = ""

    country_code: str = ""
    merchant_name: str = ""
    merchant_city: str = ""
    postal_code: str = ""

    additional_data: AdditionalDataField | None = None
    language_template: LanguageTemplate | None = None
    unreserved_templates: list[UnreservedTemplate] = Field(default_factory=list)

    crc: str | None = None
    rfu_fields: list[DataObject] = Field(default_factory=list)

    # -- merchant accounts ------------------------------------------------

    def account(self, account_id: str) -> PrimitiveAccount | TemplateAccount | None:
        for entry in self.merchant_accounts:
            if entry.id == account_id:
                return entry
        return None

    def _next_account_id(self, bounds: tuple[int, int]) -> str:
        used = {entry.id for entry in self.merchant_accounts}
        for n in range(bounds[0], bounds[1] + 1):
            if format_id(n) not in used:
                return format_id(n)
        raise err_invalid_value(f"No free merchant account ID left in {format_id(bounds[0])}-{format_id(bounds[1])}")

    def _check_new_account_id(self, account_id: str) -> None:
        if self.account(account_id) is not None:
            raise err_invalid_value(f"Merchant account ID {account_id} already exists", field_id=account_id)

    def add_primitive_merchant_account(self, value: str, account_id: str = "") -> PrimitiveAccount:
        """Add a primitive merchant account (IDs 02-25); an empty ID picks the next free one."""

        if not account_id:
            account_id = self._next_account_id(PRIMITIVE_ACCOUNT_RANGE)
        elif not is_primitive_account(account_id):
            raise err_invalid_value(f"Primitive merchant account ID must be 02-25, got {account_id!r}", field_id=account_id)
        self._check_new_account_id(account_id)
        entry = PrimitiveAccount(id=account_id, value=value)
        self.merchant_accounts.append(entry)
        return entry

    def add_template_merchant_account(
        self,
        globally_unique_id: str = "",
        *sub_fields: DataObject,
        account_id: str = "",
    ) -> TemplateAccount:
        """Add a template merchant account (IDs 26-51).

        A non-empty ``globally_unique_id`` is stored as sub-ID "00" ahead of
        ``sub_fields``.
        """

        if not account_id:
            account_id = self._next_account_id(TEMPLATE_ACCOUNT_RANGE)
        elif not is_template_account(account_id):
            raise err_invalid_value(f"Template merchant account ID must be 26-51, got {account_id!r}", field_id=account_id)
        self._check_new_account_id(account_id)
        subs = _with_guid(globally_unique_id, sub_fields)
        entry = TemplateAccount(id=account_id, sub_fields=subs)
        self.merchant_accounts.append(entry)
        return entry

    def add_unreserved_template(
        self,
        template_id: str,
        globally_unique_id: str = "",
        *sub_fields: DataObject,
    ) -> UnreservedTemplate:
        if not is_unreserved_template(template_id):
            raise err_invalid_value(f"Unreserved template ID must be 80-99, got {template_id!r}", field_id=template_id)
        subs = _with_guid(globally_unique_id, sub_fields)
        template = UnreservedTemplate(id=template_id, sub_fields=subs)
        self.unreserved_templates.append(template)
        return template

    # -- tip / convenience fee -------------------------------------------

    def set_fixed_convenience_fee(self, amount: str) -> None:
        self.tip_or_convenience_indicator = TipIndicator.FIXED_FEE.value
        self.convenience_fee_fixed = amount
        self.convenience_fee_percentage = ""

    def set_percentage_convenience_fee(self, percent: str) -> None:
        """Configure a percentage fee; ``percent`` like "3.00" means 3%."""

        self.tip_or_convenience_indicator = TipIndicator.PERCENTAGE_FEE.value
        self.convenience_fee_percentage = percent
        self.convenience_fee_fixed = ""

    def set_prompt_for_tip(self) -> None:
        self.tip_or_convenience_indicator = TipIndicator.PROMPT_CONSUMER.value
        self.convenience_fee_fixed = ""
        self.convenience_fee_percentage = ""

    # -- nested templates ------------------------------------------------

    def set_additional_data(self, **values: str) -> AdditionalDataField:
        """Assign named Additional Data Field values, creating the template if needed."""

        known = set(ADDITIONAL_DATA_FIELDS.values())
        unknown = sorted(set(values) - known)
        if unknown:
            raise err_invalid_value(f"Unknown additional data field(s): {', '.join(unknown)}")
        if self.additional_data is None:
            self.additional_data = AdditionalDataField()
        for name, value in values.items():
            setattr(self.additional_data, name, value)
        return self.additional_data

    def set_language_template(self, language: str, name: str, city: str) -> LanguageTemplate:
        self.language_template = LanguageTemplate(language_preference=language, merchant_name=name, merchant_city=city)
        return self.language_template

    def set_point_of_initiation_method(self, method: str, data_type: str) -> None:
        """Set ID "01": method 1/2/3 (QR/BLE/NFC), data type 1/2 (static/dynamic)."""

        if method not in {"1", "2", "3"}:
            raise err_invalid_value(f"Initiation method must be 1 (QR), 2 (BLE) or 3 (NFC), got {method!r}", field_id=ID_POINT_OF_INITIATION_METHOD)
        if data_type not in {"1", "2"}:
            raise err_invalid_value(f"Initiation data type must be 1 (static) or 2 (dynamic), got {data_type!r}", field_id=ID_POINT_OF_INITIATION_METHOD)
        self.point_of_initiation_method = method + data_type


def new_payload() -> Payload:
    """Return an empty payload with the current payload format indicator."""

    return Payload(payload_format_indicator=DEFAULT_PAYLOAD_FORMAT_INDICATOR)
