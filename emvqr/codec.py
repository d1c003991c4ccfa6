"""EMV QR payload decoder and encoder."""
from __future__ import annotations

import logging
from typing import Any

from .config import settings
from .crc import CRC_FIELD_LENGTH, append_crc, verify_crc
from .fields import (
    ADDITIONAL_DATA_FIELDS,
    ID_ADDITIONAL_DATA_FIELD,
    ID_CONVENIENCE_FEE_FIXED,
    ID_CONVENIENCE_FEE_PERCENTAGE,
    ID_COUNTRY_CODE,
    ID_CRC,
    ID_LANGUAGE_TEMPLATE,
    ID_MERCHANT_CATEGORY_CODE,
    ID_MERCHANT_CITY,
    ID_MERCHANT_NAME,
    ID_PAYLOAD_FORMAT_INDICATOR,
    ID_POINT_OF_INITIATION_METHOD,
    ID_POSTAL_CODE,
    ID_TIP_OR_CONVENIENCE_INDICATOR,
    ID_TRANSACTION_AMOUNT,
    ID_TRANSACTION_CURRENCY,
    LANGUAGE_TEMPLATE_FIELDS,
    FieldKind,
    TipIndicator,
    classify,
    is_primitive_account,
    is_template_account,
    is_unreserved_template,
)
from .monitoring import observe_operation, record_codec_error
from .schemas import (
    AdditionalDataField,
    DataObject,
    LanguageTemplate,
    Payload,
    PrimitiveAccount,
    TemplateAccount,
    UnreservedTemplate,
)
from .services.errors import CodecError, err_invalid_value, err_length_too_short, err_malformed, wrap_nested
from .services.validator import validate_payload
from .tlv import HEADER_LENGTH, TLVItem, build_tlv, parse_tlv

logger = logging.getLogger("emvqr.codec")


# -- decode ---------------------------------------------------------------


def decode(raw: str, *, skip_checksum: bool = False) -> Payload:
    """Parse a raw EMV QR string into a :class:`Payload`.

    The trailing CRC is verified unless ``skip_checksum`` is set. Any error
    aborts the whole decode; no partial payload is returned.
    """

    try:
        payload = _decode(raw, skip_checksum)
    except CodecError as exc:
        logger.warning("decode failed", extra={"code": exc.code, "error": str(exc), "raw_length": len(raw)})
        observe_operation("decode", "error")
        record_codec_error("decode", exc.code)
        raise
    logger.debug(
        "payload decoded",
        extra={"raw_length": len(raw), "accounts": len(payload.merchant_accounts), "checksum_skipped": skip_checksum},
    )
    observe_operation("decode", "ok")
    return payload


def _decode(raw: str, skip_checksum: bool) -> Payload:
    if len(raw) < HEADER_LENGTH:
        raise err_length_too_short(f"Payload must be at least {HEADER_LENGTH} characters, got {len(raw)}")
    if not skip_checksum:
        if len(raw) < CRC_FIELD_LENGTH:
            raise err_length_too_short(f"Payload must be at least {CRC_FIELD_LENGTH} characters to carry a CRC")
        verify_crc(raw)

    items = parse_tlv(raw)
    if not skip_checksum and items[-1].tag != ID_CRC:
        raise err_malformed("CRC must be the final data object", field_id=ID_CRC)

    fields: dict[str, Any] = {}
    accounts: list[PrimitiveAccount | TemplateAccount] = []
    unreserved: list[UnreservedTemplate] = []
    rfu: list[DataObject] = []

    for item in items:
        try:
            kind, attribute = classify(item.tag)
            if kind is FieldKind.NAMED:
                fields[attribute] = _decode_named(item)
            elif kind is FieldKind.PRIMITIVE_ACCOUNT:
                accounts.append(PrimitiveAccount(id=item.tag, value=item.value))
            elif kind is FieldKind.TEMPLATE_ACCOUNT:
                accounts.append(TemplateAccount(id=item.tag, sub_fields=_data_objects(item.value)))
            elif kind is FieldKind.UNRESERVED_TEMPLATE:
                unreserved.append(_decode_unreserved_template(item))
            else:
                rfu.append(DataObject(id=item.tag, value=item.value))
        except CodecError as exc:
            raise wrap_nested(exc, item.tag) from exc

    return Payload(
        **fields,
        merchant_accounts=accounts,
        unreserved_templates=unreserved,
        rfu_fields=rfu,
    )


def _decode_named(item: TLVItem) -> Any:
    if item.tag == ID_ADDITIONAL_DATA_FIELD:
        return _decode_additional_data(item.value)
    if item.tag == ID_LANGUAGE_TEMPLATE:
        return _decode_language_template(item.value)
    if item.tag == ID_CRC:
        return item.value.upper()
    return item.value


def _data_objects(value: str) -> list[DataObject]:
    return [DataObject(id=sub.tag, value=sub.value) for sub in parse_tlv(value)]


def _decode_additional_data(value: str) -> AdditionalDataField:
    named: dict[str, str] = {}
    rfu: list[DataObject] = []
    for sub in parse_tlv(value):
        if sub.tag in ADDITIONAL_DATA_FIELDS:
            named[ADDITIONAL_DATA_FIELDS[sub.tag]] = sub.value
        else:
            rfu.append(DataObject(id=sub.tag, value=sub.value))
    return AdditionalDataField(**named, rfu_fields=rfu)


def _decode_language_template(value: str) -> LanguageTemplate:
    named: dict[str, str] = {}
    rfu: list[DataObject] = []
    for sub in parse_tlv(value):
        if sub.tag in LANGUAGE_TEMPLATE_FIELDS:
            named[LANGUAGE_TEMPLATE_FIELDS[sub.tag]] = sub.value
        else:
            rfu.append(DataObject(id=sub.tag, value=sub.value))
    return LanguageTemplate(**named, rfu_fields=rfu)


def _decode_unreserved_template(item: TLVItem) -> UnreservedTemplate:
    return UnreservedTemplate(id=item.tag, sub_fields=_data_objects(item.value))


# -- encode ---------------------------------------------------------------


def encode(payload: Payload, *, format_indicator: str | None = None) -> str:
    """Serialize ``payload`` in canonical order and append its CRC."""

    try:
        raw = _encode(payload, format_indicator)
    except CodecError as exc:
        logger.warning("encode failed", extra={"code": exc.code, "error": str(exc)})
        observe_operation("encode", "error")
        record_codec_error("encode", exc.code)
        raise
    logger.debug("payload encoded", extra={"raw_length": len(raw), "crc": raw[-4:]})
    observe_operation("encode", "ok")
    return raw


def _encode(payload: Payload, format_indicator: str | None) -> str:
    validate_payload(payload)

    pfi = format_indicator or payload.payload_format_indicator or settings.default_format_indicator
    items: list[TLVItem] = [TLVItem(ID_PAYLOAD_FORMAT_INDICATOR, pfi)]
    if payload.point_of_initiation_method:
        items.append(TLVItem(ID_POINT_OF_INITIATION_METHOD, payload.point_of_initiation_method))

    for account in payload.merchant_accounts:
        items.append(_encode_account(account))

    items.append(TLVItem(ID_MERCHANT_CATEGORY_CODE, payload.merchant_category_code))
    items.append(TLVItem(ID_TRANSACTION_CURRENCY, payload.transaction_currency))
    if payload.transaction_amount:
        items.append(TLVItem(ID_TRANSACTION_AMOUNT, payload.transaction_amount))

    indicator = payload.tip_or_convenience_indicator
    if indicator:
        items.append(TLVItem(ID_TIP_OR_CONVENIENCE_INDICATOR, indicator))
        if indicator == TipIndicator.FIXED_FEE.value and payload.convenience_fee_fixed:
            items.append(TLVItem(ID_CONVENIENCE_FEE_FIXED, payload.convenience_fee_fixed))
        elif indicator == TipIndicator.PERCENTAGE_FEE.value and payload.convenience_fee_percentage:
            items.append(TLVItem(ID_CONVENIENCE_FEE_PERCENTAGE, payload.convenience_fee_percentage))

    items.append(TLVItem(ID_COUNTRY_CODE, payload.country_code))
    items.append(TLVItem(ID_MERCHANT_NAME, payload.merchant_name))
    items.append(TLVItem(ID_MERCHANT_CITY, payload.merchant_city))
    if payload.postal_code:
        items.append(TLVItem(ID_POSTAL_CODE, payload.postal_code))

    if payload.additional_data is not None:
        items.append(_nested(ID_ADDITIONAL_DATA_FIELD, _additional_data_items(payload.additional_data)))
    if payload.language_template is not None:
        items.append(_nested(ID_LANGUAGE_TEMPLATE, _language_template_items(payload.language_template)))

    for template in payload.unreserved_templates:
        items.append(_encode_unreserved_template(template))

    items.extend(_encode_rfu(obj) for obj in payload.rfu_fields)

    return append_crc(build_tlv(items))


def _nested(tag: str, sub_items: list[TLVItem]) -> TLVItem:
    try:
        return TLVItem(tag, build_tlv(sub_items))
    except CodecError as exc:
        raise wrap_nested(exc, tag) from exc


def _encode_account(account: PrimitiveAccount | TemplateAccount) -> TLVItem:
    if isinstance(account, TemplateAccount):
        if not is_template_account(account.id):
            raise err_invalid_value(f"Template merchant account ID must be 26-51, got {account.id!r}", field_id=account.id)
        return _nested(account.id, [TLVItem(obj.id, obj.value) for obj in account.sub_fields])
    if not is_primitive_account(account.id):
        raise err_invalid_value(f"Primitive merchant account ID must be 02-25, got {account.id!r}", field_id=account.id)
    return TLVItem(account.id, account.value)


def _additional_data_items(adf: AdditionalDataField) -> list[TLVItem]:
    items = [
        TLVItem(sub_id, getattr(adf, name))
        for sub_id, name in ADDITIONAL_DATA_FIELDS.items()
        if getattr(adf, name)
    ]
    items.extend(TLVItem(obj.id, obj.value) for obj in adf.rfu_fields)
    return items


def _language_template_items(template: LanguageTemplate) -> list[TLVItem]:
    items = [
        TLVItem(sub_id, getattr(template, name))
        for sub_id, name in LANGUAGE_TEMPLATE_FIELDS.items()
        if getattr(template, name)
    ]
    items.extend(TLVItem(obj.id, obj.value) for obj in template.rfu_fields)
    return items


def _encode_unreserved_template(template: UnreservedTemplate) -> TLVItem:
    if not is_unreserved_template(template.id):
        raise err_invalid_value(f"Unreserved template ID must be 80-99, got {template.id!r}", field_id=template.id)
    return _nested(template.id, [TLVItem(obj.id, obj.value) for obj in template.sub_fields])


def _encode_rfu(obj: DataObject) -> TLVItem:
    # IDs with a dedicated attribute are never emitted from rfu_fields.
    if classify(obj.id).kind is not FieldKind.RFU:
        raise err_invalid_value(f"ID {obj.id} is not reserved for future use and cannot be stored as an RFU field", field_id=obj.id)
    return TLVItem(obj.id, obj.value)
