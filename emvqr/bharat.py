"""Bharat QR (India) extension templates.

Bharat QR reuses template merchant account IDs for UPI data:

* ``26`` UPI VPA template: ``00`` RID, ``01`` VPA, ``02`` minimum amount
* ``27`` UPI VPA reference: ``00`` RID, ``01`` transaction reference, ``02`` reference URL
* ``28`` Aadhaar template: ``00`` RID, ``01`` Aadhaar number

The typed models below are read-only projections of those entries; the
sub-fields themselves stay in ``Payload.merchant_accounts``.
"""
from __future__ import annotations

import logging

from pydantic import BaseModel

from .fields import GLOBALLY_UNIQUE_ID
from .schemas import DataObject, Payload, TemplateAccount
from .services.errors import err_invalid_value

logger = logging.getLogger("emvqr.bharat")

RUPAY_RID = "A000000524"
NPCI_UPI_AID = "A000000677010111"

UPI_VPA_TEMPLATE_ID = "26"
UPI_VPA_REFERENCE_ID = "27"
AADHAAR_TEMPLATE_ID = "28"

SUB_VPA = "01"
SUB_MINIMUM_AMOUNT = "02"
SUB_TRANSACTION_REFERENCE = "01"
SUB_REFERENCE_URL = "02"
SUB_AADHAAR_NUMBER = "01"

TRANSACTION_REFERENCE_LENGTH = (4, 35)
REFERENCE_URL_MAX_LENGTH = 26
AADHAAR_NUMBER_LENGTH = 12


class UPIVPATemplate(BaseModel):
    rupay_rid: str = ""
    vpa: str = ""
    minimum_amount: str = ""


class UPIVPAReference(BaseModel):
    rupay_rid: str = ""
    transaction_reference: str = ""
    reference_url: str = ""


class AadhaarTemplate(BaseModel):
    rupay_rid: str = ""
    aadhaar_number: str = ""


def _template(payload: Payload, template_id: str) -> TemplateAccount | None:
    entry = payload.account(template_id)
    if isinstance(entry, TemplateAccount):
        return entry
    return None


def _upsert(payload: Payload, template_id: str, values: list[tuple[str, str]]) -> TemplateAccount:
    entry = TemplateAccount(
        id=template_id,
        sub_fields=[DataObject(id=sub_id, value=value) for sub_id, value in values if value],
    )
    for idx, existing in enumerate(payload.merchant_accounts):
        if existing.id == template_id:
            payload.merchant_accounts[idx] = entry
            break
    else:
        payload.merchant_accounts.append(entry)
    return entry


# -- setters --------------------------------------------------------------


def set_upi_vpa_template(payload: Payload, rupay_rid: str, vpa: str, minimum_amount: str = "") -> UPIVPATemplate:
    """Store the merchant's UPI VPA under template ID 26."""

    if not vpa:
        raise err_invalid_value("VPA must not be empty", field_id=UPI_VPA_TEMPLATE_ID)
    _upsert(
        payload,
        UPI_VPA_TEMPLATE_ID,
        [(GLOBALLY_UNIQUE_ID, rupay_rid), (SUB_VPA, vpa), (SUB_MINIMUM_AMOUNT, minimum_amount)],
    )
    return UPIVPATemplate(rupay_rid=rupay_rid, vpa=vpa, minimum_amount=minimum_amount)


def set_upi_vpa_reference(payload: Payload, transaction_reference: str, reference_url: str = "") -> UPIVPAReference:
    """Store a per-transaction reference (order, booking or bill ID) under template ID 27."""

    low, high = TRANSACTION_REFERENCE_LENGTH
    reference_size = len(transaction_reference.encode("utf-8"))
    url_size = len(reference_url.encode("utf-8"))
    if not low <= reference_size <= high:
        raise err_invalid_value(
            f"Transaction reference must be {low}-{high} bytes, got {reference_size}",
            field_id=UPI_VPA_REFERENCE_ID,
        )
    if url_size > REFERENCE_URL_MAX_LENGTH:
        raise err_invalid_value(
            f"Reference URL must be at most {REFERENCE_URL_MAX_LENGTH} bytes, got {url_size}",
            field_id=UPI_VPA_REFERENCE_ID,
        )
    _upsert(
        payload,
        UPI_VPA_REFERENCE_ID,
        [(GLOBALLY_UNIQUE_ID, RUPAY_RID), (SUB_TRANSACTION_REFERENCE, transaction_reference), (SUB_REFERENCE_URL, reference_url)],
    )
    return UPIVPAReference(rupay_rid=RUPAY_RID, transaction_reference=transaction_reference, reference_url=reference_url)


def set_aadhaar_number(payload: Payload, aadhaar_number: str) -> AadhaarTemplate:
    if len(aadhaar_number) != AADHAAR_NUMBER_LENGTH or not (aadhaar_number.isascii() and aadhaar_number.isdigit()):
        raise err_invalid_value(
            f"Aadhaar number must be exactly {AADHAAR_NUMBER_LENGTH} digits",
            field_id=AADHAAR_TEMPLATE_ID,
        )
    _upsert(payload, AADHAAR_TEMPLATE_ID, [(GLOBALLY_UNIQUE_ID, RUPAY_RID), (SUB_AADHAAR_NUMBER, aadhaar_number)])
    logger.debug("aadhaar template set", extra={"template_id": AADHAAR_TEMPLATE_ID})
    return AadhaarTemplate(rupay_rid=RUPAY_RID, aadhaar_number=aadhaar_number)


# -- readers --------------------------------------------------------------


def upi_vpa_template(payload: Payload) -> UPIVPATemplate | None:
    entry = _template(payload, UPI_VPA_TEMPLATE_ID)
    if entry is None:
        return None
    return UPIVPATemplate(
        rupay_rid=entry.globally_unique_id,
        vpa=entry.sub_field(SUB_VPA),
        minimum_amount=entry.sub_field(SUB_MINIMUM_AMOUNT),
    )


def upi_vpa_reference(payload: Payload) -> UPIVPAReference | None:
    entry = _template(payload, UPI_VPA_REFERENCE_ID)
    if entry is None:
        return None
    return UPIVPAReference(
        rupay_rid=entry.globally_unique_id,
        transaction_reference=entry.sub_field(SUB_TRANSACTION_REFERENCE),
        reference_url=entry.sub_field(SUB_REFERENCE_URL),
    )


def aadhaar_template(payload: Payload) -> AadhaarTemplate | None:
    entry = _template(payload, AADHAAR_TEMPLATE_ID)
    if entry is None:
        return None
    return AadhaarTemplate(rupay_rid=entry.globally_unique_id, aadhaar_number=entry.sub_field(SUB_AADHAAR_NUMBER))


def merchant_vpa(payload: Payload) -> str:
    template = upi_vpa_template(payload)
    return template.vpa if template else ""


def minimum_amount(payload: Payload) -> str:
    template = upi_vpa_template(payload)
    return template.minimum_amount if template else ""


def transaction_reference(payload: Payload) -> str:
    reference = upi_vpa_reference(payload)
    return reference.transaction_reference if reference else ""


def aadhaar_number(payload: Payload) -> str:
    template = aadhaar_template(payload)
    return template.aadhaar_number if template else ""
