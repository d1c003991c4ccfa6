"""Tests for the payload builder helpers on the pydantic models."""
import pytest

from emvqr.schemas import DataObject, Payload, PrimitiveAccount, TemplateAccount, new_payload
from emvqr.services.errors import InvalidValueError


def test_new_payload_defaults():
    p = new_payload()
    assert p.payload_format_indicator == "01"
    assert p.merchant_accounts == []
    assert p.additional_data is None
    assert p.crc is None


def test_primitive_account_ids_are_assigned_in_order():
    p = new_payload()
    assert p.add_primitive_merchant_account("4000123456789012").id == "02"
    assert p.add_primitive_merchant_account("5500000000000004").id == "03"


def test_primitive_account_skips_used_ids():
    p = new_payload()
    p.add_primitive_merchant_account("a", account_id="02")
    p.add_primitive_merchant_account("b", account_id="04")
    assert p.add_primitive_merchant_account("c").id == "03"


def test_primitive_account_range_exhausted():
    p = new_payload()
    for n in range(2, 26):
        p.add_primitive_merchant_account(str(n))
    with pytest.raises(InvalidValueError):
        p.add_primitive_merchant_account("overflow")


@pytest.mark.parametrize("account_id", ["01", "26", "AB"])
def test_primitive_account_rejects_ids_outside_range(account_id):
    with pytest.raises(InvalidValueError):
        new_payload().add_primitive_merchant_account("x", account_id=account_id)


def test_duplicate_account_id_is_rejected():
    p = new_payload()
    p.add_primitive_merchant_account("x", account_id="04")
    with pytest.raises(InvalidValueError) as info:
        p.add_primitive_merchant_account("y", account_id="04")
    assert info.value.field_id == "04"


def test_template_account_stores_guid_first():
    p = new_payload()
    entry = p.add_template_merchant_account("D15600000000", DataObject(id="01", value="A93FO3230QDJ8F93845K"))
    assert entry.id == "26"
    assert entry.globally_unique_id == "D15600000000"
    assert entry.sub_field("01") == "A93FO3230QDJ8F93845K"
    assert entry.sub_field("05") == ""
    assert [obj.id for obj in entry.sub_fields] == ["00", "01"]


def test_template_account_without_guid():
    entry = new_payload().add_template_merchant_account("", DataObject(id="01", value="x"), account_id="30")
    assert entry.id == "30"
    assert entry.globally_unique_id == ""


def test_template_account_rejects_primitive_id():
    with pytest.raises(InvalidValueError):
        new_payload().add_template_merchant_account("guid", account_id="02")


def test_account_lookup():
    p = new_payload()
    p.add_primitive_merchant_account("x")
    assert isinstance(p.account("02"), PrimitiveAccount)
    assert p.account("26") is None


def test_unreserved_template_range():
    p = new_payload()
    template = p.add_unreserved_template("80", "com.example", DataObject(id="01", value="1"))
    assert template.globally_unique_id == "com.example"
    assert [obj.id for obj in template.sub_fields] == ["00", "01"]
    with pytest.raises(InvalidValueError):
        p.add_unreserved_template("79")


def test_fee_setters_clear_the_other_value():
    p = new_payload()
    p.set_fixed_convenience_fee("1.00")
    assert (p.tip_or_convenience_indicator, p.convenience_fee_fixed) == ("02", "1.00")
    p.set_percentage_convenience_fee("3.00")
    assert p.tip_or_convenience_indicator == "03"
    assert p.convenience_fee_percentage == "3.00"
    assert p.convenience_fee_fixed == ""
    p.set_prompt_for_tip()
    assert p.tip_or_convenience_indicator == "01"
    assert p.convenience_fee_percentage == ""


def test_set_additional_data_merges_values():
    p = new_payload()
    p.set_additional_data(bill_number="INV-1")
    p.set_additional_data(terminal_label="T-9")
    assert p.additional_data.bill_number == "INV-1"
    assert p.additional_data.terminal_label == "T-9"


def test_set_additional_data_rejects_unknown_names():
    p = new_payload()
    with pytest.raises(InvalidValueError):
        p.set_additional_data(shoe_size="42")
    assert p.additional_data is None


def test_point_of_initiation_method():
    p = new_payload()
    p.set_point_of_initiation_method("1", "2")
    assert p.point_of_initiation_method == "12"


@pytest.mark.parametrize(("method", "data_type"), [("4", "1"), ("1", "3"), ("", "1")])
def test_point_of_initiation_method_rejects_bad_values(method, data_type):
    with pytest.raises(InvalidValueError) as info:
        new_payload().set_point_of_initiation_method(method, data_type)
    assert info.value.field_id == "01"


def test_merchant_accounts_are_discriminated_by_kind():
    p = Payload.model_validate(
        {
            "merchant_accounts": [
                {"kind": "primitive", "id": "02", "value": "4000"},
                {"kind": "template", "id": "26", "sub_fields": [{"id": "00", "value": "D156"}]},
            ]
        }
    )
    assert isinstance(p.merchant_accounts[0], PrimitiveAccount)
    assert isinstance(p.merchant_accounts[1], TemplateAccount)
    assert p.merchant_accounts[1].globally_unique_id == "D156"
