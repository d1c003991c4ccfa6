from emvqr.services.errors import (
    CodecError,
    LengthError,
    StructureError,
    err_checksum,
    err_invalid_value,
    err_length_too_short,
    err_malformed,
    err_missing_required,
    wrap_nested,
)


def test_error_codes():
    assert err_length_too_short().code == "ERR_LENGTH_TOO_SHORT"
    assert err_malformed().code == "ERR_MALFORMED_STRUCTURE"
    assert err_checksum("7222", "0000").code == "ERR_CHECKSUM_MISMATCH"
    assert err_missing_required("merchant_name").code == "ERR_MISSING_REQUIRED_FIELD"
    assert err_invalid_value("bad").code == "ERR_INVALID_VALUE"


def test_every_error_is_a_codec_error():
    for exc in (err_length_too_short(), err_malformed(), err_checksum("1", "2"), err_missing_required("x"), err_invalid_value("y")):
        assert isinstance(exc, CodecError)
        assert isinstance(exc, Exception)


def test_length_error_is_structural():
    assert isinstance(err_length_too_short(), StructureError)


def test_checksum_message_names_both_values():
    assert str(err_checksum("7222", "0000")) == "ERR_CHECKSUM_MISMATCH: CRC mismatch: got 0000, want 7222"


def test_missing_required_message():
    exc = err_missing_required("merchant_city")
    assert exc.field == "merchant_city"
    assert "merchant_city" in str(exc)


def test_structure_error_message_names_field():
    exc = err_malformed("truncated", field_id="62")
    assert str(exc) == "ERR_MALFORMED_STRUCTURE: error parsing field 62: truncated"


def test_wrap_nested_sets_enclosing_field():
    wrapped = wrap_nested(err_malformed("truncated"), "26")
    assert isinstance(wrapped, StructureError)
    assert wrapped.field_id == "26"


def test_wrap_nested_keeps_error_class():
    wrapped = wrap_nested(err_length_too_short(), "64")
    assert isinstance(wrapped, LengthError)
    assert wrapped.field_id == "64"


def test_wrap_nested_keeps_innermost_field():
    inner = err_invalid_value("too long", field_id="59")
    assert wrap_nested(inner, "62") is inner


def test_wrap_nested_leaves_other_errors_alone():
    exc = err_checksum("1", "2")
    assert wrap_nested(exc, "63") is exc
