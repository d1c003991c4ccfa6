"""Codec error taxonomy shared by decode, encode and the builders."""
from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class CodecError(Exception):
    code: str
    message: str

    def __str__(self) -> str:  # noqa: D401 override
        return f"{self.code}: {self.message}"


@dataclass(slots=True)
class StructureError(CodecError):
    """A TLV unit is truncated or unparsable; ``field_id`` names the enclosing field."""

    field_id: str | None = None

    def __str__(self) -> str:  # noqa: D401 override
        if self.field_id:
            return f"{self.code}: error parsing field {self.field_id}: {self.message}"
        return f"{self.code}: {self.message}"


@dataclass(slots=True)
class LengthError(StructureError):
    pass


@dataclass(slots=True)
class ChecksumError(CodecError):
    computed: str = ""
    declared: str = ""


@dataclass(slots=True)
class MissingRequiredError(CodecError):
    field: str = ""


@dataclass(slots=True)
class InvalidValueError(CodecError):
    field_id: str | None = None


def err_length_too_short(message: str | None = None) -> LengthError:
    return LengthError(code="ERR_LENGTH_TOO_SHORT", message=message or "Data length is too short")


def err_malformed(message: str | None = None, field_id: str | None = None) -> StructureError:
    return StructureError(
        code="ERR_MALFORMED_STRUCTURE",
        message=message or "Malformed TLV structure",
        field_id=field_id,
    )


def err_checksum(computed: str, declared: str) -> ChecksumError:
    return ChecksumError(
        code="ERR_CHECKSUM_MISMATCH",
        message=f"CRC mismatch: got {declared}, want {computed}",
        computed=computed,
        declared=declared,
    )


def err_missing_required(field: str, message: str | None = None) -> MissingRequiredError:
    return MissingRequiredError(
        code="ERR_MISSING_REQUIRED_FIELD",
        message=message or f"Missing required field: {field}",
        field=field,
    )


def err_invalid_value(message: str, field_id: str | None = None) -> InvalidValueError:
    return InvalidValueError(code="ERR_INVALID_VALUE", message=message, field_id=field_id)


def wrap_nested(exc: CodecError, field_id: str) -> CodecError:
    """Return a copy of ``exc`` naming ``field_id`` as the enclosing field.

    Errors that already name an inner field are returned unchanged so the
    innermost location is reported.
    """

    if isinstance(exc, StructureError) and not exc.field_id:
        return type(exc)(code=exc.code, message=exc.message, field_id=field_id)
    if isinstance(exc, InvalidValueError) and not exc.field_id:
        return InvalidValueError(code=exc.code, message=exc.message, field_id=field_id)
    return exc
