"""Utility helpers to build and parse EMV-style TLV payloads.

Each data object is ``ID (2 chars) + LENGTH (2 decimal digits) + VALUE``.
Lengths count UTF-8 bytes, so multi-byte text (merchant names in a
language template, for example) is measured by its encoded size.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from .services.errors import err_invalid_value, err_malformed

MAX_VALUE_LENGTH = 99
HEADER_LENGTH = 4


@dataclass(frozen=True)
class TLVItem:
    tag: str
    value: str

    def serialize(self) -> str:
        if len(self.tag.encode("utf-8")) != 2:
            raise err_invalid_value(f"Data object ID {self.tag!r} must be exactly 2 characters", field_id=self.tag)
        size = len(self.value.encode("utf-8"))
        if size > MAX_VALUE_LENGTH:
            raise err_invalid_value(
                f"Value for ID {self.tag} is {size} bytes, exceeds maximum of {MAX_VALUE_LENGTH}",
                field_id=self.tag,
            )
        return f"{self.tag}{size:02d}{self.value}"


def serialize(tag: str, value: str) -> str:
    """Encode a single ID/value pair into its wire form."""

    return TLVItem(tag=tag, value=value).serialize()


def build_tlv(items: Iterable[TLVItem]) -> str:
    """Serialize iterable of TLV items into EMV string."""

    return "".join(item.serialize() for item in items)


def parse_tlv(payload: str) -> list[TLVItem]:
    """Parse TLV payload string into TLV items, preserving input order."""

    data = payload.encode("utf-8")
    items: list[TLVItem] = []
    idx = 0
    total = len(data)
    while idx < total:
        if total - idx < HEADER_LENGTH:
            raise err_malformed(f"Expected at least {HEADER_LENGTH} bytes, got {total - idx}")
        raw_tag = data[idx : idx + 2]
        raw_length = data[idx + 2 : idx + 4]
        tag = _decode(raw_tag, "ID")
        if not raw_length.isdigit():
            raise err_malformed(f"Non-numeric length {raw_length!r} for ID {tag}")
        length = int(raw_length)
        value_start = idx + HEADER_LENGTH
        value_end = value_start + length
        if value_end > total:
            raise err_malformed(
                f"Declared length {length} for ID {tag} exceeds remaining data ({total - value_start} bytes)"
            )
        items.append(TLVItem(tag=tag, value=_decode(data[value_start:value_end], f"value of ID {tag}")))
        idx = value_end
    return items


def _decode(chunk: bytes, what: str) -> str:
    try:
        return chunk.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise err_malformed(f"Invalid UTF-8 in {what}") from exc
