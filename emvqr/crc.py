"""CRC16-CCITT implementation."""
from __future__ import annotations

from .services.errors import err_checksum, err_length_too_short, err_malformed

CRC16_POLY = 0x1021
CRC16_INIT = 0xFFFF

CRC_ID = "63"
CRC_HEADER = f"{CRC_ID}04"
CRC_FIELD_LENGTH = len(CRC_HEADER) + 4


def crc16_ccitt(data: str) -> str:
    """Compute CRC-16/CCITT-FALSE (0x1021, init 0xFFFF) for EMV payload strings."""

    checksum = CRC16_INIT
    for ch in data.encode("utf-8"):
        checksum ^= ch << 8
        for _ in range(8):
            if checksum & 0x8000:
                checksum = (checksum << 1) ^ CRC16_POLY
            else:
                checksum <<= 1
            checksum &= 0xFFFF
    return f"{checksum:04X}"


def append_crc(payload_no_crc: str) -> str:
    """Append the CRC data object; the checksum covers the ``6304`` header."""

    crc_input = f"{payload_no_crc}{CRC_HEADER}"
    return f"{crc_input}{crc16_ccitt(crc_input)}"


def verify_crc(raw: str) -> str:
    """Check the trailing CRC data object and return its upper-cased value.

    The CRC object must occupy the final eight characters of ``raw``.
    """

    if len(raw) < CRC_FIELD_LENGTH:
        raise err_length_too_short("Payload too short to contain CRC")
    header_start = len(raw) - CRC_FIELD_LENGTH
    if raw[header_start : header_start + len(CRC_HEADER)] != CRC_HEADER:
        raise err_malformed(f"CRC field ({CRC_HEADER}) not found at end of payload", field_id=CRC_ID)
    declared = raw[-4:].upper()
    computed = crc16_ccitt(raw[:-4])
    if declared != computed:
        raise err_checksum(computed=computed, declared=declared)
    return declared
