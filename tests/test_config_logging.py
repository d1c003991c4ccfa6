import json
import logging
import sys

import pytest
from prometheus_client import REGISTRY
from pydantic import ValidationError

from emvqr.codec import decode, encode
from emvqr.config import Settings
from emvqr.logging_conf import JsonFormatter, configure_logging
from emvqr.monitoring import metrics_payload
from emvqr.services.errors import ChecksumError

from conftest import ABC_HAMMERS_RAW


def _sample(name: str, labels: dict[str, str]) -> float:
    return REGISTRY.get_sample_value(name, labels) or 0.0


def test_settings_defaults(monkeypatch):
    monkeypatch.delenv("EMVQR_FORMAT_INDICATOR", raising=False)
    monkeypatch.delenv("DEFAULT_FORMAT_INDICATOR", raising=False)
    s = Settings()
    assert s.default_format_indicator == "01"
    assert s.logging.level == "INFO"


def test_settings_only_carry_fields_the_library_reads():
    assert set(Settings.model_fields) == {"default_format_indicator", "metrics_enabled", "logging"}


def test_settings_from_environment(monkeypatch):
    monkeypatch.setenv("EMVQR_FORMAT_INDICATOR", "02")
    monkeypatch.setenv("LOGGING__LEVEL", "DEBUG")
    monkeypatch.setenv("EMVQR_METRICS", "false")
    s = Settings()
    assert s.default_format_indicator == "02"
    assert s.logging.level == "DEBUG"
    assert s.metrics_enabled is False


def test_settings_reject_bad_format_indicator(monkeypatch):
    monkeypatch.setenv("EMVQR_FORMAT_INDICATOR", "123")
    with pytest.raises(ValidationError):
        Settings()


def test_json_formatter_includes_extra_fields():
    record = logging.LogRecord("emvqr.codec", logging.WARNING, __file__, 1, "decode failed", None, None)
    record.code = "ERR_CHECKSUM_MISMATCH"
    record.raw_length = 84
    payload = json.loads(JsonFormatter().format(record))
    assert payload["level"] == "WARNING"
    assert payload["logger"] == "emvqr.codec"
    assert payload["message"] == "decode failed"
    assert payload["code"] == "ERR_CHECKSUM_MISMATCH"
    assert payload["raw_length"] == 84


def test_json_formatter_omits_standard_record_attributes():
    try:
        raise ValueError("boom")
    except ValueError:
        record = logging.LogRecord("emvqr", logging.ERROR, __file__, 1, "failed", None, sys.exc_info())
    payload = json.loads(JsonFormatter().format(record))
    assert set(payload) == {"level", "logger", "message", "exc_info"}
    assert "ValueError: boom" in payload["exc_info"]


def test_configure_logging_installs_json_handler():
    logger = logging.getLogger("emvqr")
    saved = (logger.handlers[:], logger.level, logger.propagate)
    try:
        configure_logging()
        assert logger.propagate is False
        assert any(isinstance(h.formatter, JsonFormatter) for h in logger.handlers)
    finally:
        logger.handlers[:] = saved[0]
        logger.setLevel(saved[1])
        logger.propagate = saved[2]


def test_decode_failure_is_logged(caplog):
    with caplog.at_level(logging.WARNING, logger="emvqr.codec"):
        with pytest.raises(ChecksumError):
            decode(ABC_HAMMERS_RAW[:-4] + "0000")
    record = next(r for r in caplog.records if r.getMessage() == "decode failed")
    assert record.code == "ERR_CHECKSUM_MISMATCH"


def test_codec_metrics(base_payload):
    ok_labels = {"operation": "decode", "outcome": "ok"}
    error_labels = {"operation": "decode", "code": "ERR_CHECKSUM_MISMATCH"}
    ok_before = _sample("emvqr_codec_operations_total", ok_labels)
    errors_before = _sample("emvqr_codec_errors_total", error_labels)

    decode(encode(base_payload))
    with pytest.raises(ChecksumError):
        decode(ABC_HAMMERS_RAW[:-4] + "0000")

    assert _sample("emvqr_codec_operations_total", ok_labels) == ok_before + 1
    assert _sample("emvqr_codec_errors_total", error_labels) == errors_before + 1


def test_metrics_payload_exposes_counters():
    body, content_type = metrics_payload()
    assert b"emvqr_codec_operations_total" in body
    assert content_type.startswith("text/plain")
