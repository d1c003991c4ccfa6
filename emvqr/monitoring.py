"""Prometheus metrics for codec operations."""
from __future__ import annotations

from typing import Final

from prometheus_client import CONTENT_TYPE_LATEST, Counter, generate_latest

from .config import settings

_CODEC_OPERATIONS_TOTAL: Final = Counter(
    "emvqr_codec_operations_total",
    "Encode/decode calls by outcome",
    labelnames=("operation", "outcome"),
)
_CODEC_ERRORS_TOTAL: Final = Counter(
    "emvqr_codec_errors_total",
    "Codec errors by code",
    labelnames=("operation", "code"),
)


def observe_operation(operation: str, outcome: str) -> None:
    if settings.metrics_enabled:
        _CODEC_OPERATIONS_TOTAL.labels(operation=operation, outcome=outcome).inc()


def record_codec_error(operation: str, code: str) -> None:
    if settings.metrics_enabled:
        _CODEC_ERRORS_TOTAL.labels(operation=operation, code=code).inc()


def metrics_payload() -> tuple[bytes, str]:
    """Return Prometheus exposition payload and content type."""

    return generate_latest(), CONTENT_TYPE_LATEST
