"""Telemetry helpers and metrics."""

from .metrics import (
    ERROR_COUNTER,
    NARRATION_COUNTER,
    NARRATION_STAGE_LATENCY,
    REPORT_COUNTER,
    REQUEST_COUNT,
    REQUEST_LATENCY,
    observe_request,
    record_narration,
    record_report,
)

__all__ = [
    "ERROR_COUNTER",
    "NARRATION_COUNTER",
    "NARRATION_STAGE_LATENCY",
    "REPORT_COUNTER",
    "REQUEST_COUNT",
    "REQUEST_LATENCY",
    "observe_request",
    "record_narration",
    "record_report",
]
