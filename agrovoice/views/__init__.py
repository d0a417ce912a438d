"""Pydantic schemas used as views in the MVC architecture."""

from .common import ErrorResponse
from .reports import (
    NarrationRequest,
    NarrationResponse,
    ReportDiagnostics,
    VoiceSummary,
)

__all__ = [
    "ErrorResponse",
    "NarrationRequest",
    "NarrationResponse",
    "ReportDiagnostics",
    "VoiceSummary",
]
