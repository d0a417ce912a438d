"""SQLAlchemy models."""

from .base import Base
from .report import ReportRecord  # noqa: F401

__all__ = [
    "Base",
    "ReportRecord",
]
