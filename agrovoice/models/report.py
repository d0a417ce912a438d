"""SQLAlchemy model for persisted agronomic reports."""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import JSON, Column, DateTime, Index, String, Text
from sqlalchemy.dialects.postgresql import JSONB, UUID

from .base import Base

_JSON = JSON().with_variant(JSONB(), "postgresql")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ReportRecord(Base):
    __tablename__ = "reports"

    id = Column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        nullable=False,
    )
    user_id = Column(String(128), nullable=False, index=True)
    parcelle_id = Column(String(128), nullable=False)
    parcelle_name = Column(String(255), nullable=True)
    status = Column(String(16), nullable=False)
    summary = Column(Text, nullable=False)
    recommendations = Column(_JSON, nullable=False)
    weather = Column(_JSON, nullable=False)
    # Optional sections returned by the report model.
    details = Column(_JSON, nullable=True)
    audio_url = Column(String(2048), nullable=True)
    darija_script = Column(Text, nullable=True)

    generated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
    )
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=utc_now,
        onupdate=utc_now,
    )

    __table_args__ = (
        Index("ix_reports_user_parcelle", "user_id", "parcelle_id"),
    )


__all__ = ["ReportRecord"]
