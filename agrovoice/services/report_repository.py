"""Repository for persisted reports keyed by (user_id, report_id)."""

from __future__ import annotations

import logging
from typing import Any, Callable, List, Optional
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from agrovoice.application.interfaces import ReportStoreInterface
from agrovoice.domain.models import Report
from agrovoice.models.report import ReportRecord, utc_now
from agrovoice.pipelines.errors import ReportNotFoundError, StorageError

logger = logging.getLogger(__name__)

DEFAULT_LIST_LIMIT = 50

# Model sections stored together in the ``details`` JSON column.
_DETAIL_FIELDS = (
    "weather_analysis",
    "soil_analysis",
    "disease_risk",
    "irrigation_advice",
    "next_actions",
    "weekly_forecast",
)


def _parse_report_id(report_id: str) -> UUID | None:
    try:
        return UUID(str(report_id))
    except (TypeError, ValueError):
        return None


def _to_domain(record: ReportRecord) -> Report:
    details: dict[str, Any] = record.details or {}
    return Report(
        id=str(record.id),
        user_id=record.user_id,
        parcelle_id=record.parcelle_id,
        parcelle_name=record.parcelle_name,
        generated_at=record.generated_at,
        status=record.status,
        summary=record.summary,
        recommendations=list(record.recommendations or []),
        weather=dict(record.weather or {}),
        audio_url=record.audio_url,
        darija_script=record.darija_script,
        **{key: details.get(key) for key in _DETAIL_FIELDS},
    )


class SqlAlchemyReportStore(ReportStoreInterface):
    """SQLAlchemy implementation of the report store."""

    def __init__(self, session_factory: Callable[[], AsyncSession]):
        self._session_factory = session_factory

    async def create(self, user_id: str, report: Report) -> Report:
        dumped = report.model_dump(mode="json", exclude_none=True)
        record = ReportRecord(
            user_id=user_id,
            parcelle_id=report.parcelle_id,
            parcelle_name=report.parcelle_name,
            status=report.status,
            summary=report.summary,
            recommendations=list(report.recommendations),
            weather=dict(report.weather),
            details={key: dumped[key] for key in _DETAIL_FIELDS if key in dumped},
            generated_at=report.generated_at or utc_now(),
        )
        try:
            async with self._session_factory() as session:
                session.add(record)
                await session.commit()
                await session.refresh(record)
        except SQLAlchemyError as exc:
            logger.exception("Failed to persist report user=%s", user_id)
            raise StorageError(f"Failed to persist report: {exc}") from exc

        logger.info("Report stored user=%s report=%s", user_id, record.id)
        return _to_domain(record)

    async def get(self, user_id: str, report_id: str) -> Optional[Report]:
        key = _parse_report_id(report_id)
        if key is None:
            return None
        try:
            async with self._session_factory() as session:
                result = await session.execute(
                    select(ReportRecord).where(
                        ReportRecord.user_id == user_id,
                        ReportRecord.id == key,
                    )
                )
                record = result.scalar_one_or_none()
        except SQLAlchemyError as exc:
            raise StorageError(f"Failed to load report: {exc}") from exc
        return _to_domain(record) if record else None

    async def list_for_user(
        self,
        user_id: str,
        *,
        parcelle_id: Optional[str] = None,
        limit: int = DEFAULT_LIST_LIMIT,
    ) -> List[Report]:
        query = select(ReportRecord).where(ReportRecord.user_id == user_id)
        if parcelle_id:
            query = query.where(ReportRecord.parcelle_id == parcelle_id)
        query = query.order_by(ReportRecord.generated_at.desc()).limit(limit)
        try:
            async with self._session_factory() as session:
                result = await session.execute(query)
                records = result.scalars().all()
        except SQLAlchemyError as exc:
            raise StorageError(f"Failed to list reports: {exc}") from exc
        return [_to_domain(record) for record in records]

    async def patch_audio(
        self,
        user_id: str,
        report_id: str,
        *,
        audio_url: str,
        darija_script: str,
    ) -> None:
        key = _parse_report_id(report_id)
        if key is None:
            raise ReportNotFoundError(f"Report {report_id} not found")

        # Unconditional update: concurrent narrations for one report race and
        # the last commit wins.
        statement = (
            update(ReportRecord)
            .where(ReportRecord.user_id == user_id, ReportRecord.id == key)
            .values(audio_url=audio_url, darija_script=darija_script)
        )
        try:
            async with self._session_factory() as session:
                result = await session.execute(statement)
                await session.commit()
        except SQLAlchemyError as exc:
            logger.exception("Failed to patch report user=%s report=%s", user_id, report_id)
            raise StorageError(f"Failed to update report: {exc}") from exc

        if result.rowcount == 0:
            raise ReportNotFoundError(f"Report {report_id} not found")


def get_report_store() -> ReportStoreInterface:
    """Return the default database-backed report store."""

    from agrovoice.database import SessionFactory

    return SqlAlchemyReportStore(SessionFactory)


__all__ = ["SqlAlchemyReportStore", "get_report_store", "DEFAULT_LIST_LIMIT"]
