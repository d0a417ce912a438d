"""Merge parsed model output with request context into a Report."""

from __future__ import annotations

import logging
import time
from typing import Any, Mapping

from pydantic import ValidationError as PydanticValidationError

from agrovoice.domain.models import DiseaseRisk, NextAction, Report, ReportStatus
from agrovoice.pipelines.errors import ParseError, PipelineError
from agrovoice.pipelines.narration.capability import NarrationCapability, NoOpNarration
from agrovoice.pipelines.narration.types import DEFAULT_ADDRESSEE, NarrationInput

from .types import ReportRequest

logger = logging.getLogger("agrovoice.services.report_pipeline")

_STATUS_ALIASES = {
    "normal": ReportStatus.NORMAL,
    "ok": ReportStatus.NORMAL,
    "vigilance": ReportStatus.VIGILANCE,
    "alerte": ReportStatus.ALERTE,
}

_TEXT_SECTIONS = ("weatherAnalysis", "soilAnalysis", "irrigationAdvice", "weeklyForecast")


def classify_status(raw: Any) -> ReportStatus:
    """Map the model's status onto the three-value enum."""

    key = raw.strip().lower() if isinstance(raw, str) else None
    status = _STATUS_ALIASES.get(key)
    if status is None:
        raise ParseError(f"Unexpected report status from model: {raw!r}")
    return status


def _summary(parsed: Mapping[str, Any]) -> str:
    summary = parsed.get("summary")
    if not isinstance(summary, str) or not summary.strip():
        raise ParseError("Model response has no summary.")
    return summary.strip()


def _recommendations(parsed: Mapping[str, Any]) -> list[str]:
    raw = parsed.get("recommendations")
    if not isinstance(raw, list):
        raise ParseError("Model response has no recommendations list.")
    items = [item.strip() for item in raw if isinstance(item, str) and item.strip()]
    if not items:
        raise ParseError("Model response has no recommendations.")
    return items


def _optional_sections(parsed: Mapping[str, Any]) -> dict[str, Any]:
    """Keep the extended sections that are well formed; drop the rest."""

    sections: dict[str, Any] = {}
    for key in _TEXT_SECTIONS:
        value = parsed.get(key)
        if isinstance(value, str) and value.strip():
            sections[key] = value.strip()

    risk = parsed.get("diseaseRisk")
    if isinstance(risk, Mapping):
        try:
            sections["diseaseRisk"] = DiseaseRisk.model_validate(risk)
        except PydanticValidationError:
            logger.warning("Dropping malformed diseaseRisk section")

    actions = parsed.get("nextActions")
    if isinstance(actions, list):
        valid: list[NextAction] = []
        for item in actions:
            try:
                valid.append(NextAction.model_validate(item))
            except PydanticValidationError:
                logger.warning("Dropping malformed nextActions item: %r", item)
        if valid:
            sections["nextActions"] = valid
    return sections


class ReportAssembler:
    """Build the canonical Report; narration only runs when the capability is live."""

    def __init__(
        self,
        narration: NarrationCapability | None = None,
        *,
        addressee: str = DEFAULT_ADDRESSEE,
    ) -> None:
        self._narration = narration or NoOpNarration()
        self._addressee = addressee

    async def assemble(self, parsed: Mapping[str, Any], request: ReportRequest) -> Report:
        try:
            report = Report.model_validate(
                {
                    "parcelleId": request.parcelle_id,
                    "parcelleName": request.parcelle_name,
                    "status": classify_status(parsed.get("status")),
                    "summary": _summary(parsed),
                    "recommendations": _recommendations(parsed),
                    "weather": request.weather_snapshot,
                    **_optional_sections(parsed),
                }
            )
        except PydanticValidationError as exc:
            raise ParseError(f"Model response does not fit the report shape: {exc}") from exc

        if not self._narration.enabled:
            return report
        return await self._narrate(report)

    async def _narrate(self, report: Report) -> Report:
        narration_input = NarrationInput.from_report(report, addressee=self._addressee)
        try:
            script = await self._narration.script(narration_input)
            audio_url = ""
            if script:
                filename = f"report_manual_{int(time.time() * 1000)}.mp3"
                audio_url = await self._narration.audio(script, filename=filename)
        except PipelineError as exc:
            logger.warning("In-line narration failed, continuing without audio: %s", exc)
            return report

        if not script or not audio_url:
            return report
        return report.model_copy(update={"darija_script": script, "audio_url": audio_url})


__all__ = ["ReportAssembler", "classify_status"]
