"""Report endpoints.

``POST /reports/generate`` runs the synchronous path and returns the stored
report without audio:

1. Validate the request (parcelle, weather, soil, elevation).
2. Call the JSON-mode report model and parse its reply.
3. Assemble the canonical report and persist it.

``POST /reports/narration`` is triggered separately, usually by the client
once it holds the report id. It runs the script, audio and patch stages and
answers with a success flag either way.
"""

import logging
from typing import Any, Optional

from fastapi import APIRouter, Body, HTTPException, Query, Request, status
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError

from agrovoice.controllers.dependencies import (
    CurrentUserIdDep,
    NarrationOrchestratorDep,
    ReportAssemblerDep,
    ReportGeneratorDep,
    ReportStoreDep,
)
from agrovoice.pipelines.errors import PipelineError
from agrovoice.pipelines.narration import NarrationInput, NarrationTrigger
from agrovoice.pipelines.report import ReportRequest
from agrovoice.services.report_repository import DEFAULT_LIST_LIMIT
from agrovoice.telemetry import record_report
from agrovoice.views import ErrorResponse, NarrationRequest, NarrationResponse, ReportDiagnostics

router = APIRouter(prefix="/reports", tags=["reports"])

logger = logging.getLogger(__name__)

_ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
    502: {"model": ErrorResponse},
}


@router.post("/generate", responses=_ERROR_RESPONSES)
async def generate_report(
    user_id: CurrentUserIdDep,
    generator: ReportGeneratorDep,
    assembler: ReportAssemblerDep,
    store: ReportStoreDep,
    payload: Any = Body(...),
) -> dict[str, Any]:
    """Generate, persist and return an agronomic report (no audio)."""

    try:
        request = ReportRequest.from_payload(payload)
        parsed = await generator.generate(request)
        report = await assembler.assemble(parsed, request)
        stored = await store.create(user_id, report)
    except PipelineError as exc:
        record_report(type(exc).__name__)
        raise

    record_report("success")
    logger.info(
        "Report generated user=%s report=%s status=%s",
        user_id,
        stored.id,
        stored.status,
    )
    return stored.to_payload()


@router.post("/narration", response_model=NarrationResponse, response_model_exclude_none=True)
async def narrate_report(
    request: Request,
    orchestrator: NarrationOrchestratorDep,
) -> Any:
    """Generate the Darija script and audio for a stored report."""

    try:
        payload = await request.json()
    except ValueError:
        return _narration_failure(status.HTTP_400_BAD_REQUEST, "Request body must be valid JSON")

    try:
        trigger_request = NarrationRequest.model_validate(payload)
    except PydanticValidationError as exc:
        return _narration_failure(status.HTTP_400_BAD_REQUEST, f"Invalid narration request: {exc.error_count()} invalid field(s)")

    trigger = NarrationTrigger(
        user_id=trigger_request.user_id,
        report_id=trigger_request.report_id,
        content=NarrationInput(
            parcelle_name=trigger_request.parcelle_name,
            status=trigger_request.status,
            summary=trigger_request.summary,
            recommendations=trigger_request.recommendations,
            weather=trigger_request.weather,
        ),
    )

    try:
        result = await orchestrator.narrate(trigger)
    except PipelineError as exc:
        return _narration_failure(exc.status_code, str(exc))
    except Exception:
        logger.exception("Unclassified narration failure report=%s", trigger.report_id)
        return _narration_failure(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to generate audio")

    return NarrationResponse(
        success=True,
        audio_url=result.audio_url,
        darija_script=result.darija_script[:100] + "...",
    )


def _narration_failure(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=NarrationResponse(success=False, error=message).model_dump(
            by_alias=True, exclude_none=True
        ),
    )


@router.get("/{report_id}", response_model=ReportDiagnostics)
async def get_report(
    report_id: str,
    store: ReportStoreDep,
    user_id: Optional[str] = Query(default=None, alias="userId"),
) -> ReportDiagnostics:
    """Return a stored report with audio presence flags."""

    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="userId parameter is required",
        )
    report = await store.get(user_id, report_id)
    if report is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Report not found")

    return ReportDiagnostics(
        report_id=report_id,
        data=report.to_payload(),
        has_audio_url=bool(report.audio_url),
        has_darija_script=bool(report.darija_script),
    )


@router.get("")
async def list_reports(
    store: ReportStoreDep,
    user_id: str = Query(alias="userId", min_length=1),
    parcelle_id: Optional[str] = Query(default=None, alias="parcelleId"),
    limit: int = Query(default=DEFAULT_LIST_LIMIT, ge=1, le=200),
) -> list[dict[str, Any]]:
    """List a user's reports, newest first."""

    reports = await store.list_for_user(user_id, parcelle_id=parcelle_id, limit=limit)
    return [report.to_payload() for report in reports]
