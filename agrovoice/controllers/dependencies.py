"""Common FastAPI dependencies reused across controllers.

Each pipeline component receives its clients at construction; the factories
below wire in the process-wide defaults and are the seams tests override.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Header, HTTPException, status

from agrovoice.application.interfaces import ReportStoreInterface
from agrovoice.pipelines.narration import (
    AudioSynthesizer,
    NarrationOrchestrator,
    ScriptTranslator,
)
from agrovoice.pipelines.report import ReportAssembler, ReportGenerator
from agrovoice.services.elevenlabs import ElevenLabsClient, get_elevenlabs_client
from agrovoice.services.llm_client import get_bedrock_client
from agrovoice.services.openai_client import get_openai_client
from agrovoice.services.report_repository import get_report_store
from agrovoice.services.storage import get_artifact_store


async def get_current_user_id(
    x_user_id: Annotated[str | None, Header()] = None,
) -> str:
    """Return the caller identity asserted by the upstream auth layer."""

    user_id = (x_user_id or "").strip()
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing X-User-Id header",
        )
    return user_id


def get_report_generator() -> ReportGenerator:
    return ReportGenerator(get_openai_client())


def get_report_assembler() -> ReportAssembler:
    # Narration is deferred to POST /reports/narration.
    return ReportAssembler()


def get_narration_orchestrator(
    store: Annotated[ReportStoreInterface, Depends(get_report_store)],
) -> NarrationOrchestrator:
    return NarrationOrchestrator(
        ScriptTranslator(get_bedrock_client()),
        AudioSynthesizer(get_elevenlabs_client(), get_artifact_store()),
        store,
    )


CurrentUserIdDep = Annotated[str, Depends(get_current_user_id)]
ReportStoreDep = Annotated[ReportStoreInterface, Depends(get_report_store)]
ReportGeneratorDep = Annotated[ReportGenerator, Depends(get_report_generator)]
ReportAssemblerDep = Annotated[ReportAssembler, Depends(get_report_assembler)]
NarrationOrchestratorDep = Annotated[NarrationOrchestrator, Depends(get_narration_orchestrator)]
ElevenLabsDep = Annotated[ElevenLabsClient, Depends(get_elevenlabs_client)]


__all__ = [
    "get_current_user_id",
    "get_report_generator",
    "get_report_assembler",
    "get_narration_orchestrator",
    "CurrentUserIdDep",
    "ReportStoreDep",
    "ReportGeneratorDep",
    "ReportAssemblerDep",
    "NarrationOrchestratorDep",
    "ElevenLabsDep",
]
