"""Narration entry point: script, then audio, then report patch.

A report moves from *created* (no audio) to *narrated* only when all three
stages succeed. Configuration and the report's existence are checked before
any provider call. The patch is the last step, so a failure in the script or
audio stage never touches the stored report. Every successful run uploads a
new, timestamp-qualified object and overwrites the report's audio fields;
earlier objects are left in storage.
"""

from __future__ import annotations

import logging
import time
from typing import Callable
from uuid import UUID

from agrovoice.application.interfaces import ReportStoreInterface
from agrovoice.pipelines.errors import PipelineError, ReportNotFoundError, ValidationError
from agrovoice.telemetry import NARRATION_STAGE_LATENCY, record_narration

from .script import ScriptTranslator
from .synthesis import AudioSynthesizer
from .types import NarrationResult, NarrationTrigger

logger = logging.getLogger("agrovoice.services.narration_pipeline")


def _epoch_millis() -> int:
    return int(time.time() * 1000)


def _check_report_id(report_id: str) -> None:
    # Report ids are store-assigned UUIDs and end up in the object key.
    try:
        canonical = str(UUID(report_id))
    except ValueError:
        canonical = None
    if canonical != report_id.lower():
        raise ValidationError(f"reportId is not a valid report identifier: {report_id!r}")


def audio_filename(report_id: str, epoch_millis: int) -> str:
    return f"report_{report_id}_{epoch_millis}.mp3"


class NarrationOrchestrator:
    """Run the narration stages strictly in sequence for one report."""

    def __init__(
        self,
        translator: ScriptTranslator,
        synthesizer: AudioSynthesizer,
        store: ReportStoreInterface,
        *,
        clock: Callable[[], int] = _epoch_millis,
    ) -> None:
        self._translator = translator
        self._synthesizer = synthesizer
        self._store = store
        self._clock = clock

    async def narrate(self, trigger: NarrationTrigger) -> NarrationResult:
        if not trigger.user_id or not trigger.report_id:
            raise ValidationError("userId and reportId are required.")
        _check_report_id(trigger.report_id)

        logger.info(
            "Starting narration user=%s report=%s",
            trigger.user_id,
            trigger.report_id,
        )
        try:
            self._synthesizer.ensure_configured()
            if await self._store.get(trigger.user_id, trigger.report_id) is None:
                raise ReportNotFoundError(f"Report {trigger.report_id} not found")

            with NARRATION_STAGE_LATENCY.labels(stage="script").time():
                script = await self._translator.translate(trigger.content)

            filename = audio_filename(trigger.report_id, self._clock())
            with NARRATION_STAGE_LATENCY.labels(stage="audio").time():
                synthesis = await self._synthesizer.synthesize(script, filename=filename)

            with NARRATION_STAGE_LATENCY.labels(stage="patch").time():
                await self._store.patch_audio(
                    trigger.user_id,
                    trigger.report_id,
                    audio_url=synthesis.audio_url,
                    darija_script=script,
                )
        except PipelineError as exc:
            record_narration(type(exc).__name__)
            logger.warning(
                "Narration failed user=%s report=%s: %s",
                trigger.user_id,
                trigger.report_id,
                exc,
            )
            raise
        except Exception:
            record_narration("unclassified")
            raise

        record_narration("success")
        logger.info(
            "Report narrated user=%s report=%s url=%s",
            trigger.user_id,
            trigger.report_id,
            synthesis.audio_url,
        )
        return NarrationResult(
            report_id=trigger.report_id,
            audio_url=synthesis.audio_url,
            darija_script=script,
            object_path=synthesis.object_path,
        )


__all__ = ["NarrationOrchestrator", "audio_filename"]
