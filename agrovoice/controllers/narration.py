"""Narration provider helpers."""

from fastapi import APIRouter

from agrovoice.controllers.dependencies import ElevenLabsDep
from agrovoice.views import VoiceSummary

router = APIRouter(prefix="/narration", tags=["narration"])


@router.get("/voices", response_model=list[VoiceSummary])
async def list_voices(tts: ElevenLabsDep) -> list[VoiceSummary]:
    """List the TTS voices available for narration."""

    voices = await tts.list_voices()
    return [VoiceSummary.model_validate(voice) for voice in voices if voice.get("voice_id")]
