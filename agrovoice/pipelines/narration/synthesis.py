"""TTS synthesis stage of the narration pipeline."""

from __future__ import annotations

import logging
from typing import Mapping

from agrovoice.application.interfaces import ArtifactStoreInterface
from agrovoice.pipelines.errors import ConfigurationError, ValidationError
from agrovoice.services.elevenlabs import ElevenLabsClient

from .types import SynthesisResult

logger = logging.getLogger("agrovoice.services.narration_pipeline")

FALLBACK_VOICE_ID = "21m00Tcm4TlvDq8ikWAM"
FALLBACK_MODEL_ID = "eleven_multilingual_v2"
AUDIO_PREFIX = "audio-reports"
AUDIO_CONTENT_TYPE = "audio/mpeg"

# Favour accent reproduction over a flat delivery.
VOICE_SETTINGS: Mapping[str, float | bool] = {
    "stability": 0.5,
    "similarity_boost": 0.75,
    "style": 0.4,
    "use_speaker_boost": True,
}


def audio_object_path(filename: str) -> str:
    return f"{AUDIO_PREFIX}/{filename.lstrip('/')}"


class AudioSynthesizer:
    """Convert narration text to MP3 and publish it."""

    def __init__(self, tts: ElevenLabsClient, store: ArtifactStoreInterface) -> None:
        self._tts = tts
        self._store = store

    def ensure_configured(self) -> None:
        """Raise before any provider call when the key or the bucket is missing."""

        if not self._tts.is_configured:
            raise ConfigurationError("ELEVENLABS_API_KEY is not configured.")
        if not self._store.is_configured:
            raise ConfigurationError("Audio storage bucket is not configured.")

    def resolve_voice(self, voice_id: str | None = None) -> str:
        return voice_id or self._tts.default_voice_id or FALLBACK_VOICE_ID

    def resolve_model(self, model_id: str | None = None) -> str:
        return model_id or self._tts.default_model_id or FALLBACK_MODEL_ID

    async def synthesize(
        self,
        text: str,
        *,
        filename: str,
        voice_id: str | None = None,
        model_id: str | None = None,
    ) -> SynthesisResult:
        """Generate speech for ``text`` and return the stored artifact's URL."""

        text = (text or "").strip()
        if not text:
            raise ValidationError("Narration text is empty.")
        self.ensure_configured()

        voice = self.resolve_voice(voice_id)
        model = self.resolve_model(model_id)
        audio = await self._tts.text_to_speech(
            text,
            voice_id=voice,
            model_id=model,
            voice_settings=VOICE_SETTINGS,
        )
        logger.info("Audio generated voice=%s model=%s bytes=%s", voice, model, len(audio))

        object_path = audio_object_path(filename)
        audio_url = await self._store.upload(
            object_path,
            audio,
            content_type=AUDIO_CONTENT_TYPE,
        )
        return SynthesisResult(
            audio_url=audio_url,
            object_path=object_path,
            voice_id=voice,
            model_id=model,
            size_bytes=len(audio),
        )


__all__ = [
    "AudioSynthesizer",
    "AUDIO_PREFIX",
    "FALLBACK_MODEL_ID",
    "FALLBACK_VOICE_ID",
    "VOICE_SETTINGS",
    "audio_object_path",
]
