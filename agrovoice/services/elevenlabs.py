"""ElevenLabs text-to-speech HTTP client."""

from __future__ import annotations

import logging
from typing import Any, Mapping

import httpx

from agrovoice.config.settings import ElevenLabsConfig, settings
from agrovoice.pipelines.errors import ConfigurationError, UpstreamError

logger = logging.getLogger(__name__)


class ElevenLabsClient:
    """Call the ElevenLabs REST API with the configured key."""

    provider = "elevenlabs"

    def __init__(
        self,
        config: ElevenLabsConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._config = config
        self._transport = transport

    @property
    def is_configured(self) -> bool:
        return bool(self._config.api_key and self._config.api_key.get_secret_value())

    @property
    def default_voice_id(self) -> str | None:
        return self._config.voice_id

    @property
    def default_model_id(self) -> str | None:
        return self._config.model_id

    def _headers(self, accept: str) -> dict[str, str]:
        if not self.is_configured:
            raise ConfigurationError("ELEVENLABS_API_KEY is not configured.")
        return {
            "Accept": accept,
            "Content-Type": "application/json",
            "xi-api-key": self._config.api_key.get_secret_value(),
        }

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self._config.base_url,
            timeout=self._config.timeout_seconds,
            transport=self._transport,
        )

    async def text_to_speech(
        self,
        text: str,
        *,
        voice_id: str,
        model_id: str,
        voice_settings: Mapping[str, Any],
    ) -> bytes:
        """Return MP3 bytes for ``text`` spoken by ``voice_id``."""

        headers = self._headers("audio/mpeg")
        payload = {
            "text": text,
            "model_id": model_id,
            "voice_settings": dict(voice_settings),
        }
        async with self._client() as client:
            try:
                response = await client.post(
                    f"/text-to-speech/{voice_id}",
                    json=payload,
                    headers=headers,
                )
            except httpx.RequestError as exc:
                raise UpstreamError(
                    f"Unable to reach ElevenLabs: {exc}",
                    provider=self.provider,
                ) from exc

        if not response.is_success:
            raise UpstreamError(
                f"ElevenLabs API error: {response.status_code} - {response.text}",
                provider=self.provider,
                upstream_status=response.status_code,
                body=response.text,
            )

        audio = response.content
        if not audio:
            raise UpstreamError(
                "ElevenLabs returned an empty audio payload.",
                provider=self.provider,
                upstream_status=response.status_code,
            )
        return audio

    async def list_voices(self) -> list[dict[str, Any]]:
        """Return the voice catalogue available to the configured account."""

        headers = self._headers("application/json")
        async with self._client() as client:
            try:
                response = await client.get("/voices", headers=headers)
            except httpx.RequestError as exc:
                raise UpstreamError(
                    f"Unable to reach ElevenLabs: {exc}",
                    provider=self.provider,
                ) from exc

        if not response.is_success:
            raise UpstreamError(
                f"Failed to fetch voices: {response.status_code}",
                provider=self.provider,
                upstream_status=response.status_code,
                body=response.text,
            )
        try:
            data = response.json()
        except ValueError as exc:
            raise UpstreamError(
                "ElevenLabs returned an invalid voices payload.",
                provider=self.provider,
                upstream_status=response.status_code,
                body=response.text,
            ) from exc
        return list(data.get("voices") or [])


def get_elevenlabs_client() -> ElevenLabsClient:
    """Return the shared ElevenLabs client."""

    return _DEFAULT_CLIENT


_DEFAULT_CLIENT = ElevenLabsClient(settings.elevenlabs)


__all__ = ["ElevenLabsClient", "get_elevenlabs_client"]
