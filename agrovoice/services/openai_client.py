"""OpenAI chat client used for JSON-mode report generation."""

from __future__ import annotations

import logging
from typing import Any

from openai import APIStatusError, AsyncOpenAI, OpenAIError

from agrovoice.config.settings import OpenAIConfig, settings
from agrovoice.pipelines.errors import ConfigurationError, UpstreamError

logger = logging.getLogger(__name__)


class OpenAIJsonClient:
    """Request JSON-object completions from an OpenAI chat model."""

    provider = "openai"

    def __init__(self, config: OpenAIConfig, *, client: Any | None = None) -> None:
        self._config = config
        self._client = client

    @property
    def is_configured(self) -> bool:
        return self._client is not None or bool(
            self._config.api_key and self._config.api_key.get_secret_value()
        )

    def _get_client(self) -> Any:
        if self._client is None:
            self._client = AsyncOpenAI(api_key=self._config.api_key.get_secret_value())
        return self._client

    async def complete_json(
        self,
        *,
        system_prompt: str,
        user_prompt: str,
        max_tokens: int | None = None,
    ) -> str:
        """Return the raw message content of a JSON-mode chat completion."""

        if not self.is_configured:
            raise ConfigurationError("OPENAI_API_KEY is not configured.")

        client = self._get_client()
        try:
            completion = await client.chat.completions.create(
                model=self._config.report_model,
                max_tokens=max_tokens or self._config.max_tokens,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
                response_format={"type": "json_object"},
            )
        except APIStatusError as exc:
            raise UpstreamError(
                f"OpenAI request failed with status {exc.status_code}",
                provider=self.provider,
                upstream_status=exc.status_code,
                body=exc.response.text,
            ) from exc
        except OpenAIError as exc:
            raise UpstreamError(
                f"OpenAI request failed: {exc}",
                provider=self.provider,
            ) from exc

        choices = getattr(completion, "choices", None) or []
        content = choices[0].message.content if choices else None
        if not content:
            raise UpstreamError("OpenAI returned no content.", provider=self.provider)
        return content


def get_openai_client() -> OpenAIJsonClient:
    """Return the shared OpenAI client."""

    return _DEFAULT_CLIENT


_DEFAULT_CLIENT = OpenAIJsonClient(settings.openai)


__all__ = ["OpenAIJsonClient", "get_openai_client"]
