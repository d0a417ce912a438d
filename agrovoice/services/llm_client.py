"""Thin Bedrock client wrapper for plain-text LLM invocations."""

from __future__ import annotations

import logging
from typing import Any

from botocore.exceptions import BotoCoreError, ClientError
from fastapi.concurrency import run_in_threadpool

from agrovoice.config.settings import BedrockConfig, settings
from agrovoice.pipelines.errors import ConfigurationError, UpstreamError
from agrovoice.services.aws import (
    create_boto3_client,
    decode_bedrock_api_key,
    default_credentials_available,
    static_credentials,
)

logger = logging.getLogger(__name__)


class BedrockLlmClient:
    """Invoke Amazon Bedrock models with standard configuration."""

    provider = "bedrock"

    def __init__(self, config: BedrockConfig, *, client: Any | None = None) -> None:
        self._config = config
        self._credentials = None
        if config.api_key:
            self._credentials = decode_bedrock_api_key(config.api_key.get_secret_value())
        if self._credentials is None:
            self._credentials = static_credentials()
        self._client = client
        self._default_chain: bool | None = None

    def _has_credentials(self) -> bool:
        if self._credentials is not None:
            return True
        if self._default_chain is None:
            self._default_chain = default_credentials_available()
        return self._default_chain

    @property
    def is_configured(self) -> bool:
        return bool(self._config.model_id) and self._has_credentials()

    def _get_client(self) -> Any:
        if self._client is None:
            self._client = create_boto3_client(
                "bedrock-runtime",
                region_name=self._config.region,
                credentials=self._credentials,
            )
        return self._client

    async def invoke(
        self,
        *,
        user_prompt: str,
        system_prompt: str | None = None,
        max_tokens: int | None = None,
        temperature: float | None = None,
    ) -> str:
        """Run a Bedrock ``converse`` call and return the aggregate text output."""

        if not self.is_configured:
            raise ConfigurationError("Bedrock credentials are not configured.")

        inference_cfg = {
            "maxTokens": max_tokens or self._config.max_tokens,
            "temperature": (
                temperature if temperature is not None else self._config.temperature
            ),
            "topP": self._config.top_p,
        }
        request: dict[str, Any] = {
            "modelId": self._config.model_id,
            "messages": [{"role": "user", "content": [{"text": user_prompt}]}],
            "inferenceConfig": inference_cfg,
        }
        if system_prompt:
            request["system"] = [{"text": system_prompt}]

        client = self._get_client()

        def _call() -> str:
            response = client.converse(**request)
            content_blocks = (
                response.get("output", {})
                .get("message", {})
                .get("content", [])
            )
            texts = [block.get("text", "") for block in content_blocks if block.get("text")]
            return "\n".join(texts).strip()

        try:
            result = await run_in_threadpool(_call)
        except ClientError as exc:
            error = exc.response.get("Error", {})
            metadata = exc.response.get("ResponseMetadata", {})
            raise UpstreamError(
                f"Bedrock invocation failed: {error.get('Code', 'unknown')}",
                provider=self.provider,
                upstream_status=metadata.get("HTTPStatusCode"),
                body=error.get("Message"),
            ) from exc
        except BotoCoreError as exc:
            raise UpstreamError(
                f"Bedrock invocation failed: {exc}",
                provider=self.provider,
            ) from exc

        if not result:
            raise UpstreamError("Bedrock returned an empty response.", provider=self.provider)
        return result


def get_bedrock_client() -> BedrockLlmClient:
    """Return the shared Bedrock client."""

    return _DEFAULT_CLIENT


_DEFAULT_CLIENT = BedrockLlmClient(settings.bedrock)


__all__ = ["BedrockLlmClient", "get_bedrock_client"]
