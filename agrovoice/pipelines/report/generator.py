"""Report model invocation and JSON extraction."""

from __future__ import annotations

import json
import logging
import re
from typing import Any

from agrovoice.pipelines.errors import ParseError
from agrovoice.services.openai_client import OpenAIJsonClient

from .prompts import AGRONOMIST_SYSTEM_PROMPT, build_report_prompt
from .types import ReportRequest

logger = logging.getLogger("agrovoice.services.report_pipeline")

_FENCE_PATTERN = re.compile(r"```(?:json)?\s*([\s\S]*?)```", re.IGNORECASE)


def _truncate(value: str, max_length: int = 500) -> str:
    if len(value) <= max_length:
        return value
    return value[: max_length - 3] + "..."


def extract_json(content: str) -> dict[str, Any]:
    """Parse a JSON object, unwrapping a ```json fence when one is present."""

    match = _FENCE_PATTERN.search(content or "")
    candidate = match.group(1) if match else (content or "")
    try:
        data = json.loads(candidate.strip())
    except json.JSONDecodeError as exc:
        raise ParseError("Unable to parse the model response as JSON.") from exc
    if not isinstance(data, dict):
        raise ParseError("The model response is not a JSON object.")
    return data


class ReportGenerator:
    """Turn a validated request into the report model's parsed JSON output."""

    def __init__(self, llm: OpenAIJsonClient, *, max_tokens: int | None = None) -> None:
        self._llm = llm
        self._max_tokens = max_tokens

    async def generate(self, request: ReportRequest) -> dict[str, Any]:
        user_prompt = build_report_prompt(request)
        logger.info(
            "Report prompt parcelle=%s\nUSER> %s",
            request.parcelle_id,
            _truncate(user_prompt),
        )

        content = await self._llm.complete_json(
            system_prompt=AGRONOMIST_SYSTEM_PROMPT,
            user_prompt=user_prompt,
            max_tokens=self._max_tokens,
        )
        logger.info("Report model raw response: %s", _truncate(content))

        try:
            return extract_json(content)
        except ParseError:
            logger.warning("Unparsable report response: %s", _truncate(content))
            raise


__all__ = ["ReportGenerator", "extract_json"]
