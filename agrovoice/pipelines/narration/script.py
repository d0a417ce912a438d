"""Darija script stage of the narration pipeline.

The prompt asks for 130-150 words, a fixed greeting and blessing, and plain
text. Nothing here checks the reply against those rules; the script model is
trusted to follow them.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping

from agrovoice.domain.models import ReportStatus
from agrovoice.pipelines.errors import ConfigurationError, ValidationError
from agrovoice.services.llm_client import BedrockLlmClient

from .types import NarrationInput

logger = logging.getLogger("agrovoice.services.narration_pipeline")

SEVERITY_TERMS: Mapping[str, str] = {
    ReportStatus.NORMAL.value: "عادي",
    ReportStatus.VIGILANCE.value: "يقظة",
    ReportStatus.ALERTE.value: "تنبيه خطير",
}

OPENING_GREETING = "السلام عليكم ورحمة الله وبركاته يا أخي {addressee}"
CLOSING_BLESSING = "الله يسخر لك الخير والبركة"

MIN_WORDS = 130
MAX_WORDS = 150

_WEATHER_LINES = (
    ("temperature", "درجة الحرارة", "°C"),
    ("humidity", "الرطوبة", "%"),
    ("precipitation", "الأمطار", "mm"),
    ("windSpeed", "الريح", "km/h"),
)


def severity_term(status: str) -> str:
    """Return the Darija severity word for a report status."""

    try:
        return SEVERITY_TERMS[status]
    except KeyError:
        raise ValidationError(f"Unknown report status: {status!r}") from None


def opening_greeting(addressee: str) -> str:
    return OPENING_GREETING.format(addressee=addressee)


def _weather_context(weather: Mapping[str, Any]) -> str:
    lines = []
    for key, label, unit in _WEATHER_LINES:
        value = weather.get(key)
        lines.append(f"{label}: {value}{unit}" if value is not None else f"{label}: N/A")
    return "\n".join(lines)


def build_script_prompt(narration_input: NarrationInput) -> str:
    """Render the instruction prompt for the script model."""

    severity = severity_term(narration_input.status)
    greeting = opening_greeting(narration_input.addressee)
    recommendations = "\n".join(
        f"  {index}. {item}"
        for index, item in enumerate(narration_input.recommendations, start=1)
    )

    return f"""You are a Moroccan Darija dialect expert and agronomist.
Generate a script in Moroccan Darija for a 1-minute audio report ({MIN_WORDS}-{MAX_WORDS} words).

REPORT INFORMATION:
- Plot: {narration_input.parcelle_name}
- Status: {severity}
- Weather:
{_weather_context(narration_input.weather)}
- Summary: {narration_input.summary}
- Recommendations:
{recommendations}

MANDATORY STRUCTURE:
1. Open with exactly: "{greeting}"
2. Context: present the daily report for {narration_input.parcelle_name}
3. Current status: describe the status ({severity}) and the weather conditions
4. Concrete actions: the main recommendations explained in natural Moroccan Darija
5. Close with exactly: "{CLOSING_BLESSING}"

RULES:
- Write Darija in Arabic script
- Keep French technical agronomic terms (irrigation, drainage, fongicide, ...) where a farmer would use them, mixed into the Darija sentences
- Between {MIN_WORDS} and {MAX_WORDS} words
- Warm and encouraging tone, like a local agricultural advisor
- Plain text only: no markdown, no lists, no formatting

Generate ONLY the script, nothing else."""


class ScriptTranslator:
    """Produce the narration script from a report projection."""

    def __init__(self, llm: BedrockLlmClient) -> None:
        self._llm = llm

    async def translate(self, narration_input: NarrationInput) -> str:
        if not self._llm.is_configured:
            raise ConfigurationError("Script model credentials are not configured.")

        prompt = build_script_prompt(narration_input)
        script = (await self._llm.invoke(user_prompt=prompt)).strip()
        logger.info(
            "Darija script generated parcelle=%s chars=%s",
            narration_input.parcelle_name,
            len(script),
        )
        return script


__all__ = [
    "ScriptTranslator",
    "SEVERITY_TERMS",
    "OPENING_GREETING",
    "CLOSING_BLESSING",
    "build_script_prompt",
    "opening_greeting",
    "severity_term",
]
