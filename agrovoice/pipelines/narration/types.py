"""Typed containers shared across the narration pipeline.

These dataclasses live in their own module so the ``script``, ``synthesis``
and ``orchestrator`` stages (and the report assembler) can import them
without circular dependencies.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping, Sequence

from agrovoice.domain.models import Report

DEFAULT_ADDRESSEE = "الفلاح"


@dataclass(frozen=True)
class NarrationInput:
    """Read-only projection of a report handed to the script model."""

    parcelle_name: str
    status: str
    summary: str
    recommendations: Sequence[str]
    weather: Mapping[str, Any] = field(default_factory=dict)
    addressee: str = DEFAULT_ADDRESSEE

    def __post_init__(self) -> None:
        object.__setattr__(self, "recommendations", tuple(self.recommendations))
        object.__setattr__(self, "weather", MappingProxyType(dict(self.weather)))

    @classmethod
    def from_report(cls, report: Report, *, addressee: str = DEFAULT_ADDRESSEE) -> "NarrationInput":
        return cls(
            parcelle_name=report.parcelle_name or report.parcelle_id,
            status=str(report.status),
            summary=report.summary,
            recommendations=report.recommendations,
            weather=report.weather,
            addressee=addressee,
        )


@dataclass(frozen=True)
class NarrationTrigger:
    """Identity of the persisted report plus the content to narrate."""

    user_id: str
    report_id: str
    content: NarrationInput


@dataclass(frozen=True)
class SynthesisResult:
    """Uploaded audio artifact produced by the TTS stage."""

    audio_url: str
    object_path: str
    voice_id: str
    model_id: str
    size_bytes: int


@dataclass(frozen=True)
class NarrationResult:
    """Outcome of one successful narration run."""

    report_id: str
    audio_url: str
    darija_script: str
    object_path: str


__all__ = [
    "DEFAULT_ADDRESSEE",
    "NarrationInput",
    "NarrationTrigger",
    "NarrationResult",
    "SynthesisResult",
]
